"""
Request Dependencies
Conference resolution and service providers for the routers
"""

from typing import Optional
from fastapi import Query, Request

from app.errors import NotFoundError
from app.services.capacity_service import capacity_service
from app.services.conference_service import conference_service
from app.services.payment_proof_service import payment_proof_service
from app.services.registration_service import registration_service


def request_host(request: Request) -> str:
    """Domain the conference is looked up by; the client-set x-forwarded-host is only a fallback"""
    return (
        request.headers.get("host")
        or request.headers.get("x-forwarded-host")
        or "localhost"
    )


async def get_conference(
    request: Request,
    confcode: Optional[str] = Query(default=None, description="Venue code on multi-venue domains")
) -> dict:
    """Conference served on the request domain"""
    conference = await conference_service.resolve(request_host(request), confcode)
    if not conference:
        raise NotFoundError("Conference not found for this domain")
    return conference


def get_capacity_service():
    return capacity_service


def get_registration_service():
    return registration_service


def get_payment_proof_service():
    return payment_proof_service
