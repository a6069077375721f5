"""
Reference Endpoints
Conference info, maintenance status and form pick lists
"""

from fastapi import APIRouter, Depends, Query, Request
from typing import List, Optional

from app.dependencies import get_conference, request_host
from app.errors import ValidationError
from app.schemas.conference import (
    ConferenceResponse,
    MaintenanceStatusResponse,
    PositionResponse,
    BankResponse,
    ContactResponse,
)
from app.services.conference_service import conference_service, is_on_maintenance
from app.services.reference_service import reference_service

router = APIRouter()


@router.get("/get-conference", response_model=ConferenceResponse)
async def get_conference_info(conference: dict = Depends(get_conference)):
    """Conference served on this domain"""
    return conference


@router.get("/get-venues", response_model=List[ConferenceResponse])
async def get_venues(request: Request):
    """All venues sharing this domain"""
    return await conference_service.list_by_domain(request_host(request))


@router.get("/check-maintenance", response_model=MaintenanceStatusResponse)
async def check_maintenance(
    request: Request,
    confcode: Optional[str] = Query(default=None)
):
    """Maintenance flag of the conference, false when none resolves"""
    conference = await conference_service.resolve(request_host(request), confcode)
    if not conference:
        return {"onMaintenance": False, "conference": None}
    return {
        "onMaintenance": is_on_maintenance(conference),
        "conference": {"confcode": conference["confcode"], "name": conference.get("name")},
    }


@router.get("/get-provinces", response_model=List[str])
async def get_provinces(conference: dict = Depends(get_conference)):
    return await reference_service.provinces(conference)


@router.get("/get-lgus", response_model=List[str])
async def get_lgus(province: str = Query(default="")):
    if not province.strip():
        raise ValidationError("Province parameter is required", field="province")
    return await reference_service.lgus(province)


@router.get("/get-barangays", response_model=List[str])
async def get_barangays(
    lgu: Optional[str] = Query(default=None),
    psgc: Optional[str] = Query(default=None)
):
    if not (lgu or "").strip() and not (psgc or "").strip():
        raise ValidationError("LGU or PSGC parameter is required", field="lgu")
    return await reference_service.barangays(lgu=lgu, psgc=psgc)


@router.get("/get-positions", response_model=List[PositionResponse])
async def get_positions():
    return await reference_service.positions()


@router.get("/get-banks", response_model=List[BankResponse])
async def get_banks(conference: dict = Depends(get_conference)):
    return await reference_service.banks(conference["confcode"])


@router.get("/get-contacts", response_model=List[ContactResponse])
async def get_contacts(conference: dict = Depends(get_conference)):
    return await reference_service.contacts(conference["confcode"])
