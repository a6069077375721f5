"""
Registration Endpoints
Admission status, submission and registration lookup
"""

import json
from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, Response

from app.config import settings
from app.dependencies import (
    get_conference,
    get_capacity_service,
    get_registration_service,
)
from app.errors import PayloadTooLarge, ValidationError
from app.schemas.conference import SessionPolicyResponse
from app.schemas.registration import (
    RegistrationSubmission,
    SubmissionResponse,
    CapacityStatusResponse,
    ProvinceLguStatusResponse,
    RegistrationLookupResponse,
)
from app.services import admission
from app.services.conference_service import registration_limit, province_lgu_limit
from app.services.session_timer import SessionPolicy

router = APIRouter()

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def conference_ref(conference: dict) -> dict:
    return {"confcode": conference["confcode"], "name": conference.get("name")}


async def read_capped_body(request: Request, limit: int) -> bytes:
    """Read the request body, stopping once it grows past ``limit`` bytes"""
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > limit:
        raise PayloadTooLarge(limit)

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise PayloadTooLarge(limit)
    return bytes(body)


@router.get("/check-registration", response_model=CapacityStatusResponse)
async def check_registration(
    response: Response,
    conference: dict = Depends(get_conference),
    capacity=Depends(get_capacity_service)
):
    """Conference-wide admitted count and whether registration is open"""
    response.headers.update(NO_STORE_HEADERS)
    limit = registration_limit(conference)
    count = await capacity.conference_count(conference["confcode"])
    return {
        "count": count,
        "limit": limit,
        "isOpen": admission.is_open(count, limit),
        "remaining": admission.remaining_slots(count, limit),
        "showWarning": admission.should_warn(count, limit, conference.get("reg_alert_count")),
        "conference": conference_ref(conference),
    }


@router.get("/check-province-lgu", response_model=ProvinceLguStatusResponse)
async def check_province_lgu(
    response: Response,
    province: str = Query(default=""),
    lgu: str = Query(default=""),
    conference: dict = Depends(get_conference),
    capacity=Depends(get_capacity_service)
):
    """Admitted count for one province-LGU pair"""
    if not province.strip() or not lgu.strip():
        raise ValidationError("Province and LGU parameters are required")

    response.headers.update(NO_STORE_HEADERS)
    limit = province_lgu_limit(conference)
    count = await capacity.province_lgu_count(conference["confcode"], province, lgu)
    return {
        "count": count,
        "limit": limit,
        "isOpen": admission.is_open(count, limit),
        "remaining": admission.remaining_slots(count, limit),
        "province": province.strip().upper(),
        "lgu": lgu.strip().upper(),
        "conference": conference_ref(conference),
    }


@router.post("/submit-registration", response_model=SubmissionResponse)
async def submit_registration(
    request: Request,
    background_tasks: BackgroundTasks,
    conference: dict = Depends(get_conference),
    service=Depends(get_registration_service)
):
    """
    Submit a registration

    Accepts ``{province, lgu, contactPerson, contactNumber, emailAddress,
    participants: [...]}`` or the flat ``PROVINCE ... DETAILCOUNT, FIELD|i``
    form payload.
    """
    body = await read_capped_body(request, settings.MAX_SUBMISSION_BYTES)
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Request body must be valid JSON")

    submission = RegistrationSubmission.from_payload(payload, max_participants=settings.MAX_PARTICIPANTS)
    result = await service.submit(conference, submission, background_tasks=background_tasks)
    return {
        "success": True,
        "transId": result.trans_id,
        "regnum": result.regnum,
        "message": result.message,
    }


@router.get("/registration", response_model=RegistrationLookupResponse)
@router.get("/get-registration", response_model=RegistrationLookupResponse)
async def get_registration(
    response: Response,
    trans_id: str = Query(default="", alias="transId"),
    service=Depends(get_registration_service)
):
    """Registration header and participants by transaction id"""
    if not trans_id.strip():
        raise ValidationError("Registration ID parameter is required")
    response.headers.update(NO_STORE_HEADERS)
    return await service.get_registration(trans_id)


@router.get("/session-policy", response_model=SessionPolicyResponse)
async def session_policy():
    """Countdown policy for the registration form"""
    return SessionPolicy.from_settings().to_response()
