"""
Registration Request/Response Models
"""

from pydantic import BaseModel, EmailStr, Field, ValidationError as PydanticValidationError
from typing import Optional, List, Any
from datetime import date, datetime

from app.errors import ValidationError

# Legacy flat payload keys: header fields plus "FIELD|index" per participant
FLAT_HEADER_KEYS = {
    "province": "PROVINCE",
    "lgu": "LGU",
    "contact_person": "CONTACTPERSON",
    "contact_number": "CONTACTNUMBER",
    "email_address": "EMAILADDRESS",
}

FLAT_PARTICIPANT_KEYS = {
    "last_name": "LASTNAME",
    "first_name": "FIRSTNAME",
    "middle_initial": "MI",
    "suffix": "SUFFIX",
    "designation": "DESIGNATION",
    "barangay": "BRGY",
    "lgu": "LGU",
    "province": "PROVINCE",
    "tshirt_size": "TSHIRTSIZE",
    "contact_number": "CONTACTNUMBER",
    "prc_number": "PRCNUM",
    "expiry_date": "EXPIRYDATE",
    "email": "EMAIL",
}


class Participant(BaseModel):
    """One participant line of a registration"""
    last_name: str = Field(..., min_length=1, max_length=100)
    first_name: str = Field(..., min_length=1, max_length=100)
    middle_initial: Optional[str] = Field(default=None, max_length=10)
    suffix: Optional[str] = Field(default=None, max_length=10)
    designation: Optional[str] = Field(default=None, max_length=150)
    barangay: Optional[str] = Field(default=None, max_length=150)
    lgu: Optional[str] = Field(default=None, max_length=150, description="Defaults to the registration LGU")
    province: Optional[str] = Field(default=None, max_length=150, description="Defaults to the registration province")
    tshirt_size: Optional[str] = Field(default=None, max_length=5)
    contact_number: Optional[str] = Field(default=None, max_length=30)
    prc_number: Optional[str] = Field(default=None, max_length=30, description="Professional license number")
    expiry_date: Optional[str] = Field(default=None, description="License expiry, YYYY-MM-DD")
    email: Optional[str] = Field(default=None, max_length=255)

    class Config:
        str_strip_whitespace = True


class RegistrationSubmission(BaseModel):
    """A submitted registration form with its participant roster"""
    province: str = Field(..., min_length=1, max_length=150)
    lgu: str = Field(..., min_length=1, max_length=150)
    contact_person: str = Field(..., min_length=1, max_length=150, alias="contactPerson")
    contact_number: str = Field(..., min_length=1, max_length=30, alias="contactNumber")
    email_address: EmailStr = Field(..., alias="emailAddress")
    participants: List[Participant] = Field(..., min_length=1)

    class Config:
        populate_by_name = True
        str_strip_whitespace = True
        json_schema_extra = {
            "example": {
                "province": "Bukidnon",
                "lgu": "Malaybalay City",
                "contactPerson": "Juan Dela Cruz",
                "contactNumber": "09171234567",
                "emailAddress": "juan@example.com",
                "participants": [
                    {"last_name": "Dela Cruz", "first_name": "Juan", "tshirt_size": "M"}
                ],
            }
        }

    @classmethod
    def from_payload(cls, payload: Any, max_participants: Optional[int] = None) -> "RegistrationSubmission":
        """
        Decode a request body into a typed submission.

        Accepts the explicit JSON shape (``participants`` array) or the legacy
        flat map (``DETAILCOUNT`` plus ``FIELD|index`` keys).
        """
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")

        if "participants" not in payload and "DETAILCOUNT" in payload:
            payload = cls._flat_to_nested(payload, max_participants)

        participants = payload.get("participants")
        if max_participants is not None and isinstance(participants, list) and len(participants) > max_participants:
            raise ValidationError(
                f"Too many participants (max {max_participants})", field="participants"
            )

        try:
            return cls.model_validate(payload)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(p) for p in first.get("loc", ()))
            raise ValidationError(f"Invalid {field or 'payload'}: {first.get('msg')}", field=field or None)

    @staticmethod
    def _flat_to_nested(payload: dict, max_participants: Optional[int] = None) -> dict:
        raw_count = str(payload.get("DETAILCOUNT", "")).strip()
        try:
            detail_count = int(raw_count)
        except ValueError:
            raise ValidationError(f"DETAILCOUNT must be a whole number, got {raw_count!r}", field="DETAILCOUNT")
        if detail_count < 1:
            raise ValidationError("At least one participant is required", field="DETAILCOUNT")
        if max_participants is not None and detail_count > max_participants:
            raise ValidationError(f"Too many participants (max {max_participants})", field="DETAILCOUNT")

        nested = {
            field: payload.get(flat_key, "")
            for field, flat_key in FLAT_HEADER_KEYS.items()
        }
        participants = []
        for i in range(detail_count):
            participant = {}
            for field, flat_key in FLAT_PARTICIPANT_KEYS.items():
                value = payload.get(f"{flat_key}|{i}")
                if value not in (None, ""):
                    participant[field] = value
            participants.append(participant)
        nested["participants"] = participants
        return nested


class SubmissionResponse(BaseModel):
    success: bool = True
    transId: str
    regnum: int
    message: str


class CapacityStatusResponse(BaseModel):
    """Conference-wide admission status"""
    count: int
    limit: int
    isOpen: bool
    remaining: int
    showWarning: bool = False
    conference: Optional[dict] = None


class ProvinceLguStatusResponse(BaseModel):
    count: int
    limit: int
    isOpen: bool
    remaining: int
    province: str
    lgu: str
    conference: Optional[dict] = None


class RegistrationHeaderResponse(BaseModel):
    regnum: int
    regid: str
    confcode: str
    province: str
    lgu: str
    contactperson: str
    contactnum: str
    email: str
    regdate: datetime
    status: Optional[str] = None
    remarks: Optional[str] = None
    payment_proof_url: Optional[str] = None

    class Config:
        from_attributes = True


class RegistrationDetailResponse(BaseModel):
    linenum: int
    lastname: str
    firstname: str
    middleinit: Optional[str] = None
    suffix: Optional[str] = None
    designation: Optional[str] = None
    brgy: Optional[str] = None
    lgu: str
    province: str
    tshirtsize: Optional[str] = None
    contactnum: Optional[str] = None
    prcnum: Optional[str] = None
    expirydate: Optional[date] = None
    email: Optional[str] = None

    class Config:
        from_attributes = True


class RegistrationLookupResponse(BaseModel):
    header: RegistrationHeaderResponse
    details: List[RegistrationDetailResponse]
