"""
Pydantic schemas for request/response validation
"""

from app.schemas.registration import (
    Participant,
    RegistrationSubmission,
    SubmissionResponse,
    CapacityStatusResponse,
    ProvinceLguStatusResponse,
    RegistrationLookupResponse,
)

__all__ = [
    "Participant",
    "RegistrationSubmission",
    "SubmissionResponse",
    "CapacityStatusResponse",
    "ProvinceLguStatusResponse",
    "RegistrationLookupResponse",
]
