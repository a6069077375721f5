"""
Registration Errors
Failure taxonomy shared by services and the API layer
"""

from typing import Optional

GENERIC_RETRY_MESSAGE = "Something went wrong while processing your request. Please try again later."


class RegistrationError(Exception):
    """Base class for all registration failures"""

    status_code = 500
    public_message = GENERIC_RETRY_MESSAGE

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.public_message
        super().__init__(self.message)

    def to_response(self) -> dict:
        return {"error": self.public_message}


class ValidationError(RegistrationError):
    """Missing or malformed input, raised before anything touches storage"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)

    def to_response(self) -> dict:
        body = {"error": self.message}
        if self.field:
            body["field"] = self.field
        return body


class NotFoundError(RegistrationError):
    status_code = 404

    def to_response(self) -> dict:
        return {"error": self.message}


class CapacityExceeded(RegistrationError):
    """Admission gate closed at write time"""

    status_code = 400
    public_message = "Registration is already closed"

    def __init__(self, current_count: int, limit: int):
        self.current_count = current_count
        self.limit = limit
        super().__init__(f"Registration is already closed ({current_count}/{limit})")

    def to_response(self) -> dict:
        return {
            "error": self.public_message,
            "currentCount": self.current_count,
            "limit": self.limit,
        }


class PaymentProofLimitReached(RegistrationError):
    status_code = 400

    def __init__(self, existing: int, allowed: int):
        self.existing = existing
        self.allowed = allowed
        super().__init__(
            f"Maximum number of payment proofs reached ({existing}/{allowed}). "
            "Delete an existing proof before uploading a new one."
        )

    def to_response(self) -> dict:
        return {"error": self.message, "count": self.existing, "limit": self.allowed}


class AllocationExhausted(RegistrationError):
    """Transaction id allocator hit its retry bound"""

    status_code = 503

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Could not allocate a unique transaction id after {attempts} attempts")


class StorageError(RegistrationError):
    """Persistence or blob storage failure, tagged as a read or a write"""

    def __init__(self, message: str, kind: str = "read"):
        self.kind = kind
        super().__init__(message)


class DuplicateKeyError(StorageError):
    status_code = 409
    public_message = "This record was modified by another request. Please refresh and try again."

    def __init__(self, message: str):
        super().__init__(message, kind="write")


class HeaderWriteFailed(StorageError):
    def __init__(self, message: str):
        super().__init__(message, kind="write")


class PartialFailure(StorageError):
    """Detail write failed after the header was written"""

    def __init__(self, message: str, regnum: Optional[int] = None):
        self.regnum = regnum
        super().__init__(message, kind="write")


class DetailWriteFailed(PartialFailure):
    """Detail write failed and the header was rolled back"""


class InconsistentStateError(PartialFailure):
    """Detail write failed and the compensating header delete failed too"""


class OperationTimeout(RegistrationError):
    status_code = 504
    public_message = "The request took too long to complete. Please try again later."

    def __init__(self, operation: str, seconds: float):
        self.operation = operation
        self.seconds = seconds
        super().__init__(f"{operation} exceeded {seconds:g}s")


class NotificationError(RegistrationError):
    """Confirmation delivery failed. Logged only."""


class PayloadTooLarge(RegistrationError):
    status_code = 413

    def __init__(self, max_bytes: int):
        self.max_bytes = max_bytes
        super().__init__(f"Request payload too large. Maximum size is {max_bytes // 1024}KB")

    def to_response(self) -> dict:
        return {"error": self.message}
