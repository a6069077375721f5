"""
Registration Service
Admits, persists and confirms a registration submission
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, List
from zoneinfo import ZoneInfo

from app.config import settings
from app.errors import (
    CapacityExceeded,
    DetailWriteFailed,
    HeaderWriteFailed,
    InconsistentStateError,
    NotFoundError,
    OperationTimeout,
    StorageError,
)
from app.schemas.registration import RegistrationSubmission, Participant
from app.services import admission
from app.services.capacity_service import CapacityService, capacity_service
from app.services.conference_service import registration_limit
from app.services.email_service import ConfirmationEmail, email_service
from app.services.registration_store import registration_store
from app.services.transid_service import TransactionIdAllocator, transid_allocator

logger = logging.getLogger(__name__)

EXPIRY_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%d-%m-%Y")


class SubmissionState(str, Enum):
    RECEIVED = "RECEIVED"
    CAPACITY_CHECKED = "CAPACITY_CHECKED"
    ID_ALLOCATED = "ID_ALLOCATED"
    HEADER_WRITTEN = "HEADER_WRITTEN"
    DETAILS_WRITTEN = "DETAILS_WRITTEN"
    NOTIFIED = "NOTIFIED"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass
class SubmissionResult:
    trans_id: str
    regnum: int
    message: str
    participant_count: int
    states: List[SubmissionState] = field(default_factory=list)


def clean(value: Optional[str]) -> str:
    return (value or "").strip()


def upper(value: Optional[str]) -> str:
    return clean(value).upper()


def lower(value: Optional[str]) -> str:
    return clean(value).lower()


def parse_expiry_date(value: Optional[str]) -> Optional[date]:
    """Parse a license expiry date, None when blank or unparseable"""
    text = clean(value)
    if not text:
        return None
    for fmt in EXPIRY_DATE_FORMATS:
        try:
            return datetime.strptime(text[:10], fmt).date()
        except ValueError:
            continue
    logger.debug("Ignoring unparseable expiry date %r", text)
    return None


def conference_now() -> datetime:
    """Wall clock time at the conference, second precision"""
    now = datetime.now(ZoneInfo(settings.CONFERENCE_TIMEZONE))
    return now.replace(microsecond=0, tzinfo=None)


def normalize_header(submission: RegistrationSubmission) -> dict:
    return {
        "province": upper(submission.province),
        "lgu": upper(submission.lgu),
        "contactperson": upper(submission.contact_person),
        "contactnum": upper(submission.contact_number),
        "email": lower(submission.email_address),
    }


def normalize_participant(participant: Participant, header: dict) -> dict:
    return {
        "lastname": upper(participant.last_name),
        "firstname": upper(participant.first_name),
        "middleinit": upper(participant.middle_initial),
        "suffix": upper(participant.suffix),
        "designation": upper(participant.designation),
        "brgy": upper(participant.barangay),
        "lgu": upper(participant.lgu) or header["lgu"],
        "province": upper(participant.province) or header["province"],
        "tshirtsize": upper(participant.tshirt_size),
        "contactnum": upper(participant.contact_number),
        "prcnum": upper(participant.prc_number),
        "expirydate": parse_expiry_date(participant.expiry_date),
        "email": lower(participant.email) or None,
    }


class RegistrationService:
    """Orchestrates one registration submission"""

    def __init__(
        self,
        store=None,
        capacity: Optional[CapacityService] = None,
        allocator: Optional[TransactionIdAllocator] = None,
        notifier=None,
        clock=conference_now
    ):
        self.store = store or registration_store
        self.capacity = capacity or capacity_service
        self.allocator = allocator or transid_allocator
        self.notifier = notifier or email_service
        self.clock = clock

    async def submit(
        self,
        conference: dict,
        submission: RegistrationSubmission,
        background_tasks=None
    ) -> SubmissionResult:
        """
        Admit and persist a registration.

        The admission check always re-reads capacity; nothing the client saw
        earlier is trusted. Once the details are written the submission is
        reported as successful regardless of the confirmation email.

        Raises:
            CapacityExceeded: conference is full
            AllocationExhausted: no free transaction id
            HeaderWriteFailed: header insert failed, nothing persisted
            DetailWriteFailed: detail insert failed, header rolled back
            InconsistentStateError: detail insert and rollback both failed
        """
        confcode = conference["confcode"]
        states = [SubmissionState.RECEIVED]

        # 1. Capacity re-check
        limit = registration_limit(conference)
        count = await self.capacity.conference_count(confcode)
        if not admission.is_open(count, limit):
            logger.info("Registration closed for %s (%s/%s)", confcode, count, limit)
            raise CapacityExceeded(current_count=count, limit=limit)
        states.append(SubmissionState.CAPACITY_CHECKED)

        # 2. Normalization
        header = normalize_header(submission)
        details = [normalize_participant(p, header) for p in submission.participants]

        # 3. Transaction id
        trans_id = await self.allocator.allocate()
        states.append(SubmissionState.ID_ALLOCATED)

        # 4. Header
        regdate = self.clock()
        header.update({
            "regid": trans_id,
            "confcode": confcode,
            "regdate": regdate,
            "status": "PENDING",
        })
        regnum = await self._write_header(header)
        states.append(SubmissionState.HEADER_WRITTEN)

        # 5. Details
        for linenum, detail in enumerate(details):
            detail.update({
                "regnum": regnum,
                "regid": trans_id,
                "confcode": confcode,
                "linenum": linenum,
            })
        await self._write_details(regnum, trans_id, details)
        states.append(SubmissionState.DETAILS_WRITTEN)

        # 6. Confirmation (best effort)
        confirmation = ConfirmationEmail(
            trans_id=trans_id,
            email=header["email"],
            contact_person=header["contactperson"],
            province=header["province"],
            lgu=header["lgu"],
            contact_number=header["contactnum"],
            regdate=regdate,
            participant_count=len(details),
            conference_name=conference.get("name"),
        )
        if background_tasks is not None:
            background_tasks.add_task(self.notify, confirmation)
        else:
            await self.notify(confirmation)
        states.append(SubmissionState.NOTIFIED)

        logger.info(
            "Registration %s (regnum %s) admitted for %s with %s participants",
            trans_id, regnum, confcode, len(details)
        )
        states.append(SubmissionState.DONE)
        return SubmissionResult(
            trans_id=trans_id,
            regnum=regnum,
            message=f"Your registration was successful. Your registration ID is {trans_id}.",
            participant_count=len(details),
            states=states,
        )

    async def _write_header(self, header: dict) -> int:
        try:
            return await self.store.insert_header(header)
        except OperationTimeout:
            # The insert may still land after cancellation
            await self._discard_header_by_regid(header["regid"])
            raise
        except StorageError as e:
            logger.error("Header insert failed for %s: %s", header["regid"], e)
            raise HeaderWriteFailed(f"header insert failed for {header['regid']}") from e

    async def _discard_header_by_regid(self, trans_id: str) -> None:
        try:
            await self.store.delete_header_by_regid(trans_id)
        except Exception as e:
            logger.critical(
                "Could not discard header %s after a timed out insert, manual reconciliation required: %s",
                trans_id, e
            )

    async def _write_details(self, regnum: int, trans_id: str, details: List[dict]) -> None:
        try:
            await self.store.insert_details(details)
            return
        except Exception as e:
            detail_error = e

        logger.error("Detail insert failed for %s (regnum %s): %s", trans_id, regnum, detail_error)
        try:
            await self.store.delete_header(regnum)
        except Exception as rollback_error:
            logger.critical(
                "Rollback of header %s (regnum %s) failed, manual reconciliation required: %s",
                trans_id, regnum, rollback_error
            )
            raise InconsistentStateError(
                f"detail insert and header rollback both failed for regnum {regnum}",
                regnum=regnum
            ) from rollback_error

        logger.info("Header %s (regnum %s) rolled back", trans_id, regnum)
        raise DetailWriteFailed(f"detail insert failed for regnum {regnum}", regnum=regnum) from detail_error

    async def notify(self, confirmation: ConfirmationEmail) -> None:
        """Send the confirmation, logging and swallowing every failure"""
        try:
            await self.notifier.send_registration_confirmation(confirmation)
        except Exception as e:
            logger.warning("Confirmation for %s not delivered: %s", confirmation.trans_id, e)

    async def get_registration(self, trans_id: str) -> dict:
        """Header and ordered participant lines for a transaction id"""
        header = await self.store.get_header(clean(trans_id).upper())
        if not header:
            raise NotFoundError("Registration ID not found")
        details = await self.store.get_details(header["regnum"])
        return {"header": header, "details": details}


# Create singleton instance
registration_service = RegistrationService()
