"""
Payment Proof Service
Upload, list and delete payment proof files for a registration
"""

import logging
import uuid
from pathlib import Path
from typing import Optional

from app.config import settings
from app.errors import NotFoundError, PaymentProofLimitReached, ValidationError
from app.services.registration_store import registration_store
from app.services.storage_service import storage_service

logger = logging.getLogger(__name__)


def next_sequence(proofs: list) -> int:
    """Next upload sequence number, starting at 1"""
    return max((int(p["linenum"]) for p in proofs), default=0) + 1


class PaymentProofService:
    """Service for payment proof operations"""

    def __init__(self, store=None, storage=None):
        self.store = store or registration_store
        self.storage = storage or storage_service

    async def _registration(self, trans_id: str) -> dict:
        regid = (trans_id or "").strip().upper()
        if not regid:
            raise ValidationError("Registration ID is required", field="transId")
        header = await self.store.get_header(regid)
        if not header:
            raise NotFoundError("Registration ID not found")
        return header

    async def list_proofs(self, trans_id: str) -> dict:
        header = await self._registration(trans_id)
        proofs = await self.store.list_payment_proofs(header["regid"], header["confcode"])
        allowed = await self.store.count_details(header["regnum"])
        return {"paymentProofs": proofs, "count": len(proofs), "limit": allowed}

    @staticmethod
    def validate_file(filename: Optional[str], content: bytes, content_type: Optional[str]) -> None:
        if not content:
            raise ValidationError("No file provided", field="file")
        if content_type not in settings.allowed_proof_types:
            raise ValidationError(
                "Invalid file type. Please upload an image (JPEG, PNG, GIF) or PDF file.",
                field="file"
            )
        if len(content) > settings.MAX_UPLOAD_SIZE:
            max_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
            raise ValidationError(f"File size must be less than {max_mb}MB.", field="file")

    async def upload(
        self,
        trans_id: str,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str]
    ) -> dict:
        """
        Store a payment proof for a registration

        One proof slot per participant. The sequence number is max+1 of the
        existing proofs; a concurrent upload computing the same number fails
        on the unique key and its blob is removed again.
        """
        self.validate_file(filename, content, content_type)
        header = await self._registration(trans_id)
        regid = header["regid"]
        confcode = header["confcode"]

        existing = await self.store.list_payment_proofs(regid, confcode)
        allowed = await self.store.count_details(header["regnum"])
        if len(existing) >= allowed:
            raise PaymentProofLimitReached(existing=len(existing), allowed=allowed)

        linenum = next_sequence(existing)
        extension = Path(filename or "").suffix.lower() or ".pdf"
        key = f"payment-proof-{regid}-{uuid.uuid4().hex}{extension}"

        url = await self.storage.put(key, content, content_type)
        try:
            proof = await self.store.insert_payment_proof(regid, confcode, linenum, url)
        except Exception:
            await self._remove_blob(key)
            raise

        try:
            await self.store.set_latest_payment_proof(regid, url)
        except Exception as e:
            logger.warning("Could not update latest payment proof on %s: %s", regid, e)

        logger.info("Payment proof %s uploaded for %s (sequence %s)", key, regid, linenum)
        return proof

    async def delete(self, trans_id: str, proof_id: int) -> None:
        header = await self._registration(trans_id)
        regid = header["regid"]

        proof = await self.store.get_payment_proof(proof_id, regid)
        if not proof:
            raise NotFoundError("Payment proof not found or does not belong to this registration")

        key = self.storage.key_from_url(proof["payment_proof_url"])
        if key:
            await self._remove_blob(key)
        else:
            logger.warning("Payment proof %s has a foreign URL, blob left in place", proof_id)

        await self.store.delete_payment_proof(proof_id, regid)

        remaining = await self.store.list_payment_proofs(regid, header["confcode"])
        latest = remaining[-1]["payment_proof_url"] if remaining else None
        try:
            await self.store.set_latest_payment_proof(regid, latest)
        except Exception as e:
            logger.warning("Could not update latest payment proof on %s: %s", regid, e)

        logger.info("Payment proof %s deleted for %s", proof_id, regid)

    async def _remove_blob(self, key: str) -> None:
        try:
            await self.storage.remove(key)
        except Exception as e:
            logger.warning("Could not remove stored file %s: %s", key, e)


# Create singleton instance
payment_proof_service = PaymentProofService()
