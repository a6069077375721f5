"""
Transaction ID Service
Allocates the short public registration id
"""

import logging
import secrets
import string

from app.config import settings
from app.errors import AllocationExhausted
from app.services.registration_store import registration_store

logger = logging.getLogger(__name__)

TRANSID_ALPHABET = string.ascii_uppercase + string.digits
TRANSID_LENGTH = 6


def generate_transid(length: int = TRANSID_LENGTH) -> str:
    """Random id drawn uniformly from A-Z0-9"""
    return "".join(secrets.choice(TRANSID_ALPHABET) for _ in range(length))


class TransactionIdAllocator:
    """Generate-and-check allocator with a bounded collision retry"""

    def __init__(self, store=None, max_attempts: int = None, generator=generate_transid):
        self.store = store or registration_store
        self.max_attempts = max_attempts or settings.TRANSID_MAX_ATTEMPTS
        self.generator = generator

    async def allocate(self) -> str:
        """
        Return an id not present among persisted transaction ids.

        Storage errors from the existence check propagate unchanged.

        Raises:
            AllocationExhausted: every attempt collided
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.generator()
            if not await self.store.transid_exists(candidate):
                if attempt > 1:
                    logger.info("Allocated transaction id after %s attempts", attempt)
                return candidate

        logger.error("Transaction id allocation exhausted after %s attempts", self.max_attempts)
        raise AllocationExhausted(self.max_attempts)


# Create singleton instance
transid_allocator = TransactionIdAllocator()
