"""
Registration Session Timer
Advisory countdown for an open registration form. Holds no slot.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from app.config import settings

logger = logging.getLogger(__name__)


class SessionEvent(str, Enum):
    NONE = "NONE"
    PROMPT_EXTEND = "PROMPT_EXTEND"
    REDIRECT = "REDIRECT"


@dataclass(frozen=True)
class SessionPolicy:
    duration_seconds: int
    warning_seconds: int
    extension_seconds: int
    max_extensions: int = 1

    @classmethod
    def from_settings(cls) -> "SessionPolicy":
        return cls(
            duration_seconds=settings.SESSION_DURATION_MINUTES * 60,
            warning_seconds=settings.SESSION_WARNING_MINUTES * 60,
            extension_seconds=settings.SESSION_EXTENSION_MINUTES * 60,
        )

    def to_response(self) -> dict:
        return {
            "durationSeconds": self.duration_seconds,
            "warningSeconds": self.warning_seconds,
            "extensionSeconds": self.extension_seconds,
            "maxExtensions": self.max_extensions,
        }


class RegistrationSessionTimer:
    """
    Countdown mirrored from the registration form.

    Starts when the form first sees the conference open. At the warning mark
    admission is re-queried once; if still open the user is offered a single
    extension. At zero the form redirects away. Server-side admission at
    submit time is unaffected by anything here.
    """

    def __init__(
        self,
        admission_check: Callable[[], Awaitable[bool]],
        policy: Optional[SessionPolicy] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.admission_check = admission_check
        self.policy = policy or SessionPolicy.from_settings()
        self.clock = clock
        self.deadline: Optional[float] = None
        self.extensions_used = 0
        self.warned = False
        self.prompt_pending = False
        self.expired = False

    @property
    def started(self) -> bool:
        return self.deadline is not None

    def start(self, is_open: bool) -> bool:
        """Start the countdown the first time the form reports the conference open"""
        if self.started or not is_open:
            return self.started
        self.deadline = self.clock() + self.policy.duration_seconds
        return True

    def remaining(self) -> float:
        if not self.started:
            return float(self.policy.duration_seconds)
        return max(self.deadline - self.clock(), 0.0)

    async def tick(self) -> SessionEvent:
        if not self.started or self.expired:
            return SessionEvent.REDIRECT if self.expired else SessionEvent.NONE

        remaining = self.remaining()
        if remaining <= 0:
            self.expired = True
            self.prompt_pending = False
            return SessionEvent.REDIRECT

        if remaining <= self.policy.warning_seconds and not self.warned:
            self.warned = True
            if self.extensions_used < self.policy.max_extensions and await self.admission_check():
                self.prompt_pending = True
                return SessionEvent.PROMPT_EXTEND

        return SessionEvent.NONE

    def extend(self) -> bool:
        """Accept the extension prompt"""
        if not self.prompt_pending or self.expired or self.extensions_used >= self.policy.max_extensions:
            return False
        self.deadline += self.policy.extension_seconds
        self.extensions_used += 1
        self.prompt_pending = False
        logger.debug("Registration session extended by %ss", self.policy.extension_seconds)
        return True

    def decline(self) -> None:
        self.prompt_pending = False
