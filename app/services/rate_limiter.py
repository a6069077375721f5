"""
Rate Limiter
Per-client request throttling behind a pluggable counter store
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


@dataclass(frozen=True)
class RateLimitRule:
    limit: int
    window_seconds: int


@dataclass
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float

    def retry_after(self, now: float) -> int:
        return max(int(self.reset_at - now + 0.999), 0)


RATE_LIMITS = {
    # Write operations
    "critical": RateLimitRule(limit=20, window_seconds=15 * 60),
    # Status checks
    "status": RateLimitRule(limit=30, window_seconds=60),
    "read": RateLimitRule(limit=60, window_seconds=60),
}

CRITICAL_PATHS = ("/submit-registration", "/upload-payment-proof", "/delete-payment-proof")
STATUS_PATHS = ("/check-registration", "/check-province-lgu")


def rule_for_path(path: str) -> RateLimitRule:
    if any(p in path for p in CRITICAL_PATHS):
        return RATE_LIMITS["critical"]
    if any(p in path for p in STATUS_PATHS):
        return RATE_LIMITS["status"]
    return RATE_LIMITS["read"]


class RateLimitStore:
    """Fixed-window counter store. Multi-instance deployments plug in a shared backend."""

    async def hit(self, key: str, rule: RateLimitRule) -> RateLimitDecision:
        raise NotImplementedError


class InMemoryRateLimitStore(RateLimitStore):
    """Single-process default"""

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._records: Dict[str, list] = {}

    async def hit(self, key: str, rule: RateLimitRule) -> RateLimitDecision:
        now = self.clock()
        self._purge(now)
        record = self._records.get(key)

        if record is None or now > record[1]:
            reset_at = now + rule.window_seconds
            self._records[key] = [1, reset_at]
            return RateLimitDecision(True, rule.limit, rule.limit - 1, reset_at)

        count, reset_at = record
        if count >= rule.limit:
            return RateLimitDecision(False, rule.limit, 0, reset_at)

        record[0] = count + 1
        return RateLimitDecision(True, rule.limit, rule.limit - record[0], reset_at)

    def _purge(self, now: float) -> None:
        expired = [k for k, (_, reset_at) in self._records.items() if now > reset_at]
        for k in expired:
            del self._records[k]


def client_ip(headers, fallback: Optional[str] = None) -> str:
    """First x-forwarded-for hop, then x-real-ip"""
    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    real_ip = headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    return fallback or "unknown"


class RateLimiter:
    def __init__(self, store: Optional[RateLimitStore] = None):
        self.store = store or InMemoryRateLimitStore()

    async def check(self, path: str, ip: str) -> RateLimitDecision:
        return await self.store.hit(f"{path}:{ip}", rule_for_path(path))


# Create singleton instance
rate_limiter = RateLimiter()
