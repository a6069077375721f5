"""
Admission Gate
Single source of truth for open/closed decisions and remaining slots
"""

from typing import Optional


def is_open(count: int, limit: int) -> bool:
    """Registration is open while the admitted count is strictly below the limit"""
    return count < limit


def remaining_slots(count: int, limit: int) -> int:
    """Slots left for display, never negative"""
    return max(limit - count, 0)


def should_warn(count: int, limit: int, alert_count: Optional[int]) -> bool:
    """
    Whether the UI should show the remaining-slots warning.

    The warning starts once the admitted count reaches the conference's
    alert threshold and only while registration is still open.
    """
    if alert_count is None or alert_count < 0:
        return False
    return is_open(count, limit) and count >= alert_count
