"""
Capacity Service
Counts admitted participants for a conference or a province-LGU pair
"""

import logging
from typing import Iterable, Optional

from app.services.registration_store import registration_store

logger = logging.getLogger(__name__)

ADMITTED_STATUSES = {"", "PENDING", "APPROVED"}


def normalize_status(status: Optional[str]) -> str:
    return (status or "").strip().upper()


def normalize_scope_value(value: Optional[str]) -> str:
    return (value or "").strip().upper()


def is_admitted(row: dict) -> bool:
    """A row counts when its header is absent or its status is empty, PENDING or APPROVED"""
    if "header_regnum" in row and row["header_regnum"] is None:
        return True
    return normalize_status(row.get("status")) in ADMITTED_STATUSES


def count_admitted(rows: Iterable[dict], confcode: Optional[str] = None) -> int:
    """
    Count admitted rows.

    Rows whose header belongs to another conference are skipped when
    ``confcode`` is given. Unrecognised statuses are excluded.
    """
    total = 0
    for row in rows:
        if confcode is not None:
            if row.get("confcode") not in (None, confcode):
                continue
            header_confcode = row.get("header_confcode")
            if header_confcode and header_confcode != confcode:
                continue
        if is_admitted(row):
            total += 1
    return total


class CapacityService:
    """Fresh, uncached capacity reads for admission decisions"""

    def __init__(self, store=None):
        self.store = store or registration_store

    async def conference_count(self, confcode: str) -> int:
        rows = await self.store.fetch_capacity_rows(confcode)
        count = count_admitted(rows, confcode)
        logger.debug("Conference %s admitted count: %s", confcode, count)
        return count

    async def province_lgu_count(self, confcode: str, province: str, lgu: str) -> int:
        province = normalize_scope_value(province)
        lgu = normalize_scope_value(lgu)
        rows = await self.store.fetch_capacity_rows(confcode, province=province, lgu=lgu)
        rows = [
            r for r in rows
            if normalize_scope_value(r.get("province")) == province
            and normalize_scope_value(r.get("lgu")) == lgu
        ]
        count = count_admitted(rows, confcode)
        logger.debug("Conference %s %s/%s admitted count: %s", confcode, province, lgu, count)
        return count


# Create singleton instance
capacity_service = CapacityService()
