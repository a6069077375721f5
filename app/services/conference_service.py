"""
Conference Service
Resolves the conference (venue) from the request host and its admission limits
"""

import logging
from typing import Optional, List

from app.config import settings
from app.database import fetch_rows

logger = logging.getLogger(__name__)

def normalize_host(hostname: Optional[str]) -> str:
    """Strip the port and lowercase"""
    return (hostname or "localhost").split(":")[0].strip().lower()


def is_local_host(domain: str) -> bool:
    return "localhost" in domain or domain == "127.0.0.1"


def domain_candidates(hostname: Optional[str]) -> List[str]:
    """The host itself, then its www/non-www twin"""
    domain = normalize_host(hostname)
    candidates = [domain]
    if domain.startswith("www."):
        candidates.append(domain[4:])
    elif not is_local_host(domain):
        candidates.append("www." + domain)
    return candidates


def registration_limit(conference: Optional[dict]) -> int:
    """Conference reg_limit when set and valid, otherwise the configured default"""
    raw = (conference or {}).get("reg_limit")
    if raw in (None, ""):
        return settings.REGISTRATION_LIMIT
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        limit = -1
    if limit < 0:
        logger.warning(
            "Invalid reg_limit %r for conference %s, using REGISTRATION_LIMIT=%s",
            raw, (conference or {}).get("confcode"), settings.REGISTRATION_LIMIT
        )
        return settings.REGISTRATION_LIMIT
    return limit


def province_lgu_limit(conference: Optional[dict] = None) -> int:
    return settings.PROVINCE_LGU_LIMIT


def is_on_maintenance(conference: Optional[dict]) -> bool:
    return ((conference or {}).get("on_maintenance") or "").strip().upper() == "Y"


class ConferenceService:
    """Service for conference lookups"""

    @staticmethod
    async def get_by_confcode(confcode: str) -> Optional[dict]:
        if not confcode or not confcode.strip():
            return None
        rows = await fetch_rows(
            "SELECT * FROM conference WHERE confcode = :confcode",
            {"confcode": confcode.strip()},
            "conference lookup"
        )
        return rows[0] if rows else None

    @staticmethod
    async def list_by_domain(hostname: Optional[str]) -> List[dict]:
        """All venues sharing the request domain"""
        for domain in domain_candidates(hostname):
            rows = await fetch_rows(
                "SELECT * FROM conference WHERE domain = :domain ORDER BY confcode",
                {"domain": domain},
                "conference lookup"
            )
            if rows:
                return rows

        if is_local_host(normalize_host(hostname)):
            return await fetch_rows(
                "SELECT * FROM conference ORDER BY confcode LIMIT 10",
                operation="conference lookup"
            )
        return []

    @staticmethod
    async def get_by_domain(hostname: Optional[str]) -> Optional[dict]:
        venues = await ConferenceService.list_by_domain(hostname)
        if not venues:
            logger.warning("No conference found for domain: %s", normalize_host(hostname))
            return None
        return venues[0]

    @staticmethod
    async def resolve(hostname: Optional[str], confcode: Optional[str] = None) -> Optional[dict]:
        """
        Conference for this request.

        A venue code picks one of the venues served on the request domain;
        codes belonging to another domain do not resolve.
        """
        if not confcode or not confcode.strip():
            return await ConferenceService.get_by_domain(hostname)

        venues = await ConferenceService.list_by_domain(hostname)
        for venue in venues:
            if venue.get("confcode") == confcode.strip():
                return venue
        logger.warning("Venue %s is not served on %s", confcode, normalize_host(hostname))
        return None


# Create singleton instance
conference_service = ConferenceService()
