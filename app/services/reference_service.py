"""
Reference Data Service
Geography hierarchy, positions, bank accounts and hotlines
"""

import logging
from typing import List, Optional

from app.database import fetch_rows

logger = logging.getLogger(__name__)

# City classes listed ahead of provinces in the province picker
CITY_CLASSES = [
    "HIGHLY URBANIZED CITY",
    "INDEPENDENT COMPONENT CITY",
    "COMPONENT CITY",
]


def parse_psgc_prefixes(value: Optional[str]) -> List[str]:
    return [p.strip() for p in (value or "").split(",") if p.strip()]


def psgc_allowed(psgc: str, include: List[str], exclude: List[str]) -> bool:
    if include and not any(psgc.startswith(p) for p in include):
        return False
    return not any(psgc.startswith(p) for p in exclude)


class ReferenceService:
    """Read-only lookups for the registration form"""

    @staticmethod
    async def provinces(conference: dict) -> List[str]:
        """
        Provinces selectable for a conference

        The conference's psgc (or include_psgc) prefixes restrict the list,
        exclude_psgc prefixes remove entries. City classes always come first.
        """
        include = parse_psgc_prefixes(conference.get("psgc")) + parse_psgc_prefixes(conference.get("include_psgc"))
        exclude = parse_psgc_prefixes(conference.get("exclude_psgc"))

        rows = await fetch_rows(
            "SELECT lguname, psgc FROM lgus WHERE geolevel = 'PROV' ORDER BY lguname ASC",
            operation="province lookup"
        )

        seen = set()
        provinces = []
        for row in rows:
            name = row.get("lguname")
            if not name or name in seen:
                continue
            if not psgc_allowed(row.get("psgc") or "", include, exclude):
                continue
            seen.add(name)
            provinces.append(name)

        provinces.sort()
        return CITY_CLASSES + provinces

    @staticmethod
    async def lgus(province: str) -> List[str]:
        """Cities and municipalities sharing the province's first 5 PSGC digits"""
        rows = await fetch_rows(
            "SELECT psgc FROM lgus WHERE UPPER(lguname) = :province AND geolevel = 'PROV'",
            {"province": province.strip().upper()},
            "lgu lookup"
        )
        if not rows:
            return []

        prefix = rows[0]["psgc"][:5]
        lgu_rows = await fetch_rows(
            """
            SELECT lguname FROM lgus
            WHERE psgc LIKE :prefix AND geolevel IN ('MUN', 'CITY')
            ORDER BY lguname
            """,
            {"prefix": f"{prefix}%"},
            "lgu lookup"
        )
        return [r["lguname"] for r in lgu_rows]

    @staticmethod
    async def barangays(lgu: Optional[str] = None, psgc: Optional[str] = None) -> List[str]:
        """Barangays sharing the LGU's first 7 PSGC digits"""
        lgu_psgc = (psgc or "").strip()
        if not lgu_psgc and lgu:
            rows = await fetch_rows(
                """
                SELECT psgc FROM lgus
                WHERE UPPER(lguname) = :lgu AND geolevel IN ('MUN', 'CITY')
                LIMIT 1
                """,
                {"lgu": lgu.strip().upper()},
                "barangay lookup"
            )
            if not rows:
                return []
            lgu_psgc = rows[0]["psgc"] or ""

        if len(lgu_psgc) < 7:
            logger.warning("Invalid PSGC %r, at least 7 characters required", lgu_psgc)
            return []

        rows = await fetch_rows(
            """
            SELECT lguname FROM lgus
            WHERE psgc LIKE :prefix AND geolevel = 'BGY'
            ORDER BY lguname ASC
            """,
            {"prefix": f"{lgu_psgc[:7]}%"},
            "barangay lookup"
        )
        return [r["lguname"] for r in rows]

    @staticmethod
    async def positions() -> List[dict]:
        rows = await fetch_rows(
            "SELECT name, lvl FROM positions ORDER BY name ASC",
            operation="position lookup"
        )
        return [{"name": r["name"], "lvl": r.get("lvl")} for r in rows]

    @staticmethod
    async def banks(confcode: str) -> List[dict]:
        return await fetch_rows(
            "SELECT bank_name, acct_no, payee FROM banks WHERE confcode = :confcode ORDER BY id ASC",
            {"confcode": confcode},
            "bank lookup"
        )

    @staticmethod
    async def contacts(confcode: str) -> List[dict]:
        return await fetch_rows(
            "SELECT contact_no FROM contacts WHERE confcode = :confcode ORDER BY id ASC",
            {"confcode": confcode},
            "contact lookup"
        )


# Create singleton instance
reference_service = ReferenceService()
