"""
Seed a local conference row for development
"""

import sys
import asyncio
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.config import settings
from app.database import database, connect_db, disconnect_db

DEFAULTS = {
    "confcode": settings.DEFAULT_CONFCODE,
    "name": settings.DEFAULT_CONFERENCE_NAME,
    "venue": "General Santos City",
    "domain": "localhost",
    "reg_limit": settings.REGISTRATION_LIMIT,
    "reg_alert_count": max(settings.REGISTRATION_LIMIT - 1, 0),
}


async def seed_conference():
    await connect_db()

    try:
        existing = await database.fetch_one(
            "SELECT confcode FROM conference WHERE confcode = :confcode",
            {"confcode": DEFAULTS["confcode"]}
        )

        if existing:
            print(f"Conference {DEFAULTS['confcode']} already exists")
            return

        await database.execute(
            """
            INSERT INTO conference
            (confcode, name, venue, domain, reg_limit, reg_alert_count, on_maintenance)
            VALUES (:confcode, :name, :venue, :domain, :reg_limit, :reg_alert_count, 'N')
            """,
            DEFAULTS
        )

        print("Conference created successfully")
        print(f"   Code: {DEFAULTS['confcode']}")
        print(f"   Domain: {DEFAULTS['domain']}")
        print(f"   Limit: {DEFAULTS['reg_limit']}")

    finally:
        await disconnect_db()


if __name__ == "__main__":
    asyncio.run(seed_conference())
