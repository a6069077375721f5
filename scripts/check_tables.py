"""
Report which registration tables exist and how many rows they hold
"""

import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from app.config import settings
import psycopg2

REQUIRED_TABLES = ("conference", "regh", "regd", "regdep", "lgus", "positions", "banks", "contacts")


def main():
    conn = psycopg2.connect(settings.DATABASE_URL)
    cur = conn.cursor()
    cur.execute("select tablename from pg_tables where schemaname='public'")
    present = {row[0] for row in cur.fetchall()}

    missing = [t for t in REQUIRED_TABLES if t not in present]
    for table in REQUIRED_TABLES:
        if table in present:
            cur.execute(f"select count(*) from {table}")
            print(f"{table:<12} {cur.fetchone()[0]} rows")
        else:
            print(f"{table:<12} MISSING")

    cur.close()
    conn.close()
    if missing:
        print("Run `alembic upgrade head` to create:", ", ".join(missing))
        sys.exit(1)

if __name__ == '__main__':
    main()
