"""
Database Connection and Session Management
Uses PostgreSQL with asyncpg
"""

import asyncio
import logging
from typing import Optional, List
from databases import Database
from sqlalchemy import MetaData
from sqlalchemy.orm import declarative_base
from app.config import settings
from app.errors import OperationTimeout, StorageError

logger = logging.getLogger(__name__)

# Database URL
DATABASE_URL = settings.DATABASE_URL

# For Supabase connection pooler (pgbouncer), disable prepared statements
if "supabase.com" in DATABASE_URL or "pooler.supabase.com" in DATABASE_URL:
    db_options = {"min_size": 1, "max_size": 5, "statement_cache_size": 0}
else:
    db_options = {"min_size": 1, "max_size": 10}

# Create database instance for async queries
database = Database(DATABASE_URL, **db_options)

# Metadata for models
metadata = MetaData()

# Base class for models
Base = declarative_base(metadata=metadata)


async def bounded(awaitable, seconds: float, operation: str):
    """
    Await a collaborator call with a deadline.

    On expiry the pending call is cancelled (cooperatively, the driver may
    still finish the statement) and OperationTimeout is raised.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError:
        logger.warning("%s timed out after %ss", operation, seconds)
        raise OperationTimeout(operation, seconds)


async def fetch_rows(query: str, values: Optional[dict] = None, operation: str = "query") -> List[dict]:
    """Bounded read returning plain dicts, failures raised as StorageError"""
    try:
        rows = await bounded(database.fetch_all(query, values or {}), settings.DB_READ_TIMEOUT, operation)
    except OperationTimeout:
        raise
    except Exception as e:
        logger.error("%s failed: %s", operation, e)
        raise StorageError(f"{operation} failed", kind="read") from e
    return [dict(row) for row in rows]


async def connect_db():
    """Connect to database on startup"""
    await database.connect()
    logger.info("Database connected")


async def disconnect_db():
    """Disconnect from database on shutdown"""
    await database.disconnect()
    logger.info("Database disconnected")
