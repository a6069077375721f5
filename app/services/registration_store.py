"""
Registration Store
SQL access to registration headers, participant details and payment proofs
"""

import logging
from typing import Optional, List

from asyncpg.exceptions import UniqueViolationError

from app.config import settings
from app.database import database, bounded
from app.errors import StorageError, DuplicateKeyError, OperationTimeout

logger = logging.getLogger(__name__)

HEADER_COLUMNS = (
    "regid", "confcode", "province", "lgu", "contactperson",
    "contactnum", "email", "regdate", "status",
)

DETAIL_COLUMNS = (
    "regnum", "regid", "confcode", "linenum", "lastname", "firstname",
    "middleinit", "suffix", "designation", "brgy", "lgu", "province",
    "tshirtsize", "contactnum", "prcnum", "expirydate", "email",
)


class RegistrationStore:
    """Persistence collaborator for the registration core"""

    def __init__(self, db=None):
        self.db = db or database

    async def _read(self, awaitable, operation: str):
        try:
            return await bounded(awaitable, settings.DB_READ_TIMEOUT, operation)
        except OperationTimeout:
            raise
        except Exception as e:
            logger.error("%s failed: %s", operation, e)
            raise StorageError(f"{operation} failed", kind="read") from e

    async def _write(self, awaitable, operation: str):
        try:
            return await bounded(awaitable, settings.DB_WRITE_TIMEOUT, operation)
        except OperationTimeout:
            raise
        except UniqueViolationError as e:
            logger.warning("%s hit a duplicate key: %s", operation, e)
            raise DuplicateKeyError(f"{operation} violated a unique constraint") from e
        except Exception as e:
            logger.error("%s failed: %s", operation, e)
            raise StorageError(f"{operation} failed", kind="write") from e

    # ------------------------------------------------------------------
    # Capacity
    # ------------------------------------------------------------------

    async def fetch_capacity_rows(
        self,
        confcode: str,
        province: Optional[str] = None,
        lgu: Optional[str] = None
    ) -> List[dict]:
        """Participant rows of a conference left-joined to their header status"""
        params = {"confcode": confcode}
        scope_filter = ""
        if province is not None and lgu is not None:
            scope_filter = "AND d.province = :province AND d.lgu = :lgu"
            params["province"] = province
            params["lgu"] = lgu

        rows = await self._read(
            self.db.fetch_all(
                f"""
                SELECT d.regnum, d.confcode, d.province, d.lgu,
                       h.regnum AS header_regnum, h.confcode AS header_confcode, h.status
                FROM regd d
                LEFT JOIN regh h ON h.regnum = d.regnum
                WHERE d.confcode = :confcode
                {scope_filter}
                """,
                params
            ),
            "capacity query"
        )
        return [dict(row) for row in rows]

    # ------------------------------------------------------------------
    # Headers and details
    # ------------------------------------------------------------------

    async def transid_exists(self, regid: str) -> bool:
        row = await self._read(
            self.db.fetch_one("SELECT 1 AS found FROM regh WHERE regid = :regid", {"regid": regid}),
            "transaction id lookup"
        )
        return row is not None

    async def insert_header(self, values: dict) -> int:
        """Insert a header row and return the storage-assigned regnum"""
        columns = ", ".join(HEADER_COLUMNS)
        placeholders = ", ".join(f":{c}" for c in HEADER_COLUMNS)
        row = await self._write(
            self.db.fetch_one(
                f"INSERT INTO regh ({columns}) VALUES ({placeholders}) RETURNING regnum",
                {c: values.get(c) for c in HEADER_COLUMNS}
            ),
            "header insert"
        )
        if not row:
            raise StorageError("header insert returned no regnum", kind="write")
        return int(row["regnum"])

    async def insert_details(self, rows: List[dict]) -> int:
        """Insert all participant lines in a single statement"""
        if not rows:
            return 0

        values_placeholder = ",".join(
            "(" + ", ".join(f":{c}_{i}" for c in DETAIL_COLUMNS) + ")"
            for i in range(len(rows))
        )
        params = {}
        for i, row in enumerate(rows):
            for c in DETAIL_COLUMNS:
                params[f"{c}_{i}"] = row.get(c)

        await self._write(
            self.db.execute(
                f"INSERT INTO regd ({', '.join(DETAIL_COLUMNS)}) VALUES {values_placeholder}",
                params
            ),
            "detail insert"
        )
        return len(rows)

    async def delete_header(self, regnum: int) -> None:
        await self._write(
            self.db.execute("DELETE FROM regh WHERE regnum = :regnum", {"regnum": regnum}),
            "header delete"
        )

    async def delete_header_by_regid(self, regid: str) -> None:
        await self._write(
            self.db.execute("DELETE FROM regh WHERE regid = :regid", {"regid": regid}),
            "header delete"
        )

    async def get_header(self, regid: str) -> Optional[dict]:
        row = await self._read(
            self.db.fetch_one("SELECT * FROM regh WHERE regid = :regid", {"regid": regid}),
            "header lookup"
        )
        return dict(row) if row else None

    async def get_details(self, regnum: int) -> List[dict]:
        rows = await self._read(
            self.db.fetch_all(
                "SELECT * FROM regd WHERE regnum = :regnum ORDER BY linenum ASC",
                {"regnum": regnum}
            ),
            "detail lookup"
        )
        return [dict(row) for row in rows]

    async def count_details(self, regnum: int) -> int:
        total = await self._read(
            self.db.fetch_val("SELECT COUNT(*) FROM regd WHERE regnum = :regnum", {"regnum": regnum}),
            "detail count"
        )
        return int(total or 0)

    # ------------------------------------------------------------------
    # Payment proofs
    # ------------------------------------------------------------------

    async def list_payment_proofs(self, regid: str, confcode: str) -> List[dict]:
        rows = await self._read(
            self.db.fetch_all(
                """
                SELECT * FROM regdep
                WHERE regid = :regid AND confcode = :confcode
                ORDER BY linenum ASC
                """,
                {"regid": regid, "confcode": confcode}
            ),
            "payment proof lookup"
        )
        return [dict(row) for row in rows]

    async def insert_payment_proof(self, regid: str, confcode: str, linenum: int, url: str) -> dict:
        row = await self._write(
            self.db.fetch_one(
                """
                INSERT INTO regdep (regid, confcode, linenum, payment_proof_url)
                VALUES (:regid, :confcode, :linenum, :url)
                RETURNING id, regid, confcode, linenum, payment_proof_url, created_at
                """,
                {"regid": regid, "confcode": confcode, "linenum": linenum, "url": url}
            ),
            "payment proof insert"
        )
        return dict(row)

    async def get_payment_proof(self, proof_id: int, regid: str) -> Optional[dict]:
        row = await self._read(
            self.db.fetch_one(
                "SELECT * FROM regdep WHERE id = :id AND regid = :regid",
                {"id": proof_id, "regid": regid}
            ),
            "payment proof lookup"
        )
        return dict(row) if row else None

    async def delete_payment_proof(self, proof_id: int, regid: str) -> None:
        await self._write(
            self.db.execute(
                "DELETE FROM regdep WHERE id = :id AND regid = :regid",
                {"id": proof_id, "regid": regid}
            ),
            "payment proof delete"
        )

    async def set_latest_payment_proof(self, regid: str, url: Optional[str]) -> None:
        await self._write(
            self.db.execute(
                "UPDATE regh SET payment_proof_url = :url WHERE regid = :regid",
                {"url": url, "regid": regid}
            ),
            "header payment proof update"
        )


# Create singleton instance
registration_store = RegistrationStore()
