"""
Storage Service
Supabase Storage integration for payment proof files
"""

import logging
from typing import Optional

import httpx

from app.config import settings
from app.errors import StorageError, OperationTimeout

logger = logging.getLogger(__name__)


class StorageService:
    """Supabase Storage helper for one bucket"""

    def __init__(self, bucket: Optional[str] = None, timeout: Optional[float] = None):
        self.bucket = bucket or settings.PAYMENT_PROOF_BUCKET
        self.timeout = timeout or settings.UPLOAD_TIMEOUT

    @staticmethod
    def _ensure_config():
        if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
            raise StorageError("Supabase Storage is not configured", kind="write")

    @staticmethod
    def _base() -> str:
        return settings.SUPABASE_URL.rstrip("/")

    def _headers(self, content_type: Optional[str] = None) -> dict:
        headers = {
            "Authorization": f"Bearer {settings.SUPABASE_KEY}",
            "apikey": settings.SUPABASE_KEY,
        }
        if content_type:
            headers["Content-Type"] = content_type
            headers["cache-control"] = "3600"
        return headers

    def public_url(self, key: str) -> str:
        return f"{self._base()}/storage/v1/object/public/{self.bucket}/{key}"

    def key_from_url(self, file_url: str) -> Optional[str]:
        """Object key for a public URL of this bucket, None for foreign URLs"""
        prefix = f"{self._base()}/storage/v1/object/public/{self.bucket}/"
        if file_url and file_url.startswith(prefix):
            return file_url[len(prefix):]
        return None

    async def put(self, key: str, content: bytes, content_type: str) -> str:
        """Upload bytes under a fresh key and return the public URL"""
        self._ensure_config()
        url = f"{self._base()}/storage/v1/object/{self.bucket}/{key}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    url,
                    headers=self._headers(content_type or "application/octet-stream"),
                    content=content
                )
        except httpx.TimeoutException:
            raise OperationTimeout("payment proof upload", self.timeout)
        except httpx.HTTPError as e:
            raise StorageError(f"Storage upload failed: {e}", kind="write") from e

        if resp.status_code not in (200, 201):
            logger.error("Storage upload of %s failed: %s %s", key, resp.status_code, resp.text)
            raise StorageError(f"Storage upload failed with status {resp.status_code}", kind="write")

        return self.public_url(key)

    async def remove(self, key: str) -> None:
        self._ensure_config()
        url = f"{self._base()}/storage/v1/object/{self.bucket}/{key}"

        try:
            async with httpx.AsyncClient(timeout=settings.DB_READ_TIMEOUT) as client:
                resp = await client.delete(url, headers=self._headers())
        except httpx.TimeoutException:
            raise OperationTimeout("payment proof removal", settings.DB_READ_TIMEOUT)
        except httpx.HTTPError as e:
            raise StorageError(f"Storage delete failed: {e}", kind="write") from e

        if resp.status_code not in (200, 204, 404):
            raise StorageError(f"Storage delete failed with status {resp.status_code}", kind="write")

    async def bucket_status(self) -> dict:
        """List one object to check that the bucket exists"""
        self._ensure_config()
        url = f"{self._base()}/storage/v1/object/list/{self.bucket}"

        try:
            async with httpx.AsyncClient(timeout=settings.DB_READ_TIMEOUT) as client:
                resp = await client.post(url, headers=self._headers("application/json"), json={"prefix": "", "limit": 1})
        except httpx.TimeoutException:
            raise OperationTimeout("storage bucket check", settings.DB_READ_TIMEOUT)
        except httpx.HTTPError as e:
            raise StorageError(f"Storage bucket check failed: {e}") from e

        if resp.status_code == 200:
            return {"exists": True, "bucket": self.bucket, "fileCount": len(resp.json() or [])}
        if resp.status_code in (400, 404):
            return {"exists": False, "bucket": self.bucket}
        raise StorageError(f"Storage bucket check failed with status {resp.status_code}")


# Create singleton instance
storage_service = StorageService()
