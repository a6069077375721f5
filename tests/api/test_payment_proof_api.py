"""
API Tests for payment proof endpoints
"""
import pytest
from unittest.mock import AsyncMock

from app.errors import StorageError
from app.services.storage_service import storage_service

CONF = "2026-GCMIN"
PNG = b"\x89PNG\r\n\x1a\n" + b"0" * 64


class TestPaymentProofApi:

    async def test_upload_list_delete(self, client, store, storage):
        store.seed_registration(CONF, participants=2, regid="ABC123")

        response = await client.post(
            "/api/upload-payment-proof",
            data={"transId": "ABC123"},
            files={"file": ("receipt.png", PNG, "image/png")}
        )
        assert response.status_code == 200
        uploaded = response.json()
        assert uploaded["linenum"] == 1
        assert uploaded["url"].startswith(storage.base)

        listing = (await client.get("/api/get-payment-proofs", params={"transId": "ABC123"})).json()
        assert listing["count"] == 1
        assert listing["limit"] == 2
        assert listing["paymentProofs"][0]["id"] == uploaded["id"]

        deleted = await client.delete(
            "/api/delete-payment-proof", params={"id": uploaded["id"], "transId": "ABC123"}
        )
        assert deleted.status_code == 200
        assert store.proofs == []

    async def test_limit_reached(self, client, store):
        store.seed_registration(CONF, participants=1, regid="ABC123")
        files = {"file": ("receipt.png", PNG, "image/png")}

        await client.post("/api/upload-payment-proof", data={"transId": "ABC123"}, files=files)
        response = await client.post("/api/upload-payment-proof", data={"transId": "ABC123"}, files=files)

        assert response.status_code == 400
        assert response.json()["limit"] == 1

    async def test_invalid_type(self, client, store):
        store.seed_registration(CONF, participants=1, regid="ABC123")
        response = await client.post(
            "/api/upload-payment-proof",
            data={"transId": "ABC123"},
            files={"file": ("notes.txt", b"hello", "text/plain")}
        )
        assert response.status_code == 400
        assert response.json()["field"] == "file"

    async def test_missing_trans_id(self, client):
        response = await client.post(
            "/api/upload-payment-proof",
            files={"file": ("receipt.png", PNG, "image/png")}
        )
        assert response.status_code == 400

    async def test_unknown_registration(self, client):
        response = await client.get("/api/get-payment-proofs", params={"transId": "NOPE00"})
        assert response.status_code == 404

    async def test_delete_unknown_proof(self, client, store):
        store.seed_registration(CONF, participants=1, regid="ABC123")
        response = await client.delete("/api/delete-payment-proof", params={"id": 99, "transId": "ABC123"})
        assert response.status_code == 404


class TestVerifyStorage:

    async def test_bucket_reported(self, client, monkeypatch):
        status = AsyncMock(return_value={"exists": True, "bucket": "payment-proofs", "fileCount": 4})
        monkeypatch.setattr(storage_service, "bucket_status", status)

        response = await client.get("/api/verify-storage")
        assert response.status_code == 200
        assert response.json() == {"exists": True, "bucket": "payment-proofs", "fileCount": 4}
        status.assert_awaited_once()

    async def test_storage_failure_is_generic(self, client, monkeypatch):
        """Storage errors answer 500 without the upstream detail"""
        status = AsyncMock(side_effect=StorageError("Storage bucket check failed with status 502"))
        monkeypatch.setattr(storage_service, "bucket_status", status)

        response = await client.get("/api/verify-storage")
        assert response.status_code == 500
        assert "502" not in response.json()["error"]
