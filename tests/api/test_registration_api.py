"""
API Tests for registration endpoints
"""
import pytest
from starlette.requests import Request

from app.dependencies import request_host
from app.errors import StorageError
from app.services.conference_service import ConferenceService

CONF = "2026-GCMIN"


def flat_payload(count: int = 3, **overrides) -> dict:
    payload = {
        "PROVINCE": "Bukidnon",
        "LGU": "Malaybalay City",
        "CONTACTPERSON": "Juan Dela Cruz",
        "CONTACTNUMBER": "09171234567",
        "EMAILADDRESS": "juan@example.com",
        "DETAILCOUNT": str(count),
    }
    for i in range(count):
        payload[f"LASTNAME|{i}"] = f"Santos {i}"
        payload[f"FIRSTNAME|{i}"] = "Maria"
        payload[f"TSHIRTSIZE|{i}"] = "L"
    payload.update(overrides)
    return payload


def json_payload(count: int = 1) -> dict:
    return {
        "province": "Bukidnon",
        "lgu": "Malaybalay City",
        "contactPerson": "Juan Dela Cruz",
        "contactNumber": "09171234567",
        "emailAddress": "juan@example.com",
        "participants": [{"last_name": f"Santos {i}", "first_name": "Maria"} for i in range(count)],
    }


class TestCheckRegistration:

    async def test_open(self, client, store):
        store.seed_registration(CONF, participants=1)
        response = await client.get("/api/check-registration")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["limit"] == 3
        assert data["isOpen"] is True
        assert data["remaining"] == 2
        assert data["showWarning"] is False
        assert data["conference"]["confcode"] == CONF
        assert "no-store" in response.headers["cache-control"]

    async def test_warning_near_limit(self, client, store):
        store.seed_registration(CONF, participants=2)
        data = (await client.get("/api/check-registration")).json()
        assert data["showWarning"] is True
        assert data["remaining"] == 1

    async def test_closed(self, client, store):
        store.seed_registration(CONF, participants=3)
        data = (await client.get("/api/check-registration")).json()
        assert data["isOpen"] is False
        assert data["remaining"] == 0
        assert data["showWarning"] is False

    async def test_storage_failure_is_generic(self, client, store):
        store.fail_on["fetch_capacity_rows"] = StorageError("password authentication failed")
        response = await client.get("/api/check-registration")
        assert response.status_code == 500
        assert "password" not in response.text
        assert "try again" in response.json()["error"]


class TestCheckProvinceLgu:

    async def test_counts_pair(self, client, store):
        store.seed_registration(CONF, participants=2, province="BUKIDNON", lgu="MALAYBALAY CITY")
        store.seed_registration(CONF, participants=1, province="BUKIDNON", lgu="VALENCIA CITY")

        response = await client.get(
            "/api/check-province-lgu", params={"province": "bukidnon", "lgu": "malaybalay city"}
        )
        data = response.json()
        assert data["count"] == 2
        assert data["isOpen"] is True
        assert data["province"] == "BUKIDNON"

    async def test_missing_params(self, client):
        response = await client.get("/api/check-province-lgu", params={"province": "Bukidnon"})
        assert response.status_code == 400


class TestSubmitRegistration:

    async def test_flat_payload(self, client, store, notifier):
        response = await client.post("/api/submit-registration", json=flat_payload(count=3))

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert len(data["transId"]) == 6
        assert data["message"].endswith(f"{data['transId']}.")

        details = await store.get_details(data["regnum"])
        assert [d["linenum"] for d in details] == [0, 1, 2]
        assert details[0]["tshirtsize"] == "L"
        assert len(notifier.sent) == 1

    async def test_json_payload(self, client, store):
        response = await client.post("/api/submit-registration", json=json_payload(count=2))
        assert response.status_code == 200
        assert await store.count_details(response.json()["regnum"]) == 2

    async def test_full_conference(self, client, store):
        store.seed_registration(CONF, participants=3)
        response = await client.post("/api/submit-registration", json=flat_payload(count=1))

        assert response.status_code == 400
        assert response.json() == {
            "error": "Registration is already closed",
            "currentCount": 3,
            "limit": 3,
        }

    async def test_last_slot_then_closed(self, client, store):
        store.seed_registration(CONF, participants=2)
        first = await client.post("/api/submit-registration", json=flat_payload(count=1))
        second = await client.post("/api/submit-registration", json=flat_payload(count=1))
        assert first.status_code == 200
        assert second.status_code == 400

    async def test_invalid_detail_count(self, client, store):
        response = await client.post("/api/submit-registration", json=flat_payload(count=1, DETAILCOUNT="x"))
        assert response.status_code == 400
        assert response.json()["field"] == "DETAILCOUNT"
        assert store.headers == []

    async def test_missing_contact(self, client):
        response = await client.post("/api/submit-registration", json=flat_payload(count=1, CONTACTPERSON=""))
        assert response.status_code == 400

    async def test_not_json(self, client):
        response = await client.post(
            "/api/submit-registration",
            content=b"PROVINCE=Bukidnon",
            headers={"content-type": "application/x-www-form-urlencoded"}
        )
        assert response.status_code == 400

    async def test_oversized_body(self, client, monkeypatch):
        from app.config import settings

        monkeypatch.setattr(settings, "MAX_SUBMISSION_BYTES", 100)
        response = await client.post("/api/submit-registration", json=flat_payload(count=3))
        assert response.status_code == 413

    async def test_oversized_chunked_body(self, client, store, monkeypatch):
        """Bodies without a Content-Length are still cut off at the size limit"""
        from app.config import settings

        monkeypatch.setattr(settings, "MAX_SUBMISSION_BYTES", 100)

        async def chunks():
            for _ in range(50):
                yield b" " * 64

        response = await client.post(
            "/api/submit-registration",
            content=chunks(),
            headers={"content-type": "application/json"}
        )
        assert response.status_code == 413
        assert store.headers == []

    async def test_huge_detail_count(self, client, store):
        response = await client.post(
            "/api/submit-registration",
            json=flat_payload(count=1, DETAILCOUNT="1000000000")
        )
        assert response.status_code == 400
        assert response.json()["field"] == "DETAILCOUNT"
        assert store.headers == []

    async def test_blank_contact_person(self, client, store):
        response = await client.post("/api/submit-registration", json=flat_payload(count=1, CONTACTPERSON="   "))
        assert response.status_code == 400
        assert store.headers == []

    async def test_detail_failure_rolls_back(self, client, store):
        store.fail_on["insert_details"] = StorageError("insert failed", kind="write")
        response = await client.post("/api/submit-registration", json=flat_payload(count=2))

        assert response.status_code == 500
        assert store.headers == []
        assert "try again" in response.json()["error"]

    async def test_notification_failure_does_not_fail_submission(self, client, notifier):
        notifier.error = RuntimeError("smtp down")
        response = await client.post("/api/submit-registration", json=flat_payload(count=1))
        assert response.status_code == 200


class TestGetRegistration:

    async def test_lookup(self, client):
        submitted = (await client.post("/api/submit-registration", json=flat_payload(count=2))).json()

        response = await client.get("/api/get-registration", params={"transId": submitted["transId"].lower()})
        assert response.status_code == 200
        data = response.json()
        assert data["header"]["regid"] == submitted["transId"]
        assert data["header"]["status"] == "PENDING"
        assert len(data["details"]) == 2

    async def test_unknown(self, client):
        response = await client.get("/api/get-registration", params={"transId": "ZZZZZZ"})
        assert response.status_code == 404

    async def test_missing_id(self, client):
        response = await client.get("/api/get-registration")
        assert response.status_code == 400


class TestSessionPolicy:

    async def test_policy(self, client):
        response = await client.get("/api/session-policy")
        assert response.json()["durationSeconds"] == 1800


class TestMiddleware:

    async def test_rate_limit_headers(self, client):
        response = await client.get("/api/check-registration")
        assert response.headers["x-ratelimit-limit"] == "30"
        assert response.headers["x-ratelimit-remaining"] == "29"

    async def test_rate_limited(self, client):
        for _ in range(30):
            await client.get("/api/check-registration", headers={"x-forwarded-for": "9.9.9.9"})
        response = await client.get("/api/check-registration", headers={"x-forwarded-for": "9.9.9.9"})

        assert response.status_code == 429
        assert response.json()["retryAfter"] > 0
        assert "retry-after" in response.headers

        other = await client.get("/api/check-registration", headers={"x-forwarded-for": "8.8.8.8"})
        assert other.status_code == 200

    async def test_maintenance(self, client, conference):
        conference["on_maintenance"] = "Y"

        response = await client.get("/api/check-registration")
        assert response.status_code == 503

        status = await client.get("/api/check-maintenance")
        assert status.status_code == 200
        assert status.json()["onMaintenance"] is True

        health = await client.get("/api/health")
        assert health.status_code == 200

    async def test_maintenance_check_without_conference(self, client, monkeypatch):
        async def resolve(hostname=None, confcode=None):
            return None

        monkeypatch.setattr(ConferenceService, "resolve", staticmethod(resolve))
        response = await client.get("/api/check-maintenance")
        assert response.json() == {"onMaintenance": False, "conference": None}


class TestRegistrationPath:

    async def test_registration_alias(self, client):
        submitted = (await client.post("/api/submit-registration", json=json_payload(count=1))).json()
        response = await client.get("/api/registration", params={"transId": submitted["transId"]})
        assert response.status_code == 200
        assert response.json()["header"]["regnum"] == submitted["regnum"]


class TestConferenceHost:

    async def test_host_header_wins_over_forwarded_host(self, client, conference, monkeypatch):
        seen = []

        async def resolve(hostname=None, confcode=None):
            seen.append(hostname)
            return conference

        monkeypatch.setattr(ConferenceService, "resolve", staticmethod(resolve))
        response = await client.get(
            "/api/check-maintenance",
            headers={"x-forwarded-host": "other-conference.example"}
        )
        assert response.status_code == 200
        assert seen
        assert all(host == "test" for host in seen)

    def test_request_host_precedence(self):
        def make_request(headers):
            return Request({"type": "http", "headers": [(k.encode(), v.encode()) for k, v in headers.items()]})

        assert request_host(make_request({"host": "reg.example.org", "x-forwarded-host": "evil.example"})) == "reg.example.org"
        assert request_host(make_request({"x-forwarded-host": "reg.example.org"})) == "reg.example.org"
        assert request_host(make_request({})) == "localhost"
