"""
ConfReg - Test Configuration and Fixtures
"""
import os
from datetime import datetime
from typing import AsyncGenerator, List, Optional

import pytest
from httpx import AsyncClient, ASGITransport

# Set testing environment
os.environ['APP_ENV'] = 'testing'
os.environ['DEBUG'] = 'false'
os.environ['REGISTRATION_LIMIT'] = '3'
os.environ['PROVINCE_LGU_LIMIT'] = '3'
os.environ['SUPABASE_URL'] = 'https://storage.test'
os.environ['SUPABASE_KEY'] = 'test-service-key'

from app.main import app
from app.dependencies import (
    get_conference,
    get_capacity_service,
    get_registration_service,
    get_payment_proof_service,
)
from app.errors import StorageError
from app.services import rate_limiter as rate_limiting
from app.services.capacity_service import CapacityService
from app.services.conference_service import ConferenceService
from app.services.payment_proof_service import PaymentProofService
from app.services.registration_service import RegistrationService
from app.services.transid_service import TransactionIdAllocator

FIXED_NOW = datetime(2026, 3, 2, 9, 30, 0)


class FakeRegistrationStore:
    """
    In-memory stand-in for RegistrationStore

    ``fail_on`` maps a method name to the exception it should raise.
    """

    def __init__(self, next_regnum: int = 1):
        self.next_regnum = next_regnum
        self.headers: List[dict] = []
        self.details: List[dict] = []
        self.proofs: List[dict] = []
        self.orphan_rows: List[dict] = []
        self.fail_on = {}
        self.calls = []
        self._next_proof_id = 1

    def _enter(self, name: str):
        self.calls.append(name)
        if name in self.fail_on:
            raise self.fail_on[name]

    # Seeding helpers

    def seed_registration(
        self,
        confcode: str,
        participants: int = 1,
        status: Optional[str] = "PENDING",
        province: str = "BUKIDNON",
        lgu: str = "MALAYBALAY CITY",
        regid: Optional[str] = None
    ) -> dict:
        regnum = self.next_regnum
        self.next_regnum += 1
        header = {
            "regnum": regnum,
            "regid": regid or f"R{regnum:05d}",
            "confcode": confcode,
            "province": province,
            "lgu": lgu,
            "contactperson": "JUAN DELA CRUZ",
            "contactnum": "09171234567",
            "email": "juan@example.com",
            "regdate": FIXED_NOW,
            "status": status,
            "remarks": None,
            "payment_proof_url": None,
        }
        self.headers.append(header)
        for i in range(participants):
            self.details.append({
                "regnum": regnum,
                "regid": header["regid"],
                "confcode": confcode,
                "linenum": i,
                "lastname": f"PARTICIPANT{i}",
                "firstname": "TEST",
                "province": province,
                "lgu": lgu,
            })
        return header

    # Capacity

    async def fetch_capacity_rows(self, confcode, province=None, lgu=None):
        self._enter("fetch_capacity_rows")
        by_regnum = {h["regnum"]: h for h in self.headers}
        rows = []
        for d in self.details + self.orphan_rows:
            if d["confcode"] != confcode:
                continue
            if province is not None and lgu is not None:
                if d["province"] != province or d["lgu"] != lgu:
                    continue
            header = by_regnum.get(d["regnum"])
            rows.append({
                "regnum": d["regnum"],
                "confcode": d["confcode"],
                "province": d["province"],
                "lgu": d["lgu"],
                "header_regnum": header["regnum"] if header else None,
                "header_confcode": header["confcode"] if header else None,
                "status": header["status"] if header else None,
            })
        return rows

    # Headers and details

    async def transid_exists(self, regid):
        self._enter("transid_exists")
        return any(h["regid"] == regid for h in self.headers)

    async def insert_header(self, values):
        self._enter("insert_header")
        regnum = self.next_regnum
        self.next_regnum += 1
        self.headers.append({**values, "regnum": regnum, "remarks": None, "payment_proof_url": None})
        return regnum

    async def insert_details(self, rows):
        self._enter("insert_details")
        self.details.extend(dict(r) for r in rows)
        return len(rows)

    async def delete_header(self, regnum):
        self._enter("delete_header")
        self.headers = [h for h in self.headers if h["regnum"] != regnum]
        self.details = [d for d in self.details if d["regnum"] != regnum]

    async def delete_header_by_regid(self, regid):
        self._enter("delete_header_by_regid")
        regnums = {h["regnum"] for h in self.headers if h["regid"] == regid}
        self.headers = [h for h in self.headers if h["regid"] != regid]
        self.details = [d for d in self.details if d["regnum"] not in regnums]

    async def get_header(self, regid):
        self._enter("get_header")
        return next((dict(h) for h in self.headers if h["regid"] == regid), None)

    async def get_header_by_regnum(self, regnum):
        self._enter("get_header_by_regnum")
        return next((dict(h) for h in self.headers if h["regnum"] == regnum), None)

    async def get_details(self, regnum):
        self._enter("get_details")
        rows = [dict(d) for d in self.details if d["regnum"] == regnum]
        return sorted(rows, key=lambda d: d["linenum"])

    async def count_details(self, regnum):
        self._enter("count_details")
        return sum(1 for d in self.details if d["regnum"] == regnum)

    # Payment proofs

    async def list_payment_proofs(self, regid, confcode):
        self._enter("list_payment_proofs")
        rows = [dict(p) for p in self.proofs if p["regid"] == regid and p["confcode"] == confcode]
        return sorted(rows, key=lambda p: p["linenum"])

    async def insert_payment_proof(self, regid, confcode, linenum, url):
        self._enter("insert_payment_proof")
        proof = {
            "id": self._next_proof_id,
            "regid": regid,
            "confcode": confcode,
            "linenum": linenum,
            "payment_proof_url": url,
            "created_at": FIXED_NOW,
        }
        self._next_proof_id += 1
        self.proofs.append(proof)
        return dict(proof)

    async def get_payment_proof(self, proof_id, regid):
        self._enter("get_payment_proof")
        return next((dict(p) for p in self.proofs if p["id"] == proof_id and p["regid"] == regid), None)

    async def delete_payment_proof(self, proof_id, regid):
        self._enter("delete_payment_proof")
        self.proofs = [p for p in self.proofs if not (p["id"] == proof_id and p["regid"] == regid)]

    async def set_latest_payment_proof(self, regid, url):
        self._enter("set_latest_payment_proof")
        for h in self.headers:
            if h["regid"] == regid:
                h["payment_proof_url"] = url


class FakeStorage:
    """In-memory blob storage"""

    base = "https://storage.test/storage/v1/object/public/payment-proofs/"

    def __init__(self):
        self.objects = {}
        self.removed = []
        self.fail_put = None

    def key_from_url(self, url):
        if url and url.startswith(self.base):
            return url[len(self.base):]
        return None

    async def put(self, key, content, content_type):
        if self.fail_put:
            raise self.fail_put
        self.objects[key] = (content, content_type)
        return self.base + key

    async def remove(self, key):
        self.removed.append(key)
        self.objects.pop(key, None)


class FakeNotifier:
    def __init__(self, error: Optional[Exception] = None):
        self.sent = []
        self.error = error

    async def send_registration_confirmation(self, data):
        if self.error:
            raise self.error
        self.sent.append(data)
        return True


@pytest.fixture
def conference() -> dict:
    return {
        "confcode": "2026-GCMIN",
        "name": "Test Conference",
        "domain": "test",
        "reg_limit": 3,
        "reg_alert_count": 2,
        "on_maintenance": "N",
    }


@pytest.fixture
def store() -> FakeRegistrationStore:
    return FakeRegistrationStore()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def capacity(store) -> CapacityService:
    return CapacityService(store=store)


@pytest.fixture
def registration(store, capacity, notifier) -> RegistrationService:
    return RegistrationService(
        store=store,
        capacity=capacity,
        allocator=TransactionIdAllocator(store=store),
        notifier=notifier,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def payment_proofs(store, storage) -> PaymentProofService:
    return PaymentProofService(store=store, storage=storage)


@pytest.fixture
def rate_limiter(monkeypatch) -> rate_limiting.RateLimiter:
    """Fresh limiter per test so request counts do not leak"""
    limiter = rate_limiting.RateLimiter(rate_limiting.InMemoryRateLimitStore())
    monkeypatch.setattr(rate_limiting, "rate_limiter", limiter)
    return limiter


@pytest.fixture
async def client(
    monkeypatch,
    conference,
    capacity,
    registration,
    payment_proofs,
    rate_limiter
) -> AsyncGenerator[AsyncClient, None]:
    """Test client wired to the in-memory fakes"""

    async def resolve(hostname=None, confcode=None):
        return conference

    monkeypatch.setattr(ConferenceService, "resolve", staticmethod(resolve))

    app.dependency_overrides[get_conference] = lambda: conference
    app.dependency_overrides[get_capacity_service] = lambda: capacity
    app.dependency_overrides[get_registration_service] = lambda: registration
    app.dependency_overrides[get_payment_proof_service] = lambda: payment_proofs

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def storage_failure() -> StorageError:
    return StorageError("connection reset", kind="write")
