import pytest
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["LEDGER_BACKEND"] = "local"
os.environ["HOLIDAY_REGION"] = "US"

from leave_ledger.database import Base
from leave_ledger.dependencies import get_ledger
from leave_ledger.main import app
from leave_ledger.services.local_ledger import LocalSnapshotLedger
from leave_ledger.services.remote_ledger import RemoteLedger
from leave_ledger.services.report import ReportService
from leave_ledger.services.seed import default_dataset
from leave_ledger.services.snapshot_storage import SnapshotStorage
from fastapi.testclient import TestClient

SEED_YEAR = 2024


@pytest.fixture(scope="function")
def session_factory():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def storage(session_factory):
    return SnapshotStorage(session_factory, "test-ledger")


@pytest.fixture(scope="function")
def ledger(storage):
    """Snapshot ledger seeded with the default dataset placed in 2024."""
    return LocalSnapshotLedger(storage, seed_factory=lambda: default_dataset(SEED_YEAR))


@pytest.fixture(scope="function")
def reports(ledger):
    return ReportService(ledger)


@pytest.fixture(scope="function")
def employee(ledger):
    """Employee with 22 days allowance and 2 days carryover, no leave yet."""
    return ledger.create_employee({
        "first_name": "Lena",
        "last_name": "Moreau",
        "email": "lena@company.com",
        "allowance_days": 22,
        "carryover_days": 2,
    })


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self._text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    @property
    def content(self):
        if self._text is not None:
            return self._text.encode()
        return b"" if self._payload is None else b"json"

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeSession:
    """Stands in for requests.Session: records calls and replays queued responses."""

    def __init__(self):
        self.headers = {}
        self.calls = []
        self.responses = []

    def queue(self, status_code=200, payload=None, text=None):
        self.responses.append(FakeResponse(status_code, payload, text))

    def fail_with(self, exc):
        self.responses.append(exc)

    def echo(self, status_code=201):
        """Answer the next call with the JSON body it sent, like a PostgREST insert."""
        self.responses.append(lambda body: FakeResponse(status_code, [body]))

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.calls.append({
            "method": method,
            "url": url,
            "params": list(params or []),
            "json": json,
            "headers": headers,
            "timeout": timeout,
        })
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(json)
        return response


@pytest.fixture(scope="function")
def fake_session():
    return FakeSession()


@pytest.fixture(scope="function")
def remote(fake_session):
    return RemoteLedger("https://ledger.example.com/", "anon-key", timeout=5, session=fake_session)


@pytest.fixture(scope="function")
def client(ledger):
    """TestClient whose requests use the isolated test ledger via dependency override."""
    app.dependency_overrides[get_ledger] = lambda: ledger
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
