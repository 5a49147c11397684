import os
import tempfile
from collections import defaultdict

# Point the service at a throwaway SQLite file before anything imports the settings
TEST_DB_PATH = os.path.join(tempfile.gettempdir(), f"studylog-test-{os.getpid()}.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient

from study_server.api_service.main import app
from study_server.planning.models import RecordNotFoundError, StudyState, new_id
from study_server.store.record_store import StoreError
from study_server.store.repository import StudyRepository


class FakeRecordStore:
    """In-memory RecordStore keyed by table and id."""

    def __init__(self):
        self.tables = defaultdict(dict)
        self.calls = []

    async def create(self, table, record):
        created = await self.create_many(table, [record])
        return created[0]

    async def create_many(self, table, records):
        self.calls.append(("create", table))
        created = []
        for record in records:
            record = dict(record)
            if not record.get("id"):
                record["id"] = new_id()
            self.tables[table][record["id"]] = record
            created.append(dict(record))
        return created

    async def update(self, table, record_id, fields):
        self.calls.append(("update", table))
        if record_id not in self.tables[table]:
            raise RecordNotFoundError(table, record_id)
        self.tables[table][record_id].update(fields)

    async def upsert_many(self, table, records):
        self.calls.append(("upsert", table))
        for record in records:
            self.tables[table].setdefault(record["id"], {}).update(record)

    async def delete(self, table, record_id):
        self.calls.append(("delete", table))
        if self.tables[table].pop(record_id, None) is None:
            raise RecordNotFoundError(table, record_id)

    async def query(self, table, filters=None):
        return [
            dict(r) for r in self.tables[table].values()
            if all(r.get(k) == v for k, v in (filters or {}).items())
        ]


class FailingRecordStore(FakeRecordStore):
    """Rejects every call whose operation is listed in `fail_on`."""

    def __init__(self, fail_on=("create", "update", "upsert", "delete")):
        super().__init__()
        self.fail_on = set(fail_on)

    def _check(self, operation, table):
        if operation in self.fail_on:
            raise StoreError(table, operation, "simulated outage")

    async def create_many(self, table, records):
        self._check("create", table)
        return await super().create_many(table, records)

    async def update(self, table, record_id, fields):
        self._check("update", table)
        await super().update(table, record_id, fields)

    async def upsert_many(self, table, records):
        self._check("upsert", table)
        await super().upsert_many(table, records)

    async def delete(self, table, record_id):
        self._check("delete", table)
        await super().delete(table, record_id)


@pytest.fixture
def store():
    return FakeRecordStore()


@pytest.fixture
def repo(store):
    return StudyRepository(store, StudyState(user_id="user-1"))


@pytest.fixture
def client():
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)
    with TestClient(app) as test_client:
        yield test_client
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)


def register_and_login(client, username="alice", password="correct-horse"):
    response = client.post("/api/v1/auth/register", json={"username": username, "password": password})
    assert response.status_code == 201
    response = client.post("/api/v1/auth/token", data={"username": username, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register_and_login(client)
