"""
Shared fixtures.

The services await motor-style collection methods; mongomock is synchronous,
so AsyncDatabase/AsyncCollection expose its collections through awaitable
methods and a cursor with motor's to_list().
"""

import mongomock
import pytest
from fastapi.testclient import TestClient

from learnhub import config
from learnhub.auth.credentials import hash_password
from learnhub.auth.identity import create_access_token
from learnhub.database import get_db, utcnow
from learnhub.main import app


class AsyncCursor:
    def __init__(self, cursor):
        self._cursor = cursor

    def sort(self, *args, **kwargs):
        self._cursor = self._cursor.sort(*args, **kwargs)
        return self

    def skip(self, count):
        self._cursor = self._cursor.skip(count)
        return self

    def limit(self, count):
        self._cursor = self._cursor.limit(count)
        return self

    async def to_list(self, length=None):
        docs = list(self._cursor)
        return docs if length is None else docs[:length]


class AsyncCollection:
    def __init__(self, collection):
        self._collection = collection

    def find(self, *args, **kwargs):
        return AsyncCursor(self._collection.find(*args, **kwargs))

    def __getattr__(self, name):
        attr = getattr(self._collection, name)
        if not callable(attr):
            return attr

        async def call(*args, **kwargs):
            return attr(*args, **kwargs)

        return call


class AsyncDatabase:
    def __init__(self, database):
        self._database = database

    def __getattr__(self, name):
        return self[name]

    def __getitem__(self, name):
        return AsyncCollection(self._database[name])

    async def command(self, *args, **kwargs):
        return self._database.command(*args, **kwargs)


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    monkeypatch.setattr(config, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def raw_db():
    return mongomock.MongoClient()["learnhub_test"]


@pytest.fixture
def db(raw_db):
    return AsyncDatabase(raw_db)


def insert_user(raw_db, user_id, name, role, email=None, password="secret123", enrolled_courses=None):
    """Write a user document directly, bypassing registration rules"""
    now = utcnow()
    doc = {
        "user_id": user_id,
        "name": name,
        "email": email or f"{user_id.lower()}@example.com",
        "password": hash_password(password),
        "role": role,
        "enrolled_courses": list(enrolled_courses or []),
        "created_at": now,
        "updated_at": now,
    }
    raw_db.users.insert_one(doc)
    return doc


def auth_header(user: dict) -> dict:
    token = create_access_token(user["user_id"], user["email"], user["role"])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_client(db):
    """Each client keeps its own cookie jar, i.e. its own session"""
    app.dependency_overrides[get_db] = lambda: db

    def factory():
        return TestClient(app)

    yield factory
    app.dependency_overrides.clear()
