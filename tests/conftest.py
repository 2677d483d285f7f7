"""Pytest configuration and fixtures."""
import os
from unittest.mock import AsyncMock, MagicMock

os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("JWT_SECRET", "test-secret-key")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from app.config import settings
from app.database import database, ensure_indexes
from app.main import create_app


@pytest_asyncio.fixture
async def test_db():
    """
    Throwaway test database, dropped after each test.

    Skips the test when no MongoDB server is reachable.
    """
    test_client = AsyncIOMotorClient(
        settings.mongodb_url, tz_aware=True, serverSelectionTimeoutMS=2000
    )
    test_db_name = f"{settings.mongodb_db_name}_test"

    try:
        await test_client.admin.command("ping")
    except PyMongoError:
        test_client.close()
        pytest.skip("MongoDB is not reachable")

    db = test_client[test_db_name]
    await ensure_indexes(db)

    # Override the database dependency
    original_db = database.db
    database.db = db

    yield db

    await test_client.drop_database(test_db_name)
    database.db = original_db
    test_client.close()


@pytest.fixture
def make_client(test_db):
    """
    Factory for HTTP clients against an app built with overridden settings.

    Usage:
        async with make_client(restrict_kick_reads_to_owner=True) as client:
            ...
    """

    def _make(**overrides):
        app = create_app(settings.model_copy(update=overrides))
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    return _make


@pytest_asyncio.fixture
async def app_client(make_client):
    """Async HTTP client for the default application settings."""
    async with make_client() as client:
        yield client


@pytest.fixture
def signup():
    """Register a user through the API and return (auth headers, user json)."""

    async def _signup(client, username, password="password123"):
        response = await client.post(
            "/auth/signup",
            json={
                "username": username,
                "password": password,
                "name": username.title(),
                "email": f"{username}@example.com",
            },
        )
        assert response.status_code == 201, response.text
        data = response.json()
        return {"Authorization": f"Bearer {data['token']}"}, data["user"]

    return _signup


def make_collection():
    """A collection mock: sync ``find`` returning a cursor, async everything else."""
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.update_one = AsyncMock()
    collection.find_one_and_update = AsyncMock()
    collection.delete_one = AsyncMock()

    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=[])
    collection.find.return_value = cursor
    return collection


@pytest.fixture
def mock_db():
    """
    Database mock with ``users`` and ``kicks`` collections.

    The collections are reachable both as ``db["users"]`` and as
    ``mock_db.users`` for setting up return values.
    """
    collections = {"users": make_collection(), "kicks": make_collection()}
    db = MagicMock()
    db.__getitem__.side_effect = collections.__getitem__
    db.users = collections["users"]
    db.kicks = collections["kicks"]
    return db
