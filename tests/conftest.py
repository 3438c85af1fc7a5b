"""Pytest configuration and fixtures for roomsync tests."""

from typing import AsyncGenerator
import pytest
import pytest_asyncio
from bson import ObjectId
from mongomock_motor import AsyncMongoMockClient
from motor.motor_asyncio import AsyncIOMotorDatabase

from roomsync.config import Settings
from roomsync.services.reconciliation import ReconciliationService


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at a test database."""
    return Settings(
        mongodb_uri="mongodb://localhost:27017/boardinghouse_test",
        mapping_preview_limit=5,
    )


@pytest_asyncio.fixture(scope="function")
async def db() -> AsyncGenerator[AsyncIOMotorDatabase, None]:
    """In-memory database, fresh for each test."""
    client = AsyncMongoMockClient()
    database = client["boardinghouse_test"]

    yield database

    await database.users.delete_many({})
    await database.tenants.delete_many({})
    await database.rooms.delete_many({})


@pytest_asyncio.fixture
async def service(db: AsyncIOMotorDatabase, settings: Settings) -> ReconciliationService:
    """Create reconciliation service for testing."""
    return ReconciliationService(db, settings)


@pytest_asyncio.fixture
async def boarding_house(db: AsyncIOMotorDatabase) -> dict:
    """Seed users, tenants and rooms covering each kind of room link.

    - room 102 points at tenant_1's _id instead of user_1
    - room 104 points at garbage
    - room 103 already points at user_3, tenant_3 is in sync
    - room 202 points at user_4, tenant_4 caches the stale "101"
    - room 105 is empty
    """
    ids = {
        name: ObjectId()
        for name in (
            "user_1", "user_3", "user_4",
            "tenant_1", "tenant_3", "tenant_4",
            "room_102", "room_104", "room_103", "room_202", "room_105",
        )
    }

    await db.users.insert_many([
        {"_id": ids["user_1"], "username": "maria", "role": "tenant"},
        {"_id": ids["user_3"], "username": "jose", "role": "tenant"},
        {"_id": ids["user_4"], "username": "ana", "role": "tenant"},
    ])
    await db.tenants.insert_many([
        {
            "_id": ids["tenant_1"],
            "userId": ids["user_1"],
            "firstName": "Maria",
            "lastName": "Santos",
        },
        {
            "_id": ids["tenant_3"],
            "userId": ids["user_3"],
            "firstName": "Jose",
            "lastName": "Reyes",
            "roomNumber": "103",
        },
        {
            "_id": ids["tenant_4"],
            "userId": ids["user_4"],
            "firstName": "Ana",
            "lastName": "Cruz",
            "roomNumber": "101",
        },
    ])
    await db.rooms.insert_many([
        {
            "_id": ids["room_102"],
            "roomNumber": "102",
            "currentTenant": ids["tenant_1"],
            "occupancy": {"current": 1, "max": 2},
        },
        {
            "_id": ids["room_104"],
            "roomNumber": "104",
            "currentTenant": "garbage123",
            "occupancy": {"current": 1, "max": 1},
        },
        {
            "_id": ids["room_103"],
            "roomNumber": "103",
            "currentTenant": ids["user_3"],
            "occupancy": {"current": 1, "max": 1},
        },
        {
            "_id": ids["room_202"],
            "roomNumber": "202",
            "currentTenant": ids["user_4"],
            "occupancy": {"current": 1, "max": 2},
        },
        {
            "_id": ids["room_105"],
            "roomNumber": "105",
            "currentTenant": None,
            "occupancy": {"current": 0, "max": 1},
        },
    ])

    return ids
