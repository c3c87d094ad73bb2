# shared fixtures for backend api tests
# provides a fresh in-memory storage, a registered user with token, and httpx test clients

import os

# cheap hashing and no external services for the whole test run
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["MONGODB_URI"] = ""
os.environ["GEMINI_API_KEY"] = ""
os.environ["ELEVENLABS_API_KEY"] = ""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from friendai.main import app
from friendai.services import auth_service, habit_service
from friendai.services.db import get_storage
from friendai.services.memory_store import MemoryStorage


TEST_EMAIL = "alex@example.com"
TEST_PASSWORD = "secret123"
TEST_NAME = "Alex Rivera"


@pytest.fixture
def storage():
    """fresh in-memory storage for each test"""
    return MemoryStorage()


@pytest.fixture(autouse=True)
def reset_completion_locks():
    yield
    habit_service._completion_locks.clear()


@pytest_asyncio.fixture
async def registered(storage):
    """(token, public user) for a user registered in the test storage"""
    return await auth_service.register(storage, TEST_EMAIL, TEST_PASSWORD, TEST_NAME)


@pytest.fixture
def user_id(registered):
    return registered[1].id


@pytest_asyncio.fixture
async def client(storage):
    """unauthenticated httpx client with storage overridden"""

    async def override_get_storage():
        return storage

    app.dependency_overrides[get_storage] = override_get_storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def auth_client(storage, registered):
    """client sending the registered user's bearer token"""

    async def override_get_storage():
        return storage

    app.dependency_overrides[get_storage] = override_get_storage

    token = registered[0]
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"Authorization": f"Bearer {token}"},
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
