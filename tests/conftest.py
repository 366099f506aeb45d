# ==============================================================================
# CONFTEST - Pytest Fixtures and Configuration
# ==============================================================================
# Shared fixtures for all tests
# ==============================================================================

from __future__ import annotations

import os
from pathlib import Path
from typing import AsyncGenerator, Dict, Tuple
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment before importing app
os.environ["ENVIRONMENT"] = "development"
os.environ["DEBUG"] = "false"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_filevault.db"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-32chars!"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

from filevault.core.settings import Settings  # noqa: E402
from filevault.database import RecordStore, Table  # noqa: E402

PASSWORD = "SecurePass123"


# ==============================================================================
# SETTINGS & STORE FIXTURES
# ==============================================================================

@pytest.fixture
def app_settings(tmp_path: Path) -> Settings:
    """Settings pointing at a fresh database and storage dir."""
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        STORAGE_DIR=tmp_path / "storage",
        DB_CREATE_TABLES=True,
        MAX_UPLOAD_SIZE_MB=1,
        DEFAULT_STORAGE_QUOTA=64 * 1024,
    )


@pytest_asyncio.fixture
async def store(tmp_path: Path) -> AsyncGenerator[RecordStore, None]:
    """Open record store over an empty SQLite database."""
    record_store = RecordStore(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await record_store.create_tables()
    yield record_store
    await record_store.close()


@pytest_asyncio.fixture
async def owner(store: RecordStore):
    """A user to own folders and files in store-level tests."""
    return await store.insert(
        Table.USER,
        {
            "email": f"owner_{uuid4().hex[:8]}@example.com",
            "name": "Owner",
            "hashed_password": "not-a-real-hash",
        },
    )


# ==============================================================================
# HTTP CLIENT FIXTURES
# ==============================================================================

@pytest_asyncio.fixture
async def client(app_settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    from filevault.main import create_app

    app = create_app(app_settings)

    # ASGITransport does not send lifespan events
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(
            transport=transport,
            base_url="http://test",
            timeout=30.0,
        ) as async_client:
            yield async_client


async def register_user(client: AsyncClient, email: str = None) -> Tuple[str, Dict[str, str]]:
    """
    Register a user and log in.

    Returns:
        Tuple of (user_id, auth headers)
    """
    email = email or f"user_{uuid4().hex[:8]}@example.com"
    response = await client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": PASSWORD, "name": "Test User"},
    )
    assert response.status_code == 201, f"Failed to register: {response.text}"
    user_id = response.json()["data"]["id"]

    response = await client.post(
        "/api/v1/auth/login/json",
        json={"email": email, "password": PASSWORD},
    )
    assert response.status_code == 200, f"Failed to log in: {response.text}"
    token = response.json()["data"]["tokens"]["access_token"]
    return user_id, {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def auth_client(client: AsyncClient) -> AsyncGenerator[Tuple[AsyncClient, str], None]:
    """
    Create authenticated client with test user.

    Returns:
        Tuple of (client, user_id)
    """
    user_id, headers = await register_user(client)
    client.headers.update(headers)

    yield client, user_id

    client.headers.pop("Authorization", None)


# ==============================================================================
# HELPER FIXTURES
# ==============================================================================

@pytest.fixture
def sample_user_data() -> dict:
    """Generate sample user registration data."""
    return {
        "email": f"user_{uuid4().hex[:8]}@example.com",
        "password": PASSWORD,
        "name": "Sample User",
    }
