"""Shared pytest fixtures and configuration.

This module provides common fixtures used across all test types.
"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from mirotrak.api.main import app
from mirotrak.api.middleware.rate_limiter import reset_rate_limits
from mirotrak.models.clients import ClientDB
from mirotrak.services.database import DatabaseManager, get_db_session


@pytest.fixture
def test_database_url(tmp_path: Path) -> str:
    """Provide test database URL.

    Uses a fresh file-based SQLite database per test, or PostgreSQL if configured.
    """
    db_url = os.getenv("TEST_DATABASE_URL")
    if db_url:
        return db_url
    return f"sqlite+aiosqlite:///{tmp_path / 'mirotrak-test.db'}"


@pytest.fixture
async def db_manager(test_database_url: str) -> AsyncGenerator[DatabaseManager, None]:
    """Provide an initialized database manager with all tables created.

    Tables are dropped again after the test.
    """
    manager = DatabaseManager(test_database_url)
    await manager.initialize_async()
    await manager.create_tables()

    yield manager

    await manager.drop_tables()
    await manager.close()


@pytest.fixture
async def async_db_session(db_manager: DatabaseManager) -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session for testing."""
    async with db_manager.get_async_session() as session:
        yield session


@pytest.fixture
async def api_client(db_manager: DatabaseManager) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the application, with sessions from the test database."""

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with db_manager.get_async_session() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def clean_rate_limits():
    """Start every test with full rate limit buckets."""
    reset_rate_limits()
    yield
    reset_rate_limits()


@pytest.fixture
async def sample_client(async_db_session: AsyncSession) -> ClientDB:
    """A committed client row."""
    client = ClientDB(
        client_name="TechCorp Solutions",
        contact_person="Marie Dubois",
        email="marie.dubois@techcorp.example",
        phone="+33 1 23 45 67 89",
        company="TechCorp",
        project_type="Application Web",
        technologies="React, Node.js, PostgreSQL",
        budget=50000,
        status="En cours",
        progress=65,
    )
    async_db_session.add(client)
    await async_db_session.commit()
    return client
