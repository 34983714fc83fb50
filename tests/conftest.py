"""
Pytest configuration and fixtures
"""

import os

# Settings are read at import time; point the global engine at a throwaway database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SKIP_DB_INIT", "true")
os.environ.setdefault("ENVIRONMENT", "test")

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient, Response
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from tracker.core import database
from tracker.core.database import build_engine, build_sessionmaker, create_tables, get_db
from tracker.main import app

PROJECT_PAYLOAD: dict[str, Any] = {
    "title": "Tracker development",
    "description": "Side job management app",
    "platform": "Personal",
    "client": "Personal",
    "estimated_fee": 10000,
    "status": "InProgress",
    "deadline": "2025-05-31",
}

TASK_PAYLOAD: dict[str, Any] = {
    "title": "Implement routing",
    "description": "Routes for the API",
    "status": "Todo",
    "priority": "High",
    "due_date": "2025-03-25",
}


def auth_headers(name: str) -> dict[str, str]:
    return {"Authorization": f"Bearer mock-token-for-{name}"}


@pytest.fixture(scope="function")
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine]:
    """Create a fresh database file for each test"""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'tracker_test.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture(scope="function")
def session_maker(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_sessionmaker(db_engine)


@pytest.fixture(scope="function")
async def db_session(session_maker: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession]:
    async with session_maker() as session:
        yield session


@pytest.fixture(scope="function")
async def client(
    db_engine: AsyncEngine,
    session_maker: async_sessionmaker[AsyncSession],
    monkeypatch: pytest.MonkeyPatch,
) -> AsyncGenerator[AsyncClient]:
    """Create a test client; every request gets its own session, like in production"""
    # The health probe reads the module-level engine
    monkeypatch.setattr(database, "engine", db_engine)

    async def override_get_db() -> AsyncGenerator[AsyncSession]:
        async with session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def signup(client: AsyncClient) -> Callable[..., Awaitable[Response]]:
    async def _signup(name: str, email: str | None = None, password: str = "pw123456") -> Response:
        return await client.post(
            "/signup",
            json={"name": name, "email": email or f"{name}@x.com", "password": password},
        )

    return _signup


@pytest.fixture
def create_project(client: AsyncClient) -> Callable[..., Awaitable[Response]]:
    async def _create_project(user: str, **overrides: Any) -> Response:
        return await client.post(
            f"/{user}/projects",
            json={**PROJECT_PAYLOAD, **overrides},
            headers=auth_headers(user),
        )

    return _create_project


@pytest.fixture
def create_task(client: AsyncClient) -> Callable[..., Awaitable[Response]]:
    async def _create_task(user: str, project_number: int, **overrides: Any) -> Response:
        return await client.post(
            f"/{user}/projects/{project_number}/tasks",
            json={**TASK_PAYLOAD, **overrides},
            headers=auth_headers(user),
        )

    return _create_task
