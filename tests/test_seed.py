"""
Test the seed command
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from tracker import seed as seed_module
from tracker.models.project import Project
from tracker.models.task import Task
from tracker.models.user import User


@pytest.fixture
def seeded_database(monkeypatch: pytest.MonkeyPatch, db_engine: AsyncEngine, session_maker):
    async def init_db() -> None:
        return None

    monkeypatch.setattr(seed_module, "engine", db_engine)
    monkeypatch.setattr(seed_module, "AsyncSessionMaker", session_maker)
    monkeypatch.setattr(seed_module, "init_db", init_db)


async def count(session: AsyncSession, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.mark.asyncio
async def test_seed_is_idempotent(seeded_database, session_maker: async_sessionmaker[AsyncSession]):
    """Test that seeding twice inserts the demo data once"""
    await seed_module.seed()
    await seed_module.seed()

    expected_tasks = sum(len(tasks) for _, _, tasks in seed_module.SEED_DATA)
    async with session_maker() as session:
        assert await count(session, User) == len(seed_module.SEED_DATA)
        assert await count(session, Project) == len(seed_module.SEED_DATA)
        assert await count(session, Task) == expected_tasks

        numbers = (await session.execute(select(Project.number))).scalars().all()  # type: ignore[call-overload]
        assert set(numbers) == {1}
