"""
Database configuration and session management
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from tracker.core.config import settings


def _engine_options(url: str) -> dict[str, Any]:
    if url.startswith("sqlite"):
        return {
            "connect_args": {"timeout": 30},  # Seconds to wait on a locked database file
        }
    return {
        "pool_pre_ping": True,  # Ping before using a connection
        "pool_size": 10,  # Keep 10 connections open
        "max_overflow": 20,  # Allow 20 extra connections
        "pool_timeout": 30,  # Wait 30s for connection
        "pool_recycle": 1800,  # Recycle connections every 30 minutes
        "connect_args": {
            "timeout": 10,  # Connection timeout
            "command_timeout": 60,  # Command timeout
        },
    }


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """
    SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for the given URL"""
    engine = create_async_engine(url, echo=echo, future=True, **_engine_options(url))
    if url.startswith("sqlite"):
        enable_sqlite_foreign_keys(engine)
    return engine


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# Create async engine
engine = build_engine(settings.database_url, echo=settings.DATABASE_ECHO)

# Create async session maker
AsyncSessionMaker = build_sessionmaker(engine)


async def get_db() -> AsyncGenerator[AsyncSession]:
    """
    Dependency for getting async database sessions
    """
    async with AsyncSessionMaker() as session:
        try:
            yield session
            # Don't auto-commit - repositories commit their own unit of work
        except Exception:
            await session.rollback()
            raise


async def create_tables(target: AsyncEngine) -> None:
    """Create all tables on the given engine (existing tables are skipped)"""
    # Import all models here to ensure they are registered with SQLModel
    from tracker.models.project import Project
    from tracker.models.task import Task
    from tracker.models.user import User

    _ = (User, Project, Task)  # Reference to prevent auto-removal by mypy or pyright

    async with target.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def init_db() -> None:
    """
    Initialize database - create all tables
    Note: In multi-worker deployments, this should be run once before starting workers
    to avoid race conditions. The checkfirst=True prevents errors if tables exist.
    """
    await create_tables(engine)


async def check_db_health() -> bool:
    """Health check for database connection"""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
