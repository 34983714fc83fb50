"""
Seed the database with demo users, projects and tasks

Use '$ python -m tracker.seed' on the root directory of the project.
Users that already exist are left untouched, along with their projects.
"""

import asyncio
import logging
from datetime import date

from tracker.core.config import settings
from tracker.core.database import AsyncSessionMaker, engine, init_db
from tracker.core.exceptions import AlreadyExistsError
from tracker.core.logger import get_logger
from tracker.models.project import ProjectDraft, ProjectStatus
from tracker.models.task import TaskDraft, TaskPriority, TaskStatus
from tracker.models.user import UserDraft
from tracker.repositories import ProjectRepository, TaskRepository, UserRepository

logger = get_logger(__name__, logging.INFO)

SEED_DATA = [
    (
        UserDraft(name="demo", email="demo@tracker.dev", password="demo-password"),
        ProjectDraft(
            title="Tracker development",
            description="Build the project and task tracker",
            platform="Personal",
            client="Personal",
            status=ProjectStatus.IN_PROGRESS,
            deadline=date(2025, 5, 31),
        ),
        [
            TaskDraft(
                title="Implement routing",
                description="Routes for users, projects and tasks",
                status=TaskStatus.TODO,
                priority=TaskPriority.HIGH,
                due_date=date(2025, 3, 25),
            ),
        ],
    ),
    (
        UserDraft(name="sample", email="sample@tracker.dev", password="sample-password"),
        ProjectDraft(
            title="CLI rework",
            description="Rework the sync command",
            platform="Personal",
            client="Personal",
            status=ProjectStatus.NOT_STARTED,
            deadline=date(2025, 6, 1),
        ),
        [
            TaskDraft(
                title="Rework sync",
                description="Upload and download through object storage",
                status=TaskStatus.TODO,
                priority=TaskPriority.MEDIUM,
                due_date=date(2025, 4, 30),
            ),
        ],
    ),
]


async def seed() -> None:
    logger.info(f"Seeding {settings.database_url} ({settings.ENVIRONMENT})")
    await init_db()

    for user_draft, project_draft, task_drafts in SEED_DATA:
        async with AsyncSessionMaker() as session:
            try:
                await UserRepository(session).create(user_draft)
            except AlreadyExistsError:
                logger.info(f"User {user_draft.name} already exists, skipping")
                continue

            project = await ProjectRepository(session).create(user_draft.name, project_draft)
            for task_draft in task_drafts:
                await TaskRepository(session).create(user_draft.name, project.number, task_draft)

    await engine.dispose()
    logger.info("Seeding completed")


if __name__ == "__main__":
    asyncio.run(seed())
