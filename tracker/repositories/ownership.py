"""
Ownership resolution shared by every repository

Each lookup walks user name -> User -> Project (user_id, number) -> Task
(project_id, number) over non-deleted rows. Any broken link raises the same
NotFoundError for the resource the caller asked for, so the response never tells
which link was missing.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.core.exceptions import NotFoundError
from tracker.models.project import Project
from tracker.models.task import Task
from tracker.models.user import User


class OwnershipResolver:
    """Resolve path identifiers into the entities the named user owns."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _user_or_none(self, name: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.name == name, User.deleted_at.is_(None))  # type: ignore[arg-type,union-attr]
        )
        return result.scalar_one_or_none()

    async def _project_or_none(self, user: User, number: int) -> Project | None:
        result = await self.db.execute(
            select(Project).where(
                Project.user_id == user.id,  # type: ignore[arg-type]
                Project.number == number,  # type: ignore[arg-type]
                Project.deleted_at.is_(None),  # type: ignore[union-attr]
            )
        )
        return result.scalar_one_or_none()

    async def _task_or_none(self, project: Project, number: int) -> Task | None:
        result = await self.db.execute(
            select(Task).where(
                Task.project_id == project.id,  # type: ignore[arg-type]
                Task.number == number,  # type: ignore[arg-type]
                Task.deleted_at.is_(None),  # type: ignore[union-attr]
            )
        )
        return result.scalar_one_or_none()

    async def user(self, name: str, *, resource: str = "User") -> User:
        user = await self._user_or_none(name)
        if user is None:
            raise NotFoundError(resource)
        return user

    async def project(self, name: str, project_number: int, *, resource: str = "Project") -> Project:
        user = await self.user(name, resource=resource)
        project = await self._project_or_none(user, project_number)
        if project is None:
            raise NotFoundError(resource)
        return project

    #
    # Row locks, taken inside the matching serialized(...) block
    #

    async def lock_user(self, user: User, *, resource: str = "User", include_deleted: bool = False) -> User:
        """Re-read `user` with SELECT ... FOR UPDATE; NotFound if it is gone or soft-deleted meanwhile."""
        query = select(User).where(User.id == user.id)  # type: ignore[arg-type]
        if not include_deleted:
            query = query.where(User.deleted_at.is_(None))  # type: ignore[union-attr]
        result = await self.db.execute(query.with_for_update().execution_options(populate_existing=True))
        locked = result.scalar_one_or_none()
        if locked is None:
            raise NotFoundError(resource)
        return locked

    async def lock_project(
        self, project: Project, *, resource: str = "Project", include_deleted: bool = False
    ) -> Project:
        query = select(Project).where(Project.id == project.id)  # type: ignore[arg-type]
        if not include_deleted:
            query = query.where(Project.deleted_at.is_(None))  # type: ignore[union-attr]
        result = await self.db.execute(query.with_for_update().execution_options(populate_existing=True))
        locked = result.scalar_one_or_none()
        if locked is None:
            raise NotFoundError(resource)
        return locked

    async def lock_owned_project_ids(self, user_id: int) -> list[int]:
        result = await self.db.execute(
            select(Project.id)
            .where(Project.user_id == user_id)  # type: ignore[arg-type]
            .order_by(Project.id)  # type: ignore[arg-type]
            .with_for_update()
        )
        return list(result.scalars().all())

    async def task(self, name: str, project_number: int, task_number: int) -> Task:
        project = await self.project(name, project_number, resource="Task")
        task = await self._task_or_none(project, task_number)
        if task is None:
            raise NotFoundError("Task")
        return task
