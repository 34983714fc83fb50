"""
Project repository

Operation             Scope      Failure
--------------------  ---------  ---------------------------------------------------
create                user       NotFound (user), InvalidArgument (status)
find                  user       NotFound (user or project)
update                user       NotFound, InvalidArgument (status)
soft_delete           user       NotFound; marks the project's tasks, then the project
find_all              user       NotFound (user)
find_all_for_owner    owner      -
hard_delete           owner      NotFound; deletes the project's tasks, then the project
"""

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.core.exceptions import NotFoundError
from tracker.core.locks import serialized
from tracker.core.logger import get_logger
from tracker.models.project import PROJECT_UPDATABLE_FIELDS, Project, ProjectDraft, ProjectStatus
from tracker.models.task import Task
from tracker.repositories.fields import coerce_choice, pick_allowed
from tracker.repositories.ownership import OwnershipResolver
from tracker.utils.utils_time import utcnow

logger = get_logger(__name__)


class ProjectRepository:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.owner = OwnershipResolver(db)

    async def create(self, user_name: str, draft: ProjectDraft) -> Project:
        """
        Create a project for `user_name` and give it the user's next number.

        The status is checked before a number is taken, so a rejected draft never
        consumes one.
        """
        user = await self.owner.user(user_name, resource="Project")
        status = coerce_choice(ProjectStatus, draft.status, "status")

        async with serialized("project-number", user.id):
            try:
                # Row lock on the owner; numbering for one user is strictly sequential
                user = await self.owner.lock_user(user, resource="Project")

                number = user.last_project_number + 1
                user.last_project_number = number
                project = Project(
                    user_id=user.id,  # type: ignore[arg-type]
                    number=number,
                    title=draft.title,
                    description=draft.description,
                    platform=draft.platform,
                    client=draft.client,
                    estimated_fee=draft.estimated_fee,
                    status=status.value,
                    deadline=draft.deadline,
                )
                self.db.add(project)
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        await self.db.refresh(project)
        logger.info(f"Created project {user_name}/{project.number} (id={project.id})")
        return project

    async def find(self, user_name: str, number: int) -> Project:
        return await self.owner.project(user_name, number)

    async def update(self, user_name: str, number: int, changes: Mapping[str, Any]) -> Project:
        """
        Replace the allow-listed fields present in `changes`.
        """
        project = await self.owner.project(user_name, number)

        values = pick_allowed(changes, PROJECT_UPDATABLE_FIELDS)
        values["status"] = coerce_choice(ProjectStatus, values.get("status", project.status), "status").value

        try:
            for field, value in values.items():
                setattr(project, field, value)
            project.updated_at = utcnow()
            self.db.add(project)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(project)
        return project

    async def soft_delete(self, user_name: str, number: int) -> None:
        project = await self.owner.project(user_name, number)

        # Same key as TaskRepository.create, so no task lands after the cascade
        async with serialized("task-number", project.id):
            try:
                project = await self.owner.lock_project(project)
                now = utcnow()
                await self.db.execute(
                    update(Task)
                    .where(Task.project_id == project.id, Task.deleted_at.is_(None))  # type: ignore[arg-type,union-attr]
                    .values(deleted_at=now)
                    .execution_options(synchronize_session=False)
                )
                project.deleted_at = now
                self.db.add(project)
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        logger.info(f"Soft-deleted project {user_name}/{number} and its tasks")

    async def find_all(self, user_name: str) -> Sequence[Project]:
        user = await self.owner.user(user_name, resource="Project")
        result = await self.db.execute(
            select(Project)
            .where(Project.user_id == user.id, Project.deleted_at.is_(None))  # type: ignore[arg-type,union-attr]
            .order_by(Project.number)  # type: ignore[arg-type]
        )
        return result.scalars().all()

    #
    # Owner scope: no per-user scoping, soft-deleted rows included
    #

    async def find_all_for_owner(self) -> Sequence[Project]:
        result = await self.db.execute(select(Project).order_by(Project.id))  # type: ignore[arg-type]
        return result.scalars().all()

    async def hard_delete(self, project_id: int) -> None:
        project = await self.db.get(Project, project_id)
        if project is None:
            raise NotFoundError("Project")

        async with serialized("task-number", project.id):
            try:
                project = await self.owner.lock_project(project, include_deleted=True)
                await self.db.execute(
                    delete(Task)
                    .where(Task.project_id == project_id)  # type: ignore[arg-type]
                    .execution_options(synchronize_session=False)
                )
                await self.db.delete(project)
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        logger.info(f"Hard-deleted project id={project_id} and its tasks")
