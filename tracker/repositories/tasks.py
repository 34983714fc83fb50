"""
Task repository

Every user-scoped operation resolves user -> project (by number) -> task (by number);
a missing link anywhere surfaces as the same NotFound.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.core.exceptions import NotFoundError
from tracker.core.locks import serialized
from tracker.core.logger import get_logger
from tracker.models.task import TASK_UPDATABLE_FIELDS, Task, TaskDraft, TaskPriority, TaskStatus
from tracker.repositories.fields import coerce_choice, pick_allowed
from tracker.repositories.ownership import OwnershipResolver
from tracker.utils.utils_time import utcnow

logger = get_logger(__name__)


class TaskRepository:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.owner = OwnershipResolver(db)

    async def create(self, user_name: str, project_number: int, draft: TaskDraft) -> Task:
        """
        Create a task in the user's project and give it the project's next number.
        """
        project = await self.owner.project(user_name, project_number, resource="Task")
        status = coerce_choice(TaskStatus, draft.status, "status")
        priority = coerce_choice(TaskPriority, draft.priority, "priority")

        async with serialized("task-number", project.id):
            try:
                project = await self.owner.lock_project(project, resource="Task")

                number = project.last_task_number + 1
                project.last_task_number = number
                task = Task(
                    project_id=project.id,  # type: ignore[arg-type]
                    number=number,
                    title=draft.title,
                    description=draft.description,
                    status=status.value,
                    priority=priority.value,
                    due_date=draft.due_date,
                )
                self.db.add(task)
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        await self.db.refresh(task)
        logger.info(f"Created task {user_name}/{project_number}/{task.number} (id={task.id})")
        return task

    async def find(self, user_name: str, project_number: int, task_number: int) -> Task:
        return await self.owner.task(user_name, project_number, task_number)

    async def update(self, user_name: str, project_number: int, task_number: int, changes: Mapping[str, Any]) -> Task:
        task = await self.owner.task(user_name, project_number, task_number)

        values = pick_allowed(changes, TASK_UPDATABLE_FIELDS)
        values["status"] = coerce_choice(TaskStatus, values.get("status", task.status), "status").value
        values["priority"] = coerce_choice(TaskPriority, values.get("priority", task.priority), "priority").value

        try:
            for field, value in values.items():
                setattr(task, field, value)
            task.updated_at = utcnow()
            self.db.add(task)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(task)
        return task

    async def soft_delete(self, user_name: str, project_number: int, task_number: int) -> None:
        task = await self.owner.task(user_name, project_number, task_number)

        try:
            task.deleted_at = utcnow()
            self.db.add(task)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def find_all(self, user_name: str, project_number: int) -> Sequence[Task]:
        project = await self.owner.project(user_name, project_number, resource="Task")
        result = await self.db.execute(
            select(Task)
            .where(Task.project_id == project.id, Task.deleted_at.is_(None))  # type: ignore[arg-type,union-attr]
            .order_by(Task.number)  # type: ignore[arg-type]
        )
        return result.scalars().all()

    #
    # Owner scope
    #

    async def find_all_for_owner(self) -> Sequence[Task]:
        result = await self.db.execute(select(Task).order_by(Task.id))  # type: ignore[arg-type]
        return result.scalars().all()

    async def hard_delete(self, task_id: int) -> None:
        task = await self.db.get(Task, task_id)
        if task is None:
            raise NotFoundError("Task")

        try:
            await self.db.delete(task)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Hard-deleted task id={task_id}")
