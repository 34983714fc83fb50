from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.core.database import get_db
from tracker.repositories import ProjectRepository, TaskRepository, UserRepository


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_project_repository(db: AsyncSession = Depends(get_db)) -> ProjectRepository:
    return ProjectRepository(db)


def get_task_repository(db: AsyncSession = Depends(get_db)) -> TaskRepository:
    return TaskRepository(db)


Users = Annotated[UserRepository, Depends(get_user_repository)]
Projects = Annotated[ProjectRepository, Depends(get_project_repository)]
Tasks = Annotated[TaskRepository, Depends(get_task_repository)]
