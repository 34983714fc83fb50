"""
Owner-scope endpoints

No per-user scoping and no soft-delete filter. Guarded by admin API keys only when
ADMIN_API_KEY<n> settings are configured.

Endpoint                       Repository operation                  Status Codes
-----------------------------  ------------------------------------  ---------------
GET /admin/users               UserRepository.find_all_for_owner     200
DELETE /admin/users/{id}       UserRepository.hard_delete            204, 400, 404
GET /admin/projects            ProjectRepository.find_all_for_owner  200
DELETE /admin/projects/{id}    ProjectRepository.hard_delete         204, 400, 404
GET /admin/tasks               TaskRepository.find_all_for_owner     200
DELETE /admin/tasks/{id}       TaskRepository.hard_delete            204, 400, 404

{id} is the internal id.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status

from tracker.api.deps import Projects, Tasks, Users
from tracker.core.security import require_admin_key
from tracker.models.project import ProjectOwnerRead
from tracker.models.task import TaskOwnerRead
from tracker.models.user import UserOwnerRead

router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin_key)])

EntityId = Annotated[int, Path(ge=0, description="Internal id")]


@router.get("/users", response_model=list[UserOwnerRead])
async def get_all_users(users: Users) -> list[UserOwnerRead]:
    return [UserOwnerRead.from_entity(user) for user in await users.find_all_for_owner()]


@router.delete("/users/{id}", status_code=status.HTTP_204_NO_CONTENT)
async def hard_delete_user(id: EntityId, users: Users) -> Response:
    """
    Permanently erase a user with all of their projects and tasks
    """
    await users.hard_delete(id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/projects", response_model=list[ProjectOwnerRead])
async def get_all_projects(projects: Projects) -> list[ProjectOwnerRead]:
    return [ProjectOwnerRead.from_entity(project) for project in await projects.find_all_for_owner()]


@router.delete("/projects/{id}", status_code=status.HTTP_204_NO_CONTENT)
async def hard_delete_project(id: EntityId, projects: Projects) -> Response:
    """
    Permanently erase a project with its tasks
    """
    await projects.hard_delete(id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/tasks", response_model=list[TaskOwnerRead])
async def get_all_tasks(tasks: Tasks) -> list[TaskOwnerRead]:
    return [TaskOwnerRead.from_entity(task) for task in await tasks.find_all_for_owner()]


@router.delete("/tasks/{id}", status_code=status.HTTP_204_NO_CONTENT)
async def hard_delete_task(id: EntityId, tasks: Tasks) -> Response:
    await tasks.hard_delete(id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
