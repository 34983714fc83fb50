"""
Task endpoints (the caller must be the {user} in the path)

Endpoint                                      Repository operation         Status Codes
--------------------------------------------  ---------------------------  ----------------------
POST /{user}/projects/{pid}/tasks             TaskRepository.create        201, 400, 401, 403, 404
GET /{user}/projects/{pid}/tasks              TaskRepository.find_all      200, 400, 401, 403, 404
GET /{user}/projects/{pid}/tasks/{tid}        TaskRepository.find          200, 400, 401, 403, 404
PATCH /{user}/projects/{pid}/tasks/{tid}      TaskRepository.update        200, 400, 401, 403, 404
DELETE /{user}/projects/{pid}/tasks/{tid}     TaskRepository.soft_delete   204, 400, 401, 403, 404
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status

from tracker.api.deps import Tasks
from tracker.core.security import CurrentUser, authorize_path_user
from tracker.models.task import TaskCreate, TaskDraft, TaskRead, TaskUpdate
from tracker.utils.utils_time import parse_wire_date

router = APIRouter(prefix="/{user}/projects/{pid}/tasks", dependencies=[Depends(authorize_path_user)])

ProjectNumber = Annotated[int, Path(ge=0, description="Per-user project number")]
TaskNumber = Annotated[int, Path(ge=0, description="Per-project task number")]


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    username: CurrentUser,
    pid: ProjectNumber,
    task_data: TaskCreate,
    tasks: Tasks,
) -> TaskRead:
    """
    Create a task; it receives the project's next task number
    """
    draft = TaskDraft(
        title=task_data.title,
        description=task_data.description,
        status=task_data.status,
        priority=task_data.priority,
        due_date=parse_wire_date(task_data.due_date, "due_date"),
    )
    task = await tasks.create(username, pid, draft)
    return TaskRead.from_entity(task)


@router.get("", response_model=list[TaskRead])
async def get_tasks(username: CurrentUser, pid: ProjectNumber, tasks: Tasks) -> list[TaskRead]:
    return [TaskRead.from_entity(task) for task in await tasks.find_all(username, pid)]


@router.get("/{tid}", response_model=TaskRead)
async def get_task(username: CurrentUser, pid: ProjectNumber, tid: TaskNumber, tasks: Tasks) -> TaskRead:
    task = await tasks.find(username, pid, tid)
    return TaskRead.from_entity(task)


@router.patch("/{tid}", response_model=TaskRead)
async def update_task(
    username: CurrentUser,
    pid: ProjectNumber,
    tid: TaskNumber,
    task_data: TaskUpdate,
    tasks: Tasks,
) -> TaskRead:
    """
    Update the fields sent in the body
    """
    changes = task_data.model_dump(exclude_unset=True)
    if changes.get("due_date") is not None:
        changes["due_date"] = parse_wire_date(changes["due_date"], "due_date")

    task = await tasks.update(username, pid, tid, changes)
    return TaskRead.from_entity(task)


@router.delete("/{tid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(username: CurrentUser, pid: ProjectNumber, tid: TaskNumber, tasks: Tasks) -> Response:
    await tasks.soft_delete(username, pid, tid)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
