"""
Project endpoints (the caller must be the {user} in the path)

Endpoint                          Repository operation            Status Codes
--------------------------------  ------------------------------  --------------------------
POST /{user}/projects             ProjectRepository.create        201, 400, 401, 403, 404
GET /{user}/projects              ProjectRepository.find_all      200, 401, 403, 404
GET /{user}/projects/{pid}        ProjectRepository.find          200, 400, 401, 403, 404
PATCH /{user}/projects/{pid}      ProjectRepository.update        200, 400, 401, 403, 404
DELETE /{user}/projects/{pid}     ProjectRepository.soft_delete   204, 400, 401, 403, 404

{pid} is the per-user project number, not the internal id.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status

from tracker.api.deps import Projects
from tracker.core.security import CurrentUser, authorize_path_user
from tracker.models.project import ProjectCreate, ProjectDraft, ProjectRead, ProjectUpdate
from tracker.utils.utils_time import parse_wire_date

router = APIRouter(prefix="/{user}/projects", dependencies=[Depends(authorize_path_user)])

ProjectNumber = Annotated[int, Path(ge=0, description="Per-user project number")]


@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project(username: CurrentUser, project_data: ProjectCreate, projects: Projects) -> ProjectRead:
    """
    Create a project; it receives the caller's next project number
    """
    draft = ProjectDraft(
        title=project_data.title,
        description=project_data.description,
        platform=project_data.platform,
        client=project_data.client,
        estimated_fee=project_data.estimated_fee,
        status=project_data.status,
        deadline=parse_wire_date(project_data.deadline, "deadline"),
    )
    project = await projects.create(username, draft)
    return ProjectRead.from_entity(project)


@router.get("", response_model=list[ProjectRead])
async def get_projects(username: CurrentUser, projects: Projects) -> list[ProjectRead]:
    """
    List the caller's projects
    """
    return [ProjectRead.from_entity(project) for project in await projects.find_all(username)]


@router.get("/{pid}", response_model=ProjectRead)
async def get_project(username: CurrentUser, pid: ProjectNumber, projects: Projects) -> ProjectRead:
    """
    Get one of the caller's projects by number
    """
    project = await projects.find(username, pid)
    return ProjectRead.from_entity(project)


@router.patch("/{pid}", response_model=ProjectRead)
async def update_project(
    username: CurrentUser,
    pid: ProjectNumber,
    project_data: ProjectUpdate,
    projects: Projects,
) -> ProjectRead:
    """
    Update the fields sent in the body
    """
    changes = project_data.model_dump(exclude_unset=True)
    if changes.get("deadline") is not None:
        changes["deadline"] = parse_wire_date(changes["deadline"], "deadline")

    project = await projects.update(username, pid, changes)
    return ProjectRead.from_entity(project)


@router.delete("/{pid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(username: CurrentUser, pid: ProjectNumber, projects: Projects) -> Response:
    """
    Soft-delete a project together with its tasks
    """
    await projects.soft_delete(username, pid)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
