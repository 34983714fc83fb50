"""
Project model

A project belongs to one user. Its `number` is assigned per user (1, 2, 3, ...) and is
the identifier used in URLs; `id` stays internal and only appears in owner views.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlmodel import Field, SQLModel  # type: ignore[attr-defined]

from tracker.utils.utils_time import to_rfc3339, utcnow


class ProjectStatus(str, Enum):
    """Project status enum"""

    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELED = "Canceled"


# Columns a project update may touch; id, number and user_id are immutable.
PROJECT_UPDATABLE_FIELDS = frozenset(
    {"title", "description", "platform", "client", "estimated_fee", "status", "deadline"}
)


class Project(SQLModel, table=True):
    """Project database model"""

    __tablename__ = "projects"  # type: ignore[assignment]
    __table_args__ = (UniqueConstraint("user_id", "number", name="uq_projects_user_number"),)

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(
        sa_column=Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    number: int = Field(index=True)
    title: str = Field(max_length=100)
    description: str = Field(default="", max_length=1000)
    platform: str = Field(max_length=50)
    client: str = Field(max_length=50)
    estimated_fee: float = Field(default=0)
    status: str = Field(sa_column=Column(String(20), nullable=False))
    deadline: date
    # Highest task number ever issued in this project
    last_task_number: int = Field(default=0)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    deleted_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True), index=True))


@dataclass
class ProjectDraft:
    """Values for a project that does not exist yet"""

    title: str
    platform: str
    client: str
    status: str
    deadline: date
    description: str = ""
    estimated_fee: float = 0


class ProjectCreate(SQLModel):
    """Schema for creating a project"""

    title: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=1000)
    platform: str = Field(min_length=1, max_length=50)
    client: str = Field(min_length=1, max_length=50)
    estimated_fee: float = Field(default=0, ge=0)
    status: ProjectStatus
    deadline: str = Field(description="YYYY-MM-DD")


class ProjectUpdate(SQLModel):
    """Schema for updating a project (only the fields sent are replaced)"""

    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=1000)
    platform: str | None = Field(default=None, min_length=1, max_length=50)
    client: str | None = Field(default=None, min_length=1, max_length=50)
    estimated_fee: float | None = Field(default=None, ge=0)
    status: ProjectStatus | None = None
    deadline: str | None = Field(default=None, description="YYYY-MM-DD")


class ProjectRead(SQLModel):
    """Schema for reading a project as its owner"""

    project_id: int
    title: str
    description: str
    platform: str
    client: str
    estimated_fee: float
    status: ProjectStatus
    deadline: date
    created_at: str
    updated_at: str

    @classmethod
    def from_entity(cls, project: Project) -> "ProjectRead":
        return cls(
            project_id=project.number,
            title=project.title,
            description=project.description,
            platform=project.platform,
            client=project.client,
            estimated_fee=project.estimated_fee,
            status=ProjectStatus(project.status),
            deadline=project.deadline,
            created_at=to_rfc3339(project.created_at),
            updated_at=to_rfc3339(project.updated_at),
        )


class ProjectOwnerRead(ProjectRead):
    """Schema for reading any project, including soft-deleted ones"""

    id: int
    user_id: int
    deleted_at: str | None = None

    @classmethod
    def from_entity(cls, project: Project) -> "ProjectOwnerRead":
        return cls(
            **ProjectRead.from_entity(project).model_dump(),
            id=project.id,  # type: ignore[arg-type]
            user_id=project.user_id,
            deleted_at=to_rfc3339(project.deleted_at) if project.deleted_at else None,
        )
