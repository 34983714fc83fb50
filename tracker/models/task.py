"""
Task model
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlmodel import Field, SQLModel  # type: ignore[attr-defined]

from tracker.utils.utils_time import to_rfc3339, utcnow


class TaskStatus(str, Enum):
    """Task status enum"""

    TODO = "Todo"
    DOING = "Doing"
    DONE = "Done"


class TaskPriority(str, Enum):
    """Task priority enum"""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


TASK_UPDATABLE_FIELDS = frozenset({"title", "description", "status", "priority", "due_date"})


class Task(SQLModel, table=True):
    """Task database model"""

    __tablename__ = "tasks"  # type: ignore[assignment]
    __table_args__ = (UniqueConstraint("project_id", "number", name="uq_tasks_project_number"),)

    id: int | None = Field(default=None, primary_key=True)
    project_id: int = Field(
        sa_column=Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    number: int = Field(index=True)
    title: str = Field(max_length=100)
    description: str = Field(default="", max_length=1000)
    status: str = Field(sa_column=Column(String(20), nullable=False))
    priority: str = Field(sa_column=Column(String(20), nullable=False))
    due_date: date
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
class TaskDraft:
    """Values for a task that does not exist yet"""

    title: str
    description: str
    status: str
    priority: str
    due_date: date


class TaskCreate(SQLModel):
    """Schema for creating a task"""

    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=1000)
    status: TaskStatus
    priority: TaskPriority
    due_date: str = Field(description="YYYY-MM-DD")


class TaskUpdate(SQLModel):
    """Schema for updating a task (only the fields sent are replaced)"""

    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=1000)
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: str | None = Field(default=None, description="YYYY-MM-DD")


class TaskRead(SQLModel):
    """Schema for reading a task as its owner"""

    task_id: int
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    due_date: date
    created_at: str
    updated_at: str

    @classmethod
    def from_entity(cls, task: Task) -> "TaskRead":
        return cls(
            task_id=task.number,
            title=task.title,
            description=task.description,
            status=TaskStatus(task.status),
            priority=TaskPriority(task.priority),
            due_date=task.due_date,
            created_at=to_rfc3339(task.created_at),
            updated_at=to_rfc3339(task.updated_at),
        )


class TaskOwnerRead(TaskRead):
    """Schema for reading any task, including soft-deleted ones"""

    id: int
    project_id: int
    deleted_at: str | None = None

    @classmethod
    def from_entity(cls, task: Task) -> "TaskOwnerRead":
        return cls(
            **TaskRead.from_entity(task).model_dump(),
            id=task.id,  # type: ignore[arg-type]
            project_id=task.project_id,
            deleted_at=to_rfc3339(task.deleted_at) if task.deleted_at else None,
        )
