"""
Database models
"""

from tracker.models.project import Project, ProjectStatus
from tracker.models.task import Task, TaskPriority, TaskStatus
from tracker.models.user import User

__all__ = ["User", "Project", "ProjectStatus", "Task", "TaskStatus", "TaskPriority"]
