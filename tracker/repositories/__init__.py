"""
Repositories: ownership-checked access to users, projects and tasks
"""

from tracker.repositories.ownership import OwnershipResolver
from tracker.repositories.projects import ProjectRepository
from tracker.repositories.tasks import TaskRepository
from tracker.repositories.users import UserRepository

__all__ = ["OwnershipResolver", "UserRepository", "ProjectRepository", "TaskRepository"]
