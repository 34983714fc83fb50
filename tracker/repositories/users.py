"""
User repository

Names and emails are unique across every stored user, soft-deleted ones included,
because their rows keep holding the unique columns.
"""

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.core.exceptions import AlreadyExistsError, NotFoundError, UnauthenticatedError
from tracker.core.locks import serialized, serialized_all
from tracker.core.logger import get_logger
from tracker.core.security import get_password_hash, verify_password
from tracker.models.project import Project
from tracker.models.task import Task
from tracker.models.user import User, UserDraft
from tracker.repositories.fields import pick_allowed
from tracker.repositories.ownership import OwnershipResolver
from tracker.utils.utils_time import utcnow

logger = get_logger(__name__)

USER_UPDATABLE_FIELDS = frozenset({"name", "email"})

# Name/email uniqueness is one check-then-act sequence shared by signup and rename
_IDENTITY_LOCK = "user-identity"


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.owner = OwnershipResolver(db)

    async def _identity_taken(self, name: str | None, email: str | None, exclude_id: int | None = None) -> bool:
        conditions = []
        if name is not None:
            conditions.append(User.name == name)
        if email is not None:
            conditions.append(User.email == email)
        if not conditions:
            return False

        query = select(User.id).where(or_(*conditions))  # type: ignore[arg-type]
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)  # type: ignore[arg-type]
        result = await self.db.execute(query.limit(1))
        return result.first() is not None

    async def create(self, draft: UserDraft) -> User:
        """
        Sign a user up.

        Raises:
            AlreadyExistsError: If the name or the email is already registered
        """
        hashed_password = await asyncio.to_thread(get_password_hash, draft.password)

        async with serialized(_IDENTITY_LOCK):
            try:
                if await self._identity_taken(draft.name, draft.email):
                    logger.info(f"Signup rejected, user already exists: name={draft.name}")
                    raise AlreadyExistsError("User")

                user = User(name=draft.name, email=draft.email, hashed_password=hashed_password)
                self.db.add(user)
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                logger.info(f"Signup rejected by unique constraint: name={draft.name}")
                raise AlreadyExistsError("User") from None
            except Exception:
                await self.db.rollback()
                raise

        await self.db.refresh(user)
        logger.info(f"Created user {user.name} (id={user.id})")
        return user

    async def find(self, name: str) -> User:
        return await self.owner.user(name)

    async def authenticate(self, name: str, password: str) -> User:
        """
        Raises:
            UnauthenticatedError: If the user is unknown or the password does not match
        """
        try:
            user = await self.owner.user(name)
        except NotFoundError:
            raise UnauthenticatedError("Invalid credentials") from None

        if not await asyncio.to_thread(verify_password, password, user.hashed_password):
            raise UnauthenticatedError("Invalid credentials")
        return user

    async def update(self, name: str, changes: Mapping[str, Any]) -> User:
        """
        Replace the user's name and/or email.

        Raises:
            NotFoundError: If the user does not exist
            AlreadyExistsError: If another user already holds the new name or email
        """
        user = await self.owner.user(name)
        values = pick_allowed(changes, USER_UPDATABLE_FIELDS)

        async with serialized(_IDENTITY_LOCK):
            try:
                if await self._identity_taken(values.get("name"), values.get("email"), exclude_id=user.id):
                    raise AlreadyExistsError("User")

                for field, value in values.items():
                    setattr(user, field, value)
                user.updated_at = utcnow()
                self.db.add(user)
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                raise AlreadyExistsError("User") from None
            except Exception:
                await self.db.rollback()
                raise

        await self.db.refresh(user)
        return user

    async def soft_delete(self, name: str) -> None:
        """
        Mark the user, every owned project and every task of those projects as deleted.

        Holds the user's project-number lock and the task-number lock of every owned
        project, so no project or task create can commit halfway through the cascade.
        """
        user = await self.owner.user(name)

        async with serialized("project-number", user.id):
            try:
                user = await self.owner.lock_user(user)
                project_ids = await self.owner.lock_owned_project_ids(user.id)  # type: ignore[arg-type]

                async with serialized_all(("task-number", project_id) for project_id in project_ids):
                    now = utcnow()
                    await self.db.execute(
                        update(Task)
                        .where(Task.project_id.in_(project_ids), Task.deleted_at.is_(None))  # type: ignore[attr-defined,union-attr]
                        .values(deleted_at=now)
                        .execution_options(synchronize_session=False)
                    )
                    await self.db.execute(
                        update(Project)
                        .where(Project.user_id == user.id, Project.deleted_at.is_(None))  # type: ignore[arg-type,union-attr]
                        .values(deleted_at=now)
                        .execution_options(synchronize_session=False)
                    )
                    user.deleted_at = now
                    self.db.add(user)
                    await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        logger.info(f"Soft-deleted user {name} with its projects and tasks")

    #
    # Owner scope
    #

    async def find_all_for_owner(self) -> Sequence[User]:
        result = await self.db.execute(select(User).order_by(User.id))  # type: ignore[arg-type]
        return result.scalars().all()

    async def hard_delete(self, user_id: int) -> None:
        """
        Erase the user with its projects and their tasks (tasks, then projects, then the user).
        """
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User")

        async with serialized("project-number", user_id):
            try:
                user = await self.owner.lock_user(user, include_deleted=True)
                project_ids = await self.owner.lock_owned_project_ids(user_id)

                async with serialized_all(("task-number", project_id) for project_id in project_ids):
                    await self.db.execute(
                        delete(Task)
                        .where(Task.project_id.in_(project_ids))  # type: ignore[attr-defined]
                        .execution_options(synchronize_session=False)
                    )
                    await self.db.execute(
                        delete(Project)
                        .where(Project.user_id == user_id)  # type: ignore[arg-type]
                        .execution_options(synchronize_session=False)
                    )
                    await self.db.delete(user)
                    await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        logger.info(f"Hard-deleted user id={user_id} with its projects and tasks")
