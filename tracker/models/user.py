"""
User model

Model Schema        Used by
------------------  -------------------------------------------
UserCreate          POST /signup
LoginRequest        POST /login
UserUpdate          PATCH /{user}
UserRead            GET /{user}, signup and update responses
UserOwnerRead       GET /admin/users
"""

import re
from dataclasses import dataclass
from datetime import datetime

from pydantic import EmailStr, field_validator
from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel  # type: ignore[attr-defined]

from tracker.core.config import settings
from tracker.utils.utils_time import to_rfc3339, utcnow


class UserBase(SQLModel):
    """Base user model"""

    name: str = Field(unique=True, index=True, max_length=30)
    email: str = Field(unique=True, index=True, max_length=255)


class User(UserBase, table=True):
    """User database model"""

    __tablename__ = "users"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    hashed_password: str = Field(max_length=255)
    # Highest project number ever issued to this user; numbers are never handed out twice.
    last_project_number: int = Field(default=0)
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
class UserDraft:
    """Values for a user that does not exist yet"""

    name: str
    email: str
    password: str


# A name is also the first path segment of the user's routes
_USER_NAME = re.compile(r"[^/\s?#%]+")


def check_user_name(value: str | None) -> str | None:
    """
    Reject names that could never be addressed as /{user}.

    Raises:
        ValueError: If the name is not a single URL path segment or is a reserved segment
    """
    if value is None:
        return value
    if not _USER_NAME.fullmatch(value):
        raise ValueError("Name must not contain whitespace or any of '/', '?', '#', '%'")
    if value in (".", ".."):
        raise ValueError("Name must not be '.' or '..'")
    if value in settings.RESERVED_PATH_SEGMENTS:
        raise ValueError(f"Name '{value}' is reserved")
    return value


class UserCreate(SQLModel):
    """Schema for signing up"""

    name: str = Field(min_length=1, max_length=30)
    email: EmailStr
    password: str = Field(min_length=8, max_length=64)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return check_user_name(v)


class UserUpdate(SQLModel):
    """Schema for updating a user (name and email only)"""

    name: str | None = Field(default=None, min_length=1, max_length=30)
    email: EmailStr | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return check_user_name(v)


class LoginRequest(SQLModel):
    """Schema for logging in"""

    name: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LoginResponse(SQLModel):
    """Schema for the placeholder bearer token"""

    token: str


class UserRead(SQLModel):
    """Schema for reading a user"""

    id: int
    name: str
    email: str
    created_at: str
    updated_at: str

    @classmethod
    def from_entity(cls, user: User) -> "UserRead":
        return cls(
            id=user.id,  # type: ignore[arg-type]
            name=user.name,
            email=user.email,
            created_at=to_rfc3339(user.created_at),
            updated_at=to_rfc3339(user.updated_at),
        )


class UserOwnerRead(UserRead):
    """Schema for reading any user, including soft-deleted ones"""

    deleted_at: str | None = None

    @classmethod
    def from_entity(cls, user: User) -> "UserOwnerRead":
        return cls(
            **UserRead.from_entity(user).model_dump(),
            deleted_at=to_rfc3339(user.deleted_at) if user.deleted_at else None,
        )
