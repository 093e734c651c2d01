"""Request/response schemas for user management and public user profiles."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from quickdesk.core.security import (
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
)

Role = Literal["user", "agent", "admin"]
ROLE_VALUES: tuple[Role, ...] = ("user", "agent", "admin")


def normalize_email(value: str | None) -> str | None:
    """Emails are compared case-insensitively; store and compare lower-cased."""
    if value is None:
        return None
    return value.strip().lower()


class UserSummary(BaseModel):
    """Creator/assignee summary attached to tickets (no password, no role)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    avatar: str | None = None


class CommentAuthor(UserSummary):
    """Comment author profile; includes role so agents' replies can be told apart."""

    role: str


class UserPublic(BaseModel):
    """User record for admin endpoints and /auth/me (password hash never included)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
    avatar: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class UserCreate(BaseModel):
    """Admin-created account; any role."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    role: Role = "user"

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str | None) -> str | None:
        return normalize_email(v)


class UserUpdate(BaseModel):
    """Admin update of another user's name, email or role. Omitted fields are unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    email: EmailStr | None = None
    role: Role | None = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str | None) -> str | None:
        return normalize_email(v)


class UsersListResponse(BaseModel):
    """Response for GET /users (admin only)."""

    users: list[UserPublic]


class UserStats(BaseModel):
    """Totals by role plus accounts created within the recent window."""

    total_users: int
    user_count: int
    agent_count: int
    admin_count: int
    recent_users: int
