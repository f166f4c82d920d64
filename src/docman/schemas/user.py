"""Pydantic schemas for users, roles, and login.

Learn: Pydantic v2 models validate request/response data. Separate
"Create" schemas (input) from "Read" schemas (output) for clean APIs.

Signup fields are all optional here on purpose: a missing field must
produce the domain message ("Please provide the username, ...") from the
service, not a generic 422 from FastAPI.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from docman.db.models import Role, User


# ─── Requests ───────────────────────────────────────────

class SignupRequest(BaseModel):
    username: Optional[str] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class UserUpdate(BaseModel):
    """Partial profile update. Role is deliberately not updatable here."""
    username: Optional[str] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


# ─── Responses ──────────────────────────────────────────

class RoleRead(BaseModel):
    id: uuid.UUID
    title: str
    access_level: int

    model_config = {"from_attributes": True}

    @classmethod
    def from_role(cls, role: Role) -> "RoleRead":
        return cls(id=role.id, title=role.title, access_level=role.access_level)


class NameRead(BaseModel):
    first: str
    last: str


class UserRead(BaseModel):
    """Public view of a user. Never carries a credential field."""
    id: uuid.UUID
    username: str
    email: str
    name: NameRead
    role: RoleRead
    logged_in: bool
    created_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserRead":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            name=NameRead(first=user.first_name, last=user.last_name),
            role=RoleRead.from_role(user.role),
            logged_in=user.logged_in,
            created_at=user.created_at,
        )


class LoginResponse(BaseModel):
    user: UserRead
    token: str


class MessageResponse(BaseModel):
    message: str
