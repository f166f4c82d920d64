"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Relationships, constraints, and indexes defined here.

Key concepts:
- UUID primary keys, generated client-side so a flushed row already has its id
- Uniqueness (username, email, role title) is enforced by the database, not
  only by the service-level pre-check, so concurrent signups cannot both win
- Generic column types, so the same models run on Postgres and SQLite
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

DEFAULT_ROLE_TITLE = "viewer"


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class Role(Base):
    """A named privilege tier. Created out-of-band (CLI or seed), never by signup.

    Learn: access_level is an ordinal ranking (lower = fewer privileges).
    Policy checks use the title; the level is informational.
    """

    __tablename__ = "roles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    title: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False, default=DEFAULT_ROLE_TITLE
    )
    access_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )


class User(Base):
    """An account. Owns documents, holds exactly one role."""

    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_created", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("roles.id"), nullable=False
    )
    logged_in: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )

    # Always needed for policy checks and responses; selectin keeps it async-safe
    role: Mapped["Role"] = relationship(lazy="selectin")


class Document(Base):
    """A document owned by a user.

    Learn: role_id is a snapshot of the owner's role at creation time.
    It is not re-resolved if the owner's role changes later.
    """

    __tablename__ = "documents"
    __table_args__ = (
        Index("idx_documents_owner", "owner_id", "date_created"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("roles.id"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    date_created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
