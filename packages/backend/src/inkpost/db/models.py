"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: SQLAlchemy 2.0 declarative style (Mapped[] + mapped_column).
Two tables: users and posts. A post row stores its creator's id, so the
user's "post list" is the posts relationship ordered by creation time.

Defaults are Python-side (default=/onupdate=) rather than server_default
so ids and timestamps are populated on the object right after flush,
without an extra round trip. The generic Uuid type keeps the schema
portable between PostgreSQL and SQLite.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

DEFAULT_STATUS = "I am new!"
NO_IMAGE = "no image here"


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class User(Base):
    """A registered author.

    Learn: The password is only ever stored as a bcrypt hash. Users are
    never deleted by any exposed operation.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[Optional[str]] = mapped_column(
        String(255), default=DEFAULT_STATUS
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )

    # Relationships
    posts: Mapped[list["Post"]] = relationship(
        back_populates="creator", order_by="Post.created_at"
    )


class Post(Base):
    """A blog post. Exactly one creator, fixed at creation."""

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[str] = mapped_column(
        String(1024), nullable=False, default=NO_IMAGE
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    creator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    creator: Mapped["User"] = relationship(back_populates="posts")
