"""GraphQL object and input types.

Learn: Strawberry types are plain dataclasses. ORM rows are converted
into them right after the service call (user_from_model /
post_from_model), while the session still has everything loaded.
Python snake_case fields are exposed as camelCase (imageUrl, createdAt).
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

import strawberry
from sqlalchemy import select
from strawberry.types import Info

from inkpost.db import models


def to_iso(value: datetime) -> str:
    """Render a timestamp as ISO-8601 UTC with milliseconds, e.g. 2024-05-01T10:00:00.000Z."""
    if value.tzinfo is None:
        # SQLite hands back naive datetimes; they were written as UTC
        value = value.replace(tzinfo=timezone.utc)
    return (
        value.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


@strawberry.type
class User:
    id: strawberry.ID
    email: str
    name: str
    status: Optional[str]
    password: Optional[str] = strawberry.field(
        default=None,
        description="Always null. Password hashes are never sent to clients.",
    )

    @strawberry.field
    async def posts(self, info: Info) -> list["Post"]:
        result = await info.context.db.execute(
            select(models.Post)
            .where(models.Post.creator_id == uuid.UUID(self.id))
            .order_by(models.Post.created_at)
        )
        return [post_from_model(p, creator=self) for p in result.scalars().all()]


@strawberry.type
class Post:
    id: strawberry.ID
    title: str
    image_url: str
    content: str
    creator: User
    created_at: str
    updated_at: str


@strawberry.type
class AuthData:
    token: str
    user_id: str


@strawberry.type
class PostData:
    posts: list[Post]
    total_posts: int


@strawberry.input
class SignupInput:
    email: str
    name: str
    password: str


@strawberry.input
class LoginInput:
    email: str
    password: str


@strawberry.input
class PostInput:
    title: str
    content: str
    image_url: Optional[str] = None


def user_from_model(user: models.User) -> User:
    return User(
        id=strawberry.ID(str(user.id)),
        email=user.email,
        name=user.name,
        status=user.status,
    )


def post_from_model(post: models.Post, creator: Optional[User] = None) -> Post:
    return Post(
        id=strawberry.ID(str(post.id)),
        title=post.title,
        image_url=post.image_url,
        content=post.content,
        creator=creator or user_from_model(post.creator),
        created_at=to_iso(post.created_at),
        updated_at=to_iso(post.updated_at),
    )
