"""Post service — create, list, read, update, delete.

Learn: Every operation here needs a logged-in caller, and the check
happens before any query runs. Update and delete additionally require
that the caller created the post. Reads eager-load the creator with
selectinload so the transport layer never triggers a lazy load (async
sessions can't do implicit IO).
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from inkpost.auth.dependencies import RequestIdentity
from inkpost.config import settings
from inkpost.db.models import NO_IMAGE, Post, User
from inkpost.errors import AuthError, AuthorizationError, NotFoundError

logger = structlog.get_logger()

# The upload form sends this text when no new image was chosen.
IMAGE_PLACEHOLDER = "undefined"


def _require_auth(identity: RequestIdentity) -> None:
    if not identity.is_auth:
        raise AuthError("Not authenticated!")


def _parse_id(post_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(post_id))
    except ValueError:
        return None


class PostService:
    """Business logic for posts."""

    def __init__(self, db: AsyncSession, per_page: Optional[int] = None):
        self.db = db
        self.per_page = per_page or settings.posts_per_page

    async def create_post(
        self,
        identity: RequestIdentity,
        title: str,
        content: str,
        image_url: Optional[str] = None,
    ) -> Post:
        """Create a post owned by the calling user.

        Learn: The post row and its link into the owner's post list are
        written in the same commit, so a crash can't leave a post that
        its owner doesn't list.
        """
        _require_auth(identity)

        user = await self.db.scalar(
            select(User).where(User.id == _parse_id(identity.user_id))
        )
        if not user:
            # Valid token, vanished account
            raise AuthError("Invalid user.")

        post = Post(
            title=title,
            content=content,
            image_url=image_url or NO_IMAGE,
            creator=user,  # posts collection stays unloaded
        )
        self.db.add(post)
        await self.db.commit()

        logger.info("inkpost.post.created", post_id=str(post.id))
        return post

    async def list_posts(
        self, identity: RequestIdentity, page: Optional[int] = None
    ) -> tuple[list[Post], int]:
        """One page of posts, newest first, plus the total post count."""
        _require_auth(identity)
        if not page or page < 1:
            page = 1

        total = await self.db.scalar(select(func.count()).select_from(Post))
        result = await self.db.execute(
            select(Post)
            .options(selectinload(Post.creator))
            .order_by(Post.created_at.desc(), Post.id.desc())
            .offset((page - 1) * self.per_page)
            .limit(self.per_page)
        )
        return list(result.scalars().all()), total or 0

    async def get_post(self, identity: RequestIdentity, post_id: str) -> Post:
        _require_auth(identity)
        return await self._load(post_id)

    async def update_post(
        self,
        identity: RequestIdentity,
        post_id: str,
        title: str,
        content: str,
        image_url: Optional[str] = None,
    ) -> Post:
        """Overwrite a post's fields. Only its creator may do this.

        The image is kept when image_url is omitted or is the upload
        form's "undefined" placeholder.
        """
        _require_auth(identity)
        post = await self._load(post_id)
        self._check_owner(post, identity, "edit")

        post.title = title
        post.content = content
        if image_url is not None and image_url != IMAGE_PLACEHOLDER:
            post.image_url = image_url

        await self.db.commit()
        await self.db.refresh(post, attribute_names=["updated_at"])

        logger.info("inkpost.post.updated", post_id=str(post.id))
        return post

    async def delete_post(self, identity: RequestIdentity, post_id: str) -> bool:
        _require_auth(identity)
        post = await self._load(post_id)
        self._check_owner(post, identity, "delete")

        await self.db.delete(post)
        await self.db.commit()

        logger.info("inkpost.post.deleted", post_id=str(post_id))
        return True

    # ─── Helpers ────────────────────────────────────────

    async def _load(self, post_id: str) -> Post:
        pid = _parse_id(post_id)
        post = None
        if pid is not None:
            result = await self.db.execute(
                select(Post).options(selectinload(Post.creator)).where(Post.id == pid)
            )
            post = result.scalars().first()
        if not post:
            raise NotFoundError("Could not find post.")
        return post

    @staticmethod
    def _check_owner(post: Post, identity: RequestIdentity, action: str) -> None:
        if str(post.creator_id) != str(identity.user_id):
            raise AuthorizationError(f"Not authorized to {action} this post.")
