"""Post lifecycle tests at the service layer.

Learn: These cover the rules that matter most: no identity means no
access, only the creator may change or remove a post, and pagination
returns the newest posts first.
"""

import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy import func, inspect, select, update
from sqlalchemy.orm import selectinload

from inkpost.auth.dependencies import ANONYMOUS, RequestIdentity
from inkpost.db.models import NO_IMAGE, Post, User
from inkpost.errors import AuthError, AuthorizationError, NotFoundError
from inkpost.services.post_service import PostService
from inkpost.services.user_service import UserService


async def _make_user(session, email="ada@example.com") -> RequestIdentity:
    user = await UserService(session).create_user(email, email.split("@")[0], "secret-pw")
    return RequestIdentity(user_id=str(user.id), email=user.email)


async def _post_count(session) -> int:
    return await session.scalar(select(func.count()).select_from(Post))


async def _owned_post_ids(session_factory, user_id: str) -> list[str]:
    """Read the owner's post list from a fresh session."""
    async with session_factory() as session:
        result = await session.execute(
            select(User)
            .options(selectinload(User.posts))
            .where(User.id == uuid.UUID(user_id))
        )
        return [str(p.id) for p in result.scalars().one().posts]


# ═══════════════════════════════════════════════════════════
# Create
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_post_requires_auth(db_session):
    svc = PostService(db_session)
    with pytest.raises(AuthError):
        await svc.create_post(ANONYMOUS, title="Hello", content="World")
    assert await _post_count(db_session) == 0


@pytest.mark.asyncio
async def test_create_post_sets_creator_and_links_owner(db_session, session_factory):
    ada = await _make_user(db_session)
    svc = PostService(db_session)

    first = await svc.create_post(ada, title="First", content="one")
    assert await _owned_post_ids(session_factory, ada.user_id) == [str(first.id)]

    second = await svc.create_post(ada, title="Second", content="two")
    assert str(second.creator_id) == ada.user_id
    assert second.creator.email == "ada@example.com"
    # The owner's list grew by exactly one
    assert await _owned_post_ids(session_factory, ada.user_id) == [
        str(first.id),
        str(second.id),
    ]


@pytest.mark.asyncio
async def test_create_post_defaults_image(db_session):
    ada = await _make_user(db_session)
    svc = PostService(db_session)

    post = await svc.create_post(ada, title="No pic", content="text", image_url="")
    assert post.image_url == NO_IMAGE


@pytest.mark.asyncio
async def test_create_post_for_vanished_user_is_auth_error(db_session):
    ghost = RequestIdentity(user_id=str(uuid.uuid4()), email="ghost@example.com")
    with pytest.raises(AuthError):
        await PostService(db_session).create_post(ghost, title="Boo", content="!")


# ═══════════════════════════════════════════════════════════
# Read / list
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_posts_requires_auth(db_session):
    with pytest.raises(AuthError):
        await PostService(db_session).list_posts(ANONYMOUS)


@pytest.mark.asyncio
async def test_list_posts_paginates_newest_first(db_session):
    ada = await _make_user(db_session)
    svc = PostService(db_session, per_page=2)
    for i in range(5):
        await svc.create_post(ada, title=f"Post {i}", content=f"body {i}")

    page1, total = await svc.list_posts(ada, page=1)
    assert total == 5
    assert [p.title for p in page1] == ["Post 4", "Post 3"]

    page3, total = await svc.list_posts(ada, page=3)
    assert total == 5
    assert [p.title for p in page3] == ["Post 0"]


@pytest.mark.asyncio
@pytest.mark.parametrize("page", [None, 0, -2])
async def test_list_posts_falsy_page_means_first(db_session, page):
    ada = await _make_user(db_session)
    svc = PostService(db_session, per_page=2)
    for i in range(3):
        await svc.create_post(ada, title=f"Post {i}", content="x")

    posts, _ = await svc.list_posts(ada, page=page)
    assert [p.title for p in posts] == ["Post 2", "Post 1"]


@pytest.mark.asyncio
async def test_get_post_roundtrip(db_session):
    ada = await _make_user(db_session)
    svc = PostService(db_session)
    created = await svc.create_post(
        ada, title="Round", content="trip", image_url="images/a.png"
    )

    fetched = await svc.get_post(ada, str(created.id))
    assert (fetched.title, fetched.content, fetched.image_url) == (
        "Round",
        "trip",
        "images/a.png",
    )
    assert str(fetched.creator.id) == ada.user_id


@pytest.mark.asyncio
@pytest.mark.parametrize("post_id", [str(uuid.uuid4()), "not-a-uuid"])
async def test_get_post_missing(db_session, post_id):
    ada = await _make_user(db_session)
    with pytest.raises(NotFoundError) as exc:
        await PostService(db_session).get_post(ada, post_id)
    assert exc.value.code == 404


@pytest.mark.asyncio
async def test_get_post_checks_auth_before_lookup(db_session):
    """Anonymous callers get AuthError even for ids that don't exist."""
    with pytest.raises(AuthError):
        await PostService(db_session).get_post(ANONYMOUS, str(uuid.uuid4()))


# ═══════════════════════════════════════════════════════════
# Update / delete
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_post_by_owner(db_session):
    ada = await _make_user(db_session)
    svc = PostService(db_session)
    post = await svc.create_post(ada, title="Old", content="old", image_url="images/a.png")

    updated = await svc.update_post(
        ada, str(post.id), title="New", content="new", image_url="images/b.png"
    )
    assert (updated.title, updated.content, updated.image_url) == (
        "New",
        "new",
        "images/b.png",
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("image_url", [None, "undefined"])
async def test_update_post_keeps_image_when_not_sent(db_session, image_url):
    ada = await _make_user(db_session)
    svc = PostService(db_session)
    post = await svc.create_post(ada, title="Old", content="old", image_url="images/a.png")

    updated = await svc.update_post(
        ada, str(post.id), title="New", content="new", image_url=image_url
    )
    assert updated.image_url == "images/a.png"


@pytest.mark.asyncio
async def test_update_post_by_non_owner_is_rejected(db_session, session_factory):
    ada = await _make_user(db_session, "ada@example.com")
    bob = await _make_user(db_session, "bob@example.com")
    svc = PostService(db_session)
    post = await svc.create_post(ada, title="Mine", content="hands off")

    with pytest.raises(AuthorizationError) as exc:
        await svc.update_post(bob, str(post.id), title="Hacked", content="!")
    assert exc.value.code == 403

    async with session_factory() as fresh:
        stored = await fresh.get(Post, post.id)
        assert (stored.title, stored.content) == ("Mine", "hands off")


@pytest.mark.asyncio
async def test_update_missing_post(db_session):
    ada = await _make_user(db_session)
    with pytest.raises(NotFoundError):
        await PostService(db_session).update_post(
            ada, str(uuid.uuid4()), title="x", content="y"
        )


@pytest.mark.asyncio
async def test_delete_post_by_owner(db_session):
    ada = await _make_user(db_session)
    svc = PostService(db_session)
    post = await svc.create_post(ada, title="Bye", content="soon gone")
    post_id = str(post.id)

    assert await svc.delete_post(ada, post_id) is True
    assert await _post_count(db_session) == 0
    with pytest.raises(NotFoundError):
        await svc.get_post(ada, post_id)


@pytest.mark.asyncio
async def test_delete_post_by_non_owner_is_rejected(db_session):
    ada = await _make_user(db_session, "ada@example.com")
    bob = await _make_user(db_session, "bob@example.com")
    svc = PostService(db_session)
    post = await svc.create_post(ada, title="Mine", content="stays")

    with pytest.raises(AuthorizationError):
        await svc.delete_post(bob, str(post.id))
    assert await _post_count(db_session) == 1


@pytest.mark.asyncio
async def test_delete_requires_auth(db_session):
    with pytest.raises(AuthError):
        await PostService(db_session).delete_post(ANONYMOUS, str(uuid.uuid4()))


@pytest.mark.asyncio
async def test_update_requires_auth(db_session):
    with pytest.raises(AuthError):
        await PostService(db_session).update_post(
            ANONYMOUS, str(uuid.uuid4()), title="x", content="y"
        )


@pytest.mark.asyncio
async def test_create_post_leaves_owner_history_unloaded(db_session):
    ada = await _make_user(db_session)
    svc = PostService(db_session)
    await svc.create_post(ada, title="First", content="one")

    post = await svc.create_post(ada, title="Second", content="two")
    assert "posts" in inspect(post.creator).unloaded


@pytest.mark.asyncio
async def test_list_posts_breaks_timestamp_ties_by_id(db_session):
    ada = await _make_user(db_session)
    svc = PostService(db_session, per_page=2)
    ids = [
        str((await svc.create_post(ada, title=f"p{i}", content="same instant")).id)
        for i in range(5)
    ]
    await db_session.execute(
        update(Post).values(created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    )
    await db_session.commit()

    seen = []
    for page in (1, 2, 3):
        posts, total = await svc.list_posts(ada, page=page)
        seen.extend(str(p.id) for p in posts)

    assert total == 5
    assert seen == sorted(ids, key=uuid.UUID, reverse=True)
