"""Async SQLAlchemy engine and session factory.

Learn: One engine with connection pooling, one AsyncSession per request
handed out through the get_db dependency. SQLite URLs (used for local
experiments) skip the pool sizing options, which only apply to
queue-based pools.
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from inkpost.config import settings


def _engine_options(url: str) -> dict:
    options = {"echo": settings.debug}
    if not url.startswith("sqlite"):
        options.update(pool_size=5, max_overflow=15, pool_pre_ping=True)
    return options


engine = create_async_engine(
    settings.database_url, **_engine_options(settings.database_url)
)

# Session factory, one session per request
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncSession:
    """FastAPI dependency — yields a session per request, auto-closes."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
