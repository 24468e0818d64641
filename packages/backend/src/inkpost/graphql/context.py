"""Per-request GraphQL context.

Learn: The context getter is an ordinary FastAPI dependency, so it can
pull in get_db (and tests can override get_db the usual way). It hands
resolvers the request's session and the identity the auth gate found.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from strawberry.fastapi import BaseContext

from inkpost.auth.dependencies import RequestIdentity, get_identity
from inkpost.db.engine import get_db


class GraphQLContext(BaseContext):
    def __init__(self, db: AsyncSession, identity: RequestIdentity):
        super().__init__()
        self.db = db
        self.identity = identity


async def get_context(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> GraphQLContext:
    return GraphQLContext(db=db, identity=get_identity(request))
