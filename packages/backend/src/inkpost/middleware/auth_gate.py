"""Soft authentication gate.

Learn: Runs once per request, before any route. If the request carries
"Authorization: Bearer <token>" and the token verifies, the caller's
identity is attached to request.state. Otherwise the request carries on
anonymously: nothing is rejected here. That lets the one /graphql
endpoint serve both login (no token yet) and authenticated operations;
each resolver decides whether it needs a user.
"""

from typing import Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from inkpost.auth.dependencies import ANONYMOUS, RequestIdentity
from inkpost.auth.jwt import verify_token

logger = structlog.get_logger()

BEARER_PREFIX = "Bearer "


def resolve_identity(authorization: Optional[str]) -> RequestIdentity:
    """Turn an Authorization header value into an identity. Never raises."""
    if not authorization:
        return ANONYMOUS
    if not authorization.startswith(BEARER_PREFIX):
        logger.debug("inkpost.auth.malformed_header")
        return ANONYMOUS

    claims = verify_token(authorization[len(BEARER_PREFIX):])
    if claims is None:
        logger.debug("inkpost.auth.invalid_token")
        return ANONYMOUS
    return RequestIdentity(user_id=claims.user_id, email=claims.email)


class AuthGateMiddleware(BaseHTTPMiddleware):
    """Attach the caller's identity (or the anonymous one) to the request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        identity = resolve_identity(request.headers.get("Authorization"))
        request.state.identity = identity
        if identity.is_auth:
            structlog.contextvars.bind_contextvars(user_id=identity.user_id)
        return await call_next(request)
