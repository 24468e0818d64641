"""FastAPI auth dependencies.

Learn: The auth gate middleware has already looked at the Authorization
header by the time a route runs. These dependencies just read what it
left on request.state:

1. get_identity — soft, always succeeds (anonymous when no token)
2. require_identity — hard, raises AuthError (401) when anonymous
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request

from inkpost.errors import AuthError


@dataclass(frozen=True)
class RequestIdentity:
    """Who is making the request, if anyone.

    Learn: This is the request-scoped auth context. An empty identity
    means "not authenticated"; handlers check is_auth before doing
    anything that needs a user.
    """

    user_id: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_auth(self) -> bool:
        return self.user_id is not None


ANONYMOUS = RequestIdentity()


def get_identity(request: Request) -> RequestIdentity:
    """Identity attached by the auth gate (anonymous if the gate did not run)."""
    return getattr(request.state, "identity", ANONYMOUS)


def require_identity(
    identity: RequestIdentity = Depends(get_identity),
) -> RequestIdentity:
    """Identity for routes that need a logged-in user."""
    if not identity.is_auth:
        raise AuthError("Not authenticated!")
    return identity
