"""JWT identity tokens.

Learn: Tokens are stateless. The server keeps no record of issued
tokens; a token is valid if its signature checks out against the
configured secret and it has not expired. Each one carries the user id
(sub) and email, and lives for settings.token_expire_hours (3h).
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from inkpost.config import settings


class TokenError(Exception):
    """Raised when a token cannot be decoded."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    email: Optional[str] = None


def issue_token(
    user_id: str,
    email: str,
    now: Optional[datetime] = None,
) -> str:
    """Create a signed identity token for a user."""
    issued = now or datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "iat": issued,
        "exp": issued + timedelta(hours=settings.token_expire_hours),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Verify and decode a token.

    Returns the payload dict on success.
    Raises TokenError on failure.
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")


def verify_token(token: str) -> Optional[TokenClaims]:
    """Return the token's claims, or None if it is not acceptable.

    Never raises: malformed, tampered, and expired tokens all come back
    as None so the auth gate can treat them as "not logged in".
    """
    try:
        payload = decode_token(token)
    except TokenError:
        return None
    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        return None
    return TokenClaims(user_id=user_id, email=payload.get("email"))
