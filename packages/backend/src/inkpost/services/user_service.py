"""User service — signup and login.

Learn: Service layer separates business logic from transport. GraphQL
resolvers (and anything else) call services, services call the
database. Errors are raised as domain errors from inkpost.errors and
rendered by whichever transport is in front.
"""

import uuid
from typing import Optional

import structlog
from email_validator import EmailNotValidError, validate_email
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inkpost.auth.jwt import issue_token
from inkpost.auth.password import hash_password, verify_password
from inkpost.db.models import User
from inkpost.errors import AuthError, ConflictError, NotFoundError, ValidationError

logger = structlog.get_logger()

MIN_PASSWORD_LENGTH = 4


def validate_signup(email: str, password: str) -> list[dict]:
    """Collect every problem with a signup form, not just the first."""
    errors = []
    try:
        validate_email(email or "", check_deliverability=False)
    except EmailNotValidError:
        errors.append({"field": "email", "message": "E-Mail is invalid."})
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        errors.append({
            "field": "password",
            "message": f"Password must be at least {MIN_PASSWORD_LENGTH} characters.",
        })
    return errors


class UserService:
    """Business logic for accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def get_by_id(self, user_id: str) -> Optional[User]:
        try:
            uid = uuid.UUID(str(user_id))
        except ValueError:
            return None
        return await self.db.get(User, uid)

    async def create_user(self, email: str, name: str, password: str) -> User:
        """Register a new account.

        Raises ValidationError (all field problems at once) or
        ConflictError when the email is already taken.
        """
        errors = validate_signup(email, password)
        if errors:
            raise ValidationError("Invalid input.", data=errors)

        if await self.get_by_email(email):
            raise ConflictError("User exists already!")

        user = User(email=email, name=name, password_hash=hash_password(password))
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email
            await self.db.rollback()
            raise ConflictError("User exists already!")

        logger.info("inkpost.user.created", user_id=str(user.id))
        return user

    async def login(self, email: str, password: str) -> tuple[str, str]:
        """Check credentials and issue a token. Returns (token, user_id)."""
        user = await self.get_by_email(email)
        if not user:
            raise NotFoundError("User not found.", code=401)

        if not verify_password(password, user.password_hash):
            logger.info("inkpost.user.login_failed", user_id=str(user.id))
            raise AuthError("Password is incorrect.")

        user_id = str(user.id)
        return issue_token(user_id, user.email), user_id
