"""Domain errors raised by the service layer.

Learn: Each kind carries an HTTP-style status code and optional
structured detail. The GraphQL formatter and the REST exception handler
both render them as {message, status, data}, so services never need to
know which transport is calling them.

Status mapping:
    ValidationError     422  malformed or missing input (batched detail)
    ConflictError       409  duplicate identity (email already used)
    AuthError           401  missing/invalid credential, wrong password
    NotFoundError       404  missing resource
    AuthorizationError  403  authenticated, but not the resource owner
"""

from typing import Any, Optional


class InkpostError(Exception):
    """Base for all domain errors."""

    code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        data: Optional[Any] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.data = data

    def to_dict(self) -> dict:
        return {"message": self.message, "status": self.code, "data": self.data}


class ValidationError(InkpostError):
    code = 422


class ConflictError(InkpostError):
    code = 409


class AuthError(InkpostError):
    code = 401


class NotFoundError(InkpostError):
    code = 404


class AuthorizationError(InkpostError):
    code = 403
