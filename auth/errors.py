"""
Error taxonomy for the auth service.

``AuthError`` subclasses carry a client-safe ``message`` and the HTTP
status they map to; ``api.exception_handlers`` turns them into
``{"msg": ...}`` responses.  ``TokenError`` subclasses describe *why* a
token failed verification and never reach the client directly.
"""

from __future__ import annotations


class AuthError(Exception):
    status_code: int = 400
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthError):
    status_code = 422
    default_message = "Invalid input"


class ConflictError(AuthError):
    status_code = 422
    default_message = "Please use another email!"


class NotFoundError(AuthError):
    status_code = 404
    default_message = "User not found!"


class InvalidCredentialsError(AuthError):
    status_code = 422
    default_message = "Invalid password!"


class UnauthenticatedError(AuthError):
    status_code = 401
    default_message = "Invalid token!"


class InternalError(AuthError):
    status_code = 500
    default_message = "Internal server error"


class RequestTimeoutError(AuthError):
    status_code = 504
    default_message = "Request timed out"


# ── Token verification failures ────────────────────────────────────────


class TokenError(Exception):
    """Base class for token verification failures."""


class MalformedTokenError(TokenError):
    pass


class InvalidSignatureError(TokenError):
    pass


class ExpiredTokenError(TokenError):
    pass
