"""
Registration and login.

Both operations end the same way: a server-side session is created, a
token is issued, and an ``AuthResult`` carrying the public user view is
returned.  Registration is complete once the user row is committed;
session creation after that point is best effort (the client can recover
by logging in).
"""

from __future__ import annotations

import logging
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auth.errors import (
    ConflictError,
    InternalError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from auth.jwt import TokenService
from auth.models import AuthResult, PublicUser
from auth.password import DEFAULT_ROUNDS, hash_password_async, verify_password_async
from auth.sessions import SessionManager
from database.helpers import create_user, get_user_by_email

logger = logging.getLogger(__name__)

REGISTERED_MSG = "User created successfully!"
LOGGED_IN_MSG = "Authentication successful!"

# users.name is String(128); bcrypt accepts at most 72 bytes of input.
NAME_MAX_LENGTH = 128
PASSWORD_MAX_BYTES = 72


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _check_email_syntax(email: str) -> None:
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValidationError("Invalid email address") from exc


def _check_password(password: str) -> None:
    try:
        encoded = password.encode()
    except UnicodeEncodeError as exc:
        raise ValidationError("Password contains invalid characters") from exc
    if len(encoded) > PASSWORD_MAX_BYTES:
        raise ValidationError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")


class AuthService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        tokens: TokenService,
        sessions: SessionManager,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
    ) -> None:
        self._session_factory = session_factory
        self._tokens = tokens
        self._sessions = sessions
        self._bcrypt_rounds = bcrypt_rounds

    async def register(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        confirm_password: Optional[str],
    ) -> AuthResult:
        name = (name or "").strip()
        email = normalize_email(email)
        if not name:
            raise ValidationError("Name is required")
        if len(name) > NAME_MAX_LENGTH:
            raise ValidationError(f"Name must be at most {NAME_MAX_LENGTH} characters")
        if not email:
            raise ValidationError("Email is required")
        if not password:
            raise ValidationError("Password is required")
        if password != confirm_password:
            raise ValidationError("Passwords do not match")
        _check_email_syntax(email)
        _check_password(password)

        password_hash = await hash_password_async(password, self._bcrypt_rounds)

        try:
            async with self._session_factory() as db:
                if await get_user_by_email(db, email) is not None:
                    raise ConflictError()
                user = await create_user(db, name, email, password_hash)
                await db.commit()
                public = PublicUser.from_row(user)
        except SQLAlchemyError as exc:
            logger.exception("Registration failed for %s", email)
            raise InternalError() from exc

        logger.info("Registered user %s", public.id)

        try:
            session_id: Optional[str] = await self._sessions.create(public.id, public.email)
        except InternalError:
            logger.warning("User %s registered without a session; login will create one", public.id)
            session_id = None

        return AuthResult(
            msg=REGISTERED_MSG,
            token=self._tokens.issue(public.id),
            session_id=session_id,
            user=public,
        )

    async def login(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        email = normalize_email(email)
        if not email:
            raise ValidationError("Email is required")
        if not password:
            raise ValidationError("Password is required")
        _check_password(password)

        try:
            async with self._session_factory() as db:
                user = await get_user_by_email(db, email)
        except SQLAlchemyError as exc:
            logger.exception("User lookup failed during login")
            raise InternalError() from exc

        if user is None:
            raise NotFoundError()
        if not await verify_password_async(password, user.password_hash):
            logger.info("Rejected password for user %s", user.user_id)
            raise InvalidCredentialsError()

        public = PublicUser.from_row(user)
        session_id = await self._sessions.create(public.id, public.email)
        logger.info("Login: %s (%s)", public.name, public.id)

        return AuthResult(
            msg=LOGGED_IN_MSG,
            token=self._tokens.issue(public.id),
            session_id=session_id,
            user=public,
        )
