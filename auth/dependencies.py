"""
FastAPI dependencies for authentication.

Components are built once in ``main.create_app`` and stored on
``app.state``; the accessors below hand them to route handlers.

Two identity checks live here and are deliberately not interchangeable:

* ``get_current_user`` trusts only the bearer token (``/user/profile``).
* ``get_session_principal`` trusts only the session cookie (``/session/*``).
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.errors import InternalError, TokenError, UnauthenticatedError
from auth.jwt import TokenService
from auth.models import Principal, PublicUser
from auth.service import AuthService
from auth.sessions import SessionManager
from config.settings import Settings
from database.helpers import get_public_user_row

logger = logging.getLogger(__name__)

# One message for every rejection reason.
UNAUTHENTICATED_MSG = "Access denied!"


# ── Component accessors ────────────────────────────────────────────────


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.sessions


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


async def db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    async with request.app.state.session_factory() as session:
        yield session


# ── Bearer token guard ─────────────────────────────────────────────────


def _extract_bearer(request: Request) -> str:
    authorization = request.headers.get("Authorization")
    if not authorization:
        raise UnauthenticatedError(UNAUTHENTICATED_MSG)
    scheme, _, credential = authorization.partition(" ")
    credential = credential.strip()
    if scheme.lower() != "bearer" or not credential:
        raise UnauthenticatedError(UNAUTHENTICATED_MSG)
    return credential


async def get_token_principal(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
) -> Principal:
    """Verify the bearer token; every failure surfaces as the same 401."""
    token = _extract_bearer(request)
    try:
        user_id = tokens.verify(token)
    except TokenError as exc:
        logger.warning(
            "Rejected token on %s: %s", request.url.path, type(exc).__name__
        )
        raise UnauthenticatedError(UNAUTHENTICATED_MSG) from exc
    return Principal(user_id=user_id, source="token")


async def get_current_user(
    request: Request,
    principal: Principal = Depends(get_token_principal),
    session: AsyncSession = Depends(db_session),
) -> PublicUser:
    """
    Resolve the bearer token to a user and attach it to ``request.state``.

    A token whose user has since disappeared is treated like any other
    invalid token.
    """
    try:
        row = await get_public_user_row(session, principal.user_id)
    except SQLAlchemyError as exc:
        logger.exception("User lookup failed in access guard")
        raise InternalError() from exc
    if row is None:
        logger.warning("Token subject %s no longer exists", principal.user_id)
        raise UnauthenticatedError(UNAUTHENTICATED_MSG)

    user = PublicUser.from_row(row)
    request.state.user = user
    request.state.principal = principal
    return user


# ── Session cookie check ───────────────────────────────────────────────


def get_session_id(request: Request) -> Optional[str]:
    settings = get_settings(request)
    return request.cookies.get(settings.session_cookie_name) or None


async def get_session_principal(
    request: Request,
    sessions: SessionManager = Depends(get_session_manager),
) -> Optional[Principal]:
    """Return the session-backed principal, or ``None`` when there is none."""
    session_id = get_session_id(request)
    record = await sessions.lookup(session_id)
    if record is None:
        return None
    return Principal(user_id=record.user_id, source="session", session_id=record.session_id)
