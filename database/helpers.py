"""
Database helper functions — user records (the credential store) and
session rows.

All helpers take an open ``AsyncSession`` and leave committing to the
caller.  Email uniqueness is enforced by the unique index on
``users.email``; ``create_user`` turns a violation into ``ConflictError``
so concurrent registrations cannot both succeed.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.errors import ConflictError
from database.models import Session, User

logger = logging.getLogger(__name__)


def _to_uuid(value: str | uuid.UUID) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return None


# ── Users ──────────────────────────────────────────────────────────────


async def create_user(
    session: AsyncSession,
    name: str,
    email: str,
    password_hash: str,
) -> User:
    """Insert a user row; raises ``ConflictError`` if the email is taken."""
    user = User(
        user_id=uuid.uuid4(),
        name=name,
        email=email,
        password_hash=password_hash,
    )
    session.add(user)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        logger.info("Duplicate email rejected by unique index: %s", email)
        raise ConflictError() from exc
    return user


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_public_user_row(session: AsyncSession, user_id: str) -> Optional[Any]:
    """Fetch id, name and email only — the password hash is never loaded."""
    uid = _to_uuid(user_id)
    if uid is None:
        return None
    result = await session.execute(
        select(User.user_id, User.name, User.email).where(User.user_id == uid)
    )
    return result.one_or_none()


# ── Sessions ───────────────────────────────────────────────────────────


async def insert_session(
    session: AsyncSession,
    session_id: str,
    user_id: str,
    user_email: str,
    created_at: datetime,
    expires_at: datetime,
) -> Session:
    row = Session(
        session_id=session_id,
        user_id=_to_uuid(user_id),
        user_email=user_email,
        created_at=created_at,
        expires_at=expires_at,
    )
    session.add(row)
    await session.flush()
    return row


async def get_session(
    session: AsyncSession,
    session_id: str,
    now: datetime,
) -> Optional[Session]:
    """Return the session row if it exists and has not expired."""
    result = await session.execute(
        select(Session).where(
            Session.session_id == session_id,
            Session.expires_at > now,
        )
    )
    return result.scalar_one_or_none()


async def delete_session(session: AsyncSession, session_id: str) -> int:
    result = await session.execute(
        delete(Session).where(Session.session_id == session_id)
    )
    return result.rowcount or 0


async def delete_sessions_for_user(session: AsyncSession, user_id: str) -> int:
    uid = _to_uuid(user_id)
    if uid is None:
        return 0
    result = await session.execute(delete(Session).where(Session.user_id == uid))
    return result.rowcount or 0


async def delete_expired_sessions(session: AsyncSession, now: datetime) -> int:
    result = await session.execute(delete(Session).where(Session.expires_at <= now))
    return result.rowcount or 0
