"""
Server-side sessions, referenced by an opaque id delivered in a cookie.

Session rows live in the same database as users so every service instance
sees them and they survive restarts.  A user holds at most one live
session: creating a new one removes the previous ones in the same
transaction.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auth.errors import InternalError
from auth.models import SessionRecord
from database.helpers import (
    delete_expired_sessions,
    delete_session,
    delete_sessions_for_user,
    get_session,
    insert_session,
)

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SessionManager:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        ttl_seconds: int = 86400,
    ) -> None:
        self._session_factory = session_factory
        self.ttl_seconds = ttl_seconds

    async def create(self, user_id: str, user_email: str) -> str:
        """Persist a new session for the user and return its id."""
        session_id = secrets.token_urlsafe(32)
        now = datetime.now(timezone.utc)
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    replaced = await delete_sessions_for_user(db, user_id)
                    await insert_session(
                        db,
                        session_id=session_id,
                        user_id=user_id,
                        user_email=user_email,
                        created_at=now,
                        expires_at=now + timedelta(seconds=self.ttl_seconds),
                    )
        except SQLAlchemyError as exc:
            logger.exception("Failed to create session for user %s", user_id)
            raise InternalError() from exc

        if replaced:
            logger.debug("Replaced %d previous session(s) for user %s", replaced, user_id)
        return session_id

    async def lookup(self, session_id: Optional[str]) -> Optional[SessionRecord]:
        """
        Return the live session for ``session_id`` or ``None``.

        Unknown and expired ids are indistinguishable to the caller.
        """
        if not session_id:
            return None
        try:
            async with self._session_factory() as db:
                row = await get_session(db, session_id, datetime.now(timezone.utc))
        except SQLAlchemyError:
            logger.exception("Session lookup failed")
            return None
        if row is None:
            return None
        return SessionRecord(
            session_id=row.session_id,
            user_id=str(row.user_id),
            user_email=row.user_email,
            created_at=_as_utc(row.created_at),
            expires_at=_as_utc(row.expires_at),
        )

    async def destroy(self, session_id: Optional[str]) -> None:
        """Remove the session; a missing session is not an error."""
        if not session_id:
            return
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    removed = await delete_session(db, session_id)
        except SQLAlchemyError as exc:
            logger.exception("Failed to destroy session")
            raise InternalError("Logout failed") from exc
        if removed:
            logger.info("Session destroyed")

    async def purge_expired(self) -> int:
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    return await delete_expired_sessions(db, datetime.now(timezone.utc))
        except SQLAlchemyError as exc:
            logger.exception("Failed to purge expired sessions")
            raise InternalError() from exc
