"""
Tests for the server-side session manager.
"""

import pytest

from auth.sessions import SessionManager
from database.helpers import create_user


async def _make_user(session_factory, email="ana@x.com") -> str:
    async with session_factory() as db:
        user = await create_user(db, "Ana", email, "hash")
        await db.commit()
        return str(user.user_id)


class TestSessionLifecycle:
    @pytest.mark.asyncio
    async def test_create_and_lookup(self, sessions, session_factory):
        user_id = await _make_user(session_factory)
        session_id = await sessions.create(user_id, "ana@x.com")

        record = await sessions.lookup(session_id)
        assert record is not None
        assert record.user_id == user_id
        assert record.user_email == "ana@x.com"
        assert (record.expires_at - record.created_at).total_seconds() == pytest.approx(86400)

    @pytest.mark.asyncio
    async def test_unknown_and_empty_ids_are_absent(self, sessions):
        assert await sessions.lookup("does-not-exist") is None
        assert await sessions.lookup("") is None
        assert await sessions.lookup(None) is None

    @pytest.mark.asyncio
    async def test_expired_session_is_absent(self, session_factory):
        user_id = await _make_user(session_factory)
        short_lived = SessionManager(session_factory, ttl_seconds=-1)
        session_id = await short_lived.create(user_id, "ana@x.com")

        assert await short_lived.lookup(session_id) is None
        assert await short_lived.purge_expired() == 1

    @pytest.mark.asyncio
    async def test_destroy_is_idempotent(self, sessions, session_factory):
        user_id = await _make_user(session_factory)
        session_id = await sessions.create(user_id, "ana@x.com")

        await sessions.destroy(session_id)
        await sessions.destroy(session_id)
        await sessions.destroy(None)
        assert await sessions.lookup(session_id) is None

    @pytest.mark.asyncio
    async def test_last_login_wins(self, sessions, session_factory):
        user_id = await _make_user(session_factory)
        first = await sessions.create(user_id, "ana@x.com")
        second = await sessions.create(user_id, "ana@x.com")

        assert first != second
        assert await sessions.lookup(first) is None
        assert (await sessions.lookup(second)).user_id == user_id

    @pytest.mark.asyncio
    async def test_sessions_of_other_users_untouched(self, sessions, session_factory):
        ana = await _make_user(session_factory, "ana@x.com")
        bob = await _make_user(session_factory, "bob@x.com")
        ana_sid = await sessions.create(ana, "ana@x.com")
        await sessions.create(bob, "bob@x.com")

        assert await sessions.lookup(ana_sid) is not None
