"""
Shared fixtures: a throwaway SQLite database per test and fast bcrypt.
"""

import pytest
from fastapi.testclient import TestClient

from auth.jwt import TokenService
from auth.service import AuthService
from auth.sessions import SessionManager
from config.settings import Settings
from database.session import build_engine, build_session_factory, init_db
from main import create_app

TEST_SECRET = "test-jwt-secret-for-testing-only"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'auth.db'}",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        environment="test",
    )


@pytest.fixture
async def engine(settings):
    engine = build_engine(settings)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(TEST_SECRET, expiry_seconds=86400)


@pytest.fixture
def sessions(session_factory) -> SessionManager:
    return SessionManager(session_factory, ttl_seconds=86400)


@pytest.fixture
def auth_service(session_factory, tokens, sessions) -> AuthService:
    return AuthService(session_factory, tokens, sessions, bcrypt_rounds=4)


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c
