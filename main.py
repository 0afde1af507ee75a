"""
Auth service — application entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.exception_handlers import setup_exception_handlers
from api.middleware import register_middleware
from api.routes import router as api_router
from auth.jwt import TokenService
from auth.routes import router as auth_router
from auth.service import AuthService
from auth.sessions import SessionManager
from config.settings import Settings
from database.session import build_engine, build_session_factory, init_db

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("sqlalchemy.engine", "aiosqlite", "asyncio"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings)

    app = FastAPI(
        title="Auth Service",
        version="1.0.0",
        description="Account registration, login, sessions and bearer tokens.",
    )

    engine = build_engine(settings)
    session_factory = build_session_factory(engine)
    tokens = TokenService(settings.jwt_secret, settings.jwt_expiry_seconds)
    sessions = SessionManager(session_factory, settings.session_ttl_seconds)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.tokens = tokens
    app.state.sessions = sessions
    app.state.auth_service = AuthService(
        session_factory,
        tokens,
        sessions,
        bcrypt_rounds=settings.bcrypt_rounds,
    )

    register_middleware(app, settings.request_timeout_seconds)

    # CORS outermost, so timeout responses carry its headers too
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_exception_handlers(app)

    # Routes
    app.include_router(auth_router, prefix="/auth")
    app.include_router(api_router)

    @app.on_event("startup")
    async def on_startup():
        await init_db(engine)
        purged = await sessions.purge_expired()
        if purged:
            logger.info("Purged %d expired sessions", purged)
        if settings.jwt_secret == Settings.model_fields["jwt_secret"].default:
            logger.warning("JWT_SECRET is the built-in default; set it before deploying")
        logger.info("Application ready to accept requests.")

    @app.on_event("shutdown")
    async def on_shutdown():
        await engine.dispose()

    return app


if __name__ == "__main__":
    _settings = Settings()
    uvicorn.run(
        create_app(_settings),
        host=_settings.host,
        port=_settings.port,
        log_level="debug" if _settings.debug else "info",
    )
