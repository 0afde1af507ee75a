"""
Tests for the request deadline, timer middleware and error handlers.
"""

import asyncio

from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.exception_handlers import setup_exception_handlers
from api.middleware import register_middleware
from config.settings import Settings
from main import create_app


def _app(timeout: float) -> FastAPI:
    app = FastAPI()
    register_middleware(app, timeout)

    @app.get("/slow")
    async def slow():
        await asyncio.sleep(1)
        return {"ok": True}

    @app.get("/fast")
    async def fast():
        return {"ok": True}

    return app


class TestRequestDeadline:
    def test_slow_request_times_out(self):
        client = TestClient(_app(0.05))
        resp = client.get("/slow")
        assert resp.status_code == 504
        assert resp.json() == {"msg": "Request timed out"}

    def test_fast_request_passes_with_timer_header(self):
        client = TestClient(_app(5))
        resp = client.get("/fast")
        assert resp.status_code == 200
        assert "X-Process-Time" in resp.headers


class TestUnhandledErrors:
    def test_unexpected_exception_returns_json_500(self):
        app = FastAPI()
        setup_exception_handlers(app)

        @app.get("/boom")
        async def boom():
            raise RuntimeError("store exploded")

        client = TestClient(app, raise_server_exceptions=False)
        resp = client.get("/boom")
        assert resp.status_code == 500
        assert resp.json() == {"msg": "Internal server error"}
        assert "exploded" not in resp.text


class TestCorsOnTimeout:
    def test_timeout_response_carries_cors_headers(self, tmp_path):
        settings = Settings(
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'cors.db'}",
            jwt_secret="cors-secret",
            request_timeout_seconds=0.05,
            cors_origins=["http://localhost:3000"],
        )
        app = create_app(settings)

        @app.get("/slow")
        async def slow():
            await asyncio.sleep(1)
            return {"ok": True}

        with TestClient(app) as client:
            resp = client.get("/slow", headers={"Origin": "http://localhost:3000"})
        assert resp.status_code == 504
        assert resp.json() == {"msg": "Request timed out"}
        assert resp.headers["access-control-allow-origin"] == "http://localhost:3000"
