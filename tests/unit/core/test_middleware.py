"""
Unit Tests for HTTP Middleware
Tests for: resource grouping, user attribution in request logs, body size limit
"""
import pytest
from unittest.mock import patch
from fastapi import FastAPI, Request
from httpx import AsyncClient, ASGITransport

from alumni_api.core.logging_config import logger, get_user_id
from alumni_api.core.middleware import (
    RequestLoggingMiddleware,
    RequestSizeLimitMiddleware,
    api_resource,
)


def build_app(max_size: int = 1024) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_size=max_size)

    @app.get("/api/events/{event_id}")
    async def read_event(event_id: str, request: Request):
        request.state.user_id = "user-42"
        return {"id": event_id}

    @app.get("/api/announcements")
    async def list_announcements():
        return []

    @app.post("/api/payments")
    async def create_payment():
        return {"ok": True}

    return app


async def get(app: FastAPI, path: str, **kwargs):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        return await ac.get(path, **kwargs)


@pytest.fixture
def completions():
    """Request-complete log lines with the user id the formatter would see"""
    seen = []

    def record(message, *args, extra=None, **kwargs):
        extra = extra or {}
        if extra.get("event_type") == "http_request_complete":
            seen.append({"user_id": get_user_id(), **extra})

    with patch.object(logger, "info", side_effect=record):
        yield seen


class TestApiResource:

    @pytest.mark.parametrize("path,expected", [
        ("/api/events/123/rsvp", "events"),
        ("/api/jobs", "jobs"),
        ("/api/admin/users/9/role", "admin/users"),
        ("/api/admin", "admin"),
        ("/api/", None),
        ("/health", None),
    ])
    def test_groups_by_first_segment(self, path, expected):
        assert api_resource(path) == expected


class TestRequestLogging:

    @pytest.mark.asyncio
    async def test_completion_attributed_to_authenticated_user(self, completions):
        response = await get(build_app(), "/api/events/7")

        assert response.status_code == 200
        assert completions[0]["user_id"] == "user-42"
        assert completions[0]["api_resource"] == "events"
        assert completions[0]["http_status"] == 200

    @pytest.mark.asyncio
    async def test_anonymous_request_has_no_user(self, completions):
        await get(build_app(), "/api/announcements")

        assert completions[0]["user_id"] == ""
        assert completions[0]["api_resource"] == "announcements"

    @pytest.mark.asyncio
    async def test_user_context_cleared_after_request(self, completions):
        await get(build_app(), "/api/events/7")

        assert get_user_id() == ""

    @pytest.mark.asyncio
    async def test_request_id_echoed(self):
        response = await get(build_app(), "/api/announcements", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"
        assert "X-Response-Time" in response.headers


class TestRequestSizeLimit:

    @pytest.mark.asyncio
    async def test_oversized_body_rejected_with_error_body(self):
        app = build_app(max_size=2 * 1024 * 1024)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.post("/api/payments", content=b"x" * (3 * 1024 * 1024))

        assert response.status_code == 413
        body = response.json()
        assert body["code"] == "PAYLOAD_TOO_LARGE"
        assert body["details"] == {"max_size_mb": 2}

    @pytest.mark.asyncio
    async def test_small_body_passes(self):
        app = build_app(max_size=2 * 1024 * 1024)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.post("/api/payments", content=b"{}")

        assert response.status_code == 200
