"""Unit tests for the request logging middleware."""

import logging

import pytest
from fastapi import FastAPI, HTTPException, Request
from httpx import ASGITransport, AsyncClient
from libs.auth.models import AuthUser
from libs.common.logging import get_request_id
from libs.common.middleware import RequestContextMiddleware


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/whoami")
    async def whoami(request: Request):
        request.state.user = AuthUser(user_id="doer-1", role="authenticated")
        return {"request_id": get_request_id()}

    @app.get("/missing")
    async def missing():
        raise HTTPException(status_code=404)

    return app


def _completed(caplog):
    return [r for r in caplog.records if r.getMessage() == "Request completed"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_request_id_is_propagated_and_echoed():
    async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test") as ac:
        response = await ac.get("/whoami", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert response.json()["request_id"] == "req-123"
    assert get_request_id() is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_request_id_is_generated_when_missing():
    async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test") as ac:
        response = await ac.get("/whoami")

    assert response.headers["X-Request-ID"] == response.json()["request_id"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_completed_request_logged_with_user(caplog):
    caplog.set_level(logging.INFO, logger="libs.common.middleware")

    async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test") as ac:
        await ac.get("/whoami")
        await ac.get("/missing")

    ok, missing = _completed(caplog)
    assert ok.levelno == logging.INFO
    assert ok.extra_fields["user_id"] == "doer-1"
    assert ok.extra_fields["status_code"] == 200
    assert missing.levelno == logging.WARNING
    assert missing.extra_fields["user_id"] is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_health_checks_are_not_logged(caplog):
    caplog.set_level(logging.INFO, logger="libs.common.middleware")

    async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test") as ac:
        response = await ac.get("/health")

    assert response.status_code == 200
    assert "X-Request-ID" in response.headers
    assert _completed(caplog) == []
