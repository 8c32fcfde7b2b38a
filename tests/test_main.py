# -*- coding: utf-8 -*-
"""
Smoke test del ensamblado de la app (routers, middlewares, /health).
"""

import httpx
import pytest

from app.shared.middleware import JSONExceptionMiddleware, RequestLoggingMiddleware


@pytest.fixture
def app(monkeypatch):
    from app import main

    async def _db_ok(*args, **kwargs):
        return True

    monkeypatch.setattr(main, "check_database_health", _db_ok)
    return main.create_app()


def test_routes_are_mounted(app):
    paths = {route.path for route in app.routes}
    assert "/api/subscriptions/webpay/create" in paths
    assert "/api/subscriptions/mercadopago/webhook" in paths
    assert "/api/subscriptions/plans" in paths
    assert "/api/market/{creator_slug}/{provider}/create" in paths
    assert "/metrics" in paths
    assert "/health" in paths


def test_middlewares_installed(app):
    classes = {m.cls for m in app.user_middleware}
    assert JSONExceptionMiddleware in classes
    assert RequestLoggingMiddleware in classes


@pytest.mark.asyncio
async def test_health(app):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": True}
