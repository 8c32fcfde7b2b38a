# -*- coding: utf-8 -*-
"""
Tests del caché de tokens OAuth con reloj inyectado.
"""

import asyncio

import pytest

from app.modules.subscriptions.providers.token_cache import TokenCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_token_valid_until_refresh_margin():
    clock = FakeClock()
    cache = TokenCache(refresh_margin=0.10, clock=clock)
    cache.set("client", "tok", 32400)

    clock.now += 29159
    assert cache.get("client") == "tok"

    clock.now += 2  # 29161 s
    assert cache.get("client") is None


@pytest.mark.parametrize("margin", [0.05, 1.0, 1.5])
def test_margin_outside_range_rejected(margin):
    with pytest.raises(ValueError):
        TokenCache(refresh_margin=margin)


def test_invalidate_drops_token():
    cache = TokenCache(clock=FakeClock())
    cache.set("client", "tok", 3600)
    cache.invalidate("client")
    assert cache.get("client") is None


@pytest.mark.asyncio
async def test_get_or_fetch_calls_fetch_once_for_concurrent_callers():
    cache = TokenCache(clock=FakeClock())
    calls = {"n": 0}

    async def fetch():
        calls["n"] += 1
        await asyncio.sleep(0)
        return "A21AAF", 32400

    tokens = await asyncio.gather(*(cache.get_or_fetch("client", fetch) for _ in range(5)))
    assert tokens == ["A21AAF"] * 5
    assert calls["n"] == 1


@pytest.mark.asyncio
async def test_get_or_fetch_refreshes_after_expiry():
    clock = FakeClock()
    cache = TokenCache(clock=clock)
    values = iter([("first", 100), ("second", 100)])

    async def fetch():
        return next(values)

    assert await cache.get_or_fetch("client", fetch) == "first"
    clock.now += 95
    assert await cache.get_or_fetch("client", fetch) == "second"
