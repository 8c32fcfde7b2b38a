# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/providers/token_cache.py

Caché de tokens OAuth (client credentials) por client_id.

Un token con expires_in = T se considera vigente hasta
    obtenido_en + T × (1 - refresh_margin)
Con refresh_margin = 0.10 un token de 32400 s se renueva a los 29160 s.

El reloj es inyectable (time.monotonic por defecto) para probar el margen
sin esperar.

Autor: ClubFit
Fecha: 2026-02-12
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

MIN_REFRESH_MARGIN = 0.10


@dataclass
class _CachedToken:
    value: str
    refresh_at: float


class TokenCache:
    """Caché en memoria de tokens de acceso, uno por clave (client_id)."""

    def __init__(
        self,
        refresh_margin: float = MIN_REFRESH_MARGIN,
        clock: Callable[[], float] = time.monotonic,
    ):
        if not MIN_REFRESH_MARGIN <= refresh_margin < 1:
            raise ValueError(
                f"refresh_margin debe estar en [{MIN_REFRESH_MARGIN}, 1), recibido: {refresh_margin}"
            )
        self.refresh_margin = refresh_margin
        self._clock = clock
        self._tokens: Dict[str, _CachedToken] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def get(self, key: str) -> Optional[str]:
        cached = self._tokens.get(key)
        if cached is None:
            return None
        if self._clock() >= cached.refresh_at:
            return None
        return cached.value

    def set(self, key: str, token: str, expires_in: float) -> None:
        lifetime = max(float(expires_in), 0.0)
        self._tokens[key] = _CachedToken(
            value=token,
            refresh_at=self._clock() + lifetime * (1 - self.refresh_margin),
        )

    def invalidate(self, key: str) -> None:
        self._tokens.pop(key, None)

    async def get_or_fetch(
        self,
        key: str,
        fetch: Callable[[], Awaitable[Tuple[str, float]]],
    ) -> str:
        """
        Devuelve el token vigente o lo obtiene con `fetch` (una sola llamada
        concurrente por clave).
        """
        token = self.get(key)
        if token is not None:
            return token
        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            token = self.get(key)
            if token is not None:
                return token
            value, expires_in = await fetch()
            self.set(key, value, expires_in)
            logger.debug("Token renovado para %s (expires_in=%ss)", key, expires_in)
            return value


__all__ = ["TokenCache", "MIN_REFRESH_MARGIN"]

# Fin del archivo backend/app/modules/subscriptions/providers/token_cache.py
