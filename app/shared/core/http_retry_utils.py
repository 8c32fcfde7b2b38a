# -*- coding: utf-8 -*-
"""
backend/app/shared/core/http_retry_utils.py

Reintentos con backoff exponencial para llamadas HTTP IDEMPOTENTES.

Regla de uso en pagos:
- Solo para lecturas (GET de estado de transacción, orden, preapproval, pago).
- NUNCA para commit/capture: una captura que expira localmente pudo
  haberse aplicado en el proveedor; ahí se consulta estado, no se reintenta.

Uso:
    response = await retry_with_backoff(client.get, url, headers=headers)

Autor: ClubFit
Fecha: 2026-02-10
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Optional

import httpx

logger = logging.getLogger(__name__)

# Códigos que se consideran transitorios por defecto
TRANSIENT_HTTP_STATUS = frozenset({429, 500, 502, 503, 504})


async def retry_with_backoff(
    func: Callable[..., Awaitable[httpx.Response]],
    *args,
    max_retries: int = 2,
    base_delay: float = 0.5,
    max_delay: float = 8.0,
    backoff_factor: float = 2.0,
    retry_on_status: Optional[frozenset[int]] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    **kwargs,
) -> httpx.Response:
    """
    Ejecuta una función HTTP con reintentos y backoff exponencial.

    Args:
        func: Función async a ejecutar (ej: client.get)
        max_retries: Número máximo de reintentos
        base_delay: Delay inicial en segundos
        max_delay: Delay máximo en segundos
        backoff_factor: Factor de multiplicación del delay
        retry_on_status: Códigos HTTP que deben reintentarse
        sleep: Función de espera (inyectable en tests)

    Returns:
        La última respuesta obtenida (puede ser un error no transitorio;
        el llamador decide cómo interpretarla)

    Raises:
        httpx.TransportError / httpx.TimeoutException si se agotan los reintentos
    """
    if max_retries < 0:
        raise ValueError(f"max_retries debe ser >= 0, recibido: {max_retries}")
    if base_delay <= 0:
        raise ValueError(f"base_delay debe ser > 0, recibido: {base_delay}")

    statuses = retry_on_status if retry_on_status is not None else TRANSIENT_HTTP_STATUS
    delay = base_delay

    for attempt in range(max_retries + 1):
        try:
            response = await func(*args, **kwargs)
        except (httpx.TransportError, httpx.TimeoutException) as e:
            if attempt >= max_retries:
                logger.error(
                    "Error de transporte tras %s intentos: %s", max_retries + 1, e
                )
                raise
            logger.warning(
                "Error de transporte (%s) en intento %s/%s, reintentando en %.1fs",
                type(e).__name__, attempt + 1, max_retries + 1, delay,
            )
        else:
            if response.status_code not in statuses or attempt >= max_retries:
                if attempt > 0:
                    logger.info("Respuesta HTTP %s tras %s intentos", response.status_code, attempt + 1)
                return response
            logger.warning(
                "HTTP %s en intento %s/%s, reintentando en %.1fs",
                response.status_code, attempt + 1, max_retries + 1, delay,
            )

        # jitter para evitar thundering herd
        await sleep(delay + random.uniform(0, 0.2 * delay))
        delay = min(delay * backoff_factor, max_delay)

    raise RuntimeError("Reintentos agotados sin respuesta")  # pragma: no cover


__all__ = ["TRANSIENT_HTTP_STATUS", "retry_with_backoff"]

# Fin del archivo backend/app/shared/core/http_retry_utils.py
