# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/providers/base.py

Contrato común de las pasarelas y cliente HTTP base.

Contrato (uniforme para WebPay, PayPal y Mercado Pago):
    create_intent(...) -> ProviderIntent{intent_id, redirect_url}
    confirm(intent_id) -> ProviderConfirmation

El cliente base traduce errores de httpx a la taxonomía de dominio:
- httpx.TimeoutException   -> ProviderTimeoutError (reintentable)
- httpx.TransportError     -> ProviderRequestError (sin status)
- respuesta no 2xx         -> ProviderRequestError (status + cuerpo remoto)

Solo los GET se reintentan con backoff (retry_with_backoff). Commit y
capture nunca se reintentan a ciegas.

Autor: ClubFit
Fecha: 2026-02-12
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, AsyncIterator, Dict, Optional, Protocol, runtime_checkable

import httpx

from app.modules.subscriptions.errors import ProviderRequestError, ProviderTimeoutError
from app.modules.subscriptions.metrics.prometheus_exporter import observe_provider_request
from app.shared.core.http_retry_utils import retry_with_backoff

logger = logging.getLogger(__name__)


# ============================================================================
# DTOs
# ============================================================================

@dataclass(frozen=True)
class PayerInfo:
    """Datos del pagador que algunas pasarelas aceptan (email, nombre)."""

    email: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class ProviderIntent:
    """Intento de pago creado en la pasarela."""

    intent_id: str
    redirect_url: str
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProviderConfirmation:
    """
    Resultado autoritativo del proveedor tras commit/capture/consulta.

    provider_transaction_id es la clave de idempotencia del pago local.
    extra lleva datos específicos (capture_status, preapproval_id, ...).
    """

    provider_transaction_id: str
    status: str
    approved: bool
    amount: Optional[Decimal]
    currency: Optional[str]
    external_reference: Optional[str] = None
    raw_payload: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class PaymentProviderAdapter(Protocol):
    """Forma uniforme que implementa cada pasarela."""

    name: str

    async def create_intent(
        self,
        *,
        amount: Decimal,
        currency: str,
        external_reference: str,
        return_url: str,
        cancel_url: Optional[str] = None,
        payer: Optional[PayerInfo] = None,
        description: Optional[str] = None,
    ) -> ProviderIntent:
        ...

    async def confirm(self, intent_id: str) -> ProviderConfirmation:
        ...


# ============================================================================
# CLIENTE HTTP BASE
# ============================================================================

def build_timeout(total: float = 30.0, connect: float = 5.0) -> httpx.Timeout:
    return httpx.Timeout(total, connect=connect)


class ProviderHttpClient:
    """
    Cliente HTTP compartido por los adaptadores.

    Acepta un httpx.AsyncClient ya construido (compartido por la app) o un
    transport (httpx.MockTransport en tests). Sin ninguno, abre un cliente
    por llamada.
    """

    name: str = "provider"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: Optional[httpx.Timeout] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        get_retries: int = 2,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or build_timeout()
        self._transport = transport
        self._http_client = http_client
        self.get_retries = get_retries

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            yield client

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """
        Ejecuta la llamada y devuelve el JSON de respuesta.

        Raises:
            ProviderTimeoutError, ProviderRequestError
        """
        merged = await self._headers()
        if headers:
            merged.update(headers)

        started = time.perf_counter()
        try:
            async with self._client() as client:
                if method.upper() == "GET":
                    response = await retry_with_backoff(
                        client.request,
                        method,
                        self._url(path),
                        max_retries=self.get_retries,
                        headers=merged,
                        timeout=self.timeout,
                        **kwargs,
                    )
                else:
                    response = await client.request(
                        method,
                        self._url(path),
                        headers=merged,
                        timeout=self.timeout,
                        **kwargs,
                    )
        except httpx.TimeoutException as e:
            logger.warning("[%s] timeout en %s %s: %s", self.name, method, path, e)
            raise ProviderTimeoutError(self.name, operation) from e
        except httpx.TransportError as e:
            logger.error("[%s] error de transporte en %s %s: %s", self.name, method, path, e)
            raise ProviderRequestError(self.name, f"{operation}: {e}") from e
        finally:
            observe_provider_request(self.name, operation, time.perf_counter() - started)

        return self._parse(response, operation)

    def _parse(self, response: httpx.Response, operation: str) -> Dict[str, Any]:
        try:
            body: Any = response.json() if response.content else {}
        except ValueError:
            body = {"raw": response.text}

        if response.status_code >= 400:
            logger.error(
                "[%s] %s rechazado status=%s body=%s",
                self.name,
                operation,
                response.status_code,
                body,
            )
            raise ProviderRequestError(
                self.name,
                f"{operation} rechazado",
                status_code=response.status_code,
                body=body,
            )
        return body if isinstance(body, dict) else {"data": body}


def decimal_or_none(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return Decimal(str(value))


__all__ = [
    "PayerInfo",
    "ProviderIntent",
    "ProviderConfirmation",
    "PaymentProviderAdapter",
    "ProviderHttpClient",
    "build_timeout",
    "decimal_or_none",
]

# Fin del archivo backend/app/modules/subscriptions/providers/base.py
