# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/providers/paypal_provider.py

Adaptador PayPal Orders v2.

    token    POST /v1/oauth2/token (client credentials, cacheado)
    order    POST /v2/checkout/orders, GET /v2/checkout/orders/{id}
    capture  POST /v2/checkout/orders/{id}/capture
    captura  GET  /v2/payments/captures/{id}

Semántica de confirmación:
- approved = estado de la ORDEN == COMPLETED.
- Una captura PENDING (p.ej. PENDING_REVIEW) con orden COMPLETED se aprueba
  igual, pero extra["needs_capture_verification"] = True.
- La captura lleva PayPal-Request-Id = capture-<order_id>; ante timeout o
  422 (ORDER_ALREADY_CAPTURED) se consulta la orden en vez de recapturar.

Autor: ClubFit
Fecha: 2026-02-12
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

import httpx

from app.modules.subscriptions.enums import PaymentProvider
from app.modules.subscriptions.errors import ProviderRequestError, ProviderTimeoutError
from app.modules.subscriptions.utils.amounts import format_provider_amount
from .base import (
    PayerInfo,
    ProviderConfirmation,
    ProviderHttpClient,
    ProviderIntent,
    decimal_or_none,
)
from .credentials import PayPalCredentials
from .token_cache import TokenCache

logger = logging.getLogger(__name__)

TOKEN_PATH = "/v1/oauth2/token"
ORDERS_PATH = "/v2/checkout/orders"
CAPTURES_PATH = "/v2/payments/captures"

# Caché compartida por proceso (clave = client_id)
_default_token_cache = TokenCache()


class PayPalProvider(ProviderHttpClient):
    """PayPal parametrizado por credenciales (global o por creador)."""

    name = PaymentProvider.PAYPAL.value

    def __init__(
        self,
        credentials: PayPalCredentials,
        *,
        brand_name: str = "ClubFit",
        token_cache: Optional[TokenCache] = None,
        timeout: Optional[httpx.Timeout] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(
            credentials.base_url,
            timeout=timeout,
            transport=transport,
            http_client=http_client,
        )
        self.credentials = credentials
        self.brand_name = brand_name
        self.token_cache = token_cache or _default_token_cache

    # ------------------------------------------------------------------
    # OAuth
    # ------------------------------------------------------------------

    async def _fetch_token(self) -> Tuple[str, float]:
        form_headers = {"Content-Type": "application/x-www-form-urlencoded"}
        try:
            async with self._client() as client:
                response = await client.post(
                    self._url(TOKEN_PATH),
                    data={"grant_type": "client_credentials"},
                    auth=(self.credentials.client_id, self.credentials.client_secret),
                    headers=form_headers,
                    timeout=self.timeout,
                )
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(self.name, "oauth_token") from e
        except httpx.TransportError as e:
            raise ProviderRequestError(self.name, f"oauth_token: {e}") from e

        data = self._parse(response, "oauth_token")
        token = data.get("access_token")
        if not token:
            raise ProviderRequestError(self.name, "respuesta OAuth sin access_token", body=data)
        return token, float(data.get("expires_in") or 0)

    async def access_token(self) -> str:
        return await self.token_cache.get_or_fetch(self.credentials.client_id, self._fetch_token)

    async def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {await self.access_token()}",
            "Content-Type": "application/json",
        }

    # ------------------------------------------------------------------
    # Contrato
    # ------------------------------------------------------------------

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
        """Crea una orden CAPTURE. external_reference viaja como custom_id."""
        unit: Dict[str, Any] = {
            "reference_id": external_reference,
            "custom_id": external_reference,
            "amount": {
                "currency_code": currency.upper(),
                "value": format_provider_amount(amount, currency),
            },
        }
        if description:
            unit["description"] = description[:127]

        payload: Dict[str, Any] = {
            "intent": "CAPTURE",
            "purchase_units": [unit],
            "application_context": {
                "brand_name": self.brand_name,
                "return_url": return_url,
                "cancel_url": cancel_url or return_url,
                "user_action": "PAY_NOW",
                "shipping_preference": "NO_SHIPPING",
            },
        }
        if payer and payer.email:
            payload["payer"] = {"email_address": payer.email}

        data = await self._request("POST", ORDERS_PATH, operation="create_order", json=payload)

        order_id = data.get("id")
        approve_url = _find_link(data, "approve") or _find_link(data, "payer-action")
        if not order_id or not approve_url:
            raise ProviderRequestError(self.name, "orden sin id/approve link", body=data)

        logger.info("[paypal] orden creada order_id=%s custom_id=%s", order_id, external_reference)
        return ProviderIntent(intent_id=order_id, redirect_url=approve_url, raw=data)

    async def confirm(self, intent_id: str) -> ProviderConfirmation:
        """Captura la orden; ante timeout o 422 consulta la orden."""
        try:
            data = await self._request(
                "POST",
                f"{ORDERS_PATH}/{intent_id}/capture",
                operation="capture",
                headers={"PayPal-Request-Id": f"capture-{intent_id}"},
            )
        except ProviderTimeoutError:
            logger.warning("[paypal] capture expiró para order=%s; consultando orden", intent_id)
            return await self._order_after_capture_failure(intent_id)
        except ProviderRequestError as e:
            if e.status_code != 422:
                raise
            logger.info("[paypal] capture 422 para order=%s; consultando orden", intent_id)
            return await self._order_after_capture_failure(intent_id, rejected=True)
        return self.to_confirmation(intent_id, data)

    async def get_order(self, order_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"{ORDERS_PATH}/{order_id}", operation="get_order")

    async def get_capture(self, capture_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"{CAPTURES_PATH}/{capture_id}", operation="get_capture")

    async def _order_after_capture_failure(self, order_id: str, rejected: bool = False) -> ProviderConfirmation:
        try:
            data = await self.get_order(order_id)
        except ProviderTimeoutError as e:
            raise ProviderTimeoutError(self.name, "capture") from e
        if data.get("status") != "COMPLETED":
            if rejected:
                # 422 (p.ej. INSTRUMENT_DECLINED): rechazo definitivo, approved=False
                return self.to_confirmation(order_id, data)
            # Timeout sin captura confirmada: el llamador reintenta la validación
            raise ProviderTimeoutError(self.name, "capture")
        return self.to_confirmation(order_id, data)

    def to_confirmation(self, order_id: str, data: Dict[str, Any]) -> ProviderConfirmation:
        order_status = str(data.get("status") or "")
        unit = (data.get("purchase_units") or [{}])[0]
        captures = ((unit.get("payments") or {}).get("captures")) or []
        capture = captures[0] if captures else {}

        capture_status = capture.get("status")
        capture_reason = (capture.get("status_details") or {}).get("reason")
        amount_info = capture.get("amount") or unit.get("amount") or {}

        return ProviderConfirmation(
            provider_transaction_id=capture.get("id") or order_id,
            status=order_status,
            approved=order_status == "COMPLETED",
            amount=decimal_or_none(amount_info.get("value")),
            currency=amount_info.get("currency_code"),
            external_reference=capture.get("custom_id") or unit.get("custom_id"),
            raw_payload=data,
            extra={
                "order_id": order_id,
                "capture_id": capture.get("id"),
                "capture_status": capture_status,
                "capture_status_reason": capture_reason,
                "needs_capture_verification": capture_status == "PENDING",
            },
        )


def _find_link(data: Dict[str, Any], rel: str) -> Optional[str]:
    for link in data.get("links") or []:
        if link.get("rel") == rel:
            return link.get("href")
    return None


__all__ = ["PayPalProvider", "ORDERS_PATH", "CAPTURES_PATH", "TOKEN_PATH"]

# Fin del archivo backend/app/modules/subscriptions/providers/paypal_provider.py
