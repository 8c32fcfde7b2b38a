# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/providers/webpay_provider.py

Adaptador WebPay Plus (Transbank, REST v1.2).

    create  POST /rswebpaytransaction/api/webpay/v1.2/transactions
    commit  PUT  .../transactions/{token}
    status  GET  .../transactions/{token}

Notas:
- Solo CLP; el monto viaja como entero.
- buy_order admite hasta 26 caracteres; session_id hasta 61.
- Commit es la captura. Si expira localmente o Transbank responde 422
  (token ya confirmado), se consulta el estado en lugar de repetir el commit.

Autor: ClubFit
Fecha: 2026-02-12
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx

from app.modules.subscriptions.enums import PaymentProvider
from app.modules.subscriptions.errors import ProviderRequestError, ProviderTimeoutError
from app.modules.subscriptions.utils.amounts import quantize_for_currency
from .base import (
    PayerInfo,
    ProviderConfirmation,
    ProviderHttpClient,
    ProviderIntent,
    decimal_or_none,
)
from .credentials import WebpayCredentials

logger = logging.getLogger(__name__)

TRANSACTIONS_PATH = "/rswebpaytransaction/api/webpay/v1.2/transactions"
BUY_ORDER_MAX_LENGTH = 26
SESSION_ID_MAX_LENGTH = 61


class WebpayProvider(ProviderHttpClient):
    """WebPay Plus parametrizado por credenciales (global o por creador)."""

    name = PaymentProvider.WEBPAY.value

    def __init__(
        self,
        credentials: WebpayCredentials,
        *,
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

    async def _headers(self) -> Dict[str, str]:
        return {
            "Tbk-Api-Key-Id": self.credentials.commerce_code,
            "Tbk-Api-Key-Secret": self.credentials.api_key,
            "Content-Type": "application/json",
        }

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
        session_id: Optional[str] = None,
    ) -> ProviderIntent:
        """
        Crea la transacción. external_reference es el buy_order.

        Returns:
            ProviderIntent con intent_id = token y redirect_url = url del formulario
        """
        if currency.upper() != "CLP":
            raise ProviderRequestError(self.name, f"WebPay solo acepta CLP, recibido {currency}")
        if len(external_reference) > BUY_ORDER_MAX_LENGTH:
            raise ProviderRequestError(
                self.name, f"buy_order excede {BUY_ORDER_MAX_LENGTH} caracteres: {external_reference}"
            )

        payload = {
            "buy_order": external_reference,
            "session_id": (session_id or external_reference)[:SESSION_ID_MAX_LENGTH],
            "amount": int(quantize_for_currency(amount, "CLP")),
            "return_url": return_url,
        }
        data = await self._request("POST", TRANSACTIONS_PATH, operation="create", json=payload)

        token = data.get("token")
        url = data.get("url")
        if not token or not url:
            raise ProviderRequestError(self.name, "respuesta sin token/url", body=data)

        logger.info("[webpay] transacción creada buy_order=%s", external_reference)
        return ProviderIntent(intent_id=token, redirect_url=url, raw=data)

    async def confirm(self, intent_id: str) -> ProviderConfirmation:
        """Commit del token; ante timeout o 422 consulta el estado."""
        try:
            data = await self._request("PUT", f"{TRANSACTIONS_PATH}/{intent_id}", operation="commit")
        except ProviderTimeoutError:
            logger.warning("[webpay] commit expiró para token=%s; consultando estado", intent_id)
            return await self._status_after_commit_failure(intent_id)
        except ProviderRequestError as e:
            if e.status_code != 422:
                raise
            logger.info("[webpay] commit 422 para token=%s; consultando estado", intent_id)
            return await self._status_after_commit_failure(intent_id)
        return self._to_confirmation(intent_id, data)

    async def get_status(self, token: str) -> Dict[str, Any]:
        return await self._request("GET", f"{TRANSACTIONS_PATH}/{token}", operation="status")

    async def _status_after_commit_failure(self, token: str) -> ProviderConfirmation:
        try:
            data = await self.get_status(token)
        except ProviderTimeoutError as e:
            raise ProviderTimeoutError(self.name, "commit") from e
        if not data.get("status"):
            raise ProviderTimeoutError(self.name, "commit")
        return self._to_confirmation(token, data)

    def _to_confirmation(self, token: str, data: Dict[str, Any]) -> ProviderConfirmation:
        status = str(data.get("status") or "")
        response_code = data.get("response_code")
        approved = status == "AUTHORIZED" and response_code == 0
        return ProviderConfirmation(
            provider_transaction_id=token,
            status=status,
            approved=approved,
            amount=decimal_or_none(data.get("amount")),
            currency="CLP",
            external_reference=data.get("buy_order"),
            raw_payload=data,
            extra={
                "response_code": response_code,
                "authorization_code": data.get("authorization_code"),
                "session_id": data.get("session_id"),
                "payment_type_code": data.get("payment_type_code"),
                "card_last_digits": (data.get("card_detail") or {}).get("card_number"),
            },
        )


__all__ = ["WebpayProvider", "TRANSACTIONS_PATH", "BUY_ORDER_MAX_LENGTH"]

# Fin del archivo backend/app/modules/subscriptions/providers/webpay_provider.py
