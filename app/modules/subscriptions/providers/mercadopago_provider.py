# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/providers/mercadopago_provider.py

Adaptador Mercado Pago (Checkout Pro + PreApproval).

    preference   POST /checkout/preferences             (pago único)
    preapproval  POST /preapproval                      (recurrente)
                 GET/PUT /preapproval/{id}
    pago         GET  /v1/payments/{id}
    cobro rec.   GET  /authorized_payments/{id}

Notas:
- Autenticación con access token estático (Bearer). Tokens "TEST-" son sandbox
  y usan sandbox_init_point.
- confirm(payment_id) no muta nada en el proveedor: consulta el pago.
- Las dos APIs tienen ciclos de vida distintos: la preapproval emite webhooks
  indefinidamente; la preference genera un único pago.

Autor: ClubFit
Fecha: 2026-02-12
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple, Union

import httpx

from app.modules.subscriptions.enums import IntervalType, PaymentProvider, is_zero_decimal
from app.modules.subscriptions.errors import ProviderRequestError
from app.modules.subscriptions.utils.amounts import quantize_for_currency
from app.shared.utils.datetime_helpers import to_iso8601
from .base import (
    PayerInfo,
    ProviderConfirmation,
    ProviderHttpClient,
    ProviderIntent,
    decimal_or_none,
)
from .credentials import MercadoPagoCredentials

logger = logging.getLogger(__name__)

PREFERENCES_PATH = "/checkout/preferences"
PREAPPROVAL_PATH = "/preapproval"
PAYMENTS_PATH = "/v1/payments"
AUTHORIZED_PAYMENTS_PATH = "/authorized_payments"


def to_mp_frequency(interval_type: Union[IntervalType, str], interval_count: int) -> Tuple[int, str]:
    """
    PreApproval solo conoce days/months:
        day -> n days, week -> 7n days, month -> n months, year -> 12n months
    """
    unit = IntervalType(interval_type)
    if unit is IntervalType.DAY:
        return interval_count, "days"
    if unit is IntervalType.WEEK:
        return 7 * interval_count, "days"
    if unit is IntervalType.MONTH:
        return interval_count, "months"
    return 12 * interval_count, "months"


def _json_amount(amount: Decimal, currency: str) -> Union[int, float]:
    value = quantize_for_currency(amount, currency)
    return int(value) if is_zero_decimal(currency) else float(value)


class MercadoPagoProvider(ProviderHttpClient):
    """Mercado Pago parametrizado por access token (global o por creador)."""

    name = PaymentProvider.MERCADOPAGO.value

    def __init__(
        self,
        credentials: MercadoPagoCredentials,
        *,
        notification_url: Optional[str] = None,
        statement_descriptor: Optional[str] = None,
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
        self.notification_url = notification_url
        self.statement_descriptor = statement_descriptor

    async def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.credentials.access_token}",
            "Content-Type": "application/json",
        }

    # ------------------------------------------------------------------
    # Checkout Pro (pago único)
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
        """Crea una preference. redirect_url es init_point (o sandbox_init_point)."""
        payload: Dict[str, Any] = {
            "items": [
                {
                    "title": description or "Suscripción",
                    "quantity": 1,
                    "unit_price": _json_amount(amount, currency),
                    "currency_id": currency.upper(),
                }
            ],
            "external_reference": external_reference,
            "back_urls": {
                "success": return_url,
                "failure": cancel_url or return_url,
                "pending": return_url,
            },
            "auto_return": "approved",
        }
        if self.notification_url:
            payload["notification_url"] = self.notification_url
        if self.statement_descriptor:
            payload["statement_descriptor"] = self.statement_descriptor
        if payer and payer.email:
            payload["payer"] = {"email": payer.email, "name": payer.name or ""}

        data = await self._request("POST", PREFERENCES_PATH, operation="create_preference", json=payload)

        preference_id = data.get("id")
        init_point = self._pick_init_point(data)
        if not preference_id or not init_point:
            raise ProviderRequestError(self.name, "preference sin id/init_point", body=data)

        logger.info("[mercadopago] preference creada id=%s ref=%s", preference_id, external_reference)
        return ProviderIntent(intent_id=str(preference_id), redirect_url=init_point, raw=data)

    async def confirm(self, intent_id: str) -> ProviderConfirmation:
        """Consulta el pago (intent_id = payment_id devuelto en el retorno)."""
        data = await self.get_payment(intent_id)
        return self.payment_to_confirmation(data)

    # ------------------------------------------------------------------
    # PreApproval (recurrente)
    # ------------------------------------------------------------------

    async def create_subscription_intent(
        self,
        *,
        amount: Decimal,
        currency: str,
        external_reference: str,
        back_url: str,
        payer_email: str,
        reason: str,
        interval_type: Union[IntervalType, str],
        interval_count: int,
        card_token_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
    ) -> ProviderIntent:
        """
        Crea una preapproval. Sin card_token_id queda "pending" y el usuario
        la autoriza en init_point; con card_token_id nace "authorized".
        """
        frequency, frequency_type = to_mp_frequency(interval_type, interval_count)
        auto_recurring: Dict[str, Any] = {
            "frequency": frequency,
            "frequency_type": frequency_type,
            "transaction_amount": _json_amount(amount, currency),
            "currency_id": currency.upper(),
        }
        if start_date is not None:
            auto_recurring["start_date"] = to_iso8601(start_date)

        payload: Dict[str, Any] = {
            "reason": reason,
            "external_reference": external_reference,
            "payer_email": payer_email,
            "auto_recurring": auto_recurring,
            "back_url": back_url,
            "status": "authorized" if card_token_id else "pending",
        }
        if card_token_id:
            payload["card_token_id"] = card_token_id
        if self.notification_url:
            payload["notification_url"] = self.notification_url

        data = await self._request(
            "POST",
            PREAPPROVAL_PATH,
            operation="create_preapproval",
            json=payload,
            headers={"X-Idempotency-Key": external_reference},
        )

        preapproval_id = data.get("id")
        init_point = self._pick_init_point(data) or back_url
        if not preapproval_id:
            raise ProviderRequestError(self.name, "preapproval sin id", body=data)

        logger.info(
            "[mercadopago] preapproval creada id=%s ref=%s status=%s",
            preapproval_id,
            external_reference,
            data.get("status"),
        )
        return ProviderIntent(intent_id=str(preapproval_id), redirect_url=init_point, raw=data)

    async def get_preapproval(self, preapproval_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"{PREAPPROVAL_PATH}/{preapproval_id}", operation="get_preapproval")

    async def cancel_preapproval(self, preapproval_id: str) -> Dict[str, Any]:
        return await self._request(
            "PUT",
            f"{PREAPPROVAL_PATH}/{preapproval_id}",
            operation="cancel_preapproval",
            json={"status": "cancelled"},
        )

    # ------------------------------------------------------------------
    # Pagos
    # ------------------------------------------------------------------

    async def get_payment(self, payment_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"{PAYMENTS_PATH}/{payment_id}", operation="get_payment")

    async def get_authorized_payment(self, authorized_payment_id: str) -> Dict[str, Any]:
        return await self._request(
            "GET",
            f"{AUTHORIZED_PAYMENTS_PATH}/{authorized_payment_id}",
            operation="get_authorized_payment",
        )

    def payment_to_confirmation(self, data: Dict[str, Any]) -> ProviderConfirmation:
        status = str(data.get("status") or "")
        return ProviderConfirmation(
            provider_transaction_id=str(data.get("id")),
            status=status,
            approved=status == "approved",
            amount=decimal_or_none(data.get("transaction_amount")),
            currency=data.get("currency_id"),
            external_reference=data.get("external_reference"),
            raw_payload=data,
            extra={
                "status_detail": data.get("status_detail"),
                "preapproval_id": extract_preapproval_id(data),
                "payment_method_id": data.get("payment_method_id"),
            },
        )

    def _pick_init_point(self, data: Dict[str, Any]) -> Optional[str]:
        if self.credentials.sandbox and data.get("sandbox_init_point"):
            return data["sandbox_init_point"]
        return data.get("init_point")


def extract_preapproval_id(payment: Dict[str, Any]) -> Optional[str]:
    """Id de preapproval embebido en un pago recurrente (varía según el flujo)."""
    if payment.get("preapproval_id"):
        return str(payment["preapproval_id"])
    metadata = payment.get("metadata") or {}
    if metadata.get("preapproval_id"):
        return str(metadata["preapproval_id"])
    poi = (payment.get("point_of_interaction") or {}).get("transaction_data") or {}
    if poi.get("subscription_id"):
        return str(poi["subscription_id"])
    return None


__all__ = [
    "MercadoPagoProvider",
    "to_mp_frequency",
    "extract_preapproval_id",
    "PREFERENCES_PATH",
    "PREAPPROVAL_PATH",
    "PAYMENTS_PATH",
    "AUTHORIZED_PAYMENTS_PATH",
]

# Fin del archivo backend/app/modules/subscriptions/providers/mercadopago_provider.py
