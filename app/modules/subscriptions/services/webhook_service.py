# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/services/webhook_service.py

Despachador de webhooks de Mercado Pago.

Eventos:
    subscription_preapproval         data.id = preapproval -> remapeo de estado
    subscription_authorized_payment  data.id = cobro autorizado -> su preapproval -> remapeo
    payment / subscription_payment   data.id = pago -> registro idempotente (+ renovación; rechazo degrada ACTIVE)
    otros                            data.id tratado como preapproval -> remapeo

El endpoint siempre responde 200: handle() nunca propaga excepciones y
devuelve {"status": "ok" | "ignored" | "duplicate" | "error", ...}.
Mercado Pago reintenta entregas; eventos sin suscripción asociada se
ignoran sin error.

Autor: ClubFit
Fecha: 2026-02-13
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.subscriptions.enums import PaymentProvider, PaymentStatus, SubscriptionStatus
from app.modules.subscriptions.errors import PaymentError
from app.modules.subscriptions.metrics.prometheus_exporter import (
    observe_webhook_outcome,
    observe_webhook_received,
)
from app.modules.subscriptions.models import UserSubscription
from app.modules.subscriptions.providers.factory import ProviderFactory
from app.modules.subscriptions.providers.mercadopago_provider import MercadoPagoProvider
from app.modules.subscriptions.repositories import PlanRepository, SubscriptionRepository
from app.modules.subscriptions.services import state_machine
from app.modules.subscriptions.services.reconciliation_service import (
    ReconciliationService,
    map_mercadopago_payment_status,
)

logger = logging.getLogger(__name__)

PROVIDER = PaymentProvider.MERCADOPAGO.value

PREAPPROVAL_EVENTS = {"subscription_preapproval", "preapproval"}
AUTHORIZED_PAYMENT_EVENTS = {"subscription_authorized_payment", "authorized_payment"}
PAYMENT_EVENTS = {"payment", "subscription_payment"}


def normalize_event_type(raw: Optional[str]) -> str:
    """'payment.created' -> 'payment'; vacío -> 'unknown'."""
    value = (raw or "").strip().lower()
    if not value:
        return "unknown"
    return value.split(".", 1)[0]


class MercadoPagoWebhookService:
    def __init__(
        self,
        session: AsyncSession,
        *,
        providers: ProviderFactory,
        reconciliation: ReconciliationService,
    ):
        self.session = session
        self.providers = providers
        self.reconciliation = reconciliation
        self.subscriptions = SubscriptionRepository()
        self.plans = PlanRepository()

    async def handle(self, event_type: Optional[str], data_id: Optional[str]) -> Dict[str, Any]:
        kind = normalize_event_type(event_type)
        observe_webhook_received(PROVIDER, kind)

        if not data_id:
            logger.info("[mercadopago] webhook %s sin data.id; ignorado", kind)
            return self._outcome({"status": "ignored", "reason": "missing_id"})

        try:
            mp = self.providers.mercadopago()
            if kind in PREAPPROVAL_EVENTS:
                result = await self._handle_preapproval(mp, str(data_id))
            elif kind in AUTHORIZED_PAYMENT_EVENTS:
                result = await self._handle_authorized_payment(mp, str(data_id))
            elif kind in PAYMENT_EVENTS:
                result = await self._handle_payment(mp, str(data_id))
            else:
                result = await self._handle_preapproval(mp, str(data_id))
        except PaymentError as e:
            await self.session.rollback()
            logger.error("[mercadopago] webhook %s id=%s falló: %s", kind, data_id, e)
            result = {"status": "error", "error": e.code, "message": str(e)}
        except Exception as e:
            await self.session.rollback()
            logger.exception("[mercadopago] webhook %s id=%s error inesperado", kind, data_id)
            result = {"status": "error", "error": "internal_error", "message": str(e)}

        result.setdefault("event_type", kind)
        return self._outcome(result)

    def _outcome(self, result: Dict[str, Any]) -> Dict[str, Any]:
        observe_webhook_outcome(PROVIDER, result.get("status", "error"))
        return result

    # ------------------------------------------------------------------
    # Preapproval
    # ------------------------------------------------------------------

    async def _remap(self, subscription: UserSubscription, remote_status: Optional[str]) -> Dict[str, Any]:
        previous = subscription.status
        cycle = await self.plans.get_billing_cycle(self.session, subscription.billing_cycle_id)
        changed = state_machine.apply_remote_status(subscription, remote_status, cycle=cycle)
        if changed:
            await self.session.commit()
        logger.info(
            "[mercadopago] suscripción %s remoto=%s %s -> %s",
            subscription.id,
            remote_status,
            previous,
            subscription.status,
        )
        return {
            "status": "ok",
            "subscription_id": str(subscription.id),
            "remote_status": remote_status,
            "changed": changed,
        }

    async def _handle_preapproval(self, mp: MercadoPagoProvider, preapproval_id: str) -> Dict[str, Any]:
        subscription = await self.subscriptions.get_by_external_subscription_id(self.session, preapproval_id)
        if subscription is None:
            logger.info("[mercadopago] preapproval %s sin suscripción local; ignorado", preapproval_id)
            return {"status": "ignored", "reason": "unlinked"}

        preapproval = await mp.get_preapproval(preapproval_id)
        return await self._remap(subscription, preapproval.get("status"))

    async def _handle_authorized_payment(self, mp: MercadoPagoProvider, authorized_id: str) -> Dict[str, Any]:
        authorized = await mp.get_authorized_payment(authorized_id)
        preapproval_id = authorized.get("preapproval_id")
        if not preapproval_id:
            logger.info("[mercadopago] cobro autorizado %s sin preapproval_id; ignorado", authorized_id)
            return {"status": "ignored", "reason": "unlinked"}
        return await self._handle_preapproval(mp, str(preapproval_id))

    # ------------------------------------------------------------------
    # Pagos
    # ------------------------------------------------------------------

    async def _link_payment(self, confirmation) -> Optional[UserSubscription]:
        preapproval_id = confirmation.extra.get("preapproval_id")
        if preapproval_id:
            subscription = await self.subscriptions.get_by_external_subscription_id(self.session, preapproval_id)
            if subscription is not None:
                return subscription

        subscription = await self.subscriptions.get_by_reference_string(
            self.session, confirmation.external_reference
        )
        if subscription is not None:
            return subscription

        metadata = confirmation.raw_payload.get("metadata") or {}
        return await self.subscriptions.get_by_reference_string(self.session, metadata.get("subscription_id"))

    async def _handle_payment(self, mp: MercadoPagoProvider, payment_id: str) -> Dict[str, Any]:
        payment = await mp.get_payment(payment_id)
        confirmation = mp.payment_to_confirmation(payment)

        subscription = await self._link_payment(confirmation)
        if subscription is None:
            logger.info(
                "[mercadopago] pago %s (external_reference=%s) sin suscripción asociada; ignorado",
                payment_id,
                confirmation.external_reference,
            )
            return {"status": "ignored", "reason": "unlinked"}

        result = await self.reconciliation.record_confirmation(
            subscription,
            PaymentProvider.MERCADOPAGO,
            confirmation,
            payment_method=str(confirmation.extra.get("payment_method_id") or "mercadopago"),
            payment_status=map_mercadopago_payment_status(confirmation.status),
        )
        return {
            "status": "duplicate" if result.duplicate else "ok",
            "subscription_id": str(subscription.id),
            "payment_status": PaymentStatus(result.payment.status).value if result.payment else None,
            "activated": result.success and not result.duplicate,
            "subscription_status": SubscriptionStatus(subscription.status).value,
            "requires_review": result.requires_review,
        }


__all__ = ["MercadoPagoWebhookService", "normalize_event_type"]

# Fin del archivo backend/app/modules/subscriptions/services/webhook_service.py
