# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/services/subscription_service.py

Consultas y acciones del usuario sobre su suscripción:
- catálogo de planes
- suscripción actual y pagos
- cancelación (con cancelación remota best-effort de la preapproval)
- listado de miembros (admin)

Autor: ClubFit
Fecha: 2026-02-13
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.subscriptions.enums import SubscriptionStatus
from app.modules.subscriptions.errors import NotFoundError, PaymentError
from app.modules.subscriptions.models import (
    SubscriptionPayment,
    SubscriptionPlan,
    UserSubscription,
)
from app.modules.subscriptions.providers.factory import ProviderFactory
from app.modules.subscriptions.repositories import (
    PlanRepository,
    SubscriptionPaymentRepository,
    SubscriptionRepository,
)
from app.modules.subscriptions.services import state_machine

logger = logging.getLogger(__name__)


class SubscriptionService:
    def __init__(self, session: AsyncSession, *, providers: Optional[ProviderFactory] = None):
        self.session = session
        self.providers = providers
        self.plans = PlanRepository()
        self.subscriptions = SubscriptionRepository()
        self.payments = SubscriptionPaymentRepository()

    async def list_available_plans(self) -> Sequence[SubscriptionPlan]:
        return await self.plans.list_active(self.session)

    async def get_current_subscription(self, user_id: uuid.UUID) -> Optional[UserSubscription]:
        return await self.subscriptions.get_latest_for_user(self.session, user_id)

    async def list_user_payments(self, user_id: uuid.UUID) -> Sequence[SubscriptionPayment]:
        return await self.payments.list_by_user(self.session, user_id)

    async def list_members(
        self,
        *,
        search: Optional[str] = None,
        status: Optional[SubscriptionStatus] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Sequence[UserSubscription]:
        return await self.subscriptions.list_members(
            self.session, search=search, status=status, limit=limit, offset=offset
        )

    async def cancel_subscription(self, user_id: uuid.UUID, reason: Optional[str] = None) -> UserSubscription:
        """
        Cancela la suscripción vigente del usuario (activa, pausada o con pago
        fallido). La cancelación local no depende de la remota.

        Raises:
            NotFoundError: el usuario no tiene suscripción cancelable
        """
        subscription = await self.subscriptions.get_latest_for_user(self.session, user_id)
        if subscription is None or SubscriptionStatus(subscription.status).is_terminal:
            raise NotFoundError("UserSubscription", user_id)

        if subscription.external_subscription_id and self.providers is not None:
            try:
                await self.providers.mercadopago().cancel_preapproval(subscription.external_subscription_id)
                logger.info("Preapproval %s cancelada en Mercado Pago", subscription.external_subscription_id)
            except PaymentError as e:
                logger.warning(
                    "No se pudo cancelar la preapproval %s en Mercado Pago: %s",
                    subscription.external_subscription_id,
                    e,
                )

        state_machine.cancel(subscription, reason=reason or "Cancelada por el usuario")
        await self.session.commit()
        logger.info("Suscripción %s cancelada por el usuario %s", subscription.id, user_id)
        return subscription


__all__ = ["SubscriptionService"]

# Fin del archivo backend/app/modules/subscriptions/services/subscription_service.py
