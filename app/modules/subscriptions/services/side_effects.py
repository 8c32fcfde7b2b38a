# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/services/side_effects.py

Efectos secundarios de una activación: recibo PDF + correo de bienvenida.

Son best-effort: cualquier fallo se registra (log + métrica) y se descarta.
El pago ya fue confirmado y persistido; notificar nunca lo revierte.

Con `background` (BackgroundTasks de FastAPI) el envío del correo se difiere
hasta después de responder; sin él se envía en línea.

Autor: ClubFit
Fecha: 2026-02-13
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from fastapi import BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.auth.models import AppUser
from app.modules.subscriptions.metrics.prometheus_exporter import observe_side_effect_failure
from app.modules.subscriptions.models import (
    SubscriptionPayment,
    SubscriptionPlan,
    UserSubscription,
)
from app.modules.subscriptions.utils.pdf_receipt_generator import (
    ReceiptData,
    generate_subscription_receipt_pdf,
)
from app.shared.integrations.email_sender import EmailAttachment, IEmailSender
from app.shared.utils.datetime_helpers import utcnow

logger = logging.getLogger(__name__)


class ActivationSideEffects:
    """Envía el correo de bienvenida con el recibo adjunto."""

    def __init__(
        self,
        email_sender: IEmailSender,
        receipt_generator: Callable[[ReceiptData], bytes] = generate_subscription_receipt_pdf,
        background: Optional[BackgroundTasks] = None,
    ):
        self.email_sender = email_sender
        self.receipt_generator = receipt_generator
        self.background = background

    async def on_activated(
        self,
        session: AsyncSession,
        subscription: UserSubscription,
        payment: SubscriptionPayment,
    ) -> None:
        try:
            user = await session.get(AppUser, subscription.user_id)
            plan = await session.get(SubscriptionPlan, subscription.plan_id)
        except Exception:
            logger.exception("No se pudo cargar usuario/plan para notificar suscripción %s", subscription.id)
            observe_side_effect_failure("load")
            return

        if user is None:
            logger.warning("Usuario %s no encontrado; se omite bienvenida", subscription.user_id)
            return

        plan_name = plan.name if plan else "ClubFit"
        attachments: List[EmailAttachment] = []
        receipt = self._build_receipt(subscription, payment, user, plan_name)
        if receipt is not None:
            attachments.append(receipt)

        args = (user.user_email, user.user_full_name, plan_name, attachments or None, subscription.id)
        if self.background is not None:
            self.background.add_task(self._send_welcome, *args)
            return
        await self._send_welcome(*args)

    async def _send_welcome(
        self,
        email: str,
        name: str,
        plan_name: str,
        attachments: Optional[List[EmailAttachment]],
        subscription_id,
    ) -> None:
        try:
            await self.email_sender.send_welcome_email(email, name, plan_name, attachments=attachments)
        except Exception:
            logger.exception("Fallo enviando bienvenida a %s (suscripción %s)", email, subscription_id)
            observe_side_effect_failure("welcome_email")

    def _build_receipt(
        self,
        subscription: UserSubscription,
        payment: SubscriptionPayment,
        user: AppUser,
        plan_name: str,
    ) -> Optional[EmailAttachment]:
        try:
            pdf = self.receipt_generator(
                ReceiptData(
                    payment_id=str(payment.id),
                    subscription_id=str(subscription.id),
                    customer_name=user.user_full_name,
                    customer_email=user.user_email,
                    plan_name=plan_name,
                    amount=payment.amount,
                    currency=payment.currency,
                    provider=str(payment.payment_provider),
                    transaction_id=payment.transaction_id,
                    paid_at=payment.paid_at or utcnow(),
                    period_start=payment.period_start,
                    period_end=payment.period_end,
                )
            )
        except Exception:
            logger.exception("Fallo generando recibo del pago %s", payment.id)
            observe_side_effect_failure("receipt")
            return None
        return EmailAttachment(filename=f"recibo-{str(payment.id)[:8]}.pdf", content=pdf)


__all__ = ["ActivationSideEffects"]

# Fin del archivo backend/app/modules/subscriptions/services/side_effects.py
