# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/services/checkout_service.py

Creación de checkouts de suscripción.

Pasos comunes:
    1. Moneda: la solicitada, o la preferida del usuario, o la default.
    2. Rechazar si el usuario ya tiene una suscripción ACTIVE (ConflictError).
    3. Resolver plan, ciclo y precio (NotFoundError) ANTES de llamar al proveedor.
    4. Crear la suscripción PENDING_PAYMENT con monto/moneda esperados.
    5. Crear el intento en la pasarela y guardar el vínculo tipado.

Si la pasarela falla se hace rollback: no quedan suscripciones pendientes
sin vínculo.

Correlación por proveedor:
    WebPay        buy_order = "SUB" + 23 hex del id (26 caracteres)
    PayPal        custom_id = id de la suscripción; vínculo = order_id
    Mercado Pago  external_reference = id; vínculo = preference_id / preapproval_id

Autor: ClubFit
Fecha: 2026-02-13
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.auth.models import AppUser
from app.modules.subscriptions.enums import PaymentProvider, SubscriptionStatus
from app.modules.subscriptions.errors import ConflictError, NotFoundError
from app.modules.subscriptions.links import (
    MercadoPagoLink,
    PayPalLink,
    ProviderLink,
    WebpayLink,
    with_link,
)
from app.modules.subscriptions.metrics.prometheus_exporter import increment_checkout
from app.modules.subscriptions.models import (
    BillingCycle,
    SubscriptionPlan,
    SubscriptionPrice,
    UserSubscription,
)
from app.modules.subscriptions.providers.base import PayerInfo, ProviderIntent
from app.modules.subscriptions.providers.factory import ProviderFactory
from app.modules.subscriptions.repositories import PlanRepository, SubscriptionRepository
from app.modules.subscriptions.services import state_machine

logger = logging.getLogger(__name__)


def webpay_buy_order(subscription_id: uuid.UUID) -> str:
    """buy_order de 26 caracteres derivado del id de la suscripción."""
    return f"SUB{subscription_id.hex[:23]}"


@dataclass
class CheckoutResult:
    subscription: UserSubscription
    intent: ProviderIntent
    provider: PaymentProvider


class CheckoutService:
    """Orquesta la creación de suscripciones pendientes y sus intentos de pago."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        providers: ProviderFactory,
        frontend_url: str,
        default_currency: str = "CLP",
    ):
        self.session = session
        self.providers = providers
        self.frontend_url = frontend_url.rstrip("/")
        self.default_currency = default_currency
        self.subscriptions = SubscriptionRepository()
        self.plans = PlanRepository()

    # ------------------------------------------------------------------
    # URLs de retorno
    # ------------------------------------------------------------------

    def return_url(self, provider: PaymentProvider, subscription_id: uuid.UUID) -> str:
        return f"{self.frontend_url}/subscription/validate/{provider.value}?subscriptionId={subscription_id}"

    def cancel_url(self, subscription_id: uuid.UUID) -> str:
        failure = self.providers.settings.subscription_failure_path
        return f"{self.frontend_url}{failure}?subscriptionId={subscription_id}"

    # ------------------------------------------------------------------
    # Preparación común
    # ------------------------------------------------------------------

    async def _prepare(
        self,
        user: AppUser,
        plan_id: uuid.UUID,
        billing_cycle_id: uuid.UUID,
        currency: Optional[str],
    ) -> Tuple[SubscriptionPlan, BillingCycle, SubscriptionPrice]:
        active = await self.subscriptions.get_active_for_user(self.session, user.user_id)
        if active is not None:
            raise ConflictError(f"El usuario ya tiene una suscripción activa ({active.id})")

        resolved_currency = (currency or user.preferred_currency or self.default_currency).upper()

        plan = await self.plans.get(self.session, plan_id)
        if plan is None or not plan.is_active:
            raise NotFoundError("SubscriptionPlan", plan_id)

        cycle = await self.plans.get_billing_cycle(self.session, billing_cycle_id)
        if cycle is None or not cycle.is_active:
            raise NotFoundError("BillingCycle", billing_cycle_id)

        price = await self.plans.get_price(self.session, plan.id, cycle.id, resolved_currency)
        if price is None:
            raise NotFoundError("SubscriptionPrice", f"{plan.slug}/{cycle.slug}/{resolved_currency}")

        return plan, cycle, price

    async def _create_pending(
        self,
        user: AppUser,
        plan: SubscriptionPlan,
        cycle: BillingCycle,
        price: SubscriptionPrice,
        provider: PaymentProvider,
    ) -> UserSubscription:
        subscription = UserSubscription(
            id=uuid.uuid4(),
            user_id=user.user_id,
            plan_id=plan.id,
            billing_cycle_id=cycle.id,
            plan=plan,
            billing_cycle=cycle,
            status=SubscriptionStatus.PENDING_PAYMENT,
            provider=provider,
            amount=price.amount,
            currency=price.currency.upper(),
            auto_renew=True,
            subscription_metadata={
                "amount": str(price.amount),
                "currency": price.currency.upper(),
                "plan_name": plan.name,
                "billing_cycle": cycle.slug,
            },
        )
        self.session.add(subscription)
        await self.session.flush()
        return subscription

    async def _attach_link(self, subscription: UserSubscription, link: ProviderLink, intent: ProviderIntent) -> None:
        subscription.provider_reference = link.reference
        subscription.subscription_metadata = {
            **with_link(subscription.subscription_metadata, link),
            "redirect_url": intent.redirect_url,
        }
        await self.session.commit()

    async def _run(
        self,
        provider: PaymentProvider,
        user: AppUser,
        plan_id: uuid.UUID,
        billing_cycle_id: uuid.UUID,
        currency: Optional[str],
        create,
        kind: str = "subscription",
    ) -> CheckoutResult:
        plan, cycle, price = await self._prepare(user, plan_id, billing_cycle_id, currency)
        subscription = await self._create_pending(user, plan, cycle, price, provider)
        try:
            intent, link = await create(subscription, plan, cycle)
        except Exception:
            await self.session.rollback()
            raise
        await self._attach_link(subscription, link, intent)

        increment_checkout(provider.value, subscription.currency, kind)
        logger.info(
            "[%s] checkout creado suscripción=%s usuario=%s monto=%s %s ref=%s",
            provider.value,
            subscription.id,
            user.user_id,
            subscription.amount,
            subscription.currency,
            link.reference,
        )
        return CheckoutResult(subscription=subscription, intent=intent, provider=provider)

    # ------------------------------------------------------------------
    # Checkouts de pago único por ciclo
    # ------------------------------------------------------------------

    async def create_webpay_checkout(
        self,
        user: AppUser,
        plan_id: uuid.UUID,
        billing_cycle_id: uuid.UUID,
        currency: Optional[str] = None,
    ) -> CheckoutResult:
        async def create(sub: UserSubscription, plan: SubscriptionPlan, cycle: BillingCycle):
            buy_order = webpay_buy_order(sub.id)
            intent = await self.providers.webpay().create_intent(
                amount=sub.amount,
                currency=sub.currency,
                external_reference=buy_order,
                return_url=self.return_url(PaymentProvider.WEBPAY, sub.id),
                session_id=str(user.user_id),
            )
            return intent, WebpayLink(buy_order)

        return await self._run(PaymentProvider.WEBPAY, user, plan_id, billing_cycle_id, currency, create)

    async def create_paypal_checkout(
        self,
        user: AppUser,
        plan_id: uuid.UUID,
        billing_cycle_id: uuid.UUID,
        currency: Optional[str] = None,
    ) -> CheckoutResult:
        async def create(sub: UserSubscription, plan: SubscriptionPlan, cycle: BillingCycle):
            intent = await self.providers.paypal().create_intent(
                amount=sub.amount,
                currency=sub.currency,
                external_reference=str(sub.id),
                return_url=self.return_url(PaymentProvider.PAYPAL, sub.id),
                cancel_url=self.cancel_url(sub.id),
                payer=PayerInfo(email=user.user_email, name=user.user_full_name),
                description=f"{plan.name} - {cycle.name}",
            )
            return intent, PayPalLink(intent.intent_id)

        return await self._run(PaymentProvider.PAYPAL, user, plan_id, billing_cycle_id, currency, create)

    async def create_mercadopago_checkout(
        self,
        user: AppUser,
        plan_id: uuid.UUID,
        billing_cycle_id: uuid.UUID,
        currency: Optional[str] = None,
    ) -> CheckoutResult:
        async def create(sub: UserSubscription, plan: SubscriptionPlan, cycle: BillingCycle):
            intent = await self.providers.mercadopago().create_intent(
                amount=sub.amount,
                currency=sub.currency,
                external_reference=str(sub.id),
                return_url=self.return_url(PaymentProvider.MERCADOPAGO, sub.id),
                cancel_url=self.cancel_url(sub.id),
                payer=PayerInfo(email=user.user_email, name=user.user_full_name),
                description=f"{plan.name} - {cycle.name}",
            )
            return intent, MercadoPagoLink(preference_id=intent.intent_id)

        return await self._run(PaymentProvider.MERCADOPAGO, user, plan_id, billing_cycle_id, currency, create)

    # ------------------------------------------------------------------
    # Suscripción recurrente (PreApproval)
    # ------------------------------------------------------------------

    async def create_recurring_subscription(
        self,
        user: AppUser,
        plan_id: uuid.UUID,
        billing_cycle_id: uuid.UUID,
        currency: Optional[str] = None,
        *,
        payer_email: Optional[str] = None,
        card_token_id: Optional[str] = None,
        back_url: Optional[str] = None,
        start_date: Optional[datetime] = None,
    ) -> CheckoutResult:
        """
        Crea una preapproval de Mercado Pago. Con card_token_id la preapproval
        nace autorizada y la suscripción se activa de inmediato; los cobros
        llegan luego por webhook.
        """
        provider = PaymentProvider.MERCADOPAGO
        remote_status: dict = {}

        async def create(sub: UserSubscription, plan: SubscriptionPlan, cycle: BillingCycle):
            intent = await self.providers.mercadopago().create_subscription_intent(
                amount=sub.amount,
                currency=sub.currency,
                external_reference=str(sub.id),
                back_url=back_url or self.return_url(provider, sub.id),
                payer_email=payer_email or user.user_email,
                reason=f"{plan.name} - {cycle.name}",
                interval_type=cycle.interval_type,
                interval_count=cycle.interval_count,
                card_token_id=card_token_id,
                start_date=start_date,
            )
            sub.external_subscription_id = intent.intent_id
            remote_status["status"] = intent.raw.get("status")
            return intent, MercadoPagoLink(preapproval_id=intent.intent_id)

        result = await self._run(provider, user, plan_id, billing_cycle_id, currency, create, kind="recurring")

        if remote_status.get("status") == "authorized":
            state_machine.apply_remote_status(
                result.subscription,
                "authorized",
                cycle=result.subscription.billing_cycle,
            )
            await self.session.commit()
        return result


__all__ = ["CheckoutService", "CheckoutResult", "webpay_buy_order"]

# Fin del archivo backend/app/modules/subscriptions/services/checkout_service.py
