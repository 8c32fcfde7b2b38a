# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/dependencies.py

Dependencias FastAPI del módulo de suscripciones.

Construye la fábrica de proveedores, los efectos secundarios y los servicios
por request. Los tests sobreescriben get_provider_factory / get_side_effects
con app.dependency_overrides.

Autor: ClubFit
Fecha: 2026-02-14
"""

from __future__ import annotations

from fastapi import BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.config import get_payments_settings, get_settings
from app.shared.database import get_async_session
from app.shared.integrations import get_email_sender
from .providers.factory import ProviderFactory
from .services.checkout_service import CheckoutService
from .services.reconciliation_service import ReconciliationService
from .services.side_effects import ActivationSideEffects
from .services.subscription_service import SubscriptionService
from .services.webhook_service import MercadoPagoWebhookService

WEBHOOK_PATH = "/api/subscriptions/mercadopago/webhook"


def get_provider_factory() -> ProviderFactory:
    app_url = get_settings().app_url.rstrip("/")
    return ProviderFactory(
        get_payments_settings(),
        notification_url=f"{app_url}{WEBHOOK_PATH}",
    )


def get_side_effects(background_tasks: BackgroundTasks) -> ActivationSideEffects:
    """El correo de bienvenida se envía después de responder."""
    return ActivationSideEffects(get_email_sender(), background=background_tasks)


def get_subscription_service(
    session: AsyncSession = Depends(get_async_session),
    providers: ProviderFactory = Depends(get_provider_factory),
) -> SubscriptionService:
    return SubscriptionService(session, providers=providers)


def get_checkout_service(
    session: AsyncSession = Depends(get_async_session),
    providers: ProviderFactory = Depends(get_provider_factory),
) -> CheckoutService:
    return CheckoutService(
        session,
        providers=providers,
        frontend_url=get_settings().frontend_url,
        default_currency=providers.settings.default_currency,
    )


def get_reconciliation_service(
    session: AsyncSession = Depends(get_async_session),
    providers: ProviderFactory = Depends(get_provider_factory),
    side_effects: ActivationSideEffects = Depends(get_side_effects),
) -> ReconciliationService:
    return ReconciliationService(session, providers=providers, side_effects=side_effects)


def get_webhook_service(
    session: AsyncSession = Depends(get_async_session),
    providers: ProviderFactory = Depends(get_provider_factory),
    reconciliation: ReconciliationService = Depends(get_reconciliation_service),
) -> MercadoPagoWebhookService:
    return MercadoPagoWebhookService(session, providers=providers, reconciliation=reconciliation)


__all__ = [
    "WEBHOOK_PATH",
    "get_provider_factory",
    "get_side_effects",
    "get_subscription_service",
    "get_checkout_service",
    "get_reconciliation_service",
    "get_webhook_service",
]

# Fin del archivo backend/app/modules/subscriptions/dependencies.py
