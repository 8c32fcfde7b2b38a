# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/providers/factory.py

Construcción de adaptadores a partir de PaymentsSettings.

Un mismo tipo de adaptador sirve a suscripciones (credenciales globales) y
al market (credenciales por creador). Los tests inyectan un transport
(httpx.MockTransport) o reemplazan la fábrica completa.

Autor: ClubFit
Fecha: 2026-02-12
"""

from __future__ import annotations

from typing import Optional, Union

import httpx

from app.modules.subscriptions.enums import PaymentProvider
from app.shared.config.settings_payments import PaymentsSettings, get_payments_settings
from .base import build_timeout
from .credentials import resolve_credentials
from .mercadopago_provider import MercadoPagoProvider
from .paypal_provider import PayPalProvider
from .token_cache import TokenCache
from .webpay_provider import WebpayProvider

AnyProvider = Union[WebpayProvider, PayPalProvider, MercadoPagoProvider]


class ProviderFactory:
    """Crea adaptadores con credenciales resueltas y timeouts explícitos."""

    def __init__(
        self,
        settings: Optional[PaymentsSettings] = None,
        *,
        notification_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        token_cache: Optional[TokenCache] = None,
    ):
        self.settings = settings or get_payments_settings()
        self.notification_url = notification_url
        self._transport = transport
        self._http_client = http_client
        self._timeout = build_timeout(
            self.settings.provider_timeout_seconds,
            self.settings.provider_connect_timeout_seconds,
        )
        self.token_cache = token_cache or TokenCache(refresh_margin=self.settings.token_refresh_margin)

    def webpay(self, creator_slug: Optional[str] = None) -> WebpayProvider:
        creds = resolve_credentials(self.settings, creator_slug).require_webpay()
        return WebpayProvider(
            creds,
            timeout=self._timeout,
            transport=self._transport,
            http_client=self._http_client,
        )

    def paypal(self, creator_slug: Optional[str] = None) -> PayPalProvider:
        creds = resolve_credentials(self.settings, creator_slug).require_paypal()
        return PayPalProvider(
            creds,
            brand_name=self.settings.paypal_brand_name,
            token_cache=self.token_cache,
            timeout=self._timeout,
            transport=self._transport,
            http_client=self._http_client,
        )

    def mercadopago(self, creator_slug: Optional[str] = None) -> MercadoPagoProvider:
        creds = resolve_credentials(self.settings, creator_slug).require_mercadopago()
        return MercadoPagoProvider(
            creds,
            notification_url=self.notification_url,
            statement_descriptor=self.settings.statement_descriptor,
            timeout=self._timeout,
            transport=self._transport,
            http_client=self._http_client,
        )

    def for_provider(
        self,
        provider: Union[PaymentProvider, str],
        creator_slug: Optional[str] = None,
    ) -> AnyProvider:
        kind = PaymentProvider(provider)
        if kind is PaymentProvider.WEBPAY:
            return self.webpay(creator_slug)
        if kind is PaymentProvider.PAYPAL:
            return self.paypal(creator_slug)
        return self.mercadopago(creator_slug)


__all__ = ["ProviderFactory", "AnyProvider"]

# Fin del archivo backend/app/modules/subscriptions/providers/factory.py
