# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/providers/__init__.py

Adaptadores de pasarelas de pago (WebPay, PayPal, Mercado Pago).

Autor: ClubFit
Fecha: 2026-02-12
"""

from .base import (
    PayerInfo,
    PaymentProviderAdapter,
    ProviderConfirmation,
    ProviderIntent,
)
from .credentials import (
    MercadoPagoCredentials,
    PayPalCredentials,
    ResolvedCredentials,
    WebpayCredentials,
    resolve_credentials,
)
from .factory import ProviderFactory
from .mercadopago_provider import MercadoPagoProvider
from .paypal_provider import PayPalProvider
from .token_cache import TokenCache
from .webpay_provider import WebpayProvider

__all__ = [
    "PayerInfo",
    "PaymentProviderAdapter",
    "ProviderConfirmation",
    "ProviderIntent",
    "MercadoPagoCredentials",
    "PayPalCredentials",
    "ResolvedCredentials",
    "WebpayCredentials",
    "resolve_credentials",
    "ProviderFactory",
    "MercadoPagoProvider",
    "PayPalProvider",
    "TokenCache",
    "WebpayProvider",
]

# Fin del archivo backend/app/modules/subscriptions/providers/__init__.py
