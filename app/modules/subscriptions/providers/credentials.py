# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/providers/credentials.py

Resolución de credenciales por pasarela.

resolve_credentials(settings, creator_slug) es una función pura del objeto
de settings: no lee el entorno, así que se prueba construyendo
PaymentsSettings(...) con valores explícitos.

Cadena de fallback (primera que esté completa):
    WebPay:       creador -> WEBPAY_COMMERCE_CODE/API_KEY (production)
                          -> WEBPAY_*_TEST (sandbox, integración Transbank)
    PayPal:       creador -> PAYPAL_CLIENT_ID/SECRET (production)
                          -> PAYPAL_*_SANDBOX -> PAYPAL_CLIENT_ID/SECRET (sandbox)
    Mercado Pago: creador -> MERCADOPAGO_ACCESS_TOKEN

Autor: ClubFit
Fecha: 2026-02-12
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from app.modules.subscriptions.enums import PaymentProvider
from app.modules.subscriptions.errors import ProviderConfigError
from app.shared.config.settings_payments import PaymentsSettings

WEBPAY_PRODUCTION_URL = "https://webpay3g.transbank.cl"
WEBPAY_INTEGRATION_URL = "https://webpay3gint.transbank.cl"
PAYPAL_LIVE_URL = "https://api-m.paypal.com"
PAYPAL_SANDBOX_URL = "https://api-m.sandbox.paypal.com"
MERCADOPAGO_API_URL = "https://api.mercadopago.com"


@dataclass(frozen=True)
class WebpayCredentials:
    commerce_code: str
    api_key: str
    production: bool = False

    @property
    def base_url(self) -> str:
        return WEBPAY_PRODUCTION_URL if self.production else WEBPAY_INTEGRATION_URL


@dataclass(frozen=True)
class PayPalCredentials:
    client_id: str
    client_secret: str
    production: bool = False

    @property
    def base_url(self) -> str:
        return PAYPAL_LIVE_URL if self.production else PAYPAL_SANDBOX_URL


@dataclass(frozen=True)
class MercadoPagoCredentials:
    access_token: str

    @property
    def sandbox(self) -> bool:
        return self.access_token.startswith("TEST-")

    @property
    def base_url(self) -> str:
        return MERCADOPAGO_API_URL


@dataclass(frozen=True)
class ResolvedCredentials:
    """Credenciales resueltas para un contexto (global o un creador)."""

    webpay: Optional[WebpayCredentials] = None
    paypal: Optional[PayPalCredentials] = None
    mercadopago: Optional[MercadoPagoCredentials] = None
    creator_slug: Optional[str] = None

    def require_webpay(self) -> WebpayCredentials:
        if self.webpay is None:
            raise ProviderConfigError(PaymentProvider.WEBPAY.value, self._missing("WEBPAY_COMMERCE_CODE/WEBPAY_API_KEY"))
        return self.webpay

    def require_paypal(self) -> PayPalCredentials:
        if self.paypal is None:
            raise ProviderConfigError(PaymentProvider.PAYPAL.value, self._missing("PAYPAL_CLIENT_ID/PAYPAL_CLIENT_SECRET"))
        return self.paypal

    def require_mercadopago(self) -> MercadoPagoCredentials:
        if self.mercadopago is None:
            raise ProviderConfigError(PaymentProvider.MERCADOPAGO.value, self._missing("MERCADOPAGO_ACCESS_TOKEN"))
        return self.mercadopago

    def _missing(self, keys: str) -> str:
        scope = f" (creador '{self.creator_slug}')" if self.creator_slug else ""
        return f"faltan credenciales {keys}{scope}"


def _pair(a: Optional[str], b: Optional[str]) -> Optional[tuple[str, str]]:
    if a and b:
        return a, b
    return None


def resolve_credentials(
    settings: PaymentsSettings,
    creator_slug: Optional[str] = None,
) -> ResolvedCredentials:
    """
    Resuelve credenciales para el contexto dado.

    Args:
        settings: Configuración de pagos ya validada
        creator_slug: Creador del market (None = credenciales globales)

    Returns:
        ResolvedCredentials con None en las pasarelas sin configuración
    """
    production = settings.is_production
    overrides: Mapping[str, str] = {}
    if creator_slug:
        overrides = settings.creator_credentials.get(creator_slug.lower(), {})

    # WebPay
    webpay_pair = _pair(overrides.get("webpay_commerce_code"), overrides.get("webpay_api_key"))
    if webpay_pair is None:
        if production:
            webpay_pair = _pair(settings.webpay_commerce_code, settings.webpay_api_key)
        else:
            webpay_pair = _pair(settings.webpay_commerce_code_test, settings.webpay_api_key_test)
    webpay = WebpayCredentials(*webpay_pair, production=production) if webpay_pair else None

    # PayPal
    paypal_pair = _pair(overrides.get("paypal_client_id"), overrides.get("paypal_client_secret"))
    if paypal_pair is None:
        if production:
            paypal_pair = _pair(settings.paypal_client_id, settings.paypal_client_secret)
        else:
            paypal_pair = _pair(
                settings.paypal_client_id_sandbox, settings.paypal_client_secret_sandbox
            ) or _pair(settings.paypal_client_id, settings.paypal_client_secret)
    paypal = PayPalCredentials(*paypal_pair, production=production) if paypal_pair else None

    # Mercado Pago
    mp_token = overrides.get("mercadopago_access_token") or settings.mercadopago_access_token
    mercadopago = MercadoPagoCredentials(mp_token) if mp_token else None

    return ResolvedCredentials(
        webpay=webpay,
        paypal=paypal,
        mercadopago=mercadopago,
        creator_slug=creator_slug,
    )


__all__ = [
    "WebpayCredentials",
    "PayPalCredentials",
    "MercadoPagoCredentials",
    "ResolvedCredentials",
    "resolve_credentials",
    "WEBPAY_PRODUCTION_URL",
    "WEBPAY_INTEGRATION_URL",
    "PAYPAL_LIVE_URL",
    "PAYPAL_SANDBOX_URL",
    "MERCADOPAGO_API_URL",
]

# Fin del archivo backend/app/modules/subscriptions/providers/credentials.py
