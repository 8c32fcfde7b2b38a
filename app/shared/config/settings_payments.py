# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_payments.py

Configuración de pasarelas de pago para suscripciones y market.

Descripción:
    Centraliza credenciales de WebPay (Transbank), PayPal y Mercado Pago,
    overrides por creador (market multi-tenant), tiempos de espera y
    el margen de refresco de tokens OAuth.

    Los adaptadores de proveedores NUNCA leen variables de entorno:
    reciben credenciales ya resueltas (ver providers/credentials.py).

Autor: ClubFit
Fecha: 2026-02-10
"""

from __future__ import annotations

import os
import re
from typing import Dict, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Credenciales públicas de integración publicadas por Transbank
WEBPAY_INTEGRATION_COMMERCE_CODE = "597055555532"
WEBPAY_INTEGRATION_API_KEY = "579B532A7440BB0C9079DED94D31EA1615BACEB56610332264630D42D0A36B1C"

# <SLUG>_<CLAVE> en el entorno, p.ej. JOSE_WEBPAY_COMMERCE_CODE
_CREATOR_KEYS = (
    "WEBPAY_COMMERCE_CODE",
    "WEBPAY_API_KEY",
    "PAYPAL_CLIENT_ID",
    "PAYPAL_CLIENT_SECRET",
    "MERCADOPAGO_ACCESS_TOKEN",
)
_CREATOR_ENV_RE = re.compile(r"^([A-Z0-9]+)_(" + "|".join(_CREATOR_KEYS) + r")$")


class PaymentsSettings(BaseSettings):
    """Configuración del sistema de pagos."""

    # =========================================================================
    # MODO GLOBAL
    # =========================================================================

    payments_mode: Optional[Literal["sandbox", "production"]] = Field(
        default=None,
        validate_default=True,
        description="sandbox usa credenciales *_TEST / *_SANDBOX; production las reales",
    )

    default_currency: str = Field(
        default="CLP",
        description="Moneda por defecto cuando el usuario no tiene preferencia",
    )

    @field_validator("payments_mode", mode="before")
    @classmethod
    def _load_payments_mode(cls, v: Optional[str]) -> str:
        """Fallback a PYTHON_ENV: production => credenciales productivas."""
        if v:
            return v
        env = os.getenv("PYTHON_ENV", "development").lower()
        return "production" if env == "production" else "sandbox"

    # =========================================================================
    # WEBPAY (TRANSBANK)
    # =========================================================================

    webpay_commerce_code: Optional[str] = Field(
        default=None,
        description="Código de comercio productivo de WebPay Plus",
    )

    webpay_api_key: Optional[str] = Field(
        default=None,
        description="API key secret productiva de WebPay Plus",
    )

    webpay_commerce_code_test: str = Field(
        default=WEBPAY_INTEGRATION_COMMERCE_CODE,
        description="Código de comercio de integración",
    )

    webpay_api_key_test: str = Field(
        default=WEBPAY_INTEGRATION_API_KEY,
        description="API key de integración",
    )

    # =========================================================================
    # PAYPAL
    # =========================================================================

    paypal_client_id: Optional[str] = Field(default=None, description="PayPal client ID (live)")
    paypal_client_secret: Optional[str] = Field(default=None, description="PayPal client secret (live)")
    paypal_client_id_sandbox: Optional[str] = Field(default=None, description="PayPal client ID (sandbox)")
    paypal_client_secret_sandbox: Optional[str] = Field(default=None, description="PayPal client secret (sandbox)")

    paypal_brand_name: str = Field(
        default="ClubFit",
        description="brand_name mostrado en el checkout de PayPal",
    )

    # =========================================================================
    # MERCADO PAGO
    # =========================================================================

    mercadopago_access_token: Optional[str] = Field(
        default=None,
        description="Access token de Mercado Pago (TEST-... en sandbox)",
    )

    statement_descriptor: str = Field(
        default="ClubFit",
        description="Texto que aparece en el resumen de la tarjeta (Mercado Pago)",
    )

    # =========================================================================
    # OVERRIDES POR CREADOR (market multi-tenant)
    # =========================================================================

    creator_credentials: Dict[str, Dict[str, str]] = Field(
        default_factory=dict,
        validate_default=True,
        description=(
            "Credenciales por creador: {slug: {webpay_commerce_code, webpay_api_key, "
            "paypal_client_id, paypal_client_secret, mercadopago_access_token}}"
        ),
    )

    @field_validator("creator_credentials", mode="before")
    @classmethod
    def _load_creator_credentials(cls, v: Optional[Dict[str, Dict[str, str]]]) -> Dict[str, Dict[str, str]]:
        """
        Fallback a variables <SLUG>_<CLAVE> (JOSE_WEBPAY_COMMERCE_CODE, ...).
        Se resuelve una sola vez al construir los settings.
        """
        if v:
            return {str(slug).lower(): dict(values) for slug, values in v.items()}
        collected: Dict[str, Dict[str, str]] = {}
        for key, value in os.environ.items():
            match = _CREATOR_ENV_RE.match(key)
            if not match or not value:
                continue
            slug, name = match.group(1).lower(), match.group(2).lower()
            collected.setdefault(slug, {})[name] = value
        return collected

    # =========================================================================
    # HTTP / TOKENS
    # =========================================================================

    provider_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout total por llamada a un proveedor de pago",
    )

    provider_connect_timeout_seconds: float = Field(
        default=5.0,
        description="Timeout de conexión hacia proveedores",
    )

    token_refresh_margin: float = Field(
        default=0.10,
        ge=0.10,
        lt=1.0,
        description="Fracción del tiempo de vida del token OAuth reservada como margen de refresco",
    )

    # =========================================================================
    # REDIRECTS FRONTEND
    # =========================================================================

    subscription_success_path: str = Field(default="/subscription/success")
    subscription_failure_path: str = Field(default="/subscription/failure")
    market_success_path: str = Field(default="/market/success")

    @property
    def is_production(self) -> bool:
        return self.payments_mode == "production"

    # =========================================================================
    # CONFIGURACIÓN DE PYDANTIC
    # =========================================================================

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Singleton global
_payments_settings: Optional[PaymentsSettings] = None


def get_payments_settings() -> PaymentsSettings:
    """
    Obtiene la instancia global de configuración de pagos.

    Returns:
        PaymentsSettings: Configuración de pagos
    """
    global _payments_settings
    if _payments_settings is None:
        _payments_settings = PaymentsSettings()
    return _payments_settings


def reset_payments_settings() -> None:
    """Descarta el singleton (tests)."""
    global _payments_settings
    _payments_settings = None


__all__ = [
    "PaymentsSettings",
    "get_payments_settings",
    "reset_payments_settings",
    "WEBPAY_INTEGRATION_COMMERCE_CODE",
    "WEBPAY_INTEGRATION_API_KEY",
]
# Fin del archivo backend/app/shared/config/settings_payments.py
