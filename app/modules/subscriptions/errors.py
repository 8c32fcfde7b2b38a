# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/errors.py

Excepciones de dominio para suscripciones, market y adaptadores de pago.

Cada excepción expone `code` (estable, para la UI) y `http_status`, que las
rutas usan para traducir a HTTPException.

Autor: ClubFit
Fecha: 2026-02-11
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional


class PaymentError(Exception):
    """Raíz de los errores del motor de cobros."""

    code = "payment_error"
    http_status = 400
    retryable = False


class ProviderConfigError(PaymentError):
    """Faltan credenciales para la pasarela (error de configuración)."""

    code = "provider_not_configured"
    http_status = 400

    def __init__(self, provider: str, detail: str = "credenciales ausentes"):
        self.provider = provider
        super().__init__(f"{provider}: {detail}")


class ProviderRequestError(PaymentError):
    """La API remota rechazó la solicitud; se conserva el cuerpo de error."""

    code = "provider_request_failed"
    http_status = 502

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
    ):
        self.provider = provider
        self.status_code = status_code
        self.body = body
        super().__init__(f"{provider}: {message} (status={status_code})")


class ProviderTimeoutError(PaymentError):
    """
    Timeout sin estado concluyente. Reintentable: el llamador (navegador o
    proveedor) puede repetir la validación.
    """

    code = "provider_timeout"
    http_status = 504
    retryable = True

    def __init__(self, provider: str, operation: str):
        self.provider = provider
        self.operation = operation
        super().__init__(f"{provider}: timeout en {operation}")


class PaymentNotAuthorizedError(PaymentError):
    """El proveedor no autorizó el cobro."""

    code = "payment_not_authorized"
    http_status = 402

    def __init__(self, provider: str, status: Any, detail: Optional[str] = None):
        self.provider = provider
        self.status = status
        super().__init__(detail or f"{provider}: pago no autorizado (status={status})")


class AmountMismatchError(PaymentError, ValueError):
    """Monto confirmado distinto al esperado: posible fraude o error de precios."""

    code = "amount_mismatch"
    http_status = 409

    def __init__(self, expected: Decimal, received: Decimal, currency: str):
        self.expected = expected
        self.received = received
        self.currency = currency
        super().__init__(f"Monto esperado {expected} {currency}, recibido {received} {currency}")


class ConflictError(PaymentError):
    """El usuario ya tiene una suscripción activa (u otro conflicto de unicidad)."""

    code = "conflict"
    http_status = 409


class NotFoundError(PaymentError):
    """No se pudo resolver suscripción, plan, ciclo, precio, orden o producto."""

    code = "not_found"
    http_status = 404

    def __init__(self, entity: str, identifier: Any):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} no encontrado: {identifier}")


class InvalidStateTransition(PaymentError):
    """Se intentó una transición de estado inválida."""

    code = "invalid_state_transition"
    http_status = 409

    def __init__(self, from_state, to_state, message=None):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(message or f"Transición inválida: {from_state} → {to_state}")


__all__ = [
    "PaymentError",
    "ProviderConfigError",
    "ProviderRequestError",
    "ProviderTimeoutError",
    "PaymentNotAuthorizedError",
    "AmountMismatchError",
    "ConflictError",
    "NotFoundError",
    "InvalidStateTransition",
]

# Fin del archivo backend/app/modules/subscriptions/errors.py
