# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/schemas/subscription_schemas.py

Esquemas Pydantic de la API de suscripciones.

El frontend usa camelCase: los modelos aceptan y emiten alias camelCase
(alias_generator=to_camel) y también aceptan snake_case (populate_by_name).

Autor: ClubFit
Fecha: 2026-02-13
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# Catálogo
# =============================================================================

class BillingCycleOut(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    interval_type: str
    interval_count: int


class PriceOut(CamelModel):
    id: uuid.UUID
    currency: str
    amount: Decimal
    billing_cycle: BillingCycleOut


class PlanOut(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    description: Optional[str] = None
    features: List[Any] = Field(default_factory=list)
    prices: List[PriceOut] = Field(default_factory=list)

    @field_validator("prices", mode="before")
    @classmethod
    def _only_active(cls, v):
        return [p for p in (v or []) if getattr(p, "is_active", True)]


# =============================================================================
# Suscripción y pagos
# =============================================================================

class SubscriptionOut(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    plan_id: uuid.UUID
    billing_cycle_id: uuid.UUID
    status: str
    provider: Optional[str] = None
    amount: Decimal
    currency: str
    started_at: Optional[datetime] = None
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    auto_renew: bool
    cancellation_reason: Optional[str] = None
    external_subscription_id: Optional[str] = None
    needs_capture_verification: bool = False

    @classmethod
    def from_model(cls, sub) -> "SubscriptionOut":
        out = cls.model_validate(sub)
        out.needs_capture_verification = bool(
            (sub.subscription_metadata or {}).get("needs_capture_verification")
        )
        return out


class PaymentOut(CamelModel):
    id: uuid.UUID
    subscription_id: uuid.UUID
    amount: Decimal
    currency: str
    status: str
    payment_method: Optional[str] = None
    payment_provider: str
    transaction_id: str
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None
    paid_at: Optional[datetime] = None


class MemberOut(CamelModel):
    subscription_id: uuid.UUID
    user_id: uuid.UUID
    full_name: Optional[str] = None
    email: Optional[str] = None
    status: str
    plan_id: uuid.UUID
    current_period_end: Optional[datetime] = None

    @classmethod
    def from_model(cls, sub) -> "MemberOut":
        user = sub.user
        return cls(
            subscription_id=sub.id,
            user_id=sub.user_id,
            full_name=user.user_full_name if user else None,
            email=user.user_email if user else None,
            status=str(sub.status),
            plan_id=sub.plan_id,
            current_period_end=sub.current_period_end,
        )


class CancelSubscriptionRequest(CamelModel):
    reason: Optional[str] = Field(default=None, max_length=500)


# =============================================================================
# Checkout
# =============================================================================

class CheckoutRequest(CamelModel):
    plan_id: uuid.UUID
    billing_cycle_id: uuid.UUID
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)


class RecurringSubscribeRequest(CheckoutRequest):
    payer_email: Optional[EmailStr] = None
    card_token_id: Optional[str] = None
    back_url: Optional[str] = None


class WebpayCheckoutResponse(CamelModel):
    token: str
    url: str
    subscription_id: uuid.UUID


class PayPalCheckoutResponse(CamelModel):
    order_id: str
    approve_url: str
    subscription_id: uuid.UUID


class MercadoPagoCheckoutResponse(CamelModel):
    preference_id: str
    init_point: str
    subscription_id: uuid.UUID


class RecurringSubscribeResponse(CamelModel):
    preapproval_id: str
    init_point: str
    subscription_id: uuid.UUID
    status: str


# =============================================================================
# Validación
# =============================================================================

class WebpayValidateRequest(CamelModel):
    token: str = Field(min_length=1)


class PayPalValidateRequest(CamelModel):
    order_id: str = Field(min_length=1)


class MercadoPagoValidateRequest(CamelModel):
    payment_id: str = Field(min_length=1)

    @field_validator("payment_id", mode="before")
    @classmethod
    def _coerce_id(cls, v):
        # Mercado Pago devuelve ids numéricos en el retorno
        return str(v) if v is not None else v


class ValidateResponse(CamelModel):
    success: bool
    redirect_url: str
    subscription: Optional[SubscriptionOut] = None
    duplicate: bool = False


class VerifyCaptureRequest(CamelModel):
    capture_id: str = Field(min_length=1)


class VerifyCaptureResponse(CamelModel):
    status: str
    capture: Dict[str, Any]


class WebhookAck(BaseModel):
    received: bool = True


__all__ = [
    "BillingCycleOut",
    "PriceOut",
    "PlanOut",
    "SubscriptionOut",
    "PaymentOut",
    "MemberOut",
    "CancelSubscriptionRequest",
    "CheckoutRequest",
    "RecurringSubscribeRequest",
    "WebpayCheckoutResponse",
    "PayPalCheckoutResponse",
    "MercadoPagoCheckoutResponse",
    "RecurringSubscribeResponse",
    "WebpayValidateRequest",
    "PayPalValidateRequest",
    "MercadoPagoValidateRequest",
    "ValidateResponse",
    "VerifyCaptureRequest",
    "VerifyCaptureResponse",
    "WebhookAck",
]

# Fin del archivo backend/app/modules/subscriptions/schemas/subscription_schemas.py
