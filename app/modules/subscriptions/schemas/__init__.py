# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/schemas/__init__.py
"""

from .subscription_schemas import (
    BillingCycleOut,
    CancelSubscriptionRequest,
    CheckoutRequest,
    MemberOut,
    MercadoPagoCheckoutResponse,
    MercadoPagoValidateRequest,
    PaymentOut,
    PayPalCheckoutResponse,
    PayPalValidateRequest,
    PlanOut,
    PriceOut,
    RecurringSubscribeRequest,
    RecurringSubscribeResponse,
    SubscriptionOut,
    ValidateResponse,
    VerifyCaptureRequest,
    VerifyCaptureResponse,
    WebhookAck,
    WebpayCheckoutResponse,
    WebpayValidateRequest,
)

__all__ = [
    "BillingCycleOut",
    "CancelSubscriptionRequest",
    "CheckoutRequest",
    "MemberOut",
    "MercadoPagoCheckoutResponse",
    "MercadoPagoValidateRequest",
    "PaymentOut",
    "PayPalCheckoutResponse",
    "PayPalValidateRequest",
    "PlanOut",
    "PriceOut",
    "RecurringSubscribeRequest",
    "RecurringSubscribeResponse",
    "SubscriptionOut",
    "ValidateResponse",
    "VerifyCaptureRequest",
    "VerifyCaptureResponse",
    "WebhookAck",
    "WebpayCheckoutResponse",
    "WebpayValidateRequest",
]
