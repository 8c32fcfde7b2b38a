# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/routes/checkout_routes.py

Rutas de checkout y validación por pasarela.

Endpoints:
- POST /subscriptions/{webpay|paypal|mercadopago}/create
- POST /subscriptions/{webpay|paypal|mercadopago}/validate?subscriptionId=
- POST /subscriptions/paypal/verify-capture  (solo admin)
- POST /subscriptions/subscribe  (preapproval recurrente de Mercado Pago)

Un pago rechazado por la pasarela responde 200 con success=false y la URL
de la página de fallo; el resto de errores de dominio se traducen a
HTTPException {"error", "message"}.

Autor: ClubFit
Fecha: 2026-02-14
"""

from __future__ import annotations

import logging
import uuid
from typing import Awaitable, Callable, Optional

from fastapi import APIRouter, Depends, Query

from app.modules.auth.dependencies import get_current_user, require_admin
from app.modules.auth.models import AppUser
from app.modules.subscriptions.dependencies import (
    get_checkout_service,
    get_reconciliation_service,
)
from app.modules.subscriptions.errors import PaymentError, PaymentNotAuthorizedError
from app.modules.subscriptions.schemas import (
    CheckoutRequest,
    MercadoPagoCheckoutResponse,
    MercadoPagoValidateRequest,
    PayPalCheckoutResponse,
    PayPalValidateRequest,
    RecurringSubscribeRequest,
    RecurringSubscribeResponse,
    SubscriptionOut,
    ValidateResponse,
    VerifyCaptureRequest,
    VerifyCaptureResponse,
    WebpayCheckoutResponse,
    WebpayValidateRequest,
)
from app.modules.subscriptions.services.checkout_service import CheckoutResult, CheckoutService
from app.modules.subscriptions.services.reconciliation_service import (
    ReconciliationService,
    ValidationResult,
)
from app.shared.config import get_settings
from ._errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["subscriptions-checkout"])


# =============================================================================
# Helpers
# =============================================================================

async def _checkout(call: Awaitable[CheckoutResult]) -> CheckoutResult:
    try:
        return await call
    except PaymentError as e:
        raise to_http_exception(e) from e


def _redirect(service: ReconciliationService, success: bool, subscription_id: Optional[uuid.UUID]) -> str:
    settings = service.providers.settings
    base = get_settings().frontend_url.rstrip("/")
    path = settings.subscription_success_path if success else settings.subscription_failure_path
    suffix = f"?subscriptionId={subscription_id}" if subscription_id else ""
    return f"{base}{path}{suffix}"


async def _validate(
    service: ReconciliationService,
    subscription_id: Optional[uuid.UUID],
    call: Callable[[], Awaitable[ValidationResult]],
) -> ValidateResponse:
    try:
        result = await call()
    except PaymentNotAuthorizedError as e:
        logger.info("Pago no autorizado (suscripción=%s): %s", subscription_id, e)
        return ValidateResponse(
            success=False,
            redirect_url=_redirect(service, False, subscription_id),
        )
    except PaymentError as e:
        raise to_http_exception(e) from e

    return ValidateResponse(
        success=result.success,
        redirect_url=_redirect(service, result.success, result.subscription.id),
        subscription=SubscriptionOut.from_model(result.subscription),
        duplicate=result.duplicate,
    )


# =============================================================================
# WEBPAY
# =============================================================================

@router.post("/webpay/create", response_model=WebpayCheckoutResponse, response_model_by_alias=True)
async def create_webpay_checkout(
    body: CheckoutRequest,
    user: AppUser = Depends(get_current_user),
    service: CheckoutService = Depends(get_checkout_service),
):
    result = await _checkout(
        service.create_webpay_checkout(user, body.plan_id, body.billing_cycle_id, body.currency)
    )
    return WebpayCheckoutResponse(
        token=result.intent.intent_id,
        url=result.intent.redirect_url,
        subscription_id=result.subscription.id,
    )


@router.post("/webpay/validate", response_model=ValidateResponse, response_model_by_alias=True)
async def validate_webpay_payment(
    body: WebpayValidateRequest,
    subscription_id: Optional[uuid.UUID] = Query(default=None, alias="subscriptionId"),
    service: ReconciliationService = Depends(get_reconciliation_service),
):
    return await _validate(
        service,
        subscription_id,
        lambda: service.validate_webpay_payment(body.token, subscription_id),
    )


# =============================================================================
# PAYPAL
# =============================================================================

@router.post("/paypal/create", response_model=PayPalCheckoutResponse, response_model_by_alias=True)
async def create_paypal_checkout(
    body: CheckoutRequest,
    user: AppUser = Depends(get_current_user),
    service: CheckoutService = Depends(get_checkout_service),
):
    result = await _checkout(
        service.create_paypal_checkout(user, body.plan_id, body.billing_cycle_id, body.currency)
    )
    return PayPalCheckoutResponse(
        order_id=result.intent.intent_id,
        approve_url=result.intent.redirect_url,
        subscription_id=result.subscription.id,
    )


@router.post("/paypal/validate", response_model=ValidateResponse, response_model_by_alias=True)
async def validate_paypal_payment(
    body: PayPalValidateRequest,
    subscription_id: Optional[uuid.UUID] = Query(default=None, alias="subscriptionId"),
    service: ReconciliationService = Depends(get_reconciliation_service),
):
    return await _validate(
        service,
        subscription_id,
        lambda: service.validate_paypal_payment(body.order_id, subscription_id),
    )


@router.post("/paypal/verify-capture", response_model=VerifyCaptureResponse, response_model_by_alias=True)
async def verify_paypal_capture(
    body: VerifyCaptureRequest,
    _admin: AppUser = Depends(require_admin),
    service: ReconciliationService = Depends(get_reconciliation_service),
):
    try:
        result = await service.verify_paypal_capture(body.capture_id)
    except PaymentError as e:
        raise to_http_exception(e) from e
    return VerifyCaptureResponse(**result)


# =============================================================================
# MERCADO PAGO
# =============================================================================

@router.post("/mercadopago/create", response_model=MercadoPagoCheckoutResponse, response_model_by_alias=True)
async def create_mercadopago_checkout(
    body: CheckoutRequest,
    user: AppUser = Depends(get_current_user),
    service: CheckoutService = Depends(get_checkout_service),
):
    result = await _checkout(
        service.create_mercadopago_checkout(user, body.plan_id, body.billing_cycle_id, body.currency)
    )
    return MercadoPagoCheckoutResponse(
        preference_id=result.intent.intent_id,
        init_point=result.intent.redirect_url,
        subscription_id=result.subscription.id,
    )


@router.post("/mercadopago/validate", response_model=ValidateResponse, response_model_by_alias=True)
async def validate_mercadopago_payment(
    body: MercadoPagoValidateRequest,
    subscription_id: Optional[uuid.UUID] = Query(default=None, alias="subscriptionId"),
    service: ReconciliationService = Depends(get_reconciliation_service),
):
    return await _validate(
        service,
        subscription_id,
        lambda: service.validate_mercadopago_payment(body.payment_id, subscription_id),
    )


@router.post("/subscribe", response_model=RecurringSubscribeResponse, response_model_by_alias=True)
async def subscribe_recurring(
    body: RecurringSubscribeRequest,
    user: AppUser = Depends(get_current_user),
    service: CheckoutService = Depends(get_checkout_service),
):
    """Suscripción recurrente con PreApproval de Mercado Pago."""
    result = await _checkout(
        service.create_recurring_subscription(
            user,
            body.plan_id,
            body.billing_cycle_id,
            body.currency,
            payer_email=body.payer_email,
            card_token_id=body.card_token_id,
            back_url=body.back_url,
        )
    )
    return RecurringSubscribeResponse(
        preapproval_id=result.intent.intent_id,
        init_point=result.intent.redirect_url,
        subscription_id=result.subscription.id,
        status=str(result.subscription.status),
    )


__all__ = ["router"]

# Fin del archivo backend/app/modules/subscriptions/routes/checkout_routes.py
