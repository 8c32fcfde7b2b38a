# -*- coding: utf-8 -*-
"""
backend/app/modules/market/routes/market_routes.py

Rutas del market por creador.

Endpoints:
- POST /market/{creator_slug}/{provider}/create    (auth)
- POST /market/{creator_slug}/{provider}/validate

provider ∈ {webpay, paypal, mercadopago}.

Autor: ClubFit
Fecha: 2026-02-15
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.auth.dependencies import get_current_user
from app.modules.auth.models import AppUser
from app.modules.market.schemas import (
    MarketCheckoutRequest,
    MarketCheckoutResponse,
    MarketValidateRequest,
    MarketValidateResponse,
)
from app.modules.market.services import MarketService, OrderLine
from app.modules.subscriptions.dependencies import get_provider_factory
from app.modules.subscriptions.enums import PaymentProvider
from app.modules.subscriptions.errors import PaymentError
from app.modules.subscriptions.providers.factory import ProviderFactory
from app.shared.config import get_settings
from app.shared.database import get_async_session

router = APIRouter(prefix="/market/{creator_slug}", tags=["market"])


def get_market_service(
    session: AsyncSession = Depends(get_async_session),
    providers: ProviderFactory = Depends(get_provider_factory),
) -> MarketService:
    return MarketService(session, providers=providers, app_url=get_settings().app_url)


def _http_error(e: PaymentError) -> HTTPException:
    return HTTPException(status_code=e.http_status, detail={"error": e.code, "message": str(e)})


@router.post("/{provider}/create", response_model=MarketCheckoutResponse, response_model_by_alias=True)
async def create_order_checkout(
    creator_slug: str,
    provider: PaymentProvider,
    body: MarketCheckoutRequest,
    user: AppUser = Depends(get_current_user),
    service: MarketService = Depends(get_market_service),
):
    lines = [OrderLine(product_id=i.product_id, quantity=i.quantity) for i in body.items]
    try:
        result = await service.create_order_checkout(provider, user, lines, creator_slug)
    except PaymentError as e:
        raise _http_error(e) from e
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"error": "invalid_items", "message": str(e)},
        ) from e

    return MarketCheckoutResponse(
        order_id=result.order.id,
        order_number=result.order.order_number,
        provider=result.provider.value,
        token=result.intent.intent_id,
        url=result.intent.redirect_url,
    )


@router.post("/{provider}/validate", response_model=MarketValidateResponse, response_model_by_alias=True)
async def validate_order_payment(
    creator_slug: str,
    provider: PaymentProvider,
    body: MarketValidateRequest,
    service: MarketService = Depends(get_market_service),
):
    try:
        result = await service.validate_order_payment(provider, body.token, creator_slug)
    except PaymentError as e:
        raise _http_error(e) from e

    order = result.order
    return MarketValidateResponse(
        status=str(order.status),
        order_id=order.id,
        order_number=order.order_number,
        total=order.total,
        currency=order.currency,
        transaction_id=order.transaction_id,
        already_processed=result.already_processed,
    )


__all__ = ["router", "get_market_service"]

# Fin del archivo backend/app/modules/market/routes/market_routes.py
