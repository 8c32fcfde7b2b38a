# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/routes/subscription_routes.py

Rutas de consulta y gestión de suscripciones.

Endpoints:
- GET  /subscriptions/plans      catálogo público
- GET  /subscriptions/me         suscripción vigente del usuario
- GET  /subscriptions/payments   pagos del usuario
- POST /subscriptions/cancel     cancelación (remota best-effort en MP)
- GET  /subscriptions/members    listado admin (search, status)

Autor: ClubFit
Fecha: 2026-02-14
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.modules.auth.dependencies import get_current_user_id, require_admin
from app.modules.auth.models import AppUser
from app.modules.subscriptions.dependencies import get_subscription_service
from app.modules.subscriptions.enums import SubscriptionStatus
from app.modules.subscriptions.errors import PaymentError
from app.modules.subscriptions.schemas import (
    CancelSubscriptionRequest,
    MemberOut,
    PaymentOut,
    PlanOut,
    SubscriptionOut,
)
from app.modules.subscriptions.services.subscription_service import SubscriptionService
from ._errors import to_http_exception

router = APIRouter(tags=["subscriptions"])


@router.get("/plans", response_model=List[PlanOut], response_model_by_alias=True)
async def list_plans(
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Planes activos con sus precios y ciclos."""
    plans = await service.list_available_plans()
    return [PlanOut.model_validate(p) for p in plans]


@router.get("/me", response_model=Optional[SubscriptionOut], response_model_by_alias=True)
async def get_my_subscription(
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: SubscriptionService = Depends(get_subscription_service),
):
    subscription = await service.get_current_subscription(user_id)
    return SubscriptionOut.from_model(subscription) if subscription else None


@router.get("/payments", response_model=List[PaymentOut], response_model_by_alias=True)
async def list_my_payments(
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: SubscriptionService = Depends(get_subscription_service),
):
    payments = await service.list_user_payments(user_id)
    return [PaymentOut.model_validate(p) for p in payments]


@router.post("/cancel", response_model=SubscriptionOut, response_model_by_alias=True)
async def cancel_my_subscription(
    body: Optional[CancelSubscriptionRequest] = None,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """
    Cancela la suscripción vigente.

    La preapproval de Mercado Pago se cancela best-effort; un fallo remoto
    no impide la cancelación local.
    """
    try:
        subscription = await service.cancel_subscription(user_id, reason=body.reason if body else None)
    except PaymentError as e:
        raise to_http_exception(e) from e
    return SubscriptionOut.from_model(subscription)


@router.get("/members", response_model=List[MemberOut], response_model_by_alias=True)
async def list_members(
    search: Optional[str] = Query(default=None, max_length=100),
    status: Optional[SubscriptionStatus] = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    _admin: AppUser = Depends(require_admin),
    service: SubscriptionService = Depends(get_subscription_service),
):
    members = await service.list_members(search=search, status=status, limit=limit, offset=offset)
    return [MemberOut.from_model(m) for m in members]


__all__ = ["router"]

# Fin del archivo backend/app/modules/subscriptions/routes/subscription_routes.py
