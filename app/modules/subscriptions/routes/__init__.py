# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/routes/__init__.py

Router agregado del módulo de suscripciones (prefijo /subscriptions).
"""

from fastapi import APIRouter

from .checkout_routes import router as checkout_router
from .metrics_routes import router as metrics_router
from .subscription_routes import router as subscription_router
from .webhook_routes import router as webhook_router

router = APIRouter(prefix="/subscriptions")
router.include_router(subscription_router)
router.include_router(checkout_router)
router.include_router(webhook_router)

__all__ = ["router", "metrics_router"]
