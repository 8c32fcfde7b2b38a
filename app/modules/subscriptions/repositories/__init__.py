# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/repositories/__init__.py

Repositorios del módulo Subscriptions (sin commit; lo cierra el servicio).
"""

from .plan_repository import PlanRepository
from .subscription_payment_repository import SubscriptionPaymentRepository
from .subscription_repository import SubscriptionRepository

__all__ = [
    "PlanRepository",
    "SubscriptionRepository",
    "SubscriptionPaymentRepository",
]
