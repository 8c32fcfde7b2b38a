# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/models/__init__.py

Modelos ORM del módulo Subscriptions.
Importa AppUser para que las FKs a app_users resuelvan en el metadata.
"""

from app.modules.auth.models import AppUser  # noqa: F401

from .plan_models import BillingCycle, SubscriptionPlan, SubscriptionPrice
from .subscription_models import UserSubscription
from .subscription_payment_models import SubscriptionPayment

__all__ = [
    "BillingCycle",
    "SubscriptionPlan",
    "SubscriptionPrice",
    "UserSubscription",
    "SubscriptionPayment",
]
