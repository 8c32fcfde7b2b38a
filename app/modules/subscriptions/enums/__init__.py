# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/enums/__init__.py

Superficie de exportación de enums del módulo Subscriptions.

Autor: ClubFit
Fecha: 2026-02-11
"""

from .currency_enum import Currency, ZERO_DECIMAL_CURRENCIES, is_zero_decimal
from .interval_type_enum import IntervalType
from .payment_provider_enum import PaymentProvider
from .payment_status_enum import PaymentStatus
from .subscription_status_enum import SubscriptionStatus

__all__ = [
    "Currency",
    "ZERO_DECIMAL_CURRENCIES",
    "is_zero_decimal",
    "IntervalType",
    "PaymentProvider",
    "PaymentStatus",
    "SubscriptionStatus",
]

# Fin del archivo backend/app/modules/subscriptions/enums/__init__.py
