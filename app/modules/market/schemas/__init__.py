# -*- coding: utf-8 -*-
"""
backend/app/modules/market/schemas/__init__.py
"""

from .market_schemas import (
    MarketCheckoutRequest,
    MarketCheckoutResponse,
    MarketItemIn,
    MarketValidateRequest,
    MarketValidateResponse,
)

__all__ = [
    "MarketItemIn",
    "MarketCheckoutRequest",
    "MarketCheckoutResponse",
    "MarketValidateRequest",
    "MarketValidateResponse",
]
