# -*- coding: utf-8 -*-
"""
backend/app/modules/market/services/__init__.py
"""

from .market_service import MarketCheckoutResult, MarketService, MarketValidationResult, OrderLine

__all__ = ["MarketService", "MarketCheckoutResult", "MarketValidationResult", "OrderLine"]
