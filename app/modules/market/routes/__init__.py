# -*- coding: utf-8 -*-
"""
backend/app/modules/market/routes/__init__.py
"""

from .market_routes import router

__all__ = ["router"]
