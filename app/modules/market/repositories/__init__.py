# -*- coding: utf-8 -*-
"""
backend/app/modules/market/repositories/__init__.py
"""

from .market_repository import CreatorRepository, OrderRepository, ProductRepository

__all__ = ["CreatorRepository", "ProductRepository", "OrderRepository"]
