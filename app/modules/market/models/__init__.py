# -*- coding: utf-8 -*-
"""
backend/app/modules/market/models/__init__.py

Modelos ORM del market.
"""

from app.modules.auth.models import AppUser  # noqa: F401

from .market_models import Creator, Order, OrderItem, Product, ProductPrice

__all__ = ["Creator", "Product", "ProductPrice", "Order", "OrderItem"]
