# -*- coding: utf-8 -*-
"""
backend/app/modules/market/enums/__init__.py
"""

from .order_status_enum import OrderStatus, ProductType

__all__ = ["OrderStatus", "ProductType"]
