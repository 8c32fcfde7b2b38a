# -*- coding: utf-8 -*-
"""
backend/app/modules/market/enums/order_status_enum.py

Enums del market: estado de una orden y tipo de producto digital.
Sincronizados con order_status_enum y product_type_enum de PostgreSQL.

Autor: ClubFit
Fecha: 2026-02-15
"""

from enum import StrEnum

from sqlalchemy.dialects.postgresql import ENUM as PG_ENUM

from app.shared.database.base import as_pg_enum as _as_pg_enum


class OrderStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"

    __pg_enum_name__ = "order_status_enum"

    @classmethod
    def as_pg_enum(cls, name: str = "order_status_enum") -> PG_ENUM:
        return _as_pg_enum(cls, name=name)


class ProductType(StrEnum):
    PDF = "pdf"
    DIGITAL_FILE = "digital_file"
    VIDEO = "video"
    EBOOK = "ebook"
    TEMPLATE = "template"
    OTHER = "other"

    __pg_enum_name__ = "product_type_enum"

    @classmethod
    def as_pg_enum(cls, name: str = "product_type_enum") -> PG_ENUM:
        return _as_pg_enum(cls, name=name)


__all__ = ["OrderStatus", "ProductType"]

# Fin del archivo backend/app/modules/market/enums/order_status_enum.py
