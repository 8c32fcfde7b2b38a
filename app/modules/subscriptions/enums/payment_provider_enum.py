# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/enums/payment_provider_enum.py

Proveedores de pago soportados.
Sincronizado con el tipo ENUM de PostgreSQL: payment_provider_enum.

Autor: ClubFit
Fecha: 2026-02-11
"""

from enum import StrEnum

from sqlalchemy.dialects.postgresql import ENUM as PG_ENUM

from app.shared.database.base import as_pg_enum as _as_pg_enum


class PaymentProvider(StrEnum):
    """Pasarela que procesó (o procesará) el cobro."""

    WEBPAY = "webpay"
    PAYPAL = "paypal"
    MERCADOPAGO = "mercadopago"

    __pg_enum_name__ = "payment_provider_enum"

    @classmethod
    def as_pg_enum(cls, name: str = "payment_provider_enum") -> PG_ENUM:
        return _as_pg_enum(cls, name=name)


__all__ = ["PaymentProvider"]

# Fin del archivo backend/app/modules/subscriptions/enums/payment_provider_enum.py
