# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/enums/payment_status_enum.py

Enum de estados de un cobro de suscripción (subscription_payments).
Sincronizado con el tipo ENUM de PostgreSQL: subscription_payment_status_enum.

Autor: ClubFit
Fecha: 2026-02-11
"""

from enum import StrEnum

from sqlalchemy.dialects.postgresql import ENUM as PG_ENUM

from app.shared.database.base import as_pg_enum as _as_pg_enum


class PaymentStatus(StrEnum):
    """Estado del cobro registrado en el ledger."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"

    __pg_enum_name__ = "subscription_payment_status_enum"

    @classmethod
    def as_pg_enum(cls, name: str = "subscription_payment_status_enum") -> PG_ENUM:
        return _as_pg_enum(cls, name=name)


__all__ = ["PaymentStatus"]

# Fin del archivo backend/app/modules/subscriptions/enums/payment_status_enum.py
