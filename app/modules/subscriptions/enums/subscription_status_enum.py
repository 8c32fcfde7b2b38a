# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/enums/subscription_status_enum.py

Enum de estados de una suscripción de usuario.
Sincronizado con el tipo ENUM de PostgreSQL: subscription_status_enum.

PENDING_PAYMENT es el estado inicial (checkout creado, sin confirmación del
proveedor). PAYMENT_FAILED queda reservado para cobros recurrentes fallidos
de una suscripción que ya estuvo activa.

Autor: ClubFit
Fecha: 2026-02-11
"""

from enum import StrEnum

from sqlalchemy.dialects.postgresql import ENUM as PG_ENUM

from app.shared.database.base import as_pg_enum as _as_pg_enum


class SubscriptionStatus(StrEnum):
    """Estado de la suscripción en su ciclo de vida."""

    PENDING_PAYMENT = "pending_payment"
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    PAYMENT_FAILED = "payment_failed"

    __pg_enum_name__ = "subscription_status_enum"

    @property
    def is_terminal(self) -> bool:
        return self in (SubscriptionStatus.CANCELLED, SubscriptionStatus.EXPIRED)

    @classmethod
    def as_pg_enum(cls, name: str = "subscription_status_enum") -> PG_ENUM:
        return _as_pg_enum(cls, name=name)


__all__ = ["SubscriptionStatus"]

# Fin del archivo backend/app/modules/subscriptions/enums/subscription_status_enum.py
