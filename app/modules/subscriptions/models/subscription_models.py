# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/models/subscription_models.py

Modelo ORM para la tabla user_subscriptions.

Invariantes a nivel de almacenamiento:
- A lo sumo UNA suscripción 'active' por usuario (índice único parcial).
- Nunca se borra: cancelaciones y expiraciones son cambios de estado.

La correlación con el proveedor vive en subscription_metadata["provider_link"]
(ver links.py) y, para recurrentes de Mercado Pago, en
external_subscription_id (id de la preapproval).

Autor: ClubFit
Fecha: 2026-02-11
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.shared.database.base import Base, TimestampMixin
from app.modules.subscriptions.enums import PaymentProvider, SubscriptionStatus
from .plan_models import BillingCycle, SubscriptionPlan

if TYPE_CHECKING:
    from .subscription_payment_models import SubscriptionPayment
    from app.modules.auth.models import AppUser


_ACTIVE_ONLY = text("status = 'active'")


class UserSubscription(TimestampMixin, Base):
    """Inscripción de un usuario en un plan para un ciclo de facturación."""

    __tablename__ = "user_subscriptions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("app_users.user_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        doc="Usuario suscrito (app_users.user_id).",
    )

    plan_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("subscription_plans.id", ondelete="RESTRICT"),
        nullable=False,
    )

    billing_cycle_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("billing_cycles.id", ondelete="RESTRICT"),
        nullable=False,
    )

    status: Mapped[SubscriptionStatus] = mapped_column(
        SubscriptionStatus.as_pg_enum(),
        nullable=False,
        default=SubscriptionStatus.PENDING_PAYMENT,
        index=True,
    )

    provider: Mapped[Optional[PaymentProvider]] = mapped_column(
        PaymentProvider.as_pg_enum(),
        nullable=True,
        doc="Pasarela elegida en el checkout.",
    )

    provider_reference: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        index=True,
        doc="Clave de correlación del vínculo (buy_order, order_id, preference_id o preapproval_id).",
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        doc="Monto esperado por ciclo (resuelto desde subscription_prices).",
    )

    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    current_period_start: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    current_period_end: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    auto_renew: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    cancellation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    external_subscription_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        index=True,
        doc="Id de la preapproval de Mercado Pago (solo recurrentes).",
    )

    subscription_metadata: Mapped[dict] = mapped_column(
        JSONB,
        nullable=False,
        default=dict,
        doc="provider_link tipado + payloads de auditoría.",
    )

    plan: Mapped["SubscriptionPlan"] = relationship("SubscriptionPlan", lazy="selectin")
    billing_cycle: Mapped["BillingCycle"] = relationship("BillingCycle", lazy="selectin")

    user: Mapped["AppUser"] = relationship(
        "AppUser",
        foreign_keys=[user_id],
        lazy="noload",
    )

    payments: Mapped[List["SubscriptionPayment"]] = relationship(
        "SubscriptionPayment",
        back_populates="subscription",
        lazy="noload",
        passive_deletes="all",
    )

    __table_args__ = (
        Index(
            "uq_user_subscriptions_one_active_per_user",
            "user_id",
            unique=True,
            postgresql_where=_ACTIVE_ONLY,
            sqlite_where=_ACTIVE_ONLY,
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<UserSubscription id={self.id} user={self.user_id} "
            f"status={self.status} provider={self.provider}>"
        )


__all__ = ["UserSubscription"]

# Fin del archivo backend/app/modules/subscriptions/models/subscription_models.py
