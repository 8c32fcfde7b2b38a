# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/models/plan_models.py

Catálogo de suscripciones (solo lectura para el motor de cobros):
- SubscriptionPlan: plan comercial (nombre, features, orden)
- BillingCycle: cadencia de renovación (interval_type × interval_count)
- SubscriptionPrice: monto autoritativo por (plan, ciclo, moneda)

Autor: ClubFit
Fecha: 2026-02-11
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.shared.database.base import Base, TimestampMixin
from app.modules.subscriptions.enums import IntervalType


class SubscriptionPlan(TimestampMixin, Base):
    """Plan de membresía ofrecido en el catálogo."""

    __tablename__ = "subscription_plans"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    features: Mapped[list] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        doc="Lista de beneficios mostrados en el catálogo.",
    )

    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    prices: Mapped[List["SubscriptionPrice"]] = relationship(
        "SubscriptionPrice",
        back_populates="plan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<SubscriptionPlan slug={self.slug!r}>"


class BillingCycle(TimestampMixin, Base):
    """Cadencia de cobro: p.ej. 1 mes, 3 meses, 1 año."""

    __tablename__ = "billing_cycles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    slug: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    interval_type: Mapped[IntervalType] = mapped_column(
        IntervalType.as_pg_enum(),
        nullable=False,
    )

    interval_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("interval_count > 0", name="interval_count_positive"),
    )

    def __repr__(self) -> str:
        return f"<BillingCycle {self.interval_count} {self.interval_type}>"


class SubscriptionPrice(TimestampMixin, Base):
    """Precio autoritativo de un plan para un ciclo y una moneda."""

    __tablename__ = "subscription_prices"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    plan_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("subscription_plans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    billing_cycle_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("billing_cycles.id", ondelete="RESTRICT"),
        nullable=False,
    )

    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        doc="Monto a cobrar por ciclo en la moneda indicada.",
    )

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    plan: Mapped["SubscriptionPlan"] = relationship(
        "SubscriptionPlan",
        back_populates="prices",
        lazy="selectin",
    )

    billing_cycle: Mapped["BillingCycle"] = relationship(
        "BillingCycle",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint(
            "plan_id",
            "billing_cycle_id",
            "currency",
            name="uq_subscription_prices_plan_cycle_currency",
        ),
        CheckConstraint("amount >= 0", name="amount_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<SubscriptionPrice plan={self.plan_id} {self.amount} {self.currency}>"


__all__ = ["SubscriptionPlan", "BillingCycle", "SubscriptionPrice"]

# Fin del archivo backend/app/modules/subscriptions/models/plan_models.py
