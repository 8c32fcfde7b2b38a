# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/models/subscription_payment_models.py

Modelo ORM para la tabla subscription_payments (ledger append-only).

transaction_id es UNIQUE: es la compuerta de idempotencia a nivel de base
de datos. Dos entregas concurrentes de la misma confirmación no pueden
crear dos filas; la segunda falla con IntegrityError y se trata como
duplicado.

Autor: ClubFit
Fecha: 2026-02-11
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.shared.database.base import Base, TimestampMixin
from app.modules.subscriptions.enums import PaymentProvider, PaymentStatus

if TYPE_CHECKING:
    from .subscription_models import UserSubscription


class SubscriptionPayment(TimestampMixin, Base):
    """Cobro confirmado (o intentado) asociado a una suscripción."""

    __tablename__ = "subscription_payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # RESTRICT: los pagos son auditoría, no se borran en cascada
    subscription_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("user_subscriptions.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("app_users.user_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    status: Mapped[PaymentStatus] = mapped_column(
        PaymentStatus.as_pg_enum(),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )

    payment_method: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        doc="Medio reportado por el proveedor (VD, credit_card, paypal...).",
    )

    payment_provider: Mapped[PaymentProvider] = mapped_column(
        PaymentProvider.as_pg_enum(),
        nullable=False,
    )

    transaction_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Id de transacción del proveedor (token WebPay, capture PayPal, payment MP).",
    )

    period_start: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    period_end: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    refunded_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    payment_metadata: Mapped[dict] = mapped_column(
        JSONB,
        nullable=False,
        default=dict,
        doc="Payload crudo del proveedor para auditoría.",
    )

    subscription: Mapped["UserSubscription"] = relationship(
        "UserSubscription",
        back_populates="payments",
        lazy="noload",
    )

    __table_args__ = (
        UniqueConstraint("transaction_id", name="uq_subscription_payments_transaction_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<SubscriptionPayment id={self.id} tx={self.transaction_id!r} "
            f"status={self.status} amount={self.amount} {self.currency}>"
        )


__all__ = ["SubscriptionPayment"]

# Fin del archivo backend/app/modules/subscriptions/models/subscription_payment_models.py
