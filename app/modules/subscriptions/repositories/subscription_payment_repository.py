# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/repositories/subscription_payment_repository.py

Repositorio para la tabla subscription_payments.

transaction_id es UNIQUE: find_by_transaction_id es la compuerta de
idempotencia a nivel aplicación; la restricción cubre la carrera.

Autor: ClubFit
Fecha: 2026-02-12
"""

import uuid
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository
from app.modules.subscriptions.models import SubscriptionPayment


class SubscriptionPaymentRepository(BaseRepository[SubscriptionPayment]):
    def __init__(self) -> None:
        super().__init__(SubscriptionPayment)

    async def find_by_transaction_id(
        self,
        session: AsyncSession,
        transaction_id: str,
    ) -> Optional[SubscriptionPayment]:
        stmt = select(SubscriptionPayment).where(SubscriptionPayment.transaction_id == transaction_id)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def list_by_user(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
    ) -> Sequence[SubscriptionPayment]:
        stmt = (
            select(SubscriptionPayment)
            .where(SubscriptionPayment.user_id == user_id)
            .order_by(SubscriptionPayment.created_at.desc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_by_subscription(
        self,
        session: AsyncSession,
        subscription_id: uuid.UUID,
    ) -> Sequence[SubscriptionPayment]:
        stmt = (
            select(SubscriptionPayment)
            .where(SubscriptionPayment.subscription_id == subscription_id)
            .order_by(SubscriptionPayment.created_at)
        )
        result = await session.execute(stmt)
        return result.scalars().all()


__all__ = ["SubscriptionPaymentRepository"]

# Fin del archivo backend/app/modules/subscriptions/repositories/subscription_payment_repository.py
