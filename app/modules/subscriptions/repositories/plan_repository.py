# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/repositories/plan_repository.py

Lecturas del catálogo: planes, ciclos y precios.

Autor: ClubFit
Fecha: 2026-02-12
"""

import uuid
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository
from app.modules.subscriptions.models import (
    BillingCycle,
    SubscriptionPlan,
    SubscriptionPrice,
)


class PlanRepository(BaseRepository[SubscriptionPlan]):
    def __init__(self) -> None:
        super().__init__(SubscriptionPlan)

    async def list_active(self, session: AsyncSession) -> Sequence[SubscriptionPlan]:
        """Planes activos ordenados por sort_order (precios vía selectin)."""
        stmt = (
            select(SubscriptionPlan)
            .where(SubscriptionPlan.is_active.is_(True))
            .order_by(SubscriptionPlan.sort_order, SubscriptionPlan.name)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_billing_cycle(
        self,
        session: AsyncSession,
        billing_cycle_id: uuid.UUID,
    ) -> Optional[BillingCycle]:
        return await session.get(BillingCycle, billing_cycle_id)

    async def get_price(
        self,
        session: AsyncSession,
        plan_id: uuid.UUID,
        billing_cycle_id: uuid.UUID,
        currency: str,
    ) -> Optional[SubscriptionPrice]:
        """Precio activo para (plan, ciclo, moneda)."""
        stmt = select(SubscriptionPrice).where(
            SubscriptionPrice.plan_id == plan_id,
            SubscriptionPrice.billing_cycle_id == billing_cycle_id,
            SubscriptionPrice.currency == currency.upper(),
            SubscriptionPrice.is_active.is_(True),
        )
        result = await session.execute(stmt)
        return result.scalars().first()


__all__ = ["PlanRepository"]

# Fin del archivo backend/app/modules/subscriptions/repositories/plan_repository.py
