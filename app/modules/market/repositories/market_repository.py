# -*- coding: utf-8 -*-
"""
backend/app/modules/market/repositories/market_repository.py

Acceso a datos del market. Los repositorios hacen flush; el commit es
responsabilidad del servicio.

Autor: ClubFit
Fecha: 2026-02-15
"""

from __future__ import annotations

import uuid
from typing import Iterable, Optional, Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository
from app.modules.market.models import Creator, Order, Product


class CreatorRepository(BaseRepository[Creator]):
    def __init__(self) -> None:
        super().__init__(Creator)

    async def get_by_slug(self, session: AsyncSession, slug: str) -> Optional[Creator]:
        stmt = select(Creator).where(Creator.slug == slug.lower())
        result = await session.execute(stmt)
        return result.scalars().first()


class ProductRepository(BaseRepository[Product]):
    def __init__(self) -> None:
        super().__init__(Product)

    async def get_many(self, session: AsyncSession, ids: Iterable[uuid.UUID]) -> Sequence[Product]:
        ids = list(ids)
        if not ids:
            return []
        result = await session.execute(select(Product).where(Product.id.in_(ids)))
        return result.scalars().all()


class OrderRepository(BaseRepository[Order]):
    def __init__(self) -> None:
        super().__init__(Order)

    async def get_by_order_number(self, session: AsyncSession, order_number: str) -> Optional[Order]:
        result = await session.execute(select(Order).where(Order.order_number == order_number))
        return result.scalars().first()

    async def get_by_token(self, session: AsyncSession, token: str) -> Optional[Order]:
        """Orden cuyo provider_reference o transaction_id coincide con el token del retorno."""
        stmt = select(Order).where(
            or_(Order.provider_reference == token, Order.transaction_id == token)
        )
        result = await session.execute(stmt)
        return result.scalars().first()


__all__ = ["CreatorRepository", "ProductRepository", "OrderRepository"]

# Fin del archivo backend/app/modules/market/repositories/market_repository.py
