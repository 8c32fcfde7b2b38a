# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/repositories/subscription_repository.py

Repositorio para la tabla user_subscriptions.

Responsabilidades:
- Búsqueda por vínculo tipado (proveedor + provider_reference)
- Búsqueda por id de preapproval (external_subscription_id)
- Suscripción activa / más reciente por usuario
- Listado de miembros para administración

Autor: ClubFit
Fecha: 2026-02-12
"""

import uuid
from typing import Optional, Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.shared.database.repository import BaseRepository
from app.modules.auth.models import AppUser
from app.modules.subscriptions.enums import PaymentProvider, SubscriptionStatus
from app.modules.subscriptions.links import ProviderLink
from app.modules.subscriptions.models import UserSubscription


class SubscriptionRepository(BaseRepository[UserSubscription]):
    def __init__(self) -> None:
        super().__init__(UserSubscription)

    # -----------------------------------------------------------
    # Correlación con el proveedor
    # -----------------------------------------------------------
    async def get_by_link(
        self,
        session: AsyncSession,
        link: ProviderLink,
    ) -> Optional[UserSubscription]:
        return await self.get_by_provider_reference(session, link.provider, link.reference)

    async def get_by_provider_reference(
        self,
        session: AsyncSession,
        provider: PaymentProvider,
        reference: str,
    ) -> Optional[UserSubscription]:
        stmt = select(UserSubscription).where(
            UserSubscription.provider == provider,
            UserSubscription.provider_reference == reference,
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_by_external_subscription_id(
        self,
        session: AsyncSession,
        external_subscription_id: str,
    ) -> Optional[UserSubscription]:
        stmt = select(UserSubscription).where(
            UserSubscription.external_subscription_id == external_subscription_id
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_by_reference_string(
        self,
        session: AsyncSession,
        reference: Optional[str],
    ) -> Optional[UserSubscription]:
        """Resuelve un external_reference que debería ser el id de la suscripción."""
        if not reference:
            return None
        try:
            sub_id = uuid.UUID(str(reference))
        except ValueError:
            return None
        return await self.get(session, sub_id)

    # -----------------------------------------------------------
    # Por usuario
    # -----------------------------------------------------------
    async def get_active_for_user(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
    ) -> Optional[UserSubscription]:
        stmt = select(UserSubscription).where(
            UserSubscription.user_id == user_id,
            UserSubscription.status == SubscriptionStatus.ACTIVE,
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_latest_for_user(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
    ) -> Optional[UserSubscription]:
        """Activa si existe; si no, la más reciente."""
        active = await self.get_active_for_user(session, user_id)
        if active is not None:
            return active
        stmt = (
            select(UserSubscription)
            .where(UserSubscription.user_id == user_id)
            .order_by(UserSubscription.created_at.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def list_members(
        self,
        session: AsyncSession,
        *,
        search: Optional[str] = None,
        status: Optional[SubscriptionStatus] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Sequence[UserSubscription]:
        """Suscripciones con su usuario, filtradas por nombre/email y estado."""
        stmt = (
            select(UserSubscription)
            .join(AppUser, AppUser.user_id == UserSubscription.user_id)
            .options(selectinload(UserSubscription.user))
            .order_by(UserSubscription.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        if status is not None:
            stmt = stmt.where(UserSubscription.status == status)
        if search:
            pattern = f"%{search.strip().lower()}%"
            stmt = stmt.where(
                or_(
                    AppUser.user_full_name.ilike(pattern),
                    AppUser.user_email.ilike(pattern),
                )
            )
        result = await session.execute(stmt)
        return result.scalars().all()


__all__ = ["SubscriptionRepository"]

# Fin del archivo backend/app/modules/subscriptions/repositories/subscription_repository.py
