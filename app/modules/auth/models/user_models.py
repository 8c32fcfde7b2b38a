# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/models/user_models.py

Modelo de usuarios (AppUser).

El registro/login viven fuera de este servicio; aquí solo se leen los
datos que necesitan suscripciones y market (email, nombre, moneda
preferida, rol).

Autor: ClubFit
Fecha: 2026-02-11
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base
from app.shared.utils.datetime_helpers import utcnow
from app.modules.auth.enums import UserRole, user_role_pg_enum


class AppUser(Base):
    __tablename__ = "app_users"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    user_email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)

    user_role: Mapped[UserRole] = mapped_column(
        user_role_pg_enum(),
        nullable=False,
        default=UserRole.member,
        server_default=UserRole.member.value,
    )

    preferred_currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        default="CLP",
        server_default="CLP",
        doc="Moneda usada cuando el checkout no especifica una.",
    )

    user_created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    @property
    def is_admin(self) -> bool:
        return self.user_role == UserRole.admin

    def __repr__(self) -> str:
        return f"<AppUser id={self.user_id} email={self.user_email!r}>"


__all__ = ["AppUser"]

# Fin del archivo backend/app/modules/auth/models/user_models.py
