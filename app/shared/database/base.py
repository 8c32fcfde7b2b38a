# -*- coding: utf-8 -*-
"""
backend/app/shared/database/base.py

Base declarativa y convención de nombres para modelos ORM.

Este módulo proporciona:
- Base: clase base declarativa de SQLAlchemy
- NAMING_CONVENTION: convención de nombres para constraints
- TimestampMixin: created_at / updated_at con default en Python y en servidor
- as_pg_enum: helper genérico para mapear enums Python a ENUM de PostgreSQL

Autor: ClubFit
Fecha: 2026-02-10
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Type

from sqlalchemy import DateTime, MetaData, func
from sqlalchemy.dialects.postgresql import ENUM as PG_ENUM
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from app.shared.utils.datetime_helpers import utcnow

# ===== NAMING CONVENTION =====
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


# ===== BASE DECLARATIVA =====
class Base(DeclarativeBase):
    """
    Base declarativa para todos los modelos ORM.
    Incluye convención de nombres para constraints.
    """
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class TimestampMixin:
    """Columnas de auditoría comunes."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )


# ===== HELPER GENÉRICO PARA ENUMS PG =====
def as_pg_enum(
    enum_cls: Type[Enum],
    name: str | None = None,
    create_type: bool = True,
) -> PG_ENUM:
    """
    Devuelve un tipo ENUM de SQLAlchemy para PostgreSQL basado en un Enum de Python.

    Uso típico:

        class UserSubscription(Base):
            status: Mapped[SubscriptionStatus] = mapped_column(
                SubscriptionStatus.as_pg_enum(),
                nullable=False,
            )

    - Persiste los *values* del enum ("active"), no los nombres ("ACTIVE").
    - Si no se pasa `name`, usa `__pg_enum_name__` del enum,
      o el nombre de la clase en minúsculas.
    - En SQLite (tests) el conftest lo reemplaza por String.
    """
    enum_name = name or getattr(enum_cls, "__pg_enum_name__", enum_cls.__name__.lower())

    def _values(_: object) -> list[str]:
        return [e.value for e in enum_cls]  # type: ignore[arg-type]

    return PG_ENUM(
        enum_cls,
        name=enum_name,
        create_type=create_type,
        values_callable=_values,
    )


__all__ = ["Base", "NAMING_CONVENTION", "TimestampMixin", "as_pg_enum"]

# Fin del archivo backend/app/shared/database/base.py
