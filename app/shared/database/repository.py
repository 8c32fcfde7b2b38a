# -*- coding: utf-8 -*-
"""
backend/app/shared/database/repository.py

Repositorio base para operaciones async con SQLAlchemy.

Los repositorios no hacen commit: la unidad de trabajo la cierra
el servicio que orquesta la operación.

Autor: ClubFit
Fecha: 2026-02-10
"""

from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")  # modelo ORM


class BaseRepository(Generic[T]):
    """Base de los repositorios por modelo; las consultas propias viven en cada subclase."""

    def __init__(self, model: Type[T]):
        self.model = model

    async def get(self, session: AsyncSession, obj_id: Any) -> Optional[T]:
        """Lectura por PK (usa el identity map de la sesión)."""
        return await session.get(self.model, obj_id)


# Fin del archivo backend/app/shared/database/repository.py
