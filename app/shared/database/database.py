# -*- coding: utf-8 -*-
"""
backend/app/shared/database/database.py

SQLAlchemy async (asyncpg en producción, aiosqlite en tests).

Provee:
- get_engine(): engine perezoso construido desde settings.database_url
- get_sessionmaker(): async_sessionmaker ligado al engine
- Dependencia FastAPI: get_async_session
- session_scope(): context manager para jobs/scripts
- check_database_health()

Notas:
- El engine NO se crea en import-time; así la recolección de tests no
  necesita una base de datos accesible.
- Las sesiones usan expire_on_commit=False para poder serializar modelos
  después del commit.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.shared.config import get_settings
from app.shared.database.base import Base  # reutilizamos la Base única

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None


def get_engine() -> AsyncEngine:
    """Crea (una sola vez) el engine async a partir de la configuración."""
    global _engine
    if _engine is None:
        settings = get_settings()
        url = settings.database_url
        kwargs = {"echo": settings.db_echo_sql, "future": True}
        if url.startswith("postgresql"):
            kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
            )
        _engine = create_async_engine(url, **kwargs)
        logger.info("[DB] engine creado (dialect=%s)", _engine.dialect.name)
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    global _sessionmaker
    if _sessionmaker is None:
        _sessionmaker = async_sessionmaker(
            bind=get_engine(),
            expire_on_commit=False,
            class_=AsyncSession,
            autoflush=False,
        )
    return _sessionmaker


async def dispose_engine() -> None:
    """Cierra el pool en shutdown (lifespan)."""
    global _engine, _sessionmaker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessionmaker = None


# ── Dependencia FastAPI
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with get_sessionmaker()() as session:
        try:
            yield session
        except SQLAlchemyError:
            # Importante: rollback para liberar cualquier transacción/lock
            await session.rollback()
            raise
        finally:
            if session.in_transaction():
                await session.rollback()


# ── Context manager reutilizable en jobs/scripts
@asynccontextmanager
async def session_scope() -> AsyncGenerator[AsyncSession, None]:
    async with get_sessionmaker()() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()


# ── Health check
async def check_database_health(timeout_s: float = 3.0, sql: str = "SELECT 1") -> bool:
    """
    Verifica conectividad a la base de datos.

    Returns:
        True si la conexión es exitosa, False en caso contrario
    """
    try:
        async with asyncio.timeout(timeout_s):
            async with get_engine().connect() as conn:
                await conn.execute(text(sql))
        return True
    except (SQLAlchemyError, OSError, TimeoutError) as e:
        logger.warning("[DB] health check falló: %s", e)
        return False


__all__ = [
    "Base",
    "get_engine",
    "get_sessionmaker",
    "dispose_engine",
    "get_async_session",
    "session_scope",
    "check_database_health",
]
# Fin del archivo backend/app/shared/database/database.py
