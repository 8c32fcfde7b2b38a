# backend/tests/conftest.py
# -*- coding: utf-8 -*-
"""
Config global de tests para ClubFit.

- PYTHON_ENV=test antes de importar la app (settings de prueba, sin .env real).
- Singletons de settings limpios entre tests.
- Motor ASYNC sqlite+aiosqlite en memoria con los tipos Postgres parcheados
  (JSONB -> JSON, ENUM -> String) y sin schema.
"""

import os

os.environ.setdefault("PYTHON_ENV", "test")
os.environ.setdefault("PAYMENTS_MODE", "sandbox")

import pytest
from sqlalchemy import JSON, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# --- Base única: importar TODOS los modelos para registrarlos en la metadata ---
from app.shared.database.base import Base
from app.modules.auth.models import AppUser  # noqa: F401
from app.modules.subscriptions.models import (  # noqa: F401
    BillingCycle,
    SubscriptionPayment,
    SubscriptionPlan,
    SubscriptionPrice,
    UserSubscription,
)
from app.modules.market.models import Creator, Order, OrderItem, Product, ProductPrice  # noqa: F401
from app.shared.config import get_settings
from app.shared.config.settings_payments import reset_payments_settings


def _patch_pg_types_for_sqlite(metadata):
    """Reemplaza tipos Postgres (JSONB/Enum) por equivalentes compatibles con SQLite."""
    for table in metadata.tables.values():
        for col in table.columns:
            t = col.type
            if isinstance(t, JSONB):
                col.type = JSON()
            elif isinstance(t, SQLEnum):
                # PG_ENUM hereda de Enum; en SQLite se guarda el value como texto
                col.type = String(50)


def _strip_schema(metadata):
    """Quita schema='public' (u otros) para compatibilidad con SQLite."""
    for tbl in metadata.tables.values():
        tbl.schema = None


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Cada test ve settings recién construidos."""
    get_settings.cache_clear()
    reset_payments_settings()
    yield
    get_settings.cache_clear()
    reset_payments_settings()


@pytest.fixture
async def engine():
    """
    Motor ASYNC SQLite en memoria, uno por test.
    StaticPool: todas las sesiones comparten la misma conexión (y la misma BD).
    """
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with eng.begin() as conn:
        def _create_all(sync_conn):
            _patch_pg_types_for_sqlite(Base.metadata)
            _strip_schema(Base.metadata)
            Base.metadata.create_all(bind=sync_conn)
        await conn.run_sync(_create_all)

    try:
        yield eng
    finally:
        await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Sesión ASYNC; rollback de lo pendiente al finalizar."""
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


# Fin del archivo backend/tests/conftest.py
