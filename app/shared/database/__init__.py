# -*- coding: utf-8 -*-
"""
backend/app/shared/database/__init__.py

Re-exporta utilidades comunes de base de datos.

Autor: ClubFit
Fecha: 2026-02-10
"""

from __future__ import annotations

from .database import (
    get_engine,
    get_sessionmaker,
    dispose_engine,
    get_async_session,
    session_scope,
    check_database_health,
)
from .base import Base, NAMING_CONVENTION, as_pg_enum
from .repository import BaseRepository

__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "as_pg_enum",
    "BaseRepository",
    "get_engine",
    "get_sessionmaker",
    "dispose_engine",
    "get_async_session",
    "session_scope",
    "check_database_health",
]

# Fin del archivo backend/app/shared/database/__init__.py
