# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/enums/role_enum.py

Enum de roles de usuario.
Usado como tipo ENUM en PostgreSQL (user_role_enum).

Roles disponibles: member, admin

Autor: ClubFit
Fecha: 2026-02-11
"""
from enum import StrEnum

from sqlalchemy.dialects.postgresql import ENUM as PG_ENUM

from app.shared.database.base import as_pg_enum as _as_pg_enum


class UserRole(StrEnum):
    member = "member"
    admin = "admin"

    __pg_enum_name__ = "user_role_enum"


def as_pg_enum(name: str = "user_role_enum") -> PG_ENUM:
    """Tipo PG_ENUM para la columna app_users.user_role."""
    return _as_pg_enum(UserRole, name=name)


__all__ = ["UserRole", "as_pg_enum"]

# Fin del archivo backend/app/modules/auth/enums/role_enum.py
