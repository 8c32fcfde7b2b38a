# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/enums/__init__.py

Enums del módulo auth.
"""

from .role_enum import UserRole, as_pg_enum as user_role_pg_enum

__all__ = ["UserRole", "user_role_pg_enum"]
