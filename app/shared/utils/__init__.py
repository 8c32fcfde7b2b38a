# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/__init__.py

Utilidades comunes (fechas UTC).
"""

from .datetime_helpers import ensure_utc, from_iso8601, to_iso8601, utcnow

__all__ = ["utcnow", "to_iso8601", "from_iso8601", "ensure_utc"]
