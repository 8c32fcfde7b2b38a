# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/datetime_helpers.py

Utilidades para manejo consistente de timestamps UTC / ISO 8601.

Autor: ClubFit
Fecha: 2026-02-10
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """
    Retorna el timestamp UTC actual (timezone-aware).

    Examples:
        >>> utcnow().tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def from_iso8601(iso_string: str) -> datetime:
    """
    Parsea una cadena ISO 8601 y retorna datetime UTC timezone-aware.

    Mercado Pago devuelve fechas con offset ("2026-03-01T10:00:00.000-04:00");
    PayPal y WebPay usan "Z".

    Examples:
        >>> from_iso8601("2025-10-26T14:30:00Z").tzinfo == timezone.utc
        True
    """
    dt = datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
    return ensure_utc(dt)


def ensure_utc(dt: datetime) -> datetime:
    """
    Asegura que un datetime sea UTC timezone-aware.

    SQLite devuelve datetimes naive; se asumen en UTC.

    Examples:
        >>> ensure_utc(datetime(2025, 10, 26, 14, 30)).tzinfo == timezone.utc
        True
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    elif dt.tzinfo != timezone.utc:
        return dt.astimezone(timezone.utc)
    return dt


def to_iso8601(dt: Optional[datetime]) -> Optional[str]:
    """
    Convierte datetime a string ISO 8601 con 'Z' para UTC.

    Examples:
        >>> to_iso8601(datetime(2025, 10, 26, 14, 30, 0, tzinfo=timezone.utc))
        '2025-10-26T14:30:00Z'
    """
    if dt is None:
        return None
    return ensure_utc(dt).isoformat().replace("+00:00", "Z")


__all__ = ["utcnow", "to_iso8601", "from_iso8601", "ensure_utc"]
# Fin del archivo backend/app/shared/utils/datetime_helpers.py
