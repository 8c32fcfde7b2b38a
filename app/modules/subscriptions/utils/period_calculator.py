# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/utils/period_calculator.py

Cálculo de períodos de facturación.

    period_end = period_start + interval_count × interval_type

- day / week: suma fija (timedelta).
- month / year: aritmética de calendario; si el día no existe en el mes
  destino se ajusta al último día de ese mes:
      2024-01-31 + 1 mes  -> 2024-02-29
      2024-03-31 + 1 mes  -> 2024-04-30
      2024-02-29 + 1 año  -> 2025-02-28
  La hora y la zona horaria se conservan.

Autor: ClubFit
Fecha: 2026-02-11
"""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta
from typing import Tuple

from app.modules.subscriptions.enums import IntervalType


def add_months(value: datetime, months: int) -> datetime:
    """Suma meses de calendario ajustando al último día del mes destino."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return value.replace(year=year, month=month, day=min(value.day, last_day))


def add_interval(start: datetime, interval_type: IntervalType | str, interval_count: int) -> datetime:
    """
    Devuelve start + interval_count × interval_type.

    Raises:
        ValueError: interval_count <= 0 o interval_type desconocido
    """
    if interval_count <= 0:
        raise ValueError(f"interval_count debe ser > 0, recibido: {interval_count}")

    unit = IntervalType(interval_type)
    if unit is IntervalType.DAY:
        return start + timedelta(days=interval_count)
    if unit is IntervalType.WEEK:
        return start + timedelta(weeks=interval_count)
    if unit is IntervalType.MONTH:
        return add_months(start, interval_count)
    return add_months(start, 12 * interval_count)


def compute_period(
    start: datetime,
    interval_type: IntervalType | str,
    interval_count: int,
) -> Tuple[datetime, datetime]:
    """(period_start, period_end) para un ciclo que comienza en `start`."""
    return start, add_interval(start, interval_type, interval_count)


__all__ = ["add_months", "add_interval", "compute_period"]

# Fin del archivo backend/app/modules/subscriptions/utils/period_calculator.py
