# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/utils/amounts.py

Normalización y comparación de montos por moneda.

- Monedas sin decimales (CLP): el monto viaja como entero y la comparación
  es exacta.
- Monedas decimales (USD, ARS...): se tolera hasta 0.01 de diferencia
  absoluta para absorber formato ("10" vs "10.00").

Autor: ClubFit
Fecha: 2026-02-11
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from app.modules.subscriptions.enums import is_zero_decimal

DECIMAL_TOLERANCE = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Convierte int/float/str a Decimal sin pasar por binario (float -> str)."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Monto inválido: {value!r}") from e


def quantize_for_currency(value: Any, currency: str) -> Decimal:
    """Redondea a 0 decimales (CLP) o a 2 decimales (resto)."""
    exp = Decimal("1") if is_zero_decimal(currency) else Decimal("0.01")
    return to_decimal(value).quantize(exp, rounding=ROUND_HALF_UP)


def format_provider_amount(value: Any, currency: str) -> str:
    """Representación que esperan las APIs ("19990" o "9.99")."""
    return str(quantize_for_currency(value, currency))


def amounts_match(expected: Any, received: Any, currency: str) -> bool:
    exp = to_decimal(expected)
    rec = to_decimal(received)
    if is_zero_decimal(currency):
        # CLP: 19990 == 19990.00, pero 19990 != 19990.5
        return exp == rec and rec == rec.to_integral_value()
    return abs(exp - rec) <= DECIMAL_TOLERANCE


__all__ = [
    "DECIMAL_TOLERANCE",
    "to_decimal",
    "quantize_for_currency",
    "format_provider_amount",
    "amounts_match",
]

# Fin del archivo backend/app/modules/subscriptions/utils/amounts.py
