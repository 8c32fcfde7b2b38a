# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/enums/currency_enum.py

Monedas usadas por el catálogo de planes.

La moneda se persiste como CHAR(3) ISO 4217 (no ENUM de Postgres) porque
cada pasarela acepta un conjunto distinto; aquí se centraliza qué monedas
no tienen decimales (WebPay cobra CLP en unidades enteras).

Autor: ClubFit
Fecha: 2026-02-11
"""

from enum import StrEnum


class Currency(StrEnum):
    CLP = "CLP"
    USD = "USD"
    ARS = "ARS"
    MXN = "MXN"
    BRL = "BRL"
    COP = "COP"
    PEN = "PEN"


# Monedas sin subunidad: montos enteros y comparación exacta
ZERO_DECIMAL_CURRENCIES = frozenset({"CLP", "COP", "PYG", "JPY", "KRW"})


def is_zero_decimal(currency: str) -> bool:
    return (currency or "").upper() in ZERO_DECIMAL_CURRENCIES


__all__ = ["Currency", "ZERO_DECIMAL_CURRENCIES", "is_zero_decimal"]

# Fin del archivo backend/app/modules/subscriptions/enums/currency_enum.py
