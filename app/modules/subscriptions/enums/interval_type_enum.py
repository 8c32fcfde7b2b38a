# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/enums/interval_type_enum.py

Unidad del intervalo de un ciclo de facturación.

Autor: ClubFit
Fecha: 2026-02-11
"""

from enum import StrEnum

from sqlalchemy.dialects.postgresql import ENUM as PG_ENUM

from app.shared.database.base import as_pg_enum as _as_pg_enum


class IntervalType(StrEnum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    __pg_enum_name__ = "billing_interval_type_enum"

    @classmethod
    def as_pg_enum(cls, name: str = "billing_interval_type_enum") -> PG_ENUM:
        return _as_pg_enum(cls, name=name)


__all__ = ["IntervalType"]

# Fin del archivo backend/app/modules/subscriptions/enums/interval_type_enum.py
