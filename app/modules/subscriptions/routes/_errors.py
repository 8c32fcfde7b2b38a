# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/routes/_errors.py

Traducción de errores de dominio a HTTPException.

Autor: ClubFit
Fecha: 2026-02-14
"""

from fastapi import HTTPException

from app.modules.subscriptions.errors import PaymentError


def to_http_exception(e: PaymentError) -> HTTPException:
    return HTTPException(
        status_code=e.http_status,
        detail={"error": e.code, "message": str(e)},
    )


__all__ = ["to_http_exception"]
