# -*- coding: utf-8 -*-
"""
backend/app/shared/core/__init__.py

Utilidades de infraestructura compartidas (reintentos HTTP con backoff).

Autor: ClubFit
Fecha: 2026-02-10
"""

from .http_retry_utils import TRANSIENT_HTTP_STATUS, retry_with_backoff

__all__ = ["TRANSIENT_HTTP_STATUS", "retry_with_backoff"]
