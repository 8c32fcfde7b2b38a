# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_dev.py

Overrides para entorno de DESARROLLO usando Pydantic v2.
Logging legible en consola y correos en modo console.

Autor: ClubFit
Fecha: 2026-02-10
"""

from typing import Literal

from .settings_base import BaseAppSettings


class DevSettings(BaseAppSettings):
    """Configuración para entorno de desarrollo."""

    python_env: Literal["development", "test", "production"] = "development"

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"
    log_format: Literal["json", "pretty", "plain"] = "plain"

    email_mode: Literal["console", "api"] = "console"


__all__ = ["DevSettings"]
# Fin del archivo backend/app/shared/config/settings_dev.py
