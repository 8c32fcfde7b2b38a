# -*- coding: utf-8 -*-
"""
backend/app/main.py

Punto de entrada del backend ClubFit.

- Carga .env ANTES de leer settings (en producción no pisa el entorno).
- Logging vía setup_logging (plain en desarrollo, JSON en producción).
- Routers bajo /api: suscripciones y market. /metrics y /health en la raíz.
- Lifespan: valida la configuración de pagos al arrancar y cierra el pool
  de la base de datos en shutdown.

Autor: ClubFit
Fecha: 2026-02-16
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
_override_env = os.getenv("PYTHON_ENV", "development").lower() != "production"
load_dotenv(dotenv_path=_ENV_PATH, override=_override_env)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.modules.market.routes import router as market_router
from app.modules.subscriptions.routes import metrics_router
from app.modules.subscriptions.routes import router as subscriptions_router
from app.shared.config import get_payments_settings, get_settings
from app.shared.config.logging_config import setup_logging
from app.shared.database import check_database_health, dispose_engine
from app.shared.middleware import JSONExceptionMiddleware, RequestLoggingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    payments = get_payments_settings()
    logger.info(
        "🟢 Backend iniciado (env=%s, payments_mode=%s, creadores con credenciales=%s)",
        get_settings().python_env,
        payments.payments_mode,
        sorted(payments.creator_credentials),
    )
    try:
        yield
    finally:
        await dispose_engine()
        logger.info("🔴 Backend apagado.")


openapi_tags = [
    {"name": "subscriptions", "description": "Planes, suscripción vigente, pagos y cancelación"},
    {"name": "subscriptions-checkout", "description": "Checkout y validación por pasarela"},
    {"name": "subscriptions-webhooks", "description": "Notificaciones de Mercado Pago"},
    {"name": "market", "description": "Órdenes de productos digitales por creador"},
]


def _configure_cors(app_instance: FastAPI) -> None:
    origins = get_settings().get_cors_origins()
    wildcard = origins == ["*"]
    # "*" con credenciales es inválido en navegadores
    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=not wildcard,
        allow_methods=["*"] if wildcard else ["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["*"],
        max_age=600,
    )
    logger.info("CORS configurado: origins=%s", origins)


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Suscripciones y market con WebPay, PayPal y Mercado Pago",
        version=settings.app_version,
        lifespan=lifespan,
        openapi_tags=openapi_tags,
    )

    # El último middleware agregado es el más externo
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(JSONExceptionMiddleware)
    _configure_cors(app)

    app.include_router(subscriptions_router, prefix="/api")
    app.include_router(market_router, prefix="/api")
    if settings.metrics_enabled:
        app.include_router(metrics_router)

    @app.get("/health", include_in_schema=False)
    async def health():
        db_ok = await check_database_health()
        return {"status": "ok" if db_ok else "degraded", "database": db_ok}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run("app.main:app", host=_settings.app_host, port=_settings.app_port)

# Fin del archivo backend/app/main.py
