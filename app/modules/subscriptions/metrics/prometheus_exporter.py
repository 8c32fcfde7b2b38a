# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/metrics/prometheus_exporter.py

Exporter Prometheus del motor de suscripciones y market.
Registro propio (no el global de prometheus_client) para que los tests
puedan leer valores sin colisiones.

Autor: ClubFit
Fecha: 2026-02-12
"""

import logging
from datetime import datetime, timezone

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------
# Registro global de Prometheus
# --------------------------------------------------------------------------
registry = CollectorRegistry()

# --------------------------------------------------------------------------
# Definición de métricas
# --------------------------------------------------------------------------

CHECKOUT_STARTED_TOTAL = Counter(
    "subscriptions_checkout_started_total",
    "Checkouts iniciados",
    ["provider", "currency", "kind"],  # kind: subscription/recurring/order
    registry=registry,
)

VALIDATIONS_TOTAL = Counter(
    "subscriptions_validation_total",
    "Validaciones de pago por resultado",
    ["provider", "outcome"],  # outcome: activated/duplicate/not_authorized/amount_mismatch/error
    registry=registry,
)

WEBHOOKS_RECEIVED_TOTAL = Counter(
    "subscriptions_webhook_received_total",
    "Webhooks recibidos por proveedor y tipo",
    ["provider", "event_type"],
    registry=registry,
)

WEBHOOKS_OUTCOME_TOTAL = Counter(
    "subscriptions_webhook_outcome_total",
    "Webhooks por outcome de negocio (ok/ignored/duplicate/error)",
    ["provider", "outcome"],
    registry=registry,
)

AMOUNT_MISMATCH_TOTAL = Counter(
    "subscriptions_amount_mismatch_total",
    "Mismatches de monto detectados",
    ["provider"],
    registry=registry,
)

SIDE_EFFECT_FAILURES_TOTAL = Counter(
    "subscriptions_side_effect_failures_total",
    "Fallos de efectos secundarios (email, recibo)",
    ["effect"],
    registry=registry,
)

PROVIDER_REQUEST_SECONDS = Histogram(
    "subscriptions_provider_request_seconds",
    "Latencia de llamadas a pasarelas (segundos)",
    ["provider", "operation"],
    registry=registry,
)

# --------------------------------------------------------------------------
# Funciones auxiliares
# --------------------------------------------------------------------------
def render_prometheus_metrics() -> bytes:
    """Salida actual de las métricas en formato Prometheus."""
    return generate_latest(registry)


def increment_checkout(provider: str, currency: str, kind: str = "subscription") -> None:
    CHECKOUT_STARTED_TOTAL.labels(provider=provider, currency=currency, kind=kind).inc()


def observe_validation(provider: str, outcome: str) -> None:
    VALIDATIONS_TOTAL.labels(provider=provider, outcome=outcome).inc()
    logger.debug("[Prometheus] Validación %s outcome=%s", provider, outcome)


def observe_webhook_received(provider: str, event_type: str) -> None:
    WEBHOOKS_RECEIVED_TOTAL.labels(provider=provider, event_type=event_type or "unknown").inc()


def observe_webhook_outcome(provider: str, outcome: str) -> None:
    WEBHOOKS_OUTCOME_TOTAL.labels(provider=provider, outcome=outcome).inc()


def observe_amount_mismatch(provider: str) -> None:
    AMOUNT_MISMATCH_TOTAL.labels(provider=provider).inc()


def observe_side_effect_failure(effect: str) -> None:
    SIDE_EFFECT_FAILURES_TOTAL.labels(effect=effect).inc()


def observe_provider_request(provider: str, operation: str, duration: float) -> None:
    PROVIDER_REQUEST_SECONDS.labels(provider=provider, operation=operation).observe(duration)


def prometheus_ping() -> dict:
    """Salud simple del exporter."""
    return {
        "status": "ok",
        "service": "subscriptions-metrics",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


__all__ = [
    "CONTENT_TYPE_LATEST",
    "registry",
    "render_prometheus_metrics",
    "increment_checkout",
    "observe_validation",
    "observe_webhook_received",
    "observe_webhook_outcome",
    "observe_amount_mismatch",
    "observe_side_effect_failure",
    "observe_provider_request",
    "prometheus_ping",
]

# Fin del archivo backend/app/modules/subscriptions/metrics/prometheus_exporter.py
