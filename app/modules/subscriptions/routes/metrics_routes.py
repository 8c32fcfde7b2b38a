# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/routes/metrics_routes.py

GET /metrics en formato de exposición de Prometheus.
"""

from fastapi import APIRouter, Response

from app.modules.subscriptions.metrics.prometheus_exporter import (
    CONTENT_TYPE_LATEST,
    render_prometheus_metrics,
)

router = APIRouter(tags=["metrics"])


@router.get("/metrics", include_in_schema=False)
async def prometheus_metrics() -> Response:
    return Response(content=render_prometheus_metrics(), media_type=CONTENT_TYPE_LATEST)


__all__ = ["router"]
