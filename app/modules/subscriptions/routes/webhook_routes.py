# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/routes/webhook_routes.py

Webhook de Mercado Pago.

Acepta el formato nuevo ({"type", "data": {"id"}}), los alias "topic" y
"action", y los query params ?type=&data.id= (o ?topic=&id=) del formato
IPN. Siempre responde 200 {"received": true}: Mercado Pago reintenta ante
cualquier otro código y los errores se registran en el servicio.

Autor: ClubFit
Fecha: 2026-02-14
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, Request

from app.modules.subscriptions.dependencies import get_webhook_service
from app.modules.subscriptions.schemas import WebhookAck
from app.modules.subscriptions.services.webhook_service import MercadoPagoWebhookService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["subscriptions-webhooks"])


async def _read_payload(request: Request) -> Dict[str, Any]:
    raw = await request.body()
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        logger.warning("[mercadopago] webhook con cuerpo no JSON (%d bytes)", len(raw))
        return {}
    return payload if isinstance(payload, dict) else {}


def extract_event(payload: Dict[str, Any], query: Dict[str, str]) -> Tuple[Optional[str], Optional[str]]:
    """Obtiene (tipo, data.id) del cuerpo o, en su defecto, de los query params."""
    event_type = (
        payload.get("type")
        or payload.get("topic")
        or payload.get("action")
        or query.get("type")
        or query.get("topic")
    )

    data = payload.get("data")
    data_id = data.get("id") if isinstance(data, dict) else None
    if data_id is None:
        data_id = query.get("data.id") or query.get("id") or payload.get("id")

    return event_type, (str(data_id) if data_id is not None else None)


@router.post("/mercadopago/webhook", response_model=WebhookAck)
async def mercadopago_webhook(
    request: Request,
    service: MercadoPagoWebhookService = Depends(get_webhook_service),
):
    payload = await _read_payload(request)
    event_type, data_id = extract_event(payload, dict(request.query_params))

    result = await service.handle(event_type, data_id)
    logger.info(
        "[mercadopago] webhook type=%s id=%s -> %s",
        event_type,
        data_id,
        result.get("status"),
    )
    return WebhookAck(received=True)


__all__ = ["router", "extract_event"]

# Fin del archivo backend/app/modules/subscriptions/routes/webhook_routes.py
