# -*- coding: utf-8 -*-
"""
backend/app/modules/market/schemas/market_schemas.py

Esquemas de la API del market (camelCase hacia el frontend).

Autor: ClubFit
Fecha: 2026-02-15
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MarketItemIn(_CamelModel):
    product_id: uuid.UUID
    quantity: int = Field(default=1, ge=1, le=100)


class MarketCheckoutRequest(_CamelModel):
    items: List[MarketItemIn] = Field(min_length=1, description="Productos del creador y cantidades")


class MarketCheckoutResponse(_CamelModel):
    order_id: uuid.UUID
    order_number: str
    provider: str
    token: str = Field(description="token WebPay / order_id PayPal / preference_id Mercado Pago")
    url: str = Field(description="URL a la que redirigir al comprador")


class MarketValidateRequest(_CamelModel):
    token: str = Field(min_length=1, description="token WebPay, orderId PayPal o paymentId Mercado Pago")

    @field_validator("token", mode="before")
    @classmethod
    def _coerce(cls, v):
        return str(v) if v is not None else v


class MarketValidateResponse(_CamelModel):
    status: str
    order_id: uuid.UUID
    order_number: str
    total: Decimal
    currency: str
    transaction_id: Optional[str] = None
    already_processed: bool = False


__all__ = [
    "MarketItemIn",
    "MarketCheckoutRequest",
    "MarketCheckoutResponse",
    "MarketValidateRequest",
    "MarketValidateResponse",
]

# Fin del archivo backend/app/modules/market/schemas/market_schemas.py
