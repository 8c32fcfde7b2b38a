# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/links.py

Vínculos tipados entre una suscripción local y sus identificadores en el
proveedor. Se serializan en subscription_metadata["provider_link"] y su
`reference` se copia a la columna indexada provider_reference para que la
búsqueda sea exacta por proveedor.

    WebpayLink(buy_order)
    PayPalLink(order_id)
    MercadoPagoLink(preference_id | preapproval_id)

Autor: ClubFit
Fecha: 2026-02-11
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, ClassVar, Dict, Optional, Union

from app.modules.subscriptions.enums import PaymentProvider

LINK_KEY = "provider_link"


@dataclass(frozen=True)
class WebpayLink:
    buy_order: str

    provider: ClassVar[PaymentProvider] = PaymentProvider.WEBPAY

    @property
    def reference(self) -> str:
        return self.buy_order


@dataclass(frozen=True)
class PayPalLink:
    order_id: str

    provider: ClassVar[PaymentProvider] = PaymentProvider.PAYPAL

    @property
    def reference(self) -> str:
        return self.order_id


@dataclass(frozen=True)
class MercadoPagoLink:
    preference_id: Optional[str] = None
    preapproval_id: Optional[str] = None

    provider: ClassVar[PaymentProvider] = PaymentProvider.MERCADOPAGO

    def __post_init__(self) -> None:
        if bool(self.preference_id) == bool(self.preapproval_id):
            raise ValueError("MercadoPagoLink requiere preference_id o preapproval_id (solo uno)")

    @property
    def reference(self) -> str:
        return self.preference_id or self.preapproval_id  # type: ignore[return-value]

    @property
    def is_recurring(self) -> bool:
        return self.preapproval_id is not None


ProviderLink = Union[WebpayLink, PayPalLink, MercadoPagoLink]

_LINK_TYPES: Dict[str, type] = {
    PaymentProvider.WEBPAY.value: WebpayLink,
    PaymentProvider.PAYPAL.value: PayPalLink,
    PaymentProvider.MERCADOPAGO.value: MercadoPagoLink,
}


def link_to_dict(link: ProviderLink) -> Dict[str, Any]:
    data = {k: v for k, v in asdict(link).items() if v is not None}
    data["provider"] = link.provider.value
    return data


def link_from_dict(data: Optional[Dict[str, Any]]) -> Optional[ProviderLink]:
    """Reconstruye el vínculo; None si no hay o el proveedor es desconocido."""
    if not data:
        return None
    link_cls = _LINK_TYPES.get(str(data.get("provider", "")))
    if link_cls is None:
        return None
    fields = {k: v for k, v in data.items() if k != "provider"}
    return link_cls(**fields)


def read_link(metadata: Optional[Dict[str, Any]]) -> Optional[ProviderLink]:
    return link_from_dict((metadata or {}).get(LINK_KEY))


def with_link(metadata: Optional[Dict[str, Any]], link: ProviderLink) -> Dict[str, Any]:
    """Devuelve una copia de metadata con el vínculo (nuevo dict para que el ORM detecte el cambio)."""
    updated = dict(metadata or {})
    updated[LINK_KEY] = link_to_dict(link)
    return updated


__all__ = [
    "LINK_KEY",
    "WebpayLink",
    "PayPalLink",
    "MercadoPagoLink",
    "ProviderLink",
    "link_to_dict",
    "link_from_dict",
    "read_link",
    "with_link",
]

# Fin del archivo backend/app/modules/subscriptions/links.py
