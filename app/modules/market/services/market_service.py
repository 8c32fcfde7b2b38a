# -*- coding: utf-8 -*-
"""
backend/app/modules/market/services/market_service.py

Checkout y validación de órdenes del market.

- Precios siempre en CLP (moneda del catálogo de creadores).
- Credenciales del creador vía ProviderFactory.for_provider(provider, slug);
  sin override se usan las globales.
- Los productos deben pertenecer al creador de la ruta y estar activos.
- La validación es idempotente: una orden COMPLETED se devuelve tal cual,
  sin llamar a la pasarela ni hacer un segundo commit.

Autor: ClubFit
Fecha: 2026-02-15
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.auth.models import AppUser
from app.modules.market.enums import OrderStatus
from app.modules.market.models import Creator, Order, OrderItem, Product
from app.modules.market.repositories import CreatorRepository, OrderRepository, ProductRepository
from app.modules.subscriptions.enums import PaymentProvider
from app.modules.subscriptions.errors import AmountMismatchError, NotFoundError
from app.modules.subscriptions.metrics.prometheus_exporter import (
    increment_checkout,
    observe_amount_mismatch,
    observe_validation,
)
from app.modules.subscriptions.providers.base import PayerInfo, ProviderConfirmation, ProviderIntent
from app.modules.subscriptions.providers.factory import ProviderFactory
from app.modules.subscriptions.utils.amounts import amounts_match, to_decimal
from app.shared.utils.datetime_helpers import utcnow

logger = logging.getLogger(__name__)

MARKET_CURRENCY = "CLP"


@dataclass(frozen=True)
class OrderLine:
    product_id: uuid.UUID
    quantity: int


@dataclass
class MarketCheckoutResult:
    order: Order
    intent: ProviderIntent
    provider: PaymentProvider


@dataclass
class MarketValidationResult:
    order: Order
    approved: bool
    already_processed: bool = False


def new_order_number() -> str:
    """ORD-<epoch ms>-<6 hex>; cabe en el buy_order de WebPay (26)."""
    return f"ORD-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6].upper()}"


class MarketService:
    def __init__(
        self,
        session: AsyncSession,
        *,
        providers: ProviderFactory,
        app_url: str,
    ):
        self.session = session
        self.providers = providers
        self.app_url = app_url.rstrip("/")
        self.creators = CreatorRepository()
        self.products = ProductRepository()
        self.orders = OrderRepository()

    def return_url(self, creator_slug: str, provider: PaymentProvider) -> str:
        base = f"{self.app_url}/market/{creator_slug}/checkout/validate"
        if provider is PaymentProvider.WEBPAY:
            return base
        return f"{base}?provider={provider.value}"

    def cancel_url(self, creator_slug: str) -> str:
        return f"{self.app_url}/market/{creator_slug}"

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    async def _require_creator(self, creator_slug: str) -> Creator:
        creator = await self.creators.get_by_slug(self.session, creator_slug)
        if creator is None or not creator.is_active:
            raise NotFoundError("Creator", creator_slug)
        return creator

    async def _build_items(self, creator: Creator, lines: Sequence[OrderLine]) -> List[OrderItem]:
        if not lines:
            raise ValueError("La orden no tiene productos")

        quantities: Dict[uuid.UUID, int] = {}
        for line in lines:
            if line.quantity <= 0:
                raise ValueError(f"Cantidad inválida para {line.product_id}: {line.quantity}")
            quantities[line.product_id] = quantities.get(line.product_id, 0) + line.quantity

        found = {p.id: p for p in await self.products.get_many(self.session, quantities.keys())}
        items: List[OrderItem] = []
        for product_id, quantity in quantities.items():
            product: Optional[Product] = found.get(product_id)
            if product is None or not product.is_active or product.creator_id != creator.id:
                raise NotFoundError("Product", product_id)
            price = product.price_for(MARKET_CURRENCY)
            if price is None:
                raise NotFoundError("ProductPrice", f"{product.slug}/{MARKET_CURRENCY}")
            unit = to_decimal(price.amount)
            items.append(
                OrderItem(
                    product_id=product.id,
                    product_name=product.name,
                    product_type=str(product.product_type),
                    quantity=quantity,
                    unit_price=unit,
                    subtotal=unit * quantity,
                )
            )
        return items

    async def create_order_checkout(
        self,
        provider: Union[PaymentProvider, str],
        user: AppUser,
        items: Sequence[OrderLine],
        creator_slug: str,
    ) -> MarketCheckoutResult:
        """
        Crea la orden PENDING con sus líneas y el intento en la pasarela del
        creador. Si la pasarela falla no queda orden persistida.
        """
        kind = PaymentProvider(provider)
        slug = creator_slug.lower()
        creator = await self._require_creator(slug)
        adapter = self.providers.for_provider(kind, slug)

        order_items = await self._build_items(creator, items)
        total = sum((i.subtotal for i in order_items), Decimal("0"))

        order = Order(
            id=uuid.uuid4(),
            user_id=user.user_id,
            order_number=new_order_number(),
            status=OrderStatus.PENDING,
            subtotal=total,
            total=total,
            currency=MARKET_CURRENCY,
            payment_method=kind.value,
            payment_provider=kind.value,
            billing_email=user.user_email,
            items=order_items,
            order_metadata={
                "creatorSlug": slug,
                "items": [{"productId": str(i.product_id), "quantity": i.quantity} for i in order_items],
            },
        )
        self.session.add(order)
        await self.session.flush()

        try:
            kwargs = dict(
                amount=total,
                currency=MARKET_CURRENCY,
                external_reference=order.order_number,
                return_url=self.return_url(slug, kind),
                cancel_url=self.cancel_url(slug),
                payer=PayerInfo(email=user.user_email, name=user.user_full_name),
                description=f"{creator.name} - {order.order_number}",
            )
            if kind is PaymentProvider.WEBPAY:
                kwargs["session_id"] = str(user.user_id)
            intent = await adapter.create_intent(**kwargs)
        except Exception:
            await self.session.rollback()
            raise

        order.provider_reference = intent.intent_id
        await self.session.commit()

        increment_checkout(kind.value, MARKET_CURRENCY, "market")
        logger.info(
            "[market:%s] orden %s creada creador=%s total=%s %s ref=%s",
            kind.value,
            order.order_number,
            slug,
            total,
            MARKET_CURRENCY,
            intent.intent_id,
        )
        return MarketCheckoutResult(order=order, intent=intent, provider=kind)

    # ------------------------------------------------------------------
    # Validación
    # ------------------------------------------------------------------

    async def validate_order_payment(
        self,
        provider: Union[PaymentProvider, str],
        token: str,
        creator_slug: str,
    ) -> MarketValidationResult:
        """
        Confirma el pago de una orden.

        token es el token de WebPay, el order_id de PayPal o el payment_id de
        Mercado Pago.
        """
        kind = PaymentProvider(provider)
        slug = creator_slug.lower()

        existing = await self.orders.get_by_token(self.session, token)
        if existing is not None and existing.status == OrderStatus.COMPLETED:
            logger.info("[market:%s] orden %s ya completada; sin cambios", kind.value, existing.order_number)
            observe_validation(kind.value, "duplicate")
            return MarketValidationResult(order=existing, approved=True, already_processed=True)

        adapter = self.providers.for_provider(kind, slug)
        confirmation = await adapter.confirm(token)

        order = await self._resolve_order(confirmation, existing, token)
        if order.creator_slug and order.creator_slug != slug:
            raise NotFoundError("Order", f"{slug}/{order.order_number}")

        if order.status == OrderStatus.COMPLETED:
            observe_validation(kind.value, "duplicate")
            return MarketValidationResult(order=order, approved=True, already_processed=True)

        if confirmation.approved:
            self._check_amount(order, kind, confirmation)
            now = utcnow()
            order.status = OrderStatus.COMPLETED
            order.paid_at = now
            order.completed_at = now
            order.transaction_id = confirmation.provider_transaction_id
            order.order_metadata = {
                **(order.order_metadata or {}),
                "providerResponse": confirmation.raw_payload,
            }
        else:
            order.status = OrderStatus.FAILED
            order.order_metadata = {
                **(order.order_metadata or {}),
                "providerStatus": confirmation.status,
            }

        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            await self.session.refresh(order)
            logger.warning(
                "[market:%s] transacción %s ya registrada; orden %s",
                kind.value,
                confirmation.provider_transaction_id,
                order.order_number,
            )
            observe_validation(kind.value, "duplicate")
            return MarketValidationResult(order=order, approved=order.status == OrderStatus.COMPLETED, already_processed=True)

        observe_validation(kind.value, "approved" if confirmation.approved else "rejected")
        logger.info(
            "[market:%s] orden %s -> %s (tx=%s)",
            kind.value,
            order.order_number,
            order.status,
            confirmation.provider_transaction_id,
        )
        return MarketValidationResult(order=order, approved=confirmation.approved)

    async def _resolve_order(
        self,
        confirmation: ProviderConfirmation,
        existing: Optional[Order],
        token: str,
    ) -> Order:
        order = None
        if confirmation.external_reference:
            order = await self.orders.get_by_order_number(self.session, confirmation.external_reference)
        if order is None:
            order = existing
        if order is None:
            logger.warning("[market] orden no encontrada para token=%s ref=%s", token, confirmation.external_reference)
            raise NotFoundError("Order", confirmation.external_reference or token)
        return order

    def _check_amount(self, order: Order, provider: PaymentProvider, confirmation: ProviderConfirmation) -> None:
        expected = to_decimal(order.total)
        received = confirmation.amount
        currency_ok = confirmation.currency is None or confirmation.currency.upper() == order.currency.upper()
        if received is not None and currency_ok and amounts_match(expected, received, order.currency):
            return

        logger.error(
            "FRAUDE POTENCIAL [market:%s]: orden %s esperaba %s %s, proveedor reporta %s %s",
            provider.value,
            order.order_number,
            expected,
            order.currency,
            received,
            confirmation.currency,
        )
        observe_amount_mismatch(provider.value)
        observe_validation(provider.value, "amount_mismatch")
        raise AmountMismatchError(expected, to_decimal(received or 0), confirmation.currency or order.currency)


__all__ = [
    "MARKET_CURRENCY",
    "OrderLine",
    "MarketCheckoutResult",
    "MarketValidationResult",
    "MarketService",
    "new_order_number",
]

# Fin del archivo backend/app/modules/market/services/market_service.py
