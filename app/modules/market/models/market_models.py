# -*- coding: utf-8 -*-
"""
backend/app/modules/market/models/market_models.py

Modelos del market de productos digitales:
- Creator: dueño de productos y de sus propias credenciales de pago
- Product / ProductPrice: catálogo por creador, precio por moneda
- Order / OrderItem: compra de un usuario y sus líneas

order_number (ORD-<epoch ms>) es único y sirve de buy_order en WebPay y de
external_reference en PayPal y Mercado Pago.

Autor: ClubFit
Fecha: 2026-02-15
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.shared.database.base import Base, TimestampMixin
from app.modules.market.enums import OrderStatus, ProductType


class Creator(TimestampMixin, Base):
    __tablename__ = "creators"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    slug: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        doc="Identificador público; también prefijo de credenciales (<SLUG>_WEBPAY_...).",
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Creator slug={self.slug!r}>"


class Product(TimestampMixin, Base):
    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    creator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("creators.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    slug: Mapped[str] = mapped_column(String(300), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    product_type: Mapped[ProductType] = mapped_column(
        ProductType.as_pg_enum(),
        nullable=False,
        default=ProductType.DIGITAL_FILE,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    creator: Mapped["Creator"] = relationship("Creator", lazy="selectin")
    prices: Mapped[List["ProductPrice"]] = relationship(
        "ProductPrice",
        back_populates="product",
        lazy="selectin",
    )

    def price_for(self, currency: str) -> Optional["ProductPrice"]:
        currency = currency.upper()
        for price in self.prices:
            if price.currency.upper() == currency:
                return price
        return None


class ProductPrice(TimestampMixin, Base):
    __tablename__ = "product_prices"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    product: Mapped["Product"] = relationship("Product", back_populates="prices", lazy="noload")

    __table_args__ = (
        UniqueConstraint("product_id", "currency", name="uq_product_prices_product_currency"),
        CheckConstraint("amount >= 0", name="ck_product_prices_amount_non_negative"),
    )


class Order(TimestampMixin, Base):
    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("app_users.user_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    order_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    status: Mapped[OrderStatus] = mapped_column(
        OrderStatus.as_pg_enum(),
        nullable=False,
        default=OrderStatus.PENDING,
        index=True,
    )

    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    tax: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    discount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    payment_provider: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    provider_reference: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        index=True,
        doc="token de WebPay, order_id de PayPal o preference_id de Mercado Pago.",
    )
    transaction_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    billing_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    order_metadata: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)

    items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    @property
    def creator_slug(self) -> Optional[str]:
        return (self.order_metadata or {}).get("creatorSlug")

    def __repr__(self) -> str:
        return f"<Order {self.order_number} status={self.status}>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    product_name: Mapped[str] = mapped_column(String(300), nullable=False)
    product_type: Mapped[str] = mapped_column(String(50), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    order: Mapped["Order"] = relationship("Order", back_populates="items", lazy="noload")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )


__all__ = ["Creator", "Product", "ProductPrice", "Order", "OrderItem"]

# Fin del archivo backend/app/modules/market/models/market_models.py
