# -*- coding: utf-8 -*-
import json
import re
from decimal import Decimal

import pytest
from sqlalchemy import select

from app.modules.market.enums import OrderStatus
from app.modules.market.models import Order
from app.modules.market.services import OrderLine
from app.modules.market.services.market_service import new_order_number
from app.modules.subscriptions.enums import PaymentProvider
from app.modules.subscriptions.errors import AmountMismatchError, NotFoundError, ProviderRequestError
from app.modules.subscriptions.providers.mercadopago_provider import PREFERENCES_PATH
from app.modules.subscriptions.providers.webpay_provider import TRANSACTIONS_PATH


async def _orders(session):
    return (await session.execute(select(Order))).scalars().all()


def test_order_number_format():
    number = new_order_number()
    assert re.fullmatch(r"ORD-\d{13}-[0-9A-F]{6}", number)
    assert len(number) <= 26
    assert new_order_number() != number


@pytest.mark.asyncio
async def test_webpay_checkout_uses_creator_credentials(market_service, market_webpay, shop, user):
    result = await market_service.create_order_checkout(
        "webpay",
        user,
        [OrderLine(shop["rutina"].id, 2), OrderLine(shop["recetario"].id, 1)],
        "Jose",
    )

    order = result.order
    assert result.provider is PaymentProvider.WEBPAY
    assert order.status == OrderStatus.PENDING
    assert order.currency == "CLP"
    assert order.total == Decimal("24970")
    assert order.creator_slug == "jose"
    assert order.provider_reference == result.intent.intent_id
    assert {i.product_name: i.quantity for i in order.items} == {"Rutina 12 semanas": 2, "Recetario": 1}

    request = market_webpay.stub.requests[-1]
    assert request.headers["Tbk-Api-Key-Id"] == "597000000001"
    assert request.headers["Tbk-Api-Key-Secret"] == "jose-api-key"
    payload = json.loads(request.content)
    assert payload["buy_order"] == order.order_number
    assert payload["amount"] == 24970
    assert payload["return_url"] == "http://app.test/market/jose/checkout/validate"


@pytest.mark.asyncio
async def test_mercadopago_checkout_uses_creator_token(market_service, provider_stub, shop, user):
    provider_stub.on(
        "POST",
        PREFERENCES_PATH,
        json={"id": "pref-1", "init_point": "https://mp/init", "sandbox_init_point": "https://mp/sandbox"},
    )

    result = await market_service.create_order_checkout(
        PaymentProvider.MERCADOPAGO, user, [OrderLine(shop["rutina"].id, 1)], "jose"
    )

    assert result.intent.intent_id == "pref-1"
    assert result.intent.redirect_url == "https://mp/sandbox"
    assert provider_stub.requests[-1].headers["Authorization"] == "Bearer TEST-jose-token"


@pytest.mark.asyncio
async def test_checkout_rejects_foreign_product(db_session, market_service, provider_stub, shop, user):
    with pytest.raises(NotFoundError):
        await market_service.create_order_checkout("webpay", user, [OrderLine(shop["ajeno"].id, 1)], "jose")

    assert provider_stub.requests == []


@pytest.mark.asyncio
async def test_checkout_unknown_creator(market_service, shop, user):
    with pytest.raises(NotFoundError):
        await market_service.create_order_checkout("webpay", user, [OrderLine(shop["rutina"].id, 1)], "nadie")


@pytest.mark.asyncio
@pytest.mark.parametrize("lines", [[], [("rutina", 0)]])
async def test_checkout_rejects_invalid_lines(market_service, shop, user, lines):
    items = [OrderLine(shop[name].id, qty) for name, qty in lines]
    with pytest.raises(ValueError):
        await market_service.create_order_checkout("webpay", user, items, "jose")


@pytest.mark.asyncio
async def test_provider_failure_leaves_no_order(db_session, market_service, provider_stub, shop, user):
    provider_stub.on("POST", TRANSACTIONS_PATH, status=500, json={"error_message": "boom"})

    with pytest.raises(ProviderRequestError):
        await market_service.create_order_checkout("webpay", user, [OrderLine(shop["rutina"].id, 1)], "jose")

    assert await _orders(db_session) == []


@pytest.mark.asyncio
async def test_validate_completes_order_once(market_service, market_webpay, shop, user):
    created = await market_service.create_order_checkout("webpay", user, [OrderLine(shop["rutina"].id, 1)], "jose")
    order_number = created.order.order_number
    token = market_webpay.approve(order_number, 9990)

    first = await market_service.validate_order_payment("webpay", token, "jose")
    second = await market_service.validate_order_payment("webpay", token, "jose")

    assert first.approved is True
    assert first.already_processed is False
    assert first.order.status == OrderStatus.COMPLETED
    assert first.order.transaction_id == token
    assert first.order.paid_at is not None

    assert second.already_processed is True
    assert second.order.id == first.order.id
    assert market_webpay.commit_calls(token) == 1


@pytest.mark.asyncio
async def test_validate_rejected_marks_failed(market_service, market_webpay, shop, user):
    created = await market_service.create_order_checkout("webpay", user, [OrderLine(shop["rutina"].id, 1)], "jose")
    token = market_webpay.approve(created.order.order_number, 9990, response_code=-1)

    result = await market_service.validate_order_payment("webpay", token, "jose")

    assert result.approved is False
    assert result.order.status == OrderStatus.FAILED


@pytest.mark.asyncio
async def test_validate_amount_mismatch_keeps_order_pending(db_session, market_service, market_webpay, shop, user):
    created = await market_service.create_order_checkout("webpay", user, [OrderLine(shop["rutina"].id, 1)], "jose")
    token = market_webpay.approve(created.order.order_number, 10)

    with pytest.raises(AmountMismatchError):
        await market_service.validate_order_payment("webpay", token, "jose")

    assert created.order.status == OrderStatus.PENDING
    assert created.order.transaction_id is None


@pytest.mark.asyncio
async def test_validate_under_other_creator_is_not_found(market_service, market_webpay, shop, user):
    created = await market_service.create_order_checkout("webpay", user, [OrderLine(shop["rutina"].id, 1)], "jose")
    token = market_webpay.approve(created.order.order_number, 9990)

    with pytest.raises(NotFoundError):
        await market_service.validate_order_payment("webpay", token, "maria")


@pytest.mark.asyncio
async def test_validate_unknown_order_is_not_found(market_service, provider_stub, shop):
    token = "tok-huerfano"
    provider_stub.on(
        "PUT",
        f"{TRANSACTIONS_PATH}/{token}",
        json={"amount": 100, "status": "AUTHORIZED", "buy_order": "ORD-0-NOPE", "response_code": 0},
    )

    with pytest.raises(NotFoundError):
        await market_service.validate_order_payment("webpay", token, "jose")
