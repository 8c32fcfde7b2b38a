# -*- coding: utf-8 -*-
"""
Tests del adaptador Mercado Pago (preferences, preapproval, payments).
"""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.modules.subscriptions.enums import IntervalType
from app.modules.subscriptions.providers.mercadopago_provider import (
    PAYMENTS_PATH,
    PREAPPROVAL_PATH,
    PREFERENCES_PATH,
    extract_preapproval_id,
    to_mp_frequency,
)

NOTIFICATION_URL = "http://test/api/subscriptions/mercadopago/webhook"


@pytest.mark.parametrize(
    "interval_type, count, expected",
    [
        (IntervalType.DAY, 15, (15, "days")),
        (IntervalType.WEEK, 2, (14, "days")),
        (IntervalType.MONTH, 3, (3, "months")),
        (IntervalType.YEAR, 1, (12, "months")),
    ],
)
def test_frequency_mapping(interval_type, count, expected):
    assert to_mp_frequency(interval_type, count) == expected


def test_extract_preapproval_id_from_known_locations():
    assert extract_preapproval_id({"preapproval_id": "a"}) == "a"
    assert extract_preapproval_id({"metadata": {"preapproval_id": "b"}}) == "b"
    assert extract_preapproval_id(
        {"point_of_interaction": {"transaction_data": {"subscription_id": "c"}}}
    ) == "c"
    assert extract_preapproval_id({"id": 1}) is None


@pytest.mark.asyncio
async def test_preference_uses_sandbox_init_point_for_test_token(providers, provider_stub):
    provider_stub.on(
        "POST",
        PREFERENCES_PATH,
        json={
            "id": "123-pref",
            "init_point": "https://www.mercadopago.cl/checkout/v1/redirect?pref_id=123-pref",
            "sandbox_init_point": "https://sandbox.mercadopago.cl/checkout/v1/redirect?pref_id=123-pref",
        },
    )

    intent = await providers.mercadopago().create_intent(
        amount=Decimal("19990.00"),
        currency="CLP",
        external_reference="sub-ref",
        return_url="http://front.test/ok",
    )

    assert intent.intent_id == "123-pref"
    assert intent.redirect_url.startswith("https://sandbox.mercadopago.cl")

    request = provider_stub.requests[0]
    assert request.headers["Authorization"] == "Bearer TEST-global-token"
    body = json.loads(request.content)
    assert body["items"][0]["unit_price"] == 19990
    assert body["items"][0]["currency_id"] == "CLP"
    assert body["external_reference"] == "sub-ref"
    assert body["notification_url"] == NOTIFICATION_URL


@pytest.mark.asyncio
async def test_preapproval_with_card_token_is_created_authorized(providers, provider_stub):
    provider_stub.on(
        "POST",
        PREAPPROVAL_PATH,
        json={"id": "2c938084", "status": "authorized", "init_point": "https://mp/preapproval"},
    )

    intent = await providers.mercadopago().create_subscription_intent(
        amount=Decimal("9.99"),
        currency="USD",
        external_reference="sub-ref",
        back_url="http://front.test/back",
        payer_email="ana@example.com",
        reason="Plan Pro - Mensual",
        interval_type=IntervalType.MONTH,
        interval_count=1,
        card_token_id="card-tok",
        start_date=datetime(2024, 1, 31, tzinfo=timezone.utc),
    )

    assert intent.intent_id == "2c938084"
    request = provider_stub.requests[0]
    assert request.headers["X-Idempotency-Key"] == "sub-ref"
    body = json.loads(request.content)
    assert body["status"] == "authorized"
    assert body["card_token_id"] == "card-tok"
    assert body["auto_recurring"]["frequency"] == 1
    assert body["auto_recurring"]["frequency_type"] == "months"
    assert body["auto_recurring"]["transaction_amount"] == 9.99
    assert "start_date" in body["auto_recurring"]


@pytest.mark.asyncio
async def test_preapproval_without_card_is_pending_and_falls_back_to_back_url(providers, provider_stub):
    provider_stub.on("POST", PREAPPROVAL_PATH, json={"id": "2c938085", "status": "pending"})

    intent = await providers.mercadopago().create_subscription_intent(
        amount=Decimal("19990"),
        currency="CLP",
        external_reference="sub-ref",
        back_url="http://front.test/back",
        payer_email="ana@example.com",
        reason="Plan Pro",
        interval_type="week",
        interval_count=1,
    )

    assert intent.redirect_url == "http://front.test/back"
    body = json.loads(provider_stub.requests[0].content)
    assert body["status"] == "pending"
    assert "card_token_id" not in body
    assert body["auto_recurring"] == {
        "frequency": 7,
        "frequency_type": "days",
        "transaction_amount": 19990,
        "currency_id": "CLP",
    }


@pytest.mark.asyncio
async def test_confirm_reads_payment(providers, provider_stub):
    provider_stub.on(
        "GET",
        f"{PAYMENTS_PATH}/1319",
        json={
            "id": 1319,
            "status": "approved",
            "status_detail": "accredited",
            "transaction_amount": 19990,
            "currency_id": "CLP",
            "external_reference": "sub-ref",
            "payment_method_id": "visa",
            "metadata": {"preapproval_id": "2c938084"},
        },
    )

    confirmation = await providers.mercadopago().confirm("1319")

    assert confirmation.approved is True
    assert confirmation.provider_transaction_id == "1319"
    assert confirmation.amount == Decimal("19990")
    assert confirmation.extra["preapproval_id"] == "2c938084"
    assert confirmation.extra["payment_method_id"] == "visa"
