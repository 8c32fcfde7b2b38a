# backend/tests/modules/subscriptions/conftest.py
# -*- coding: utf-8 -*-
"""
Fixtures del módulo Subscriptions: servicios cableados al ProviderStub y
helpers para respuestas típicas de WebPay.
"""

import json
import uuid
from decimal import Decimal

import httpx
import pytest

from app.modules.subscriptions.enums import PaymentProvider, SubscriptionStatus
from app.modules.subscriptions.models import UserSubscription
from app.modules.subscriptions.providers.webpay_provider import TRANSACTIONS_PATH
from app.modules.subscriptions.services.checkout_service import CheckoutService
from app.modules.subscriptions.services.reconciliation_service import ReconciliationService
from app.modules.subscriptions.services.side_effects import ActivationSideEffects
from app.modules.subscriptions.services.subscription_service import SubscriptionService
from app.modules.subscriptions.services.webhook_service import MercadoPagoWebhookService

FRONTEND_URL = "http://front.test"


def webpay_token_for(buy_order: str) -> str:
    return f"tok-{buy_order}"


def webpay_commit_body(buy_order: str, amount=19990, response_code=0, status="AUTHORIZED"):
    return {
        "vci": "TSY",
        "amount": amount,
        "status": status,
        "buy_order": buy_order,
        "session_id": "session",
        "card_detail": {"card_number": "6623"},
        "accounting_date": "0131",
        "transaction_date": "2024-01-31T10:00:00.000Z",
        "authorization_code": "1213",
        "payment_type_code": "VN",
        "response_code": response_code,
        "installments_number": 0,
    }


@pytest.fixture
def webpay_create(provider_stub):
    """POST de creación de WebPay: token derivado del buy_order recibido."""

    def _create(request: httpx.Request) -> httpx.Response:
        buy_order = json.loads(request.content)["buy_order"]
        return httpx.Response(
            200,
            json={
                "token": webpay_token_for(buy_order),
                "url": "https://webpay3gint.transbank.cl/webpayserver/initTransaction",
            },
        )

    provider_stub.on_handler("POST", TRANSACTIONS_PATH, _create)
    return provider_stub


@pytest.fixture
def stub_webpay_commit(provider_stub):
    def _stub(buy_order: str, **kwargs) -> str:
        token = webpay_token_for(buy_order)
        provider_stub.on("PUT", f"{TRANSACTIONS_PATH}/{token}", json=webpay_commit_body(buy_order, **kwargs))
        return token

    return _stub


@pytest.fixture
def side_effects(email_sender):
    return ActivationSideEffects(email_sender)


@pytest.fixture
def checkout_service(db_session, providers):
    return CheckoutService(db_session, providers=providers, frontend_url=FRONTEND_URL)


@pytest.fixture
def reconciliation(db_session, providers, side_effects):
    return ReconciliationService(db_session, providers=providers, side_effects=side_effects)


@pytest.fixture
def webhook_service(db_session, providers, reconciliation):
    return MercadoPagoWebhookService(db_session, providers=providers, reconciliation=reconciliation)


@pytest.fixture
def subscription_service(db_session, providers):
    return SubscriptionService(db_session, providers=providers)


@pytest.fixture
def make_subscription(db_session, user, catalog):
    """Inserta una suscripción directamente (sin pasar por checkout)."""

    async def _make(status=SubscriptionStatus.ACTIVE, **overrides) -> UserSubscription:
        values = dict(
            id=uuid.uuid4(),
            user_id=user.user_id,
            plan_id=catalog["plan"].id,
            billing_cycle_id=catalog["cycle"].id,
            plan=catalog["plan"],
            billing_cycle=catalog["cycle"],
            status=status,
            provider=PaymentProvider.MERCADOPAGO,
            amount=Decimal("19990"),
            currency="CLP",
            auto_renew=True,
            subscription_metadata={},
        )
        values.update(overrides)
        sub = UserSubscription(**values)
        db_session.add(sub)
        await db_session.commit()
        return sub

    return _make


# Fin del archivo backend/tests/modules/subscriptions/conftest.py
