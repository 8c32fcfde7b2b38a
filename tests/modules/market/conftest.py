# backend/tests/modules/market/conftest.py
# -*- coding: utf-8 -*-
"""
Fixtures del market: creador "jose" con dos productos en CLP y stubs de
WebPay que derivan el token del buy_order (= order_number).
"""

import json
import uuid
from decimal import Decimal

import httpx
import pytest

from app.modules.market.models import Creator, Product, ProductPrice
from app.modules.market.services import MarketService
from app.modules.subscriptions.providers.webpay_provider import TRANSACTIONS_PATH

APP_URL = "http://app.test"


def market_token_for(order_number: str) -> str:
    return f"mk-{order_number}"


@pytest.fixture
async def shop(db_session):
    jose = Creator(id=uuid.uuid4(), slug="jose", name="José Fit", is_active=True)
    other = Creator(id=uuid.uuid4(), slug="maria", name="María Yoga", is_active=True)
    rutina = Product(
        id=uuid.uuid4(),
        creator=jose,
        name="Rutina 12 semanas",
        slug="rutina-12",
        is_active=True,
        prices=[ProductPrice(id=uuid.uuid4(), currency="CLP", amount=Decimal("9990"))],
    )
    recetario = Product(
        id=uuid.uuid4(),
        creator=jose,
        name="Recetario",
        slug="recetario",
        is_active=True,
        prices=[ProductPrice(id=uuid.uuid4(), currency="CLP", amount=Decimal("4990"))],
    )
    ajeno = Product(
        id=uuid.uuid4(),
        creator=other,
        name="Yoga básico",
        slug="yoga",
        is_active=True,
        prices=[ProductPrice(id=uuid.uuid4(), currency="CLP", amount=Decimal("3000"))],
    )
    db_session.add_all([jose, other, rutina, recetario, ajeno])
    await db_session.commit()
    return {"jose": jose, "maria": other, "rutina": rutina, "recetario": recetario, "ajeno": ajeno}


@pytest.fixture
def market_webpay(provider_stub):
    """create devuelve mk-<buy_order>; commit responde según lo registrado en approve()."""

    def _create(request: httpx.Request) -> httpx.Response:
        buy_order = json.loads(request.content)["buy_order"]
        return httpx.Response(
            200,
            json={"token": market_token_for(buy_order), "url": "https://webpay3gint.transbank.cl/init"},
        )

    provider_stub.on_handler("POST", TRANSACTIONS_PATH, _create)

    class _Webpay:
        stub = provider_stub

        def approve(self, order_number: str, amount, response_code: int = 0) -> str:
            token = market_token_for(order_number)
            provider_stub.on(
                "PUT",
                f"{TRANSACTIONS_PATH}/{token}",
                json={
                    "amount": amount,
                    "status": "AUTHORIZED" if response_code == 0 else "FAILED",
                    "buy_order": order_number,
                    "session_id": "s",
                    "authorization_code": "1213",
                    "payment_type_code": "VD",
                    "response_code": response_code,
                },
            )
            return token

        def commit_calls(self, token: str) -> int:
            return provider_stub.calls("PUT", f"{TRANSACTIONS_PATH}/{token}")

    return _Webpay()


@pytest.fixture
def market_service(db_session, providers):
    return MarketService(db_session, providers=providers, app_url=APP_URL)


# Fin del archivo backend/tests/modules/market/conftest.py
