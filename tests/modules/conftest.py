# backend/tests/modules/conftest.py
# -*- coding: utf-8 -*-
"""
Fixtures compartidas por los tests de subscriptions y market.

- ProviderStub: httpx.MockTransport con rutas (método, path) -> respuesta,
  que registra cada request para poder contar llamadas al proveedor.
- PaymentsSettings explícitos (sin leer .env ni el entorno).
- ProviderFactory apuntando al stub.
- Usuario sembrado y email sender de consola que registra envíos.
"""

import uuid
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from app.modules.auth.enums import UserRole
from app.modules.auth.models import AppUser
from app.modules.subscriptions.models import BillingCycle, SubscriptionPlan, SubscriptionPrice
from app.modules.subscriptions.enums import IntervalType
from app.modules.subscriptions.providers import ProviderFactory, TokenCache
from app.shared.config.settings_payments import PaymentsSettings
from app.shared.integrations import StubEmailSender

NOTIFICATION_URL = "http://test/api/subscriptions/mercadopago/webhook"


class ProviderStub:
    """Router mínimo sobre httpx.MockTransport."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        json: Any = None,
        status: int = 200,
        raises: Optional[Exception] = None,
    ) -> None:
        def _respond(request: httpx.Request) -> httpx.Response:
            if raises is not None:
                raise raises
            return httpx.Response(status, json=json if json is not None else {})

        self.routes[(method.upper(), path)] = _respond

    def on_handler(self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[(method.upper(), path)] = handler

    def calls(self, method: str, path: str) -> int:
        return sum(1 for r in self.requests if r.method == method.upper() and r.url.path == path)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        respond = self.routes.get((request.method, request.url.path))
        if respond is None:
            return httpx.Response(404, json={"message": f"sin stub para {request.method} {request.url.path}"})
        return respond(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def provider_stub() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
def payments_settings() -> PaymentsSettings:
    return PaymentsSettings(
        _env_file=None,
        payments_mode="sandbox",
        default_currency="CLP",
        webpay_commerce_code_test="597055555532",
        webpay_api_key_test="test-api-key",
        paypal_client_id_sandbox="pp-client",
        paypal_client_secret_sandbox="pp-secret",
        mercadopago_access_token="TEST-global-token",
        creator_credentials={
            "jose": {
                "webpay_commerce_code": "597000000001",
                "webpay_api_key": "jose-api-key",
                "mercadopago_access_token": "TEST-jose-token",
            }
        },
    )


@pytest.fixture
def providers(payments_settings, provider_stub) -> ProviderFactory:
    return ProviderFactory(
        payments_settings,
        notification_url=NOTIFICATION_URL,
        transport=provider_stub.transport,
        token_cache=TokenCache(),
    )


@pytest.fixture
def email_sender() -> StubEmailSender:
    return StubEmailSender()


@pytest.fixture
async def user(db_session) -> AppUser:
    u = AppUser(
        user_id=uuid.uuid4(),
        user_full_name="Ana Pérez",
        user_email="ana@example.com",
        user_role=UserRole.member,
        preferred_currency="CLP",
    )
    db_session.add(u)
    await db_session.commit()
    return u


@pytest.fixture
async def catalog(db_session) -> Dict[str, Any]:
    """Plan Pro mensual a 19990 CLP y 9.99 USD."""
    plan = SubscriptionPlan(
        id=uuid.uuid4(),
        name="Plan Pro",
        slug="pro",
        description="Acceso completo",
        features=["Clases ilimitadas"],
        sort_order=1,
        is_active=True,
    )
    monthly = BillingCycle(
        id=uuid.uuid4(),
        name="Mensual",
        slug="monthly",
        interval_type=IntervalType.MONTH,
        interval_count=1,
        is_active=True,
    )
    clp = SubscriptionPrice(
        id=uuid.uuid4(),
        plan_id=plan.id,
        billing_cycle_id=monthly.id,
        currency="CLP",
        amount=Decimal("19990"),
        is_active=True,
    )
    usd = SubscriptionPrice(
        id=uuid.uuid4(),
        plan_id=plan.id,
        billing_cycle_id=monthly.id,
        currency="USD",
        amount=Decimal("9.99"),
        is_active=True,
    )
    db_session.add_all([plan, monthly, clp, usd])
    await db_session.commit()
    return {"plan": plan, "cycle": monthly, "clp": clp, "usd": usd}


# Fin del archivo backend/tests/modules/conftest.py
