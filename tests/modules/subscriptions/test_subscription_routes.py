# -*- coding: utf-8 -*-
"""
Tests HTTP del router de suscripciones sobre una app FastAPI mínima.

Se sobreescriben sesión, usuario autenticado, fábrica de proveedores y
efectos secundarios; los proveedores responden desde el ProviderStub.
"""

import uuid
from decimal import Decimal

import httpx
import pytest
from fastapi import BackgroundTasks, FastAPI

from app.modules.auth.dependencies import get_current_user, get_current_user_id, require_admin
from app.modules.subscriptions.dependencies import get_provider_factory, get_side_effects
from app.modules.subscriptions.enums import SubscriptionStatus
from app.modules.subscriptions.providers.paypal_provider import CAPTURES_PATH, ORDERS_PATH, TOKEN_PATH
from app.modules.subscriptions.routes import metrics_router, router
from app.modules.subscriptions.routes.webhook_routes import extract_event
from app.modules.subscriptions.services.checkout_service import webpay_buy_order
from app.modules.subscriptions.services.side_effects import ActivationSideEffects
from app.shared.config import get_settings
from app.shared.database import get_async_session


@pytest.fixture
def app(db_session, user, providers, side_effects):
    application = FastAPI()
    application.include_router(router, prefix="/api")
    application.include_router(metrics_router)

    async def _session():
        yield db_session

    application.dependency_overrides[get_async_session] = _session
    application.dependency_overrides[get_current_user] = lambda: user
    application.dependency_overrides[get_current_user_id] = lambda: user.user_id
    application.dependency_overrides[require_admin] = lambda: user
    application.dependency_overrides[get_provider_factory] = lambda: providers
    application.dependency_overrides[get_side_effects] = lambda: side_effects
    return application


@pytest.fixture
async def client(app):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
        yield c


def _checkout_body(catalog, **extra):
    body = {"planId": str(catalog["plan"].id), "billingCycleId": str(catalog["cycle"].id)}
    body.update(extra)
    return body


@pytest.mark.asyncio
async def test_webpay_create_and_validate(client, catalog, webpay_create, stub_webpay_commit, email_sender):
    created = await client.post("/api/subscriptions/webpay/create", json=_checkout_body(catalog))

    assert created.status_code == 200
    data = created.json()
    assert set(data) == {"token", "url", "subscriptionId"}
    subscription_id = uuid.UUID(data["subscriptionId"])

    token = stub_webpay_commit(webpay_buy_order(subscription_id))
    assert data["token"] == token

    validated = await client.post(
        "/api/subscriptions/webpay/validate",
        params={"subscriptionId": str(subscription_id)},
        json={"token": token},
    )

    assert validated.status_code == 200
    body = validated.json()
    assert body["success"] is True
    assert body["duplicate"] is False
    assert body["redirectUrl"] == (
        f"{get_settings().frontend_url.rstrip('/')}/subscription/success?subscriptionId={subscription_id}"
    )
    assert body["subscription"]["status"] == SubscriptionStatus.ACTIVE.value
    assert Decimal(str(body["subscription"]["amount"])) == Decimal("19990")
    assert len(email_sender.sent) == 1


@pytest.mark.asyncio
async def test_webpay_validate_rejected_returns_failure_redirect(client, catalog, webpay_create, stub_webpay_commit):
    created = await client.post("/api/subscriptions/webpay/create", json=_checkout_body(catalog))
    subscription_id = uuid.UUID(created.json()["subscriptionId"])
    token = stub_webpay_commit(webpay_buy_order(subscription_id), response_code=-1, status="FAILED")

    validated = await client.post(
        "/api/subscriptions/webpay/validate",
        params={"subscriptionId": str(subscription_id)},
        json={"token": token},
    )

    assert validated.status_code == 200
    body = validated.json()
    assert body["success"] is False
    assert body["redirectUrl"].endswith(f"/subscription/failure?subscriptionId={subscription_id}")


@pytest.mark.asyncio
async def test_create_with_active_subscription_is_conflict(client, catalog, make_subscription, provider_stub):
    await make_subscription(status=SubscriptionStatus.ACTIVE)

    response = await client.post("/api/subscriptions/webpay/create", json=_checkout_body(catalog))

    assert response.status_code == 409
    assert response.json()["detail"]["error"] == "conflict"
    assert provider_stub.requests == []


@pytest.mark.asyncio
async def test_create_rejects_invalid_body(client):
    response = await client.post("/api/subscriptions/paypal/create", json={"planId": "no-es-uuid"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_webhook_always_acknowledges(client, provider_stub):
    garbage = await client.post(
        "/api/subscriptions/mercadopago/webhook",
        content=b"not json",
        headers={"content-type": "application/json"},
    )
    unlinked = await client.post(
        "/api/subscriptions/mercadopago/webhook",
        json={"type": "subscription_preapproval", "data": {"id": "desconocida"}},
    )

    assert garbage.status_code == 200
    assert garbage.json() == {"received": True}
    assert unlinked.status_code == 200
    assert unlinked.json() == {"received": True}
    assert provider_stub.requests == []


@pytest.mark.asyncio
async def test_list_plans(client, catalog, db_session):
    db_session.expunge_all()

    response = await client.get("/api/subscriptions/plans")

    assert response.status_code == 200
    plans = response.json()
    assert [p["slug"] for p in plans] == ["pro"]
    prices = {p["currency"]: Decimal(str(p["amount"])) for p in plans[0]["prices"]}
    assert prices == {"CLP": Decimal("19990"), "USD": Decimal("9.99")}
    assert plans[0]["prices"][0]["billingCycle"]["slug"] == "monthly"


@pytest.mark.asyncio
async def test_me_without_subscription_is_null(client, catalog):
    response = await client.get("/api/subscriptions/me")
    assert response.status_code == 200
    assert response.json() is None


@pytest.mark.asyncio
async def test_cancel_endpoint(client, make_subscription):
    sub = await make_subscription(status=SubscriptionStatus.ACTIVE)

    response = await client.post("/api/subscriptions/cancel", json={"reason": "Mudanza"})

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == str(sub.id)
    assert body["status"] == SubscriptionStatus.CANCELLED.value
    assert body["autoRenew"] is False
    assert body["cancellationReason"] == "Mudanza"


@pytest.mark.asyncio
async def test_cancel_without_subscription_is_404(client, user):
    response = await client.post("/api/subscriptions/cancel")
    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "not_found"


@pytest.mark.asyncio
async def test_paypal_declined_capture_returns_failure_redirect(client, catalog, provider_stub, email_sender):
    provider_stub.on("POST", TOKEN_PATH, json={"access_token": "A21AAF", "expires_in": 32400})
    provider_stub.on(
        "POST",
        ORDERS_PATH,
        json={
            "id": "O-9",
            "status": "CREATED",
            "links": [{"rel": "approve", "href": "https://www.sandbox.paypal.com/checkoutnow?token=O-9"}],
        },
    )
    created = await client.post("/api/subscriptions/paypal/create", json=_checkout_body(catalog, currency="USD"))
    subscription_id = created.json()["subscriptionId"]
    provider_stub.on(
        "POST",
        f"{ORDERS_PATH}/O-9/capture",
        status=422,
        json={"name": "UNPROCESSABLE_ENTITY", "details": [{"issue": "INSTRUMENT_DECLINED"}]},
    )
    provider_stub.on("GET", f"{ORDERS_PATH}/O-9", json={"id": "O-9", "status": "APPROVED"})

    validated = await client.post(
        "/api/subscriptions/paypal/validate",
        params={"subscriptionId": subscription_id},
        json={"orderId": "O-9"},
    )

    assert validated.status_code == 200
    body = validated.json()
    assert body["success"] is False
    assert body["redirectUrl"].endswith(f"/subscription/failure?subscriptionId={subscription_id}")
    assert email_sender.sent == []


@pytest.mark.asyncio
async def test_verify_capture_requires_admin(app, client):
    app.dependency_overrides.pop(require_admin)

    response = await client.post("/api/subscriptions/paypal/verify-capture", json={"captureId": "CAP-1"})

    assert response.status_code == 403
    assert response.json()["detail"]["error"] == "forbidden"


@pytest.mark.asyncio
async def test_verify_capture_as_admin(client, provider_stub):
    provider_stub.on("POST", TOKEN_PATH, json={"access_token": "A21AAF", "expires_in": 32400})
    provider_stub.on("GET", f"{CAPTURES_PATH}/CAP-1", json={"id": "CAP-1", "status": "COMPLETED"})

    response = await client.post("/api/subscriptions/paypal/verify-capture", json={"captureId": "CAP-1"})

    assert response.status_code == 200
    assert response.json()["status"] == "COMPLETED"


@pytest.mark.asyncio
async def test_welcome_email_sent_after_response(app, client, catalog, webpay_create, stub_webpay_commit, email_sender):
    def _deferred(background_tasks: BackgroundTasks) -> ActivationSideEffects:
        return ActivationSideEffects(email_sender, background=background_tasks)

    app.dependency_overrides[get_side_effects] = _deferred
    created = await client.post("/api/subscriptions/webpay/create", json=_checkout_body(catalog))
    subscription_id = uuid.UUID(created.json()["subscriptionId"])
    token = stub_webpay_commit(webpay_buy_order(subscription_id))

    validated = await client.post(
        "/api/subscriptions/webpay/validate",
        params={"subscriptionId": str(subscription_id)},
        json={"token": token},
    )

    assert validated.json()["success"] is True
    assert len(email_sender.sent) == 1


@pytest.mark.asyncio
async def test_metrics_endpoint(client):
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "subscriptions_checkout_started_total" in response.text


def test_extract_event_from_body():
    assert extract_event({"type": "payment", "data": {"id": 123}}, {}) == ("payment", "123")


def test_extract_event_from_ipn_query():
    assert extract_event({}, {"topic": "payment", "id": "55"}) == ("payment", "55")
    assert extract_event({}, {"type": "payment", "data.id": "66"}) == ("payment", "66")


def test_extract_event_action_alias():
    assert extract_event({"action": "payment.created", "data": {"id": "9"}}, {}) == ("payment.created", "9")


def test_extract_event_without_id():
    assert extract_event({"type": "payment"}, {}) == ("payment", None)
