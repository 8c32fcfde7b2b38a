# -*- coding: utf-8 -*-
"""
Tests del procesamiento de webhooks de Mercado Pago.
"""

import pytest
from sqlalchemy import select

from app.modules.subscriptions.enums import PaymentStatus, SubscriptionStatus
from app.modules.subscriptions.models import SubscriptionPayment
from app.modules.subscriptions.providers.mercadopago_provider import (
    AUTHORIZED_PAYMENTS_PATH,
    PAYMENTS_PATH,
    PREAPPROVAL_PATH,
)
from app.modules.subscriptions.services.webhook_service import normalize_event_type


def _payment(payment_id, status="approved", amount=19990, **extra):
    body = {
        "id": payment_id,
        "status": status,
        "status_detail": "accredited" if status == "approved" else status,
        "transaction_amount": amount,
        "currency_id": "CLP",
        "payment_method_id": "visa",
    }
    body.update(extra)
    return body


async def _payments(session):
    return (await session.execute(select(SubscriptionPayment))).scalars().all()


@pytest.fixture
async def recurring_pending(make_subscription):
    return await make_subscription(
        status=SubscriptionStatus.PENDING_PAYMENT,
        external_subscription_id="pre-1",
        provider_reference="pre-1",
    )


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("payment", "payment"),
        ("payment.created", "payment"),
        ("Subscription_Preapproval", "subscription_preapproval"),
        (None, "unknown"),
        ("  ", "unknown"),
    ],
)
def test_normalize_event_type(raw, expected):
    assert normalize_event_type(raw) == expected


@pytest.mark.asyncio
async def test_missing_data_id_is_ignored(webhook_service, provider_stub):
    result = await webhook_service.handle("payment", None)
    assert result == {"status": "ignored", "reason": "missing_id"}
    assert provider_stub.requests == []


@pytest.mark.asyncio
async def test_unlinked_payment_is_ignored_without_rows(db_session, webhook_service, provider_stub, user, catalog):
    provider_stub.on("GET", f"{PAYMENTS_PATH}/999", json=_payment(999, external_reference="ORD-externo"))

    result = await webhook_service.handle("payment", "999")

    assert result["status"] == "ignored"
    assert result["reason"] == "unlinked"
    assert await _payments(db_session) == []


@pytest.mark.asyncio
async def test_preapproval_authorized_activates_subscription(webhook_service, provider_stub, recurring_pending):
    provider_stub.on("GET", f"{PREAPPROVAL_PATH}/pre-1", json={"id": "pre-1", "status": "authorized"})

    result = await webhook_service.handle("subscription_preapproval", "pre-1")

    assert result["status"] == "ok"
    assert result["changed"] is True
    assert recurring_pending.status == SubscriptionStatus.ACTIVE
    assert recurring_pending.current_period_end is not None


@pytest.mark.asyncio
async def test_preapproval_cancelled_remotely(webhook_service, provider_stub, make_subscription):
    sub = await make_subscription(status=SubscriptionStatus.ACTIVE, external_subscription_id="pre-2")
    provider_stub.on("GET", f"{PREAPPROVAL_PATH}/pre-2", json={"id": "pre-2", "status": "cancelled"})

    result = await webhook_service.handle("preapproval", "pre-2")

    assert result["status"] == "ok"
    assert sub.status == SubscriptionStatus.CANCELLED
    assert sub.auto_renew is False


@pytest.mark.asyncio
async def test_unknown_preapproval_is_ignored(webhook_service, provider_stub):
    result = await webhook_service.handle("subscription_preapproval", "nope")
    assert result["status"] == "ignored"
    assert provider_stub.requests == []


@pytest.mark.asyncio
async def test_authorized_payment_routes_to_preapproval(webhook_service, provider_stub, recurring_pending):
    provider_stub.on(
        "GET",
        f"{AUTHORIZED_PAYMENTS_PATH}/7001",
        json={"id": 7001, "preapproval_id": "pre-1", "status": "processed"},
    )
    provider_stub.on("GET", f"{PREAPPROVAL_PATH}/pre-1", json={"id": "pre-1", "status": "authorized"})

    result = await webhook_service.handle("subscription_authorized_payment", "7001")

    assert result["status"] == "ok"
    assert recurring_pending.status == SubscriptionStatus.ACTIVE


@pytest.mark.asyncio
async def test_recurring_payment_recorded_once(
    db_session, webhook_service, provider_stub, recurring_pending, email_sender
):
    provider_stub.on(
        "GET",
        f"{PAYMENTS_PATH}/555",
        json=_payment(555, metadata={"preapproval_id": "pre-1"}),
    )

    first = await webhook_service.handle("payment", "555")
    second = await webhook_service.handle("payment.updated", "555")

    assert first["status"] == "ok"
    assert first["activated"] is True
    assert second["status"] == "duplicate"
    payments = await _payments(db_session)
    assert len(payments) == 1
    assert payments[0].transaction_id == "555"
    assert recurring_pending.status == SubscriptionStatus.ACTIVE
    assert len(email_sender.sent) == 1


@pytest.mark.asyncio
async def test_pending_payment_is_corrected_when_approved(
    db_session, webhook_service, provider_stub, make_subscription
):
    sub = await make_subscription(status=SubscriptionStatus.PENDING_PAYMENT)

    provider_stub.on("GET", f"{PAYMENTS_PATH}/777", json=_payment(777, status="in_process", external_reference=str(sub.id)))
    pending = await webhook_service.handle("payment", "777")

    assert pending["status"] == "ok"
    assert pending["payment_status"] == "pending"
    assert pending["activated"] is False
    assert sub.status == SubscriptionStatus.PENDING_PAYMENT

    provider_stub.on("GET", f"{PAYMENTS_PATH}/777", json=_payment(777, external_reference=str(sub.id)))
    approved = await webhook_service.handle("payment", "777")

    assert approved["status"] == "ok"
    payments = await _payments(db_session)
    assert len(payments) == 1
    assert payments[0].status == PaymentStatus.COMPLETED
    assert sub.status == SubscriptionStatus.ACTIVE


@pytest.mark.asyncio
async def test_amount_mismatch_reports_error_without_activation(
    db_session, webhook_service, provider_stub, make_subscription
):
    sub = await make_subscription(status=SubscriptionStatus.PENDING_PAYMENT)
    sub_id = sub.id
    provider_stub.on("GET", f"{PAYMENTS_PATH}/888", json=_payment(888, amount=100, external_reference=str(sub_id)))

    result = await webhook_service.handle("payment", "888")

    assert result["status"] == "error"
    assert result["error"] == "amount_mismatch"
    assert await _payments(db_session) == []


@pytest.mark.asyncio
async def test_provider_error_is_reported_not_raised(webhook_service):
    # sin stub: el GET responde 404
    result = await webhook_service.handle("payment", "404404")
    assert result["status"] == "error"
    assert result["error"] == "provider_request_failed"


@pytest.mark.asyncio
async def test_rejected_renewal_downgrades_active_subscription(
    db_session, webhook_service, provider_stub, make_subscription, email_sender
):
    sub = await make_subscription(external_subscription_id="pre-9", provider_reference="pre-9")
    provider_stub.on(
        "GET",
        f"{PAYMENTS_PATH}/901",
        json=_payment(901, status="rejected", metadata={"preapproval_id": "pre-9"}),
    )

    result = await webhook_service.handle("payment", "901")

    assert result["status"] == "ok"
    assert result["payment_status"] == "failed"
    assert result["activated"] is False
    assert result["subscription_status"] == "payment_failed"
    assert sub.status == SubscriptionStatus.PAYMENT_FAILED
    payments = await _payments(db_session)
    assert len(payments) == 1
    assert payments[0].status == PaymentStatus.FAILED
    assert email_sender.sent == []


@pytest.mark.asyncio
async def test_pending_payment_corrected_to_failed_on_redelivery(
    db_session, webhook_service, provider_stub, make_subscription
):
    sub = await make_subscription(external_subscription_id="pre-8", provider_reference="pre-8")
    provider_stub.on(
        "GET",
        f"{PAYMENTS_PATH}/902",
        json=_payment(902, status="in_process", metadata={"preapproval_id": "pre-8"}),
    )
    pending = await webhook_service.handle("payment", "902")
    assert pending["payment_status"] == "pending"
    assert sub.status == SubscriptionStatus.ACTIVE

    provider_stub.on(
        "GET",
        f"{PAYMENTS_PATH}/902",
        json=_payment(902, status="rejected", metadata={"preapproval_id": "pre-8"}),
    )
    rejected = await webhook_service.handle("payment", "902")

    assert rejected["status"] == "ok"
    assert rejected["payment_status"] == "failed"
    assert sub.status == SubscriptionStatus.PAYMENT_FAILED
    payments = await _payments(db_session)
    assert len(payments) == 1
    assert payments[0].status == PaymentStatus.FAILED
    assert payments[0].payment_metadata["previous_status"] == "pending"


@pytest.mark.asyncio
async def test_completed_payment_corrected_to_refunded(
    db_session, webhook_service, provider_stub, recurring_pending, email_sender
):
    provider_stub.on("GET", f"{PAYMENTS_PATH}/903", json=_payment(903, metadata={"preapproval_id": "pre-1"}))
    await webhook_service.handle("payment", "903")

    provider_stub.on(
        "GET",
        f"{PAYMENTS_PATH}/903",
        json=_payment(903, status="refunded", metadata={"preapproval_id": "pre-1"}),
    )
    refunded = await webhook_service.handle("payment", "903")

    assert refunded["status"] == "ok"
    assert refunded["payment_status"] == "refunded"
    payments = await _payments(db_session)
    assert len(payments) == 1
    assert payments[0].status == PaymentStatus.REFUNDED
    assert payments[0].refunded_at is not None
    assert len(email_sender.sent) == 1

    # Un approved tardío no revierte el reembolso
    provider_stub.on("GET", f"{PAYMENTS_PATH}/903", json=_payment(903, metadata={"preapproval_id": "pre-1"}))
    late = await webhook_service.handle("payment", "903")
    assert late["status"] == "duplicate"
    assert (await _payments(db_session))[0].status == PaymentStatus.REFUNDED


@pytest.mark.asyncio
async def test_payment_on_cancelled_subscription_is_not_activated(
    db_session, webhook_service, provider_stub, make_subscription, email_sender
):
    sub = await make_subscription(
        status=SubscriptionStatus.CANCELLED,
        external_subscription_id="pre-7",
        provider_reference="pre-7",
    )
    provider_stub.on("GET", f"{PAYMENTS_PATH}/904", json=_payment(904, metadata={"preapproval_id": "pre-7"}))

    result = await webhook_service.handle("payment", "904")

    assert result["status"] == "ok"
    assert result["activated"] is False
    assert result["requires_review"] is True
    assert sub.status == SubscriptionStatus.CANCELLED
    payments = await _payments(db_session)
    assert payments[0].payment_metadata["requires_manual_review"] is True
    assert email_sender.sent == []
