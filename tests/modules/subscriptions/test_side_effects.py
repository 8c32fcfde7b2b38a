# -*- coding: utf-8 -*-
"""
Tests de ActivationSideEffects: recibo + bienvenida, en línea o diferidos
con BackgroundTasks.
"""

import uuid
from decimal import Decimal

import pytest
from fastapi import BackgroundTasks

from app.modules.subscriptions.enums import PaymentProvider, PaymentStatus
from app.modules.subscriptions.models import SubscriptionPayment
from app.modules.subscriptions.services.side_effects import ActivationSideEffects
from app.shared.utils.datetime_helpers import utcnow


class _FailingSender:
    async def send_welcome_email(self, *args, **kwargs):
        raise RuntimeError("mailersend caído")


def _payment(sub) -> SubscriptionPayment:
    return SubscriptionPayment(
        id=uuid.uuid4(),
        subscription_id=sub.id,
        user_id=sub.user_id,
        amount=Decimal("19990"),
        currency="CLP",
        status=PaymentStatus.COMPLETED,
        payment_provider=PaymentProvider.WEBPAY,
        transaction_id="tok-1",
        paid_at=utcnow(),
        payment_metadata={},
    )


@pytest.mark.asyncio
async def test_welcome_email_sent_inline(db_session, make_subscription, email_sender):
    sub = await make_subscription()

    await ActivationSideEffects(email_sender).on_activated(db_session, sub, _payment(sub))

    assert len(email_sender.sent) == 1
    assert email_sender.sent[0]["plan"] == "Plan Pro"


@pytest.mark.asyncio
async def test_welcome_email_deferred_to_background(db_session, make_subscription, email_sender):
    sub = await make_subscription()
    background = BackgroundTasks()

    await ActivationSideEffects(email_sender, background=background).on_activated(
        db_session, sub, _payment(sub)
    )

    assert email_sender.sent == []
    assert len(background.tasks) == 1

    await background()

    assert len(email_sender.sent) == 1
    assert email_sender.sent[0]["attachments"][0].startswith("recibo-")


@pytest.mark.asyncio
async def test_background_send_failure_is_swallowed(db_session, make_subscription):
    sub = await make_subscription()
    background = BackgroundTasks()

    await ActivationSideEffects(_FailingSender(), background=background).on_activated(
        db_session, sub, _payment(sub)
    )

    await background()
