# -*- coding: utf-8 -*-
"""
Tests de la máquina de estados de UserSubscription (entidades en memoria).
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.modules.subscriptions.enums import IntervalType, SubscriptionStatus as S
from app.modules.subscriptions.errors import InvalidStateTransition
from app.modules.subscriptions.models import BillingCycle, UserSubscription
from app.modules.subscriptions.services import state_machine

NOW = datetime(2024, 1, 31, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def cycle():
    return BillingCycle(
        id=uuid.uuid4(),
        name="Mensual",
        slug="monthly",
        interval_type=IntervalType.MONTH,
        interval_count=1,
    )


def _sub(status, cycle):
    return UserSubscription(
        id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        plan_id=uuid.uuid4(),
        billing_cycle_id=cycle.id,
        billing_cycle=cycle,
        status=status,
        amount=Decimal("19990"),
        currency="CLP",
        auto_renew=True,
        subscription_metadata={},
    )


def test_activate_from_pending_sets_calendar_period(cycle):
    sub = _sub(S.PENDING_PAYMENT, cycle)
    state_machine.activate(sub, cycle=cycle, now=NOW)

    assert sub.status == S.ACTIVE
    assert sub.started_at == NOW
    assert sub.current_period_start == NOW
    assert sub.current_period_end == datetime(2024, 2, 29, 10, 0, tzinfo=timezone.utc)


def test_reactivation_of_active_only_advances_period(cycle):
    sub = _sub(S.ACTIVE, cycle)
    sub.started_at = datetime(2023, 12, 31, tzinfo=timezone.utc)
    state_machine.activate(sub, cycle=cycle, now=NOW)

    assert sub.status == S.ACTIVE
    assert sub.started_at == datetime(2023, 12, 31, tzinfo=timezone.utc)
    assert sub.current_period_start == NOW


@pytest.mark.parametrize("terminal", [S.CANCELLED, S.EXPIRED])
def test_terminal_states_cannot_be_reactivated(cycle, terminal):
    sub = _sub(terminal, cycle)
    with pytest.raises(InvalidStateTransition):
        state_machine.activate(sub, cycle=cycle, now=NOW)


def test_cancel_sets_timestamp_and_disables_renewal(cycle):
    sub = _sub(S.ACTIVE, cycle)
    state_machine.cancel(sub, reason="me mudo", now=NOW)

    assert sub.status == S.CANCELLED
    assert sub.cancelled_at == NOW
    assert sub.auto_renew is False
    assert sub.cancellation_reason == "me mudo"

    # idempotente
    state_machine.cancel(sub, now=datetime(2025, 1, 1, tzinfo=timezone.utc))
    assert sub.cancelled_at == NOW


def test_pending_payment_can_be_cancelled(cycle):
    sub = _sub(S.PENDING_PAYMENT, cycle)
    state_machine.cancel(sub, now=NOW)
    assert sub.status == S.CANCELLED


def test_pause_resume_and_payment_failed(cycle):
    sub = _sub(S.ACTIVE, cycle)
    state_machine.pause(sub)
    assert sub.status == S.PAUSED
    state_machine.resume(sub)
    assert sub.status == S.ACTIVE
    state_machine.mark_payment_failed(sub)
    assert sub.status == S.PAYMENT_FAILED


def test_payment_failed_only_from_active(cycle):
    sub = _sub(S.PENDING_PAYMENT, cycle)
    with pytest.raises(InvalidStateTransition):
        state_machine.mark_payment_failed(sub)


def test_expire_from_active_disables_renewal(cycle):
    sub = _sub(S.ACTIVE, cycle)
    state_machine.expire(sub)
    assert sub.status == S.EXPIRED
    assert sub.auto_renew is False
    assert not state_machine.can_transition(S.EXPIRED, S.ACTIVE)


# ---------------------------------------------------------------------------
# Remapeo desde estado remoto (preapproval)
# ---------------------------------------------------------------------------

def test_remote_authorized_activates_pending(cycle):
    sub = _sub(S.PENDING_PAYMENT, cycle)
    assert state_machine.apply_remote_status(sub, "authorized", cycle=cycle, now=NOW) is True
    assert sub.status == S.ACTIVE
    assert sub.current_period_end is not None


def test_remote_authorized_on_active_is_noop_unless_recompute(cycle):
    sub = _sub(S.ACTIVE, cycle)
    assert state_machine.apply_remote_status(sub, "authorized", cycle=cycle, now=NOW) is False
    assert sub.current_period_start is None

    assert state_machine.apply_remote_status(
        sub, "authorized", recompute_period=True, cycle=cycle, now=NOW
    ) is True
    assert sub.current_period_start == NOW


def test_remote_pending_degrades_only_active(cycle):
    pending = _sub(S.PENDING_PAYMENT, cycle)
    assert state_machine.apply_remote_status(pending, "pending") is False
    assert pending.status == S.PENDING_PAYMENT

    active = _sub(S.ACTIVE, cycle)
    assert state_machine.apply_remote_status(active, "pending") is True
    assert active.status == S.PAYMENT_FAILED


def test_remote_paused_and_cancelled(cycle):
    sub = _sub(S.ACTIVE, cycle)
    assert state_machine.apply_remote_status(sub, "paused") is True
    assert sub.status == S.PAUSED
    assert state_machine.apply_remote_status(sub, "cancelled", now=NOW) is True
    assert sub.status == S.CANCELLED
    assert sub.auto_renew is False


def test_remote_status_ignored_for_terminal_and_unknown(cycle):
    cancelled = _sub(S.CANCELLED, cycle)
    assert state_machine.apply_remote_status(cancelled, "authorized", cycle=cycle) is False
    assert cancelled.status == S.CANCELLED

    active = _sub(S.ACTIVE, cycle)
    assert state_machine.apply_remote_status(active, "weird") is False
    assert active.status == S.ACTIVE
