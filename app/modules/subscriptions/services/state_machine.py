# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/services/state_machine.py

Máquina de estados de UserSubscription.

    PENDING_PAYMENT ─confirmación─> ACTIVE
    PAYMENT_FAILED  ─confirmación─> ACTIVE
    ACTIVE  ─pausa─> PAUSED ─reanudación─> ACTIVE
    ACTIVE  ─cobro recurrente fallido─> PAYMENT_FAILED
    {PENDING_PAYMENT, ACTIVE, PAUSED, PAYMENT_FAILED} ─cancelación─> CANCELLED
    ACTIVE / PAUSED ─vencimiento─> EXPIRED

CANCELLED y EXPIRED son terminales: reactivar exige una suscripción nueva.

Las funciones mutan la entidad en memoria; persistir es responsabilidad del
servicio llamador (flush/commit).

Autor: ClubFit
Fecha: 2026-02-12
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, FrozenSet, Optional

from app.modules.subscriptions.enums import SubscriptionStatus
from app.modules.subscriptions.errors import InvalidStateTransition
from app.modules.subscriptions.models import BillingCycle, UserSubscription
from app.modules.subscriptions.utils.period_calculator import compute_period
from app.shared.utils.datetime_helpers import utcnow

logger = logging.getLogger(__name__)

S = SubscriptionStatus

ALLOWED_TRANSITIONS: Dict[SubscriptionStatus, FrozenSet[SubscriptionStatus]] = {
    S.PENDING_PAYMENT: frozenset({S.ACTIVE, S.CANCELLED}),
    S.PAYMENT_FAILED: frozenset({S.ACTIVE, S.CANCELLED}),
    S.ACTIVE: frozenset({S.PAUSED, S.PAYMENT_FAILED, S.CANCELLED, S.EXPIRED}),
    S.PAUSED: frozenset({S.ACTIVE, S.CANCELLED, S.EXPIRED}),
    S.CANCELLED: frozenset(),
    S.EXPIRED: frozenset(),
}


def can_transition(from_state: SubscriptionStatus, to_state: SubscriptionStatus) -> bool:
    return to_state in ALLOWED_TRANSITIONS.get(S(from_state), frozenset())


def _transition(sub: UserSubscription, to_state: SubscriptionStatus) -> None:
    current = S(sub.status)
    if not can_transition(current, to_state):
        raise InvalidStateTransition(current.value, to_state.value)
    logger.info("Suscripción %s: %s -> %s", sub.id, current.value, to_state.value)
    sub.status = to_state


def activate(
    sub: UserSubscription,
    *,
    cycle: Optional[BillingCycle] = None,
    now: Optional[datetime] = None,
) -> None:
    """
    Activa la suscripción y recalcula el período desde `now`.

    Re-activar una suscripción ya ACTIVE (renovación) solo avanza el período.
    `cycle` evita cargar la relación en contextos async.
    """
    now = now or utcnow()
    if S(sub.status) is not S.ACTIVE:
        _transition(sub, S.ACTIVE)
    cycle = cycle or sub.billing_cycle
    start, end = compute_period(now, cycle.interval_type, cycle.interval_count)
    if sub.started_at is None:
        sub.started_at = start
    sub.current_period_start = start
    sub.current_period_end = end


def pause(sub: UserSubscription) -> None:
    if S(sub.status) is S.PAUSED:
        return
    _transition(sub, S.PAUSED)


def resume(sub: UserSubscription) -> None:
    if S(sub.status) is not S.PAUSED:
        raise InvalidStateTransition(S(sub.status).value, S.ACTIVE.value, "Solo se reanuda una suscripción pausada")
    _transition(sub, S.ACTIVE)


def cancel(sub: UserSubscription, reason: Optional[str] = None, now: Optional[datetime] = None) -> None:
    """Cancela: estampa cancelled_at y fuerza auto_renew=False."""
    if S(sub.status) is S.CANCELLED:
        return
    _transition(sub, S.CANCELLED)
    sub.cancelled_at = now or utcnow()
    sub.auto_renew = False
    if reason:
        sub.cancellation_reason = reason


def expire(sub: UserSubscription) -> None:
    _transition(sub, S.EXPIRED)
    sub.auto_renew = False


def mark_payment_failed(sub: UserSubscription) -> None:
    """Solo una suscripción ACTIVE puede degradarse a PAYMENT_FAILED."""
    if S(sub.status) is not S.ACTIVE:
        raise InvalidStateTransition(
            S(sub.status).value,
            S.PAYMENT_FAILED.value,
            "PAYMENT_FAILED solo aplica a suscripciones activas",
        )
    _transition(sub, S.PAYMENT_FAILED)


# ============================================================================
# REMAPEO DESDE ESTADO REMOTO (preapproval de Mercado Pago)
# ============================================================================

def apply_remote_status(
    sub: UserSubscription,
    remote_status: Optional[str],
    *,
    recompute_period: bool = False,
    cycle: Optional[BillingCycle] = None,
    now: Optional[datetime] = None,
) -> bool:
    """
    Deriva el estado local del estado de la preapproval.

        authorized -> ACTIVE (período recalculado si recompute_period o si recién se activa)
        paused     -> PAUSED
        cancelled  -> CANCELLED
        pending    -> PAYMENT_FAILED, solo desde ACTIVE

    Retorna True si hubo cambio. Estados terminales o combinaciones no
    permitidas se registran y se ignoran (el proveedor reintenta eventos).
    """
    status = (remote_status or "").lower()
    current = S(sub.status)

    if current.is_terminal:
        logger.info("Suscripción %s en estado terminal %s; remoto=%s ignorado", sub.id, current.value, status)
        return False

    if status == "authorized":
        if current is S.ACTIVE and not recompute_period:
            return False
        activate(sub, cycle=cycle, now=now)
        return True

    if status == "paused":
        if current is not S.ACTIVE:
            return False
        pause(sub)
        return True

    if status == "cancelled":
        cancel(sub, reason="Cancelada en el proveedor", now=now)
        return True

    if status == "pending":
        if current is not S.ACTIVE:
            return False
        mark_payment_failed(sub)
        return True

    logger.warning("Estado remoto desconocido para suscripción %s: %r", sub.id, remote_status)
    return False


__all__ = [
    "ALLOWED_TRANSITIONS",
    "can_transition",
    "activate",
    "pause",
    "resume",
    "cancel",
    "expire",
    "mark_payment_failed",
    "apply_remote_status",
]

# Fin del archivo backend/app/modules/subscriptions/services/state_machine.py
