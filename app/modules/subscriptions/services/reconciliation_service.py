# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/services/reconciliation_service.py

Validación de pagos y reconciliación con el ledger de suscripciones.

Flujo uniforme por proveedor (validate_<proveedor>_payment):
    1. confirm() en el adaptador (estado autoritativo del proveedor)
    2. exigir estado exitoso        -> PaymentNotAuthorizedError
    3. resolver la suscripción      -> NotFoundError
    4. comparar montos              -> AmountMismatchError (nunca activa)
    5. compuerta de idempotencia por transaction_id (UNIQUE en la tabla)
    6. crear pago + activar + recalcular período + guardar payload
    7. efectos secundarios best-effort (recibo + bienvenida)

record_confirmation() implementa 4-7 y lo reutiliza el webhook de
Mercado Pago para renovaciones recurrentes.

Autor: ClubFit
Fecha: 2026-02-13
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.subscriptions.enums import (
    PaymentProvider,
    PaymentStatus,
    SubscriptionStatus,
)
from app.modules.subscriptions.errors import (
    AmountMismatchError,
    ConflictError,
    NotFoundError,
    PaymentError,
    PaymentNotAuthorizedError,
)
from app.modules.subscriptions.links import (
    MercadoPagoLink,
    PayPalLink,
    ProviderLink,
    WebpayLink,
    read_link,
)
from app.modules.subscriptions.metrics.prometheus_exporter import (
    observe_amount_mismatch,
    observe_validation,
)
from app.modules.subscriptions.models import SubscriptionPayment, UserSubscription
from app.modules.subscriptions.providers.base import ProviderConfirmation
from app.modules.subscriptions.providers.factory import ProviderFactory
from app.modules.subscriptions.repositories import (
    PlanRepository,
    SubscriptionPaymentRepository,
    SubscriptionRepository,
)
from app.modules.subscriptions.services import state_machine
from app.modules.subscriptions.services.side_effects import ActivationSideEffects
from app.modules.subscriptions.utils.amounts import amounts_match, to_decimal
from app.shared.utils.datetime_helpers import utcnow

logger = logging.getLogger(__name__)

_MP_PAYMENT_STATUS = {
    "approved": PaymentStatus.COMPLETED,
    "authorized": PaymentStatus.PENDING,
    "in_process": PaymentStatus.PENDING,
    "in_mediation": PaymentStatus.PENDING,
    "pending": PaymentStatus.PENDING,
    "rejected": PaymentStatus.FAILED,
    "cancelled": PaymentStatus.FAILED,
    "refunded": PaymentStatus.REFUNDED,
    "charged_back": PaymentStatus.REFUNDED,
}


def map_mercadopago_payment_status(status: Optional[str]) -> PaymentStatus:
    return _MP_PAYMENT_STATUS.get((status or "").lower(), PaymentStatus.PENDING)


# Correcciones de estado admitidas ante una entrega repetida del mismo transaction_id
_STATUS_CORRECTIONS = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.COMPLETED, PaymentStatus.FAILED, PaymentStatus.REFUNDED}),
    PaymentStatus.FAILED: frozenset({PaymentStatus.COMPLETED}),
    PaymentStatus.COMPLETED: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.REFUNDED: frozenset(),
}


def _review_flags(subscription: UserSubscription) -> Dict[str, Any]:
    return {
        "requires_manual_review": True,
        "review_reason": f"subscription_{SubscriptionStatus(subscription.status).value}",
    }


@dataclass
class ValidationResult:
    """Resultado de validar un pago contra el ledger."""

    success: bool
    subscription: UserSubscription
    payment: Optional[SubscriptionPayment] = None
    duplicate: bool = False
    needs_capture_verification: bool = False
    requires_review: bool = False


def _duplicate_result(subscription: UserSubscription, payment: SubscriptionPayment) -> ValidationResult:
    """Una entrega repetida informa el resultado ya registrado, sin efectos."""
    metadata = payment.payment_metadata or {}
    review = bool(metadata.get("requires_manual_review"))
    return ValidationResult(
        success=payment.status == PaymentStatus.COMPLETED and not review,
        subscription=subscription,
        payment=payment,
        duplicate=True,
        needs_capture_verification=bool(metadata.get("needs_capture_verification")),
        requires_review=review,
    )


class ReconciliationService:
    """Valida confirmaciones de pasarelas y muta el ledger de forma idempotente."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        providers: ProviderFactory,
        side_effects: ActivationSideEffects,
    ):
        self.session = session
        self.providers = providers
        self.side_effects = side_effects
        self.subscriptions = SubscriptionRepository()
        self.payments = SubscriptionPaymentRepository()
        self.plans = PlanRepository()

    # ======================================================================
    # WEBPAY
    # ======================================================================

    async def validate_webpay_payment(
        self,
        token: str,
        subscription_id: Optional[uuid.UUID] = None,
    ) -> ValidationResult:
        provider = PaymentProvider.WEBPAY
        confirmation = await self.providers.webpay().confirm(token)
        self._require_approved(provider, confirmation)

        subscription = await self._resolve(
            provider,
            subscription_id,
            link=WebpayLink(confirmation.external_reference) if confirmation.external_reference else None,
        )
        return await self.record_confirmation(
            subscription,
            provider,
            confirmation,
            payment_method=str(confirmation.extra.get("payment_type_code") or "webpay"),
        )

    # ======================================================================
    # PAYPAL
    # ======================================================================

    async def validate_paypal_payment(
        self,
        order_id: str,
        subscription_id: Optional[uuid.UUID] = None,
    ) -> ValidationResult:
        provider = PaymentProvider.PAYPAL
        confirmation = await self.providers.paypal().confirm(order_id)
        self._require_approved(provider, confirmation)

        subscription = await self._resolve(
            provider,
            subscription_id,
            link=PayPalLink(order_id),
            external_reference=confirmation.external_reference,
        )

        needs_verification = bool(confirmation.extra.get("needs_capture_verification"))
        if needs_verification:
            logger.warning(
                "[paypal] captura %s en estado PENDING (%s) con orden COMPLETED; se activa con verificación pendiente",
                confirmation.extra.get("capture_id"),
                confirmation.extra.get("capture_status_reason"),
            )

        return await self.record_confirmation(
            subscription,
            provider,
            confirmation,
            payment_method="paypal",
            extra_metadata={
                "order_id": order_id,
                "capture_status": confirmation.extra.get("capture_status"),
                "capture_status_reason": confirmation.extra.get("capture_status_reason"),
                "needs_capture_verification": needs_verification,
            },
        )

    async def verify_paypal_capture(self, capture_id: str) -> Dict[str, Any]:
        """
        Re-consulta una captura. COMPLETED limpia needs_capture_verification;
        DECLINED/FAILED marca el pago como fallido.
        """
        capture = await self.providers.paypal().get_capture(capture_id)
        status = str(capture.get("status") or "")

        payment = await self.payments.find_by_transaction_id(self.session, capture_id)
        if payment is None:
            logger.info("[paypal] verify-capture %s sin pago local asociado", capture_id)
            return {"status": status, "capture": capture}

        subscription = await self.subscriptions.get(self.session, payment.subscription_id)

        if status == "COMPLETED":
            payment.payment_metadata = {
                **(payment.payment_metadata or {}),
                "needs_capture_verification": False,
                "capture_status": status,
            }
            if subscription is not None:
                subscription.subscription_metadata = {
                    **(subscription.subscription_metadata or {}),
                    "needs_capture_verification": False,
                }
            logger.info("[paypal] captura %s verificada", capture_id)
        elif status in ("DECLINED", "FAILED"):
            payment.status = PaymentStatus.FAILED
            payment.payment_metadata = {**(payment.payment_metadata or {}), "capture_status": status}
            logger.error(
                "[paypal] captura %s terminó en %s; suscripción %s requiere revisión manual",
                capture_id,
                status,
                payment.subscription_id,
            )

        await self.session.commit()
        return {"status": status, "capture": capture}

    # ======================================================================
    # MERCADO PAGO
    # ======================================================================

    async def validate_mercadopago_payment(
        self,
        payment_id: str,
        subscription_id: Optional[uuid.UUID] = None,
    ) -> ValidationResult:
        provider = PaymentProvider.MERCADOPAGO
        confirmation = await self.providers.mercadopago().confirm(payment_id)
        self._require_approved(provider, confirmation)

        preapproval_id = confirmation.extra.get("preapproval_id")
        subscription = await self._resolve(
            provider,
            subscription_id,
            link=MercadoPagoLink(preapproval_id=preapproval_id) if preapproval_id else None,
            external_reference=confirmation.external_reference,
        )
        return await self.record_confirmation(
            subscription,
            provider,
            confirmation,
            payment_method=str(confirmation.extra.get("payment_method_id") or "mercadopago"),
        )

    # ======================================================================
    # NÚCLEO COMÚN (pasos 4-7)
    # ======================================================================

    async def record_confirmation(
        self,
        subscription: UserSubscription,
        provider: PaymentProvider,
        confirmation: ProviderConfirmation,
        *,
        payment_method: Optional[str] = None,
        payment_status: PaymentStatus = PaymentStatus.COMPLETED,
        extra_metadata: Optional[Dict[str, Any]] = None,
    ) -> ValidationResult:
        """
        Registra una confirmación sobre una suscripción ya resuelta.

        - COMPLETED activa (o renueva) la suscripción; sobre una suscripción
          terminal se registra el cobro marcado para revisión manual y no activa.
        - FAILED degrada una suscripción ACTIVE a PAYMENT_FAILED.
        - Una entrega repetida solo corrige el estado del pago existente
          según _STATUS_CORRECTIONS; cualquier otra repetición es duplicado.
        """
        completed = payment_status == PaymentStatus.COMPLETED
        if completed:
            self._check_amount(subscription, provider, confirmation)

        # Compuerta de idempotencia
        existing = await self.payments.find_by_transaction_id(
            self.session, confirmation.provider_transaction_id
        )
        if existing is not None:
            if payment_status not in _STATUS_CORRECTIONS[PaymentStatus(existing.status)]:
                logger.info(
                    "[%s] transacción %s ya registrada (%s); sin cambios",
                    provider.value,
                    confirmation.provider_transaction_id,
                    PaymentStatus(existing.status).value,
                )
                observe_validation(provider.value, "duplicate")
                return _duplicate_result(subscription, existing)
            return await self._correct_existing(subscription, existing, provider, confirmation, payment_status)

        now = utcnow()
        activated = completed and await self._activate(subscription, now)
        review = completed and not activated
        if payment_status == PaymentStatus.FAILED:
            self._downgrade_on_failure(subscription)

        metadata = {**(extra_metadata or {}), "provider_payload": confirmation.raw_payload}
        if review:
            metadata.update(_review_flags(subscription))
        payment = SubscriptionPayment(
            id=uuid.uuid4(),
            subscription_id=subscription.id,
            user_id=subscription.user_id,
            amount=confirmation.amount if confirmation.amount is not None else subscription.amount,
            currency=(confirmation.currency or subscription.currency).upper(),
            status=payment_status,
            payment_method=payment_method,
            payment_provider=provider,
            transaction_id=confirmation.provider_transaction_id,
            period_start=subscription.current_period_start if activated else None,
            period_end=subscription.current_period_end if activated else None,
            paid_at=now if completed else None,
            refunded_at=now if payment_status == PaymentStatus.REFUNDED else None,
            payment_metadata=metadata,
        )
        self.session.add(payment)

        subscription.subscription_metadata = {
            **(subscription.subscription_metadata or {}),
            "last_transaction_id": confirmation.provider_transaction_id,
            "last_payment_status": PaymentStatus(payment_status).value,
            "needs_capture_verification": bool((extra_metadata or {}).get("needs_capture_verification")),
        }

        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            return await self._after_integrity_error(subscription, provider, confirmation)

        logger.info(
            "[%s] pago %s registrado (%s %s) para suscripción %s status=%s",
            provider.value,
            confirmation.provider_transaction_id,
            payment.amount,
            payment.currency,
            subscription.id,
            PaymentStatus(payment_status).value,
        )

        if activated:
            observe_validation(provider.value, "activated")
            await self.side_effects.on_activated(self.session, subscription, payment)
        elif review:
            self._log_review(provider, subscription, payment)

        return ValidationResult(
            success=activated,
            subscription=subscription,
            payment=payment,
            needs_capture_verification=bool((extra_metadata or {}).get("needs_capture_verification")),
            requires_review=review,
        )

    # ======================================================================
    # HELPERS
    # ======================================================================

    def _require_approved(self, provider: PaymentProvider, confirmation: ProviderConfirmation) -> None:
        if confirmation.approved:
            return
        logger.warning(
            "[%s] pago no autorizado tx=%s status=%s extra=%s",
            provider.value,
            confirmation.provider_transaction_id,
            confirmation.status,
            confirmation.extra,
        )
        observe_validation(provider.value, "not_authorized")
        raise PaymentNotAuthorizedError(provider.value, confirmation.status)

    async def _resolve(
        self,
        provider: PaymentProvider,
        subscription_id: Optional[uuid.UUID],
        *,
        link: Optional[ProviderLink] = None,
        external_reference: Optional[str] = None,
    ) -> UserSubscription:
        """Id explícito primero; luego vínculo tipado; luego external_reference."""
        subscription: Optional[UserSubscription] = None

        if subscription_id is not None:
            subscription = await self.subscriptions.get(self.session, subscription_id)
            if subscription is None:
                raise NotFoundError("UserSubscription", subscription_id)
            stored = read_link(subscription.subscription_metadata)
            # MP: el pago trae preapproval_id y la suscripción puede guardar una preference
            if (
                link is not None
                and stored is not None
                and not isinstance(link, MercadoPagoLink)
                and stored.reference != link.reference
            ):
                raise ConflictError(
                    f"La confirmación {link.reference} no corresponde a la suscripción {subscription_id}"
                )
            return subscription

        if link is not None:
            if isinstance(link, MercadoPagoLink) and link.is_recurring:
                subscription = await self.subscriptions.get_by_external_subscription_id(
                    self.session, link.reference
                )
            else:
                subscription = await self.subscriptions.get_by_link(self.session, link)

        if subscription is None and external_reference:
            subscription = await self.subscriptions.get_by_reference_string(self.session, external_reference)

        if subscription is None:
            ref = link.reference if link is not None else external_reference
            logger.warning("[%s] no se pudo resolver suscripción para %s", provider.value, ref)
            raise NotFoundError("UserSubscription", ref)
        return subscription

    def _check_amount(
        self,
        subscription: UserSubscription,
        provider: PaymentProvider,
        confirmation: ProviderConfirmation,
    ) -> None:
        expected = to_decimal(subscription.amount)
        currency = subscription.currency.upper()
        received = confirmation.amount

        currency_ok = confirmation.currency is None or confirmation.currency.upper() == currency
        if received is not None and currency_ok and amounts_match(expected, received, currency):
            return

        logger.error(
            "FRAUDE POTENCIAL [%s]: suscripción %s esperaba %s %s, proveedor reporta %s %s (tx=%s)",
            provider.value,
            subscription.id,
            expected,
            currency,
            received,
            confirmation.currency,
            confirmation.provider_transaction_id,
        )
        observe_amount_mismatch(provider.value)
        observe_validation(provider.value, "amount_mismatch")
        raise AmountMismatchError(expected, to_decimal(received or 0), confirmation.currency or currency)

    async def _activate(self, subscription: UserSubscription, now) -> bool:
        """Activa o renueva; False si la suscripción es terminal."""
        if SubscriptionStatus(subscription.status).is_terminal:
            return False
        cycle = await self.plans.get_billing_cycle(self.session, subscription.billing_cycle_id)
        state_machine.activate(subscription, cycle=cycle, now=now)
        return True

    def _downgrade_on_failure(self, subscription: UserSubscription) -> None:
        if SubscriptionStatus(subscription.status) is SubscriptionStatus.ACTIVE:
            state_machine.mark_payment_failed(subscription)

    def _log_review(
        self,
        provider: PaymentProvider,
        subscription: UserSubscription,
        payment: SubscriptionPayment,
    ) -> None:
        logger.error(
            "[%s] cobro %s (%s %s) sobre suscripción %s en estado terminal %s; requiere revisión/reembolso",
            provider.value,
            payment.transaction_id,
            payment.amount,
            payment.currency,
            subscription.id,
            SubscriptionStatus(subscription.status).value,
        )
        observe_validation(provider.value, "terminal_subscription")

    async def _correct_existing(
        self,
        subscription: UserSubscription,
        payment: SubscriptionPayment,
        provider: PaymentProvider,
        confirmation: ProviderConfirmation,
        new_status: PaymentStatus,
    ) -> ValidationResult:
        """Aplica una corrección de estado permitida a un pago ya registrado."""
        now = utcnow()
        previous = PaymentStatus(payment.status)
        completed = new_status == PaymentStatus.COMPLETED
        activated = completed and await self._activate(subscription, now)
        review = completed and not activated

        metadata = {
            **(payment.payment_metadata or {}),
            "provider_payload": confirmation.raw_payload,
            "status_corrected_at": now.isoformat(),
            "previous_status": previous.value,
        }
        if review:
            metadata.update(_review_flags(subscription))

        payment.status = new_status
        payment.payment_metadata = metadata
        if completed:
            payment.paid_at = now
            if activated:
                payment.period_start = subscription.current_period_start
                payment.period_end = subscription.current_period_end
        elif new_status == PaymentStatus.FAILED:
            self._downgrade_on_failure(subscription)
        elif new_status == PaymentStatus.REFUNDED:
            payment.refunded_at = now

        subscription.subscription_metadata = {
            **(subscription.subscription_metadata or {}),
            "last_transaction_id": confirmation.provider_transaction_id,
            "last_payment_status": new_status.value,
        }

        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            return await self._after_integrity_error(subscription, provider, confirmation)

        logger.info(
            "[%s] pago %s corregido %s -> %s",
            provider.value,
            payment.transaction_id,
            previous.value,
            new_status.value,
        )
        if activated:
            observe_validation(provider.value, "activated")
            await self.side_effects.on_activated(self.session, subscription, payment)
        elif review:
            self._log_review(provider, subscription, payment)
        else:
            observe_validation(provider.value, "corrected")
        return ValidationResult(
            success=activated,
            subscription=subscription,
            payment=payment,
            requires_review=review,
        )

    async def _after_integrity_error(
        self,
        subscription: UserSubscription,
        provider: PaymentProvider,
        confirmation: ProviderConfirmation,
    ) -> ValidationResult:
        """
        La restricción UNIQUE ganó la carrera: o el pago ya existe (duplicado
        concurrente) o el usuario ya tiene otra suscripción activa.
        """
        await self.session.refresh(subscription)
        existing = await self.payments.find_by_transaction_id(
            self.session, confirmation.provider_transaction_id
        )
        if existing is not None:
            logger.info(
                "[%s] transacción %s registrada concurrentemente; duplicado",
                provider.value,
                confirmation.provider_transaction_id,
            )
            observe_validation(provider.value, "duplicate")
            return _duplicate_result(subscription, existing)

        active = await self.subscriptions.get_active_for_user(self.session, subscription.user_id)
        if active is not None and active.id != subscription.id:
            observe_validation(provider.value, "conflict")
            raise ConflictError(
                f"El usuario {subscription.user_id} ya tiene la suscripción activa {active.id}"
            )
        observe_validation(provider.value, "error")
        raise PaymentError("No se pudo registrar el pago por una restricción de integridad")


__all__ = [
    "ReconciliationService",
    "ValidationResult",
    "map_mercadopago_payment_status",
]

# Fin del archivo backend/app/modules/subscriptions/services/reconciliation_service.py
