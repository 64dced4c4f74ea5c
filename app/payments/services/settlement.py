"""
Order settlement: the single place an order's payment status changes.

OrderSettlement moves an order from pending to paid or failed exactly
once. Two paths can drive the same order and may race:

    client confirmation  ->  mark_paid        (signature checked here)
    Razorpay webhook     ->  mark_paid_from_gateway / mark_failed_from_gateway
                             (already authenticated by the webhook HMAC)

Compare-and-swap:
    Transitions are django-fsm transitions saved through
    ConcurrentTransitionMixin, so the write is
    ``UPDATE ... WHERE id = :id AND payment_status = 'pending'``. The
    loser of a race gets ConcurrentTransition; it reloads the order and
    evaluates the outcome table once more, which turns the race into an
    idempotent success or a CONFLICT.

Outcomes of mark_paid:

    +------------------------------+----------------------+
    | Current status               | Result               |
    +------------------------------+----------------------+
    | pending                      | paid, success        |
    | paid, same payment_id        | success (idempotent) |
    | paid, different payment_id   | CONFLICT             |
    | failed                       | CONFLICT             |
    | no such order                | NOT_FOUND            |
    +------------------------------+----------------------+

Outcomes of mark_failed:

    +------------------------------+----------------------+
    | pending                      | failed, success      |
    | failed                       | success (idempotent) |
    | paid                         | CONFLICT             |
    | no such order                | NOT_FOUND            |
    +------------------------------+----------------------+
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.db.models import Q
from django_fsm import ConcurrentTransition

from core.services import BaseService, ErrorKind, ServiceResult
from payments.models import Order
from payments.signatures import verify_payment_signature
from payments.state_machines import PaymentStatus

if TYPE_CHECKING:
    from collections.abc import Callable

# One initial attempt plus one re-evaluation after a lost race
SETTLE_ATTEMPTS = 2


def _conflict(message: str, order: Order, **details: Any) -> ServiceResult[Order]:
    return ServiceResult.failure(
        message,
        error_code=ErrorKind.CONFLICT,
        details={"payment_status": order.payment_status, **details},
        data=order,
    )


def _order_not_found() -> ServiceResult[Order]:
    return ServiceResult.failure("Order not found", error_code=ErrorKind.NOT_FOUND)


def by_id(order_id) -> Callable[[], Order | None]:
    def load():
        try:
            return Order.objects.filter(pk=order_id).first()
        except (ValueError, DjangoValidationError):
            return None

    return load


def by_gateway_order_id(gateway_order_id: str) -> Callable[[], Order | None]:
    def load():
        if not gateway_order_id:
            return None
        return (
            Order.objects.filter(
                Q(gateway_order_id=gateway_order_id)
                | Q(gateway_links__gateway_order_id=gateway_order_id)
            )
            .distinct()
            .first()
        )

    return load


class OrderSettlement(BaseService):
    """
    Settles orders pending -> paid | failed.

    Usage:
        result = OrderSettlement.mark_paid(
            order_id, payment_id, gateway_order_id, signature
        )
        if result.error_code == ErrorKind.CONFLICT:
            ...
    """

    # =========================================================================
    # Paid
    # =========================================================================

    @classmethod
    def mark_paid(
        cls,
        order_id,
        payment_id: str,
        gateway_order_id: str,
        signature: str,
    ) -> ServiceResult[Order]:
        """
        Settle an order as paid from a client confirmation.

        The client's signature must be authentic for (gateway_order_id,
        payment_id) before the order is touched.

        Returns:
            ServiceResult[Order]; SIGNATURE_MISMATCH, NOT_FOUND or CONFLICT
            on failure
        """
        if not verify_payment_signature(gateway_order_id, payment_id, signature):
            cls.get_logger().warning(
                "Payment signature mismatch",
                extra={"order_id": str(order_id), "payment_id": payment_id},
            )
            return ServiceResult.failure(
                "Payment verification failed",
                error_code=ErrorKind.SIGNATURE_MISMATCH,
            )

        return cls._settle_paid(
            by_id(order_id),
            payment_id=payment_id,
            gateway_order_id=gateway_order_id,
            signature=signature,
            source="client",
        )

    @classmethod
    def mark_paid_from_gateway(
        cls,
        gateway_order_id: str,
        payment_id: str,
        payment_method: str = "razorpay",
    ) -> ServiceResult[Order]:
        """
        Settle an order as paid from an authenticated payment.captured webhook.

        The order is resolved by any Razorpay order id issued for it at
        checkout, not only the latest one.
        """
        return cls._settle_paid(
            by_gateway_order_id(gateway_order_id),
            payment_id=payment_id,
            gateway_order_id=gateway_order_id,
            signature="",
            source="webhook",
            payment_method=payment_method,
        )

    @classmethod
    def _settle_paid(
        cls,
        load: Callable[[], Order | None],
        payment_id: str,
        gateway_order_id: str,
        signature: str,
        source: str,
        payment_method: str = "razorpay",
    ) -> ServiceResult[Order]:
        logger = cls.get_logger()
        log_extra = {
            "payment_id": payment_id,
            "gateway_order_id": gateway_order_id,
            "source": source,
        }

        for attempt in range(1, SETTLE_ATTEMPTS + 1):
            order = load()
            if order is None:
                logger.warning("Order not found for payment", extra=log_extra)
                return _order_not_found()

            log_extra["order_id"] = str(order.pk)
            outcome = cls._paid_outcome(order, payment_id, gateway_order_id)
            if outcome is not None:
                if outcome.success:
                    logger.info("Order already paid by this payment", extra=log_extra)
                else:
                    logger.warning(
                        "Paid settlement conflict",
                        extra={**log_extra, "payment_status": order.payment_status},
                    )
                return outcome

            order.mark_paid(
                payment_id=payment_id,
                gateway_order_id=gateway_order_id,
                signature=signature,
                payment_method=payment_method,
            )
            try:
                with cls.atomic():
                    order.save()
            except ConcurrentTransition:
                logger.warning(
                    "Lost settlement race, re-evaluating",
                    extra={**log_extra, "attempt": attempt},
                )
                continue
            except IntegrityError:
                logger.warning(
                    "Gateway order id already belongs to another order",
                    extra=log_extra,
                )
                return ServiceResult.failure(
                    "Gateway order id already belongs to another order",
                    error_code=ErrorKind.CONFLICT,
                    details={"reason": "GATEWAY_ORDER_MISMATCH"},
                )

            logger.info("Order marked paid", extra=log_extra)
            return ServiceResult.success(order)

        return ServiceResult.failure(
            "Order changed concurrently",
            error_code=ErrorKind.CONFLICT,
        )

    @staticmethod
    def _paid_outcome(
        order: Order, payment_id: str, gateway_order_id: str
    ) -> ServiceResult[Order] | None:
        """Terminal outcome for a paid request, or None to proceed with the CAS."""
        if order.payment_status == PaymentStatus.PAID:
            if order.payment_id == payment_id:
                return ServiceResult.success(order)
            return _conflict(
                "Order is already paid by a different payment",
                order,
                reason="PAID_BY_OTHER_PAYMENT",
            )

        if order.payment_status == PaymentStatus.FAILED:
            return _conflict("Order payment has already failed", order, reason="ALREADY_FAILED")

        if not order.owns_gateway_order(gateway_order_id):
            return _conflict(
                "Payment belongs to a different gateway order",
                order,
                reason="GATEWAY_ORDER_MISMATCH",
            )
        return None

    # =========================================================================
    # Failed
    # =========================================================================

    @classmethod
    def mark_failed(cls, order_id, error_info=None) -> ServiceResult[Order]:
        """
        Settle an order as failed from a client-reported failure.

        Args:
            order_id: Local order id
            error_info: Error payload from Razorpay Checkout, stored as-is

        Returns:
            ServiceResult[Order]; NOT_FOUND or CONFLICT on failure
        """
        return cls._settle_failed(by_id(order_id), error_info, source="client")

    @classmethod
    def mark_failed_from_gateway(
        cls, gateway_order_id: str, error_info=None
    ) -> ServiceResult[Order]:
        """Settle an order as failed from an authenticated payment.failed webhook."""
        return cls._settle_failed(
            by_gateway_order_id(gateway_order_id), error_info, source="webhook"
        )

    @classmethod
    def _settle_failed(
        cls,
        load: Callable[[], Order | None],
        error_info,
        source: str,
    ) -> ServiceResult[Order]:
        logger = cls.get_logger()
        log_extra: dict[str, Any] = {"source": source}

        for attempt in range(1, SETTLE_ATTEMPTS + 1):
            order = load()
            if order is None:
                logger.warning("Order not found for failure", extra=log_extra)
                return _order_not_found()

            log_extra["order_id"] = str(order.pk)
            if order.payment_status == PaymentStatus.FAILED:
                logger.info("Order already failed", extra=log_extra)
                return ServiceResult.success(order)
            if order.payment_status == PaymentStatus.PAID:
                logger.warning("Failure reported for a paid order", extra=log_extra)
                return _conflict("Order is already paid", order, reason="ALREADY_PAID")

            order.mark_failed(error_info)
            try:
                with cls.atomic():
                    order.save()
            except ConcurrentTransition:
                logger.warning(
                    "Lost settlement race, re-evaluating",
                    extra={**log_extra, "attempt": attempt},
                )
                continue

            logger.info("Order marked failed", extra=log_extra)
            return ServiceResult.success(order)

        return ServiceResult.failure(
            "Order changed concurrently",
            error_code=ErrorKind.CONFLICT,
        )
