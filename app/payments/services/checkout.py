"""
Checkout-facing payment operations.

CheckoutService is what the storefront's payment endpoints call:

    create_payment_order   -> Razorpay order for the checkout modal
    verify_payment         -> settle the order from the client's proof
    record_payment_failure -> settle the order as failed
    fetch_payment          -> payment details from Razorpay

Orders are always looked up within the requesting user's orders, so one
buyer cannot settle or inspect another buyer's order.

Related files:
    - settlement.py: OrderSettlement (the state machine)
    - payments.adapters: RazorpayAdapter
    - payments.views: HTTP endpoints
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError

from core.helpers import epoch_ms
from core.services import BaseService, ErrorKind, ServiceResult
from payments.adapters import get_gateway
from payments.models import Order
from payments.services.settlement import OrderSettlement
from payments.state_machines import PaymentStatus

if TYPE_CHECKING:
    from authentication.models import User


def round_amount(amount) -> int | None:
    """Round an amount in minor units to the nearest integer (halves up)."""
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def default_receipt(order_id=None) -> str:
    return f"order_rcptid_{order_id or epoch_ms()}"


def _owned_order(user: User, order_id) -> Order | None:
    try:
        return Order.objects.filter(pk=order_id, user=user).first()
    except (ValueError, DjangoValidationError):
        return None


class CheckoutService(BaseService):
    """Storefront payment flow built on RazorpayAdapter and OrderSettlement."""

    @classmethod
    def create_payment_order(
        cls,
        user: User,
        amount,
        currency: str | None = None,
        order_id=None,
        receipt: str | None = None,
    ) -> ServiceResult[dict[str, Any]]:
        """
        Create a Razorpay order for a checkout attempt.

        Args:
            user: Buyer
            amount: Amount in minor units; rounded to an integer
            currency: ISO 4217 code (default from settings)
            order_id: Local order id, echoed back and linked when pending
            receipt: Merchant receipt (default: order_rcptid_<order_id or epoch ms>)

        Returns:
            ServiceResult with {id, currency, amount, receipt, orderId?}
        """
        rounded = round_amount(amount)
        if rounded is None or rounded <= 0:
            return ServiceResult.failure(
                "Invalid amount. Amount must be a positive number.",
                error_code=ErrorKind.VALIDATION_ERROR,
                details={"reason": "INVALID_AMOUNT"},
            )

        gateway = get_gateway()
        if not gateway:
            return gateway

        receipt = receipt or default_receipt(order_id)
        result = gateway.data.create_order(rounded, currency, receipt)
        if not result:
            return result

        intent = result.data
        if order_id:
            cls._link_gateway_order(user, order_id, intent.gateway_order_id)

        body: dict[str, Any] = {
            "id": intent.gateway_order_id,
            "currency": intent.currency,
            "amount": intent.amount_minor_units,
            "receipt": intent.receipt,
        }
        if order_id:
            body["orderId"] = str(order_id)
        return ServiceResult.success(body)

    @classmethod
    def _link_gateway_order(cls, user: User, order_id, gateway_order_id: str) -> None:
        """
        Record the gateway order id on a pending order so webhooks can find it.

        Ids from earlier attempts stay linked, so a payment made on any of
        them still settles the order.
        """
        log_extra = {"order_id": str(order_id), "gateway_order_id": gateway_order_id}
        try:
            with cls.atomic():
                order = (
                    Order.objects.select_for_update()
                    .filter(pk=order_id, user=user, payment_status=PaymentStatus.PENDING)
                    .first()
                )
                if order is not None:
                    order.link_gateway_order(gateway_order_id)
        except (ValueError, DjangoValidationError):
            order = None
        except IntegrityError:
            cls.get_logger().warning(
                "Gateway order id already linked to another order", extra=log_extra
            )
            return

        if order is not None:
            cls.get_logger().info("Gateway order linked", extra=log_extra)
        else:
            cls.get_logger().info("No pending order to link", extra=log_extra)

    @classmethod
    def verify_payment(
        cls,
        user: User,
        order_id,
        gateway_order_id: str,
        payment_id: str,
        signature: str,
    ) -> ServiceResult[Order]:
        """
        Settle an order as paid from the proof Razorpay Checkout returned.

        Returns:
            ServiceResult[Order]; NOT_FOUND, SIGNATURE_MISMATCH or CONFLICT
        """
        order = _owned_order(user, order_id)
        if order is None:
            return ServiceResult.failure("Order not found", error_code=ErrorKind.NOT_FOUND)

        return OrderSettlement.mark_paid(order.pk, payment_id, gateway_order_id, signature)

    @classmethod
    def record_payment_failure(cls, user: User, order_id, error=None) -> ServiceResult[Order]:
        """Settle an order as failed with the error Checkout reported."""
        order = _owned_order(user, order_id)
        if order is None:
            return ServiceResult.failure("Order not found", error_code=ErrorKind.NOT_FOUND)

        return OrderSettlement.mark_failed(order.pk, error)

    @classmethod
    def fetch_payment(cls, user: User, payment_id: str) -> ServiceResult[dict]:
        """
        Fetch payment details from Razorpay.

        Non-staff users may only fetch payments that settled one of their
        own orders.
        """
        if not user.is_staff and not Order.objects.filter(
            user=user, payment_id=payment_id
        ).exists():
            return ServiceResult.failure("Payment not found", error_code=ErrorKind.NOT_FOUND)

        gateway = get_gateway()
        if not gateway:
            return gateway
        return gateway.data.fetch_payment(payment_id)
