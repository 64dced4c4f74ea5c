"""
Tests for OrderSettlement.

Covers both outcome tables (paid and failed), the client and webhook entry
points, and the compare-and-swap: a caller holding a stale copy of the
order loses the write, reloads, and re-evaluates.
"""

from unittest.mock import patch

import pytest

from core.services import ErrorKind
from payments.models import Order
from payments.services import OrderSettlement
from payments.state_machines import PaymentStatus
from payments.tests.factories import OrderFactory, sign_payment

PAYMENT_ID = "pay_N3wPayment001"
FIRST_ATTEMPT = "order_P3nd1ngOrd3r1"
LATER_ATTEMPT = "order_Sec0ndAttempt1"


def settle(order, payment_id=PAYMENT_ID, gateway_order_id=None):
    gateway_order_id = gateway_order_id or order.gateway_order_id
    return OrderSettlement.mark_paid(
        order.pk,
        payment_id,
        gateway_order_id,
        sign_payment(gateway_order_id, payment_id),
    )


def reload(order):
    return Order.objects.get(pk=order.pk)


def stale_loader(*copies):
    """Loader that hands out the given order copies in turn."""
    remaining = iter(copies)
    return lambda: next(remaining)


# =============================================================================
# mark_paid
# =============================================================================


@pytest.mark.django_db
class TestMarkPaid:
    """Client confirmation path."""

    def test_pending_becomes_paid(self, pending_order):
        result = settle(pending_order)

        assert result.success
        order = reload(pending_order)
        assert order.payment_status == PaymentStatus.PAID
        assert order.payment_id == PAYMENT_ID
        assert order.payment_method == "razorpay"
        assert order.signature == sign_payment(pending_order.gateway_order_id, PAYMENT_ID)
        assert order.paid_at is not None

    def test_bad_signature_leaves_order_untouched(self, pending_order):
        result = OrderSettlement.mark_paid(
            pending_order.pk, PAYMENT_ID, pending_order.gateway_order_id, "0" * 64
        )

        assert result.error_code == ErrorKind.SIGNATURE_MISMATCH
        assert reload(pending_order).payment_status == PaymentStatus.PENDING

    def test_signature_for_other_payment_rejected(self, pending_order):
        signature = sign_payment(pending_order.gateway_order_id, "pay_Someb0dyElse1")

        result = OrderSettlement.mark_paid(
            pending_order.pk, PAYMENT_ID, pending_order.gateway_order_id, signature
        )

        assert result.error_code == ErrorKind.SIGNATURE_MISMATCH

    def test_same_payment_twice_is_idempotent(self, pending_order):
        first = settle(pending_order)
        paid_at = reload(pending_order).paid_at

        second = settle(pending_order)

        assert first.success
        assert second.success
        assert reload(pending_order).paid_at == paid_at

    def test_paid_by_other_payment_conflicts(self, paid_order):
        result = settle(paid_order, payment_id="pay_Different0001")

        assert result.error_code == ErrorKind.CONFLICT
        assert result.reason == "PAID_BY_OTHER_PAYMENT"
        assert result.details["payment_status"] == PaymentStatus.PAID
        assert reload(paid_order).payment_id == "pay_Pa1dAlready01"

    def test_failed_order_conflicts(self, failed_order):
        result = settle(failed_order)

        assert result.error_code == ErrorKind.CONFLICT
        assert result.reason == "ALREADY_FAILED"
        assert reload(failed_order).payment_status == PaymentStatus.FAILED

    def test_unknown_order(self, db):
        result = OrderSettlement.mark_paid(
            "0b7c2f8e-0000-4000-8000-000000000000",
            PAYMENT_ID,
            "order_Nowhere00001",
            sign_payment("order_Nowhere00001", PAYMENT_ID),
        )

        assert result.error_code == ErrorKind.NOT_FOUND

    def test_malformed_order_id(self, db):
        result = OrderSettlement.mark_paid(
            "not-a-uuid", PAYMENT_ID, "order_x", sign_payment("order_x", PAYMENT_ID)
        )

        assert result.error_code == ErrorKind.NOT_FOUND

    def test_signed_for_different_gateway_order(self, pending_order):
        result = settle(pending_order, gateway_order_id="order_AnotherOne001")

        assert result.error_code == ErrorKind.CONFLICT
        assert result.reason == "GATEWAY_ORDER_MISMATCH"
        assert reload(pending_order).payment_status == PaymentStatus.PENDING

    def test_unlinked_order_records_gateway_order(self, buyer):
        order = OrderFactory(user=buyer, gateway_order_id=None)

        result = settle(order, gateway_order_id="order_L1nkedLater1")

        assert result.success
        assert reload(order).gateway_order_id == "order_L1nkedLater1"

    def test_gateway_order_owned_by_another_order(self, buyer, pending_order):
        order = OrderFactory(user=buyer, gateway_order_id=None)

        result = settle(order, gateway_order_id=pending_order.gateway_order_id)

        assert result.error_code == ErrorKind.CONFLICT
        assert result.reason == "GATEWAY_ORDER_MISMATCH"
        assert reload(order).payment_status == PaymentStatus.PENDING

    def test_paid_on_earlier_checkout_attempt(self, pending_order):
        pending_order.link_gateway_order(LATER_ATTEMPT)

        result = settle(pending_order, gateway_order_id=FIRST_ATTEMPT)

        assert result.success
        order = reload(pending_order)
        assert order.payment_status == PaymentStatus.PAID
        assert order.gateway_order_id == FIRST_ATTEMPT

    def test_earlier_attempt_of_another_order(self, buyer, pending_order):
        pending_order.link_gateway_order(LATER_ATTEMPT)
        order = OrderFactory(user=buyer, gateway_order_id=None)

        result = settle(order, gateway_order_id=FIRST_ATTEMPT)

        assert result.error_code == ErrorKind.CONFLICT
        assert result.reason == "GATEWAY_ORDER_MISMATCH"
        assert reload(order).payment_status == PaymentStatus.PENDING


# =============================================================================
# mark_failed
# =============================================================================


@pytest.mark.django_db
class TestMarkFailed:
    def test_pending_becomes_failed(self, pending_order):
        error = {"code": "BAD_REQUEST_ERROR", "description": "Card declined"}

        result = OrderSettlement.mark_failed(pending_order.pk, error)

        assert result.success
        order = reload(pending_order)
        assert order.payment_status == PaymentStatus.FAILED
        assert order.payment_error == error
        assert order.failed_at is not None

    def test_without_error_info(self, pending_order):
        result = OrderSettlement.mark_failed(pending_order.pk)

        assert result.success
        assert reload(pending_order).payment_error is None

    def test_already_failed_is_idempotent(self, failed_order):
        original_error = failed_order.payment_error

        result = OrderSettlement.mark_failed(failed_order.pk, {"code": "LATER"})

        assert result.success
        assert reload(failed_order).payment_error == original_error

    def test_paid_order_conflicts(self, paid_order):
        result = OrderSettlement.mark_failed(paid_order.pk, {"code": "LATE_FAILURE"})

        assert result.error_code == ErrorKind.CONFLICT
        assert result.reason == "ALREADY_PAID"
        assert reload(paid_order).payment_status == PaymentStatus.PAID

    def test_unknown_order(self, db):
        result = OrderSettlement.mark_failed("0b7c2f8e-0000-4000-8000-000000000000")

        assert result.error_code == ErrorKind.NOT_FOUND


# =============================================================================
# Webhook Entry Points
# =============================================================================


@pytest.mark.django_db
class TestFromGateway:
    """Orders resolved by gateway_order_id; no client signature involved."""

    def test_captured_marks_paid(self, pending_order):
        result = OrderSettlement.mark_paid_from_gateway(
            pending_order.gateway_order_id, PAYMENT_ID, payment_method="upi"
        )

        assert result.success
        order = reload(pending_order)
        assert order.payment_status == PaymentStatus.PAID
        assert order.payment_method == "upi"
        assert order.signature == ""

    def test_webhook_after_client_is_idempotent(self, pending_order):
        settle(pending_order)

        result = OrderSettlement.mark_paid_from_gateway(
            pending_order.gateway_order_id, PAYMENT_ID
        )

        assert result.success

    def test_failed_webhook_after_payment_conflicts(self, paid_order):
        result = OrderSettlement.mark_failed_from_gateway(
            paid_order.gateway_order_id, {"code": "BAD_REQUEST_ERROR"}
        )

        assert result.error_code == ErrorKind.CONFLICT
        assert reload(paid_order).payment_status == PaymentStatus.PAID

    def test_failed_webhook_marks_failed(self, pending_order):
        result = OrderSettlement.mark_failed_from_gateway(
            pending_order.gateway_order_id, {"code": "GATEWAY_ERROR"}
        )

        assert result.success
        assert reload(pending_order).payment_error == {"code": "GATEWAY_ERROR"}

    def test_captured_on_earlier_checkout_attempt(self, pending_order):
        pending_order.link_gateway_order(LATER_ATTEMPT)

        result = OrderSettlement.mark_paid_from_gateway(FIRST_ATTEMPT, PAYMENT_ID)

        assert result.success
        assert result.data.pk == pending_order.pk
        assert reload(pending_order).payment_status == PaymentStatus.PAID

    def test_captured_on_latest_checkout_attempt(self, pending_order):
        pending_order.link_gateway_order(LATER_ATTEMPT)

        result = OrderSettlement.mark_paid_from_gateway(LATER_ATTEMPT, PAYMENT_ID)

        assert result.success
        assert reload(pending_order).gateway_order_id == LATER_ATTEMPT

    @pytest.mark.parametrize("gateway_order_id", ["order_Unknown00001", ""])
    def test_unknown_gateway_order(self, db, gateway_order_id):
        paid = OrderSettlement.mark_paid_from_gateway(gateway_order_id, PAYMENT_ID)
        failed = OrderSettlement.mark_failed_from_gateway(gateway_order_id)

        assert paid.error_code == ErrorKind.NOT_FOUND
        assert failed.error_code == ErrorKind.NOT_FOUND


# =============================================================================
# Lost Races
# =============================================================================


@pytest.mark.django_db
class TestConcurrentSettlement:
    """A writer holding a stale pending copy loses the CAS and re-evaluates."""

    def test_lost_race_same_payment_is_success(self, pending_order):
        stale = reload(pending_order)
        OrderSettlement.mark_paid_from_gateway(pending_order.gateway_order_id, PAYMENT_ID)

        loader = stale_loader(stale, reload(pending_order))
        with patch("payments.services.settlement.by_id", return_value=loader):
            result = settle(pending_order)

        assert result.success
        assert result.data.payment_id == PAYMENT_ID

    def test_lost_race_other_payment_conflicts(self, pending_order):
        stale = reload(pending_order)
        OrderSettlement.mark_paid_from_gateway(
            pending_order.gateway_order_id, "pay_W3bhookWon001"
        )

        loader = stale_loader(stale, reload(pending_order))
        with patch("payments.services.settlement.by_id", return_value=loader):
            result = settle(pending_order)

        assert result.error_code == ErrorKind.CONFLICT
        assert result.reason == "PAID_BY_OTHER_PAYMENT"
        assert reload(pending_order).payment_id == "pay_W3bhookWon001"

    def test_failure_loses_to_payment(self, pending_order):
        stale = reload(pending_order)
        settle(pending_order)

        loader = stale_loader(stale, reload(pending_order))
        with patch("payments.services.settlement.by_id", return_value=loader):
            result = OrderSettlement.mark_failed(pending_order.pk, {"code": "X"})

        assert result.error_code == ErrorKind.CONFLICT
        assert result.reason == "ALREADY_PAID"
        assert reload(pending_order).payment_status == PaymentStatus.PAID

    def test_gives_up_after_second_lost_race(self, pending_order):
        first_stale = reload(pending_order)
        second_stale = reload(pending_order)
        OrderSettlement.mark_failed(pending_order.pk)

        loader = stale_loader(first_stale, second_stale)
        with patch("payments.services.settlement.by_id", return_value=loader):
            result = settle(pending_order)

        assert result.error_code == ErrorKind.CONFLICT
        assert result.data is None
        assert reload(pending_order).payment_status == PaymentStatus.FAILED
