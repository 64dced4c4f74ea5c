"""
Tests for compare-and-swap saves on Order.

Order uses ConcurrentTransitionMixin: a save after a transition only
succeeds if the status in the database is still the one the instance was
loaded with. Two copies of the same row stand in for two workers.
"""

import pytest
from django.db import transaction
from django_fsm import ConcurrentTransition

from payments.models import Order
from payments.state_machines import PaymentStatus


class TestConcurrentTransition:
    """Tests for the conditional UPDATE on payment_status."""

    def test_stale_copy_cannot_overwrite_settlement(self, pending_order):
        """
        Worker A and worker B both load the pending order.

        A settles first; B's save must fail instead of overwriting.
        """
        worker_a = Order.objects.get(pk=pending_order.pk)
        worker_b = Order.objects.get(pk=pending_order.pk)

        worker_a.mark_paid(payment_id="pay_A")
        worker_a.save()

        worker_b.mark_failed({"code": "LATE"})
        with pytest.raises(ConcurrentTransition):
            with transaction.atomic():
                worker_b.save()

        stored = Order.objects.get(pk=pending_order.pk)
        assert stored.payment_status == PaymentStatus.PAID
        assert stored.payment_id == "pay_A"
        assert stored.payment_error is None

    def test_two_payments_racing(self, pending_order):
        """Only one of two different payments can settle the order."""
        first = Order.objects.get(pk=pending_order.pk)
        second = Order.objects.get(pk=pending_order.pk)

        first.mark_paid(payment_id="pay_first")
        second.mark_paid(payment_id="pay_second")
        first.save()

        with pytest.raises(ConcurrentTransition):
            with transaction.atomic():
                second.save()

        assert Order.objects.get(pk=pending_order.pk).payment_id == "pay_first"

    def test_fresh_copy_saves(self, pending_order):
        """Saving a non-stale instance is unaffected."""
        order = Order.objects.get(pk=pending_order.pk)
        order.mark_paid(payment_id="pay_ok")
        order.save()

        assert Order.objects.get(pk=pending_order.pk).payment_status == PaymentStatus.PAID
