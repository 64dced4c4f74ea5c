"""
Tests for the Razorpay order ids kept per Order.

Each checkout attempt links a new gateway order id; earlier ids stay
linked so a payment made on any of them can still settle the order.
"""

import pytest
from django.db import IntegrityError, transaction

from payments.models import GatewayOrderLink, Order
from payments.tests.factories import OrderFactory


@pytest.mark.django_db
class TestLinkGatewayOrder:
    def test_first_link(self, buyer):
        order = OrderFactory(user=buyer, gateway_order_id=None)

        order.link_gateway_order("order_F1rstAttempt1")

        assert Order.objects.get(pk=order.pk).gateway_order_id == "order_F1rstAttempt1"
        assert list(order.gateway_links.values_list("gateway_order_id", flat=True)) == [
            "order_F1rstAttempt1"
        ]

    def test_relink_keeps_previous_id(self, pending_order):
        pending_order.link_gateway_order("order_Sec0ndAttempt1")

        stored = Order.objects.get(pk=pending_order.pk)
        assert stored.gateway_order_id == "order_Sec0ndAttempt1"
        assert set(stored.gateway_links.values_list("gateway_order_id", flat=True)) == {
            "order_P3nd1ngOrd3r1",
            "order_Sec0ndAttempt1",
        }

    def test_id_of_another_order_is_rejected(self, buyer, pending_order):
        pending_order.link_gateway_order("order_Sec0ndAttempt1")
        order = OrderFactory(user=buyer, gateway_order_id=None)

        with pytest.raises(IntegrityError), transaction.atomic():
            order.link_gateway_order("order_P3nd1ngOrd3r1")

        assert not GatewayOrderLink.objects.filter(order=order).exists()


@pytest.mark.django_db
class TestOwnsGatewayOrder:
    def test_current_id(self, pending_order):
        assert pending_order.owns_gateway_order("order_P3nd1ngOrd3r1")

    def test_superseded_id(self, pending_order):
        pending_order.link_gateway_order("order_Sec0ndAttempt1")

        assert pending_order.owns_gateway_order("order_P3nd1ngOrd3r1")
        assert pending_order.owns_gateway_order("order_Sec0ndAttempt1")

    def test_unrelated_id(self, pending_order):
        assert not pending_order.owns_gateway_order("order_Unre1ated001")

    def test_unlinked_order_accepts_unclaimed_id(self, buyer):
        order = OrderFactory(user=buyer, gateway_order_id=None)

        assert order.owns_gateway_order("order_Unre1ated001")

    def test_unlinked_order_rejects_claimed_id(self, buyer, pending_order):
        pending_order.link_gateway_order("order_Sec0ndAttempt1")
        order = OrderFactory(user=buyer, gateway_order_id=None)

        assert not order.owns_gateway_order("order_P3nd1ngOrd3r1")
