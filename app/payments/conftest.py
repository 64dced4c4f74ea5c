"""
Pytest fixtures shared by the payments test packages.

This module provides:
- Known Razorpay credentials installed into settings for every test
- Orders in each payment status
- A RazorpayAdapter whose razorpay.Client is a MagicMock
- An authenticated API client

Usage:
    def test_settle(pending_order):
        signature = sign_payment(pending_order.gateway_order_id, "pay_1")
        result = OrderSettlement.mark_paid(
            pending_order.id, "pay_1", pending_order.gateway_order_id, signature
        )
        assert result.success
"""

from unittest.mock import MagicMock

import pytest
from rest_framework.test import APIClient

from payments.adapters import RazorpayAdapter
from payments.tests.factories import (
    TEST_KEY_ID,
    TEST_KEY_SECRET,
    TEST_WEBHOOK_SECRET,
    OrderFactory,
    UserFactory,
)


@pytest.fixture(autouse=True)
def razorpay_settings(settings):
    """Install test credentials; PRODUCTION stays off unless a test turns it on."""
    settings.RAZORPAY_KEY_ID = TEST_KEY_ID
    settings.RAZORPAY_KEY_SECRET = TEST_KEY_SECRET
    settings.RAZORPAY_WEBHOOK_SECRET = TEST_WEBHOOK_SECRET
    settings.RAZORPAY_API_TIMEOUT_SECONDS = 30
    settings.PRODUCTION = False
    return settings


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def buyer(db):
    return UserFactory(email="buyer@example.com", email_verified=True)


@pytest.fixture
def other_buyer(db):
    return UserFactory(email="someone.else@example.com", email_verified=True)


@pytest.fixture
def buyer_client(buyer):
    """API client authenticated as buyer."""
    client = APIClient()
    client.force_authenticate(user=buyer)
    return client


# =============================================================================
# Order Fixtures
# =============================================================================


@pytest.fixture
def pending_order(buyer):
    return OrderFactory(user=buyer, gateway_order_id="order_P3nd1ngOrd3r1")


@pytest.fixture
def paid_order(buyer):
    return OrderFactory(
        user=buyer,
        paid=True,
        payment_id="pay_Pa1dAlready01",
        gateway_order_id="order_Pa1dOrd3r001",
    )


@pytest.fixture
def failed_order(buyer):
    return OrderFactory(user=buyer, failed=True, gateway_order_id="order_Fa1ledOrd3r1")


# =============================================================================
# Gateway Fixtures
# =============================================================================


@pytest.fixture
def razorpay_client():
    """
    Stand-in for razorpay.Client; configure order.create / payment.fetch per test.

    order.create echoes the amount, currency and receipt it was sent, the
    way Razorpay does.
    """
    client = MagicMock()

    def create_order(data, **kwargs):
        return {
            "id": "order_GatewayOrd001",
            "entity": "order",
            "amount": data["amount"],
            "amount_paid": 0,
            "amount_due": data["amount"],
            "currency": data["currency"],
            "receipt": data["receipt"],
            "status": "created",
            "attempts": 0,
        }

    client.order.create.side_effect = create_order
    return client


@pytest.fixture
def gateway(razorpay_client):
    """RazorpayAdapter wired to the mocked client."""
    return RazorpayAdapter(TEST_KEY_ID, TEST_KEY_SECRET, client=razorpay_client)
