"""
Tests for RazorpayAdapter.

The razorpay.Client is a MagicMock (see payments/conftest.py); no test
touches the network. Tests cover:
- Amount validation before any gateway call
- Error classification and the retry decision
- The non-production stub fallback and the production error path
- fetch_payment
- Construction from settings and the startup gateway registry
"""

from unittest.mock import MagicMock, patch

import pytest
import requests
from razorpay.errors import BadRequestError, GatewayError, ServerError

from core.services import ErrorKind
from payments.adapters import (
    NOT_CONFIGURED,
    PaymentIntent,
    RazorpayAdapter,
    configure_gateway,
    get_gateway,
    retry_receipt,
    stub_order_id,
)

GATEWAY_ORDER = {
    "id": "order_RetryOrd0001",
    "amount": 50000,
    "amount_paid": 0,
    "currency": "INR",
    "receipt": "x",
    "status": "created",
}


# =============================================================================
# Amount Validation
# =============================================================================


class TestValidateAmount:
    """Bounds are inclusive and checked before the network."""

    @pytest.mark.parametrize("amount", [100, 50000, 1_500_000_000])
    def test_in_range(self, amount):
        assert RazorpayAdapter.validate_amount(amount).data == amount

    @pytest.mark.parametrize(
        "amount,reason",
        [
            (99, "AMOUNT_TOO_SMALL"),
            (0, "AMOUNT_TOO_SMALL"),
            (-5, "AMOUNT_TOO_SMALL"),
            (1_500_000_001, "AMOUNT_TOO_LARGE"),
            (100.0, "INVALID_AMOUNT"),
            ("100", "INVALID_AMOUNT"),
            (True, "INVALID_AMOUNT"),
        ],
    )
    def test_out_of_range(self, amount, reason):
        result = RazorpayAdapter.validate_amount(amount)

        assert result.error_code == ErrorKind.VALIDATION_ERROR
        assert result.reason == reason

    def test_bounds_come_from_settings(self, settings):
        settings.PAYMENT_MIN_AMOUNT_UNITS = 1000

        assert RazorpayAdapter.validate_amount(999).reason == "AMOUNT_TOO_SMALL"

    def test_invalid_amount_makes_no_call(self, gateway, razorpay_client):
        result = gateway.create_order(50, "INR", "rcpt")

        assert result.reason == "AMOUNT_TOO_SMALL"
        razorpay_client.order.create.assert_not_called()


# =============================================================================
# Order Creation
# =============================================================================


class TestCreateOrder:
    """Tests for the happy path and the retry decision."""

    def test_success_normalizes_intent(self, gateway, razorpay_client):
        result = gateway.create_order(50000, "INR", "order_rcptid_42")

        assert result.success
        assert result.data == PaymentIntent(
            gateway_order_id="order_GatewayOrd001",
            amount_minor_units=50000,
            currency="INR",
            receipt="order_rcptid_42",
            status="created",
            amount_paid=0,
            is_stub=False,
        )
        razorpay_client.order.create.assert_called_once_with(
            data={
                "amount": 50000,
                "currency": "INR",
                "receipt": "order_rcptid_42",
                "payment_capture": 1,
            },
            timeout=30,
        )

    def test_defaults(self, gateway, razorpay_client, settings):
        settings.PAYMENT_DEFAULT_CURRENCY = "INR"

        gateway.create_order(50000)

        payload = razorpay_client.order.create.call_args.kwargs["data"]
        assert payload["currency"] == "INR"
        assert payload["receipt"].startswith("order_rcptid_")

    def test_bad_request_is_not_retried(self, gateway, razorpay_client):
        razorpay_client.order.create.side_effect = BadRequestError("The amount must be atleast INR 1.00")

        result = gateway.create_order(50000, "INR", "rcpt")

        assert result.error_code == ErrorKind.GATEWAY_ERROR
        assert result.details["status_code"] == 400
        assert razorpay_client.order.create.call_count == 1

    @pytest.mark.parametrize(
        "error",
        [
            requests.exceptions.ReadTimeout("read timed out"),
            requests.exceptions.ConnectionError("connection reset"),
            ServerError("Internal error"),
            GatewayError("Upstream failure"),
        ],
    )
    def test_retryable_failure_then_success(self, gateway, razorpay_client, error):
        razorpay_client.order.create.side_effect = [error, GATEWAY_ORDER]

        result = gateway.create_order(50000, "INR", "order_rcptid_42")

        assert result.success
        assert result.data.gateway_order_id == "order_RetryOrd0001"
        assert razorpay_client.order.create.call_count == 2

        retry_payload = razorpay_client.order.create.call_args_list[1].kwargs["data"]
        assert "payment_capture" not in retry_payload
        assert retry_payload["amount"] == 50000
        assert retry_payload["currency"] == "INR"
        assert retry_payload["receipt"].startswith("order_rcptid_42-retry-")

    def test_unexpected_exception_propagates(self, gateway, razorpay_client):
        razorpay_client.order.create.side_effect = KeyError("bug")

        with pytest.raises(KeyError):
            gateway.create_order(50000, "INR", "rcpt")


# =============================================================================
# Fallback
# =============================================================================


class TestFallback:
    """Behavior once the retry has also failed."""

    def test_stub_outside_production(self, gateway, razorpay_client):
        razorpay_client.order.create.side_effect = requests.exceptions.Timeout()

        result = gateway.create_order(50000, "INR", "order_rcptid_42")

        assert result.success
        intent = result.data
        assert intent.is_stub is True
        assert intent.gateway_order_id == stub_order_id("order_rcptid_42")
        assert intent.amount_minor_units == 50000
        assert intent.currency == "INR"
        assert intent.receipt == "order_rcptid_42"
        assert intent.status == "created"
        assert intent.amount_paid == 0
        assert razorpay_client.order.create.call_count == 2

    def test_stub_id_is_deterministic(self, gateway, razorpay_client):
        razorpay_client.order.create.side_effect = requests.exceptions.Timeout()
        first = gateway.create_order(50000, "INR", "rcpt-same").data

        razorpay_client.order.create.side_effect = requests.exceptions.Timeout()
        second = gateway.create_order(50000, "INR", "rcpt-same").data

        assert first.gateway_order_id == second.gateway_order_id
        assert first.gateway_order_id.startswith("order_stub_")
        assert len(first.gateway_order_id) == len("order_stub_") + 14

    def test_production_returns_original_timeout(self, gateway, razorpay_client, settings):
        settings.PRODUCTION = True
        razorpay_client.order.create.side_effect = [
            requests.exceptions.Timeout(),
            ServerError("still down"),
        ]

        result = gateway.create_order(50000, "INR", "rcpt")

        assert result.error_code == ErrorKind.GATEWAY_TIMEOUT

    def test_production_returns_original_gateway_error(self, gateway, razorpay_client, settings):
        settings.PRODUCTION = True
        razorpay_client.order.create.side_effect = [
            ServerError("down"),
            requests.exceptions.Timeout(),
        ]

        result = gateway.create_order(50000, "INR", "rcpt")

        assert result.error_code == ErrorKind.GATEWAY_ERROR
        assert result.details["status_code"] == 500


class TestReceiptHelpers:
    def test_retry_receipt_fits_gateway_limit(self):
        receipt = retry_receipt("r" * 40)

        assert len(receipt) <= 40
        assert "-retry-" in receipt

    def test_retry_receipts_differ(self):
        assert retry_receipt("rcpt") != retry_receipt("rcpt")

    def test_stub_ids_differ_per_receipt(self):
        assert stub_order_id("a") != stub_order_id("b")


# =============================================================================
# Fetch Payment
# =============================================================================


class TestFetchPayment:
    def test_success(self, gateway, razorpay_client):
        razorpay_client.payment.fetch.return_value = {"id": "pay_1", "status": "captured"}

        result = gateway.fetch_payment("pay_1")

        assert result.data == {"id": "pay_1", "status": "captured"}
        razorpay_client.payment.fetch.assert_called_once_with("pay_1", timeout=30)

    def test_no_retry_or_fallback(self, gateway, razorpay_client):
        razorpay_client.payment.fetch.side_effect = requests.exceptions.Timeout()

        result = gateway.fetch_payment("pay_1")

        assert result.error_code == ErrorKind.GATEWAY_TIMEOUT
        assert razorpay_client.payment.fetch.call_count == 1

    def test_bad_request(self, gateway, razorpay_client):
        razorpay_client.payment.fetch.side_effect = BadRequestError("The id provided does not exist")

        result = gateway.fetch_payment("pay_missing")

        assert result.error_code == ErrorKind.GATEWAY_ERROR
        assert result.details == {"status_code": 400}


# =============================================================================
# Construction
# =============================================================================


class TestFromSettings:
    def test_valid_credentials(self):
        result = RazorpayAdapter.from_settings()

        assert result.success
        assert result.data.key_id.startswith("rzp_test_")
        assert result.data.timeout == 30

    @pytest.mark.parametrize(
        "key_id,key_secret,setting",
        [
            ("", "thisisatestkeysecret0042", "RAZORPAY_KEY_ID"),
            ("key_test_abc", "thisisatestkeysecret0042", "RAZORPAY_KEY_ID"),
            ("rzp_test_abc", "short", "RAZORPAY_KEY_SECRET"),
        ],
    )
    def test_bad_credentials(self, settings, key_id, key_secret, setting):
        settings.RAZORPAY_KEY_ID = key_id
        settings.RAZORPAY_KEY_SECRET = key_secret

        result = RazorpayAdapter.from_settings()

        assert result.error_code == ErrorKind.CONFIGURATION_ERROR
        assert result.details == {"setting": setting}

    def test_explicit_client_is_used(self):
        client = MagicMock()

        adapter = RazorpayAdapter("rzp_test_x", "s" * 20, timeout=5, client=client)

        assert adapter.client is client
        assert adapter.timeout == 5


class TestGatewayRegistry:
    def test_unconfigured_before_startup(self):
        with patch("payments.adapters._gateway", NOT_CONFIGURED), patch.object(
            RazorpayAdapter, "from_settings"
        ) as build:
            result = get_gateway()

        assert result.error_code == ErrorKind.CONFIGURATION_ERROR
        assert result.reason == "GATEWAY_NOT_CONFIGURED"
        build.assert_not_called()

    def test_configure_keeps_the_result(self):
        with patch("payments.adapters._gateway", NOT_CONFIGURED):
            configured = configure_gateway()

            assert configured.success
            assert get_gateway() is configured

    def test_configure_keeps_a_failure(self, settings):
        settings.RAZORPAY_KEY_ID = ""

        with patch("payments.adapters._gateway", NOT_CONFIGURED):
            configure_gateway()

            assert get_gateway().error_code == ErrorKind.CONFIGURATION_ERROR
            assert get_gateway().details == {"setting": "RAZORPAY_KEY_ID"}
