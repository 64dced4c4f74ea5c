"""
Razorpay API adapter for payment operations.

This module provides the RazorpayAdapter class which encapsulates all
Razorpay API interactions. All gateway calls go through this adapter so
that timeouts, retry, error classification and logging are uniform.

Order creation runs in four steps, each its own method:

    validate_amount  ->  _attempt  ->  _retry_once  ->  _fallback

    1. validate_amount rejects out-of-range amounts before any network call
    2. _attempt creates the order with the full payload and timeout T1
    3. _retry_once runs after a retryable failure only (timeout, connection
       error, gateway 5xx) with a simplified payload and a fresh receipt
    4. _fallback runs if the retry also fails. Outside production it
       returns a deterministic stub intent; in production it returns the
       original error

Error classification:
    razorpay.errors.BadRequestError   -> GATEWAY_ERROR (400), not retryable
    razorpay.errors.GatewayError      -> GATEWAY_ERROR (502), retryable
    razorpay.errors.ServerError       -> GATEWAY_ERROR (500), retryable
    requests Timeout                  -> GATEWAY_TIMEOUT, retryable
    requests ConnectionError          -> GATEWAY_ERROR (503), retryable

Configuration (via settings):
    RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET: API credentials
    RAZORPAY_API_TIMEOUT_SECONDS: Timeout T1 for every call (default: 30)
    PAYMENT_MIN_AMOUNT_UNITS / PAYMENT_MAX_AMOUNT_UNITS: Inclusive bounds
    PRODUCTION: Disables the stub fallback

Usage:
    from payments.adapters import get_gateway

    gateway = get_gateway()
    if not gateway:
        return gateway  # CONFIGURATION_ERROR

    result = gateway.data.create_order(50000, "INR", "order_rcptid_42")
    if result:
        intent = result.data
"""

from __future__ import annotations

import hashlib
import logging
import secrets
import time
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

import razorpay
import requests
from django.conf import settings
from razorpay.errors import BadRequestError, GatewayError, ServerError

from core.exceptions import ConfigurationError, ExternalServiceError, GatewayTimeoutError
from core.helpers import epoch_ms
from core.services import ErrorKind, ServiceResult

if TYPE_CHECKING:
    from collections.abc import Callable

RECEIPT_MAX_LENGTH = 40
STUB_ORDER_PREFIX = "order_stub_"
MIN_KEY_SECRET_LENGTH = 20


# =============================================================================
# Data Types
# =============================================================================


@dataclass(frozen=True)
class PaymentIntent:
    """
    Normalized result of a gateway order creation.

    Attributes:
        gateway_order_id: Razorpay order ID (order_xxx), or a stub ID
        amount_minor_units: Amount in the smallest currency unit (paise)
        currency: ISO 4217 code
        receipt: Merchant receipt sent with the order
        status: Gateway order status ("created", ...)
        amount_paid: Amount already paid against the order
        is_stub: True when produced by the non-production fallback
    """

    gateway_order_id: str
    amount_minor_units: int
    currency: str
    receipt: str
    status: str
    amount_paid: int = 0
    is_stub: bool = False

    @classmethod
    def from_gateway(cls, order: dict[str, Any]) -> PaymentIntent:
        return cls(
            gateway_order_id=order["id"],
            amount_minor_units=int(order["amount"]),
            currency=order["currency"],
            receipt=order.get("receipt") or "",
            status=order.get("status", "created"),
            amount_paid=int(order.get("amount_paid") or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# Helpers
# =============================================================================


def retry_receipt(receipt: str) -> str:
    """Fresh receipt for the retry, within the gateway's length limit."""
    suffix = f"-retry-{secrets.token_hex(4)}"
    return receipt[: RECEIPT_MAX_LENGTH - len(suffix)] + suffix


def stub_order_id(receipt: str) -> str:
    """Deterministic stub order ID: the same receipt always maps to the same ID."""
    digest = hashlib.sha256(receipt.encode("utf-8")).hexdigest()
    return f"{STUB_ORDER_PREFIX}{digest[:14]}"


def _error_result(error: ExternalServiceError) -> ServiceResult:
    if isinstance(error, GatewayTimeoutError):
        return ServiceResult.failure(
            error.message,
            error_code=ErrorKind.GATEWAY_TIMEOUT,
            details=error.details,
        )
    return ServiceResult.failure(
        error.message,
        error_code=ErrorKind.GATEWAY_ERROR,
        details=error.details,
    )


# =============================================================================
# Razorpay Adapter
# =============================================================================


class RazorpayAdapter:
    """
    Adapter for Razorpay API operations.

    One instance wraps one razorpay.Client. Build it with from_settings();
    the payments app does this once at startup (see payments.adapters).

    The adapter keeps no per-request state, so one instance is shared by
    all requests in a process.
    """

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        timeout: float | None = None,
        client: razorpay.Client | None = None,
    ):
        self.key_id = key_id
        self.timeout = timeout if timeout is not None else settings.RAZORPAY_API_TIMEOUT_SECONDS
        self.client = client or razorpay.Client(auth=(key_id, key_secret))

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    # =========================================================================
    # Construction
    # =========================================================================

    @staticmethod
    def validate_credentials(key_id: str, key_secret: str) -> None:
        """
        Raise ConfigurationError when the credentials are obviously wrong.

        Razorpay key ids start with "rzp_" (rzp_test_... or rzp_live_...).
        """
        if not key_id or not key_id.startswith("rzp_"):
            raise ConfigurationError(
                "Razorpay key id is missing or malformed",
                details={"setting": "RAZORPAY_KEY_ID"},
            )
        if not key_secret or len(key_secret) < MIN_KEY_SECRET_LENGTH:
            raise ConfigurationError(
                "Razorpay key secret is missing or too short",
                details={"setting": "RAZORPAY_KEY_SECRET"},
            )

    @classmethod
    def from_settings(cls) -> ServiceResult[RazorpayAdapter]:
        """
        Build an adapter from Django settings.

        Returns:
            ServiceResult[RazorpayAdapter]; CONFIGURATION_ERROR when the
            credentials are missing or malformed
        """
        key_id = settings.RAZORPAY_KEY_ID
        key_secret = settings.RAZORPAY_KEY_SECRET
        try:
            cls.validate_credentials(key_id, key_secret)
        except ConfigurationError as e:
            cls.get_logger().error(
                "Razorpay adapter not configured",
                extra={"error": e.message, **e.details},
            )
            return ServiceResult.failure(
                e.message,
                error_code=ErrorKind.CONFIGURATION_ERROR,
                details=e.details,
            )

        cls.get_logger().info(
            "Razorpay adapter configured",
            extra={"key_id_prefix": key_id[:9]},
        )
        return ServiceResult.success(cls(key_id, key_secret))

    # =========================================================================
    # Core Operations
    # =========================================================================

    @staticmethod
    def validate_amount(amount_minor_units) -> ServiceResult[int]:
        """
        Check an amount against the configured inclusive bounds.

        Returns:
            ServiceResult[int]; VALIDATION_ERROR with reason INVALID_AMOUNT,
            AMOUNT_TOO_SMALL or AMOUNT_TOO_LARGE on failure
        """
        if isinstance(amount_minor_units, bool) or not isinstance(amount_minor_units, int):
            return ServiceResult.failure(
                "Amount must be an integer number of minor units",
                error_code=ErrorKind.VALIDATION_ERROR,
                details={"reason": "INVALID_AMOUNT"},
            )

        minimum = settings.PAYMENT_MIN_AMOUNT_UNITS
        maximum = settings.PAYMENT_MAX_AMOUNT_UNITS

        if amount_minor_units < minimum:
            return ServiceResult.failure(
                f"Amount too small. Minimum amount is {minimum} minor units.",
                error_code=ErrorKind.VALIDATION_ERROR,
                details={"reason": "AMOUNT_TOO_SMALL", "minimum": minimum},
            )
        if amount_minor_units > maximum:
            return ServiceResult.failure(
                "Amount too large. Maximum amount exceeded.",
                error_code=ErrorKind.VALIDATION_ERROR,
                details={"reason": "AMOUNT_TOO_LARGE", "maximum": maximum},
            )
        return ServiceResult.success(amount_minor_units)

    def create_order(
        self,
        amount_minor_units: int,
        currency: str | None = None,
        receipt: str | None = None,
    ) -> ServiceResult[PaymentIntent]:
        """
        Create a Razorpay order for a checkout attempt.

        Args:
            amount_minor_units: Amount in paise (or the currency's minor unit)
            currency: ISO 4217 code (default: PAYMENT_DEFAULT_CURRENCY)
            receipt: Merchant receipt (default: order_rcptid_<epoch ms>)

        Returns:
            ServiceResult[PaymentIntent]. Failures carry VALIDATION_ERROR,
            GATEWAY_TIMEOUT or GATEWAY_ERROR (details.status_code).
        """
        validated = self.validate_amount(amount_minor_units)
        if not validated:
            return validated

        currency = currency or settings.PAYMENT_DEFAULT_CURRENCY
        receipt = receipt or f"order_rcptid_{epoch_ms()}"

        try:
            return ServiceResult.success(
                self._attempt(amount_minor_units, currency, receipt)
            )
        except ExternalServiceError as first_error:
            if not first_error.retryable:
                return _error_result(first_error)
            return self._retry_once(amount_minor_units, currency, receipt, first_error)

    def fetch_payment(self, payment_id: str) -> ServiceResult[dict]:
        """
        Fetch a payment entity (GET /payments/{id}).

        Same timeout and error mapping as create_order; no retry or fallback.
        """
        try:
            payment = self._call(
                "fetch_payment",
                lambda: self.client.payment.fetch(payment_id, timeout=self.timeout),
                {"payment_id": payment_id},
            )
        except ExternalServiceError as e:
            return _error_result(e)
        return ServiceResult.success(payment)

    # =========================================================================
    # Order Creation Steps
    # =========================================================================

    def _attempt(self, amount: int, currency: str, receipt: str) -> PaymentIntent:
        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "payment_capture": 1,
        }
        order = self._call(
            "create_order",
            lambda: self.client.order.create(data=payload, timeout=self.timeout),
            {"amount": amount, "currency": currency, "receipt": receipt},
        )
        return PaymentIntent.from_gateway(order)

    def _retry_once(
        self,
        amount: int,
        currency: str,
        receipt: str,
        original_error: ExternalServiceError,
    ) -> ServiceResult[PaymentIntent]:
        logger = self.get_logger()
        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": retry_receipt(receipt),
        }
        logger.warning(
            "Retrying Razorpay order creation with simplified payload",
            extra={
                "receipt": receipt,
                "retry_receipt": payload["receipt"],
                "error_code": original_error.error_code,
            },
        )

        try:
            order = self._call(
                "create_order_retry",
                lambda: self.client.order.create(data=payload, timeout=self.timeout),
                {"amount": amount, "currency": currency, "receipt": payload["receipt"]},
            )
        except ExternalServiceError:
            return self._fallback(amount, currency, receipt, original_error)

        return ServiceResult.success(PaymentIntent.from_gateway(order))

    def _fallback(
        self,
        amount: int,
        currency: str,
        receipt: str,
        original_error: ExternalServiceError,
    ) -> ServiceResult[PaymentIntent]:
        logger = self.get_logger()

        if settings.PRODUCTION:
            logger.error(
                "Razorpay order creation failed after retry",
                extra={"receipt": receipt, **original_error.to_dict()},
            )
            return _error_result(original_error)

        intent = PaymentIntent(
            gateway_order_id=stub_order_id(receipt),
            amount_minor_units=amount,
            currency=currency,
            receipt=receipt,
            status="created",
            amount_paid=0,
            is_stub=True,
        )
        logger.warning(
            "Razorpay unavailable, using stub order outside production",
            extra={
                "receipt": receipt,
                "gateway_order_id": intent.gateway_order_id,
                "error_code": original_error.error_code,
            },
        )
        return ServiceResult.success(intent)

    # =========================================================================
    # Call Wrapper
    # =========================================================================

    def _call(
        self,
        operation: str,
        func: Callable[[], dict],
        log_context: dict[str, Any],
    ) -> dict:
        """
        Run one gateway call with timing, logging and error translation.

        Raises:
            GatewayTimeoutError: The call exceeded the timeout
            ExternalServiceError: Any other gateway or network failure
        """
        logger = self.get_logger()
        log_context = {"operation": operation, **log_context}

        start_time = time.time()
        logger.info("Starting Razorpay operation", extra=log_context)

        try:
            response = func()
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._handle_razorpay_error(e, log_context, duration_ms)
            raise

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "Razorpay operation completed",
            extra={**log_context, "duration_ms": duration_ms},
        )
        return response

    def _handle_razorpay_error(
        self,
        error: Exception,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate Razorpay SDK and requests errors into ExternalServiceError.

        Anything that is neither (a programming error, for instance) is left
        for the caller to re-raise unchanged.
        """
        logger = self.get_logger()
        log_context = {**log_context, "duration_ms": duration_ms}

        if isinstance(error, BadRequestError):
            logger.warning(
                "Razorpay rejected the request",
                extra={**log_context, "error": str(error)},
            )
            raise ExternalServiceError(
                str(error) or "Payment gateway rejected the request",
                details={"status_code": 400},
                retryable=False,
            ) from error

        if isinstance(error, GatewayError):
            logger.error("Razorpay gateway error", extra={**log_context, "error": str(error)})
            raise ExternalServiceError(
                str(error) or "Payment gateway error",
                details={"status_code": 502},
                retryable=True,
            ) from error

        if isinstance(error, ServerError):
            logger.error("Razorpay server error", extra={**log_context, "error": str(error)})
            raise ExternalServiceError(
                str(error) or "Payment gateway server error",
                details={"status_code": 500},
                retryable=True,
            ) from error

        if isinstance(error, requests.exceptions.Timeout):
            logger.error(
                "Razorpay call timed out",
                extra={**log_context, "timeout_seconds": self.timeout},
            )
            raise GatewayTimeoutError(
                "Payment gateway timed out",
                details={"timeout_seconds": self.timeout},
            ) from error

        if isinstance(error, requests.exceptions.ConnectionError):
            logger.error("Connection error to Razorpay", extra=log_context, exc_info=True)
            raise ExternalServiceError(
                "Could not connect to payment gateway",
                details={"status_code": 503},
                retryable=True,
            ) from error

        if isinstance(error, requests.exceptions.RequestException):
            logger.error("Unexpected Razorpay response", extra=log_context, exc_info=True)
            raise ExternalServiceError(
                "Unexpected response from payment gateway",
                details={"status_code": 502},
                retryable=True,
            ) from error
