"""
Payment gateway adapters.

All Razorpay API calls go through RazorpayAdapter. The payments app builds
one adapter at startup (PaymentsConfig.ready) and keeps the construction
result here; get_gateway() hands it out.

Usage:
    from payments.adapters import get_gateway

    gateway = get_gateway()
    if not gateway:
        return result_response(gateway)  # 503 CONFIGURATION_ERROR
    result = gateway.data.create_order(50000, "INR", "order_rcptid_42")
"""

from __future__ import annotations

from core.services import ErrorKind, ServiceResult
from payments.adapters.razorpay_adapter import (
    PaymentIntent,
    RazorpayAdapter,
    retry_receipt,
    stub_order_id,
)

NOT_CONFIGURED = ServiceResult.failure(
    "Payment gateway has not been configured",
    error_code=ErrorKind.CONFIGURATION_ERROR,
    details={"reason": "GATEWAY_NOT_CONFIGURED"},
)

_gateway: ServiceResult[RazorpayAdapter] = NOT_CONFIGURED


def configure_gateway() -> ServiceResult[RazorpayAdapter]:
    """Build the adapter from settings and keep the result."""
    global _gateway
    _gateway = RazorpayAdapter.from_settings()
    return _gateway


def get_gateway() -> ServiceResult[RazorpayAdapter]:
    """
    Return the ServiceResult[RazorpayAdapter] built at startup.

    Before PaymentsConfig.ready() has run this is a CONFIGURATION_ERROR
    failure; the adapter is never built on demand.
    """
    return _gateway


__all__ = [
    "NOT_CONFIGURED",
    "PaymentIntent",
    "RazorpayAdapter",
    "configure_gateway",
    "get_gateway",
    "retry_receipt",
    "stub_order_id",
]
