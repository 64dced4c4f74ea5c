"""
Payment services.

This module provides:
- CheckoutService: Storefront-facing payment flow
- OrderSettlement: pending -> paid | failed state machine

Usage:
    from payments.services import CheckoutService, OrderSettlement

    result = CheckoutService.verify_payment(
        request.user, order_id, gateway_order_id, payment_id, signature
    )
"""

from payments.services.checkout import CheckoutService
from payments.services.settlement import OrderSettlement

__all__ = ["CheckoutService", "OrderSettlement"]
