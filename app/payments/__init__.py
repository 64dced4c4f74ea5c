"""
Payments app for Razorpay checkout and order settlement.

This app handles:
- Gateway order creation with bounded timeout, one retry and a dev stub
- Verification of client payment signatures
- Webhook authentication and dispatch
- Settling orders pending -> paid | failed exactly once

Related apps:
    - authentication: User model for order ownership

Usage:
    from payments.services import CheckoutService, OrderSettlement

    result = CheckoutService.create_payment_order(
        {"amount": 50000, "currency": "INR", "orderId": str(order.id)}
    )
"""
