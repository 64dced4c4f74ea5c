"""
Payments app configuration.

This app settles storefront orders through Razorpay:
- Gateway order creation (RazorpayAdapter)
- Client payment signature verification
- Webhook verification and dispatch
- Order settlement state machine
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"

    def ready(self):
        """Register system checks and build the gateway adapter once."""
        from payments import checks  # noqa: F401
        from payments.adapters import configure_gateway

        configure_gateway()
