"""
System checks for Razorpay configuration.

Checks:
    payments.E001: RAZORPAY_KEY_ID missing or not starting with "rzp_"
    payments.E002: RAZORPAY_KEY_SECRET shorter than 20 characters
    payments.W001: RAZORPAY_WEBHOOK_SECRET empty (every webhook is rejected)
    payments.W002: PRODUCTION on with a test key
    payments.W003: PRODUCTION off with a live key
"""

from __future__ import annotations

from django.conf import settings
from django.core.checks import Error, Warning, register

from payments.adapters.razorpay_adapter import MIN_KEY_SECRET_LENGTH

TEST_KEY_PREFIX = "rzp_test_"
LIVE_KEY_PREFIX = "rzp_live_"


@register()
def check_razorpay_credentials(app_configs=None, **kwargs):
    errors = []
    key_id = settings.RAZORPAY_KEY_ID or ""
    key_secret = settings.RAZORPAY_KEY_SECRET or ""

    if not key_id.startswith("rzp_"):
        errors.append(
            Error(
                "RAZORPAY_KEY_ID is missing or malformed.",
                hint="Razorpay key ids start with rzp_test_ or rzp_live_.",
                id="payments.E001",
            )
        )
    if len(key_secret) < MIN_KEY_SECRET_LENGTH:
        errors.append(
            Error(
                "RAZORPAY_KEY_SECRET is missing or shorter than %d characters."
                % MIN_KEY_SECRET_LENGTH,
                id="payments.E002",
            )
        )
    return errors


@register()
def check_razorpay_webhook_secret(app_configs=None, **kwargs):
    if settings.RAZORPAY_WEBHOOK_SECRET:
        return []
    return [
        Warning(
            "RAZORPAY_WEBHOOK_SECRET is empty; all webhooks will be rejected.",
            id="payments.W001",
        )
    ]


@register()
def check_razorpay_key_mode(app_configs=None, **kwargs):
    warnings = []
    key_id = settings.RAZORPAY_KEY_ID or ""

    if settings.PRODUCTION and key_id.startswith(TEST_KEY_PREFIX):
        warnings.append(
            Warning(
                "PRODUCTION is on but RAZORPAY_KEY_ID is a test key.",
                id="payments.W002",
            )
        )
    if not settings.PRODUCTION and key_id.startswith(LIVE_KEY_PREFIX):
        warnings.append(
            Warning(
                "RAZORPAY_KEY_ID is a live key outside production.",
                hint="Real money moves with live keys. Use an rzp_test_ key.",
                id="payments.W003",
            )
        )
    return warnings
