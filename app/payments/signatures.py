"""
HMAC proofs used by Razorpay.

Two signatures are checked here:

    Payment signature (client confirmation):
        hex(HMAC-SHA256(RAZORPAY_KEY_SECRET, "<order_id>|<payment_id>"))

    Webhook signature (X-Razorpay-Signature header):
        hex(HMAC-SHA256(RAZORPAY_WEBHOOK_SECRET, raw_request_body))

Both comparisons use hmac.compare_digest. Neither function raises: any
malformed input (None, non-string, non-ASCII signature) is INAUTHENTIC.

Usage:
    from payments.signatures import SignatureCheck, verify_payment_signature

    check = verify_payment_signature(order_id, payment_id, signature)
    if check is not SignatureCheck.AUTHENTIC:
        ...
"""

from __future__ import annotations

import enum
import hashlib
import hmac
import logging

from django.conf import settings

logger = logging.getLogger(__name__)


class SignatureCheck(enum.Enum):
    AUTHENTIC = "authentic"
    INAUTHENTIC = "inauthentic"

    def __bool__(self) -> bool:
        return self is SignatureCheck.AUTHENTIC


def compute_hmac(secret: str, message: bytes) -> str:
    """Hex HMAC-SHA256 of message under secret."""
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def _matches(expected: str, provided) -> bool:
    if not isinstance(provided, str) or not provided.isascii():
        return False
    return hmac.compare_digest(expected, provided)


def verify_payment_signature(
    gateway_order_id,
    payment_id,
    provided,
    secret: str | None = None,
) -> SignatureCheck:
    """
    Check the signature Razorpay Checkout hands back to the client.

    Args:
        gateway_order_id: Razorpay order id (order_xxx)
        payment_id: Razorpay payment id (pay_xxx)
        provided: Signature from the client
        secret: Key secret (defaults to RAZORPAY_KEY_SECRET)

    Returns:
        SignatureCheck.AUTHENTIC or SignatureCheck.INAUTHENTIC
    """
    secret = settings.RAZORPAY_KEY_SECRET if secret is None else secret
    if not secret:
        logger.warning("Payment signature checked without RAZORPAY_KEY_SECRET")
        return SignatureCheck.INAUTHENTIC

    if not isinstance(gateway_order_id, str) or not isinstance(payment_id, str):
        return SignatureCheck.INAUTHENTIC

    message = f"{gateway_order_id}|{payment_id}".encode("utf-8")
    if _matches(compute_hmac(secret, message), provided):
        return SignatureCheck.AUTHENTIC
    return SignatureCheck.INAUTHENTIC


def verify_webhook_signature(
    raw_body: bytes,
    signature_header,
    secret: str | None = None,
) -> SignatureCheck:
    """
    Check the X-Razorpay-Signature header against the raw request body.

    The HMAC is computed over the exact bytes received, never over a
    re-serialized JSON document.
    """
    secret = settings.RAZORPAY_WEBHOOK_SECRET if secret is None else secret
    if not secret or not signature_header:
        return SignatureCheck.INAUTHENTIC

    if isinstance(raw_body, str):
        raw_body = raw_body.encode("utf-8")
    if not isinstance(raw_body, (bytes, bytearray)):
        return SignatureCheck.INAUTHENTIC

    if _matches(compute_hmac(secret, bytes(raw_body)), signature_header):
        return SignatureCheck.AUTHENTIC
    return SignatureCheck.INAUTHENTIC
