"""
Razorpay webhook verification and dispatch.

handle_webhook() is the whole inbound pipeline:

    1. Authenticate: HMAC-SHA256(RAZORPAY_WEBHOOK_SECRET, raw body) must
       match X-Razorpay-Signature. Otherwise the delivery is rejected with
       SIGNATURE_MISMATCH and nothing else happens.
    2. Parse the JSON body into a WebhookEvent. Malformed JSON is rejected
       with VALIDATION_ERROR.
    3. Dispatch through the handler registry. Event types without a handler
       are accepted and change nothing.

Once a delivery is authentic and well formed it is accepted. The handler's
settlement outcome (CONFLICT, NOT_FOUND, ...) is reported in the receipt
and the log but never turns the delivery into a rejection; Razorpay would
only redeliver the same event.

Events are not persisted.

Usage:
    from payments.webhooks.handlers import handle_webhook, register_handler

    result = handle_webhook(request.body, request.headers.get("X-Razorpay-Signature"))

    @register_handler("refund.processed")
    def handle_refund(event: WebhookEvent) -> ServiceResult:
        ...
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from core.services import ErrorKind, ServiceResult
from payments.services.settlement import OrderSettlement
from payments.signatures import verify_webhook_signature

if TYPE_CHECKING:
    from collections.abc import Callable


logger = logging.getLogger(__name__)


# =============================================================================
# Types
# =============================================================================


def _payment_entity(document: dict[str, Any]) -> dict[str, Any]:
    """payload.payment.entity, or {} when any level is missing."""
    payment = document.get("payload")
    payment = payment.get("payment") if isinstance(payment, dict) else None
    entity = payment.get("entity") if isinstance(payment, dict) else None
    return entity if isinstance(entity, dict) else {}


@dataclass(frozen=True)
class WebhookEvent:
    """
    An authenticated, parsed webhook delivery. Lives only for one request.

    Attributes:
        event_type: Razorpay event name (payment.captured, ...)
        payment_entity_id: payload.payment.entity.id, when present
        gateway_order_id: payload.payment.entity.order_id, when present
        payload: The decoded body
        raw_body: The exact bytes the signature was computed over
    """

    event_type: str
    payment_entity_id: str | None
    gateway_order_id: str | None
    payload: dict[str, Any]
    raw_body: bytes = field(repr=False)

    @property
    def payment_entity(self) -> dict[str, Any]:
        return _payment_entity(self.payload)

    @classmethod
    def parse(cls, raw_body: bytes) -> WebhookEvent:
        """
        Decode a webhook body.

        Raises:
            ValueError: The body is not a JSON object with an event name
        """
        document = json.loads(raw_body)
        if not isinstance(document, dict) or not isinstance(document.get("event"), str):
            raise ValueError("Webhook body has no event name")

        entity = _payment_entity(document)
        return cls(
            event_type=document["event"],
            payment_entity_id=entity.get("id"),
            gateway_order_id=entity.get("order_id"),
            payload=document,
            raw_body=raw_body,
        )


@dataclass(frozen=True)
class WebhookReceipt:
    """
    What happened to an accepted delivery.

    Attributes:
        event_type: Razorpay event name
        dispatched: Whether a handler ran
        outcome: "ok", or the ErrorKind the handler reported
        order_id: Local order the handler touched, when known
    """

    event_type: str
    dispatched: bool
    outcome: str = "ok"
    order_id: str | None = None


# =============================================================================
# Handler Registry
# =============================================================================


# Maps event type strings to handler functions
WEBHOOK_HANDLERS: dict[str, Callable[[WebhookEvent], ServiceResult]] = {}


def register_handler(event_type: str) -> Callable:
    """
    Decorator to register a webhook event handler.

    Args:
        event_type: The Razorpay event type (e.g., "payment.captured")
    """

    def decorator(func: Callable[[WebhookEvent], ServiceResult]) -> Callable:
        WEBHOOK_HANDLERS[event_type] = func
        return func

    return decorator


def dispatch_webhook(event: WebhookEvent) -> WebhookReceipt:
    """Run the registered handler for an event and summarize the outcome."""
    handler = WEBHOOK_HANDLERS.get(event.event_type)

    if handler is None:
        logger.info(
            "No handler registered for webhook event",
            extra={"event_type": event.event_type},
        )
        return WebhookReceipt(event_type=event.event_type, dispatched=False)

    result = handler(event)
    order = result.data
    receipt = WebhookReceipt(
        event_type=event.event_type,
        dispatched=True,
        outcome="ok" if result.success else str(result.error_code),
        order_id=str(order.pk) if getattr(order, "pk", None) else None,
    )

    log_extra = {
        "event_type": event.event_type,
        "payment_id": event.payment_entity_id,
        "gateway_order_id": event.gateway_order_id,
        "outcome": receipt.outcome,
    }
    if result.success:
        logger.info("Webhook event handled", extra=log_extra)
    else:
        logger.warning("Webhook event not applied", extra=log_extra)
    return receipt


def handle_webhook(raw_body: bytes, signature_header) -> ServiceResult[WebhookReceipt]:
    """
    Authenticate, parse and dispatch one webhook delivery.

    Returns:
        ServiceResult[WebhookReceipt] when accepted. Rejections carry
        SIGNATURE_MISMATCH or VALIDATION_ERROR.
    """
    if not verify_webhook_signature(raw_body, signature_header):
        logger.warning(
            "Webhook signature verification failed",
            extra={"has_signature": bool(signature_header)},
        )
        return ServiceResult.failure(
            "Invalid signature", error_code=ErrorKind.SIGNATURE_MISMATCH
        )

    try:
        event = WebhookEvent.parse(raw_body)
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning("Malformed webhook body", extra={"error": str(e)})
        return ServiceResult.failure(
            "Malformed webhook body",
            error_code=ErrorKind.VALIDATION_ERROR,
            details={"reason": "MALFORMED_BODY"},
        )

    if event.event_type in WEBHOOK_HANDLERS and not event.payment_entity_id:
        logger.warning(
            "Webhook event without payment entity",
            extra={"event_type": event.event_type},
        )
        return ServiceResult.failure(
            "Webhook event has no payment entity",
            error_code=ErrorKind.VALIDATION_ERROR,
            details={"reason": "MISSING_PAYMENT_ENTITY"},
        )

    logger.info(
        "Received Razorpay webhook",
        extra={"event_type": event.event_type, "payment_id": event.payment_entity_id},
    )
    return ServiceResult.success(dispatch_webhook(event))


# =============================================================================
# Payment Handlers
# =============================================================================


@register_handler("payment.captured")
def handle_payment_captured(event: WebhookEvent) -> ServiceResult:
    """Settle the order as paid by the captured payment."""
    return OrderSettlement.mark_paid_from_gateway(
        event.gateway_order_id,
        event.payment_entity_id,
        payment_method=event.payment_entity.get("method") or "razorpay",
    )


@register_handler("payment.failed")
def handle_payment_failed(event: WebhookEvent) -> ServiceResult:
    """Settle the order as failed with the gateway's error fields."""
    entity = event.payment_entity
    error_info = {
        "payment_id": event.payment_entity_id,
        "code": entity.get("error_code"),
        "description": entity.get("error_description"),
        "source": entity.get("error_source"),
        "step": entity.get("error_step"),
        "reason": entity.get("error_reason"),
    }
    return OrderSettlement.mark_failed_from_gateway(event.gateway_order_id, error_info)
