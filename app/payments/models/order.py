"""
Order model and its payment state machine.

Order is the storefront's record of a purchase. This app owns its payment
lifecycle: the status starts at pending and is settled exactly once, to
paid or to failed.

Concurrency:
    Order uses django-fsm's ConcurrentTransitionMixin. Saving after a
    transition issues

        UPDATE ... WHERE id = :id AND payment_status = :status_when_loaded

    so two settlers racing on the same order produce one effective change.
    The loser's save raises django_fsm.ConcurrentTransition.

Usage:
    from payments.models import Order

    order = Order.objects.get(pk=order_id)
    order.mark_paid(payment_id="pay_xxx", gateway_order_id="order_xxx")
    order.save()
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone
from django_fsm import ConcurrentTransitionMixin, FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.models.gateway_link import GatewayOrderLink
from payments.state_machines import PaymentStatus


class Order(ConcurrentTransitionMixin, UUIDPrimaryKeyMixin, BaseModel):
    """
    A storefront order and its payment outcome.

    State Flow:
        PENDING -> PAID
        PENDING -> FAILED

    Fields:
        user: Buyer
        items: Line items as sent by the storefront
        total: Order total in major currency units
        payment_status: Current FSM state
        gateway_order_id: Razorpay order id (order_xxx) of the latest checkout
            attempt; every id issued is kept in gateway_links
        payment_id: Razorpay payment id (pay_xxx) that settled the order
        signature: Client-side payment signature, when settled by the client
        payment_method: How the order was paid
        payment_error: Gateway or client error payload on failure
        paid_at / failed_at: Settlement timestamps
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
        help_text="User who placed the order",
    )

    items = models.JSONField(
        default=list,
        blank=True,
        help_text="Line items as submitted by the storefront",
    )

    total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Order total in major currency units",
    )

    # ==========================================================================
    # Payment State
    # ==========================================================================

    payment_status = FSMField(
        default=PaymentStatus.PENDING,
        choices=PaymentStatus.choices,
        db_index=True,
        protected=True,
        help_text="Payment state (managed by FSM)",
    )

    # ==========================================================================
    # Gateway References
    # ==========================================================================

    gateway_order_id = models.CharField(
        max_length=64,
        null=True,
        blank=True,
        unique=True,
        help_text="Razorpay order ID (order_xxx)",
    )

    payment_id = models.CharField(
        max_length=64,
        null=True,
        blank=True,
        db_index=True,
        help_text="Razorpay payment ID (pay_xxx)",
    )

    signature = models.CharField(
        max_length=128,
        blank=True,
        default="",
        help_text="Client-side payment signature",
    )

    payment_method = models.CharField(
        max_length=32,
        blank=True,
        default="",
    )

    payment_error = models.JSONField(
        null=True,
        blank=True,
        help_text="Error payload recorded when the payment failed",
    )

    paid_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Order"
        verbose_name_plural = "Orders"
        indexes = [
            models.Index(fields=["user", "payment_status"], name="order_user_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total__gte=0),
                name="order_total_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"Order({self.id}, {self.payment_status}, {self.total})"

    @property
    def is_settled(self) -> bool:
        return self.payment_status in PaymentStatus.terminal()

    # ==========================================================================
    # Gateway Orders
    # ==========================================================================

    def owns_gateway_order(self, gateway_order_id: str) -> bool:
        """
        True if gateway_order_id was issued for this order.

        An order with no checkout attempt yet accepts any id that no other
        order has claimed.
        """
        if self.gateway_order_id == gateway_order_id:
            return True
        link = GatewayOrderLink.objects.filter(gateway_order_id=gateway_order_id).first()
        if link is not None:
            return link.order_id == self.pk
        return not self.gateway_order_id

    def link_gateway_order(self, gateway_order_id: str) -> None:
        """
        Make gateway_order_id the current checkout attempt for this order.

        Earlier ids stay linked. Raises IntegrityError if the id already
        belongs to another order; call inside a transaction.
        """
        if self.gateway_order_id and self.gateway_order_id != gateway_order_id:
            GatewayOrderLink.objects.get_or_create(
                order=self, gateway_order_id=self.gateway_order_id
            )
        GatewayOrderLink.objects.get_or_create(order=self, gateway_order_id=gateway_order_id)
        Order.objects.filter(pk=self.pk).update(
            gateway_order_id=gateway_order_id, updated_at=timezone.now()
        )
        self.gateway_order_id = gateway_order_id

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=payment_status,
        source=PaymentStatus.PENDING,
        target=PaymentStatus.PAID,
    )
    def mark_paid(
        self,
        payment_id: str,
        gateway_order_id: str | None = None,
        signature: str = "",
        payment_method: str = "razorpay",
    ):
        """
        Record a captured payment.

        Transition: PENDING -> PAID
        """
        self.payment_id = payment_id
        if gateway_order_id:
            self.gateway_order_id = gateway_order_id
        self.signature = signature
        self.payment_method = payment_method
        self.paid_at = timezone.now()

    @transition(
        field=payment_status,
        source=PaymentStatus.PENDING,
        target=PaymentStatus.FAILED,
    )
    def mark_failed(self, error_info=None):
        """
        Record a failed payment.

        Transition: PENDING -> FAILED
        """
        self.payment_error = error_info
        self.failed_at = timezone.now()
