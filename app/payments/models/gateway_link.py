"""
Razorpay order ids issued for a storefront order.

Every checkout attempt creates a new Razorpay order. The customer may pay
on any of them, so each id stays tied to its Order even after a later
attempt replaces Order.gateway_order_id.
"""

from django.db import models

from core.models import BaseModel


class GatewayOrderLink(BaseModel):
    """
    One Razorpay order id (order_xxx) created for an Order.

    A gateway order id belongs to at most one Order.
    """

    order = models.ForeignKey(
        "payments.Order",
        on_delete=models.CASCADE,
        related_name="gateway_links",
    )

    gateway_order_id = models.CharField(
        max_length=64,
        unique=True,
        help_text="Razorpay order ID (order_xxx)",
    )

    class Meta:
        ordering = ["created_at"]
        verbose_name = "Gateway order link"
        verbose_name_plural = "Gateway order links"

    def __str__(self) -> str:
        return f"{self.gateway_order_id} -> {self.order_id}"
