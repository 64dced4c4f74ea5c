"""
Payment admin configuration.

Orders are shown with their settlement fields read-only: payment status
only changes through OrderSettlement.
"""

from django.contrib import admin

from payments.models import GatewayOrderLink, Order


class GatewayOrderLinkInline(admin.TabularInline):
    """Every Razorpay order id issued for the order, read-only."""

    model = GatewayOrderLink
    extra = 0
    can_delete = False
    fields = ["gateway_order_id", "created_at"]
    readonly_fields = ["gateway_order_id", "created_at"]

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Admin configuration for Order.

    Provides visibility into payment status and gateway references.
    """

    list_display = [
        "id",
        "user",
        "total",
        "payment_status",
        "gateway_order_id",
        "payment_id",
        "paid_at",
        "created_at",
    ]
    list_filter = ["payment_status", "payment_method"]
    search_fields = [
        "id",
        "gateway_order_id",
        "gateway_links__gateway_order_id",
        "payment_id",
        "user__email",
    ]
    readonly_fields = [
        "id",
        "payment_status",
        "gateway_order_id",
        "payment_id",
        "signature",
        "payment_method",
        "payment_error",
        "paid_at",
        "failed_at",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]
    inlines = [GatewayOrderLinkInline]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "user", "items", "total"),
            },
        ),
        (
            "Payment",
            {
                "fields": (
                    "payment_status",
                    "gateway_order_id",
                    "payment_id",
                    "payment_method",
                    "paid_at",
                    "failed_at",
                ),
            },
        ),
        (
            "Gateway Details",
            {
                "fields": ("signature", "payment_error"),
                "classes": ("collapse",),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )
