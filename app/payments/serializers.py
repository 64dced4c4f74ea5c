"""
DRF serializers for the payments app.

This module provides serializers for:
- Order display
- Checkout requests (create order, verify, failure)

Request field names follow the storefront and Razorpay Checkout
(orderId, razorpay_order_id, ...), mapped onto snake_case with ``source``.

Related files:
    - models: Order
    - views.py: Payment API views
"""

from __future__ import annotations

from rest_framework import serializers

from payments.models import Order


class OrderSerializer(serializers.ModelSerializer):
    """Order as returned after settlement."""

    class Meta:
        model = Order
        fields = [
            "id",
            "items",
            "total",
            "payment_status",
            "payment_id",
            "gateway_order_id",
            "payment_method",
            "payment_error",
            "paid_at",
            "failed_at",
            "created_at",
        ]
        read_only_fields = fields


class CreatePaymentOrderSerializer(serializers.Serializer):
    """
    Request to open a Razorpay checkout.

    amount is in minor units (paise) and may be fractional; it is rounded.
    """

    amount = serializers.DecimalField(max_digits=20, decimal_places=4)
    currency = serializers.CharField(max_length=3, required=False, allow_blank=True)
    orderId = serializers.CharField(
        source="order_id", max_length=64, required=False, allow_blank=True
    )
    receipt = serializers.CharField(max_length=40, required=False, allow_blank=True)

    def validate_currency(self, value):
        return value.upper()


class PaymentOrderResponseSerializer(serializers.Serializer):
    id = serializers.CharField()
    currency = serializers.CharField()
    amount = serializers.IntegerField()
    receipt = serializers.CharField()
    orderId = serializers.CharField(required=False)


class VerifyPaymentSerializer(serializers.Serializer):
    """Proof returned to the client by Razorpay Checkout."""

    razorpay_order_id = serializers.CharField(max_length=64)
    razorpay_payment_id = serializers.CharField(max_length=64)
    razorpay_signature = serializers.CharField(max_length=128)
    orderId = serializers.CharField(source="order_id", max_length=64)


class VerifyPaymentResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    order = OrderSerializer()


class PaymentFailureSerializer(serializers.Serializer):
    orderId = serializers.CharField(source="order_id", max_length=64)
    error = serializers.JSONField(required=False, allow_null=True)


class PaymentMessageSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
