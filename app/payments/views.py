"""
DRF views for the payments app.

This module provides API views for the storefront checkout:
- Razorpay order creation
- Payment verification (client proof)
- Payment failure recording
- Payment details lookup

The Razorpay webhook endpoint lives in payments.webhooks.views.

Related files:
    - services/checkout.py: CheckoutService
    - serializers.py: Request/response serializers
    - urls.py: URL routing

Security:
    - All endpoints here require authentication
    - Orders are scoped to the requesting user
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from core.responses import result_response
from payments.serializers import (
    CreatePaymentOrderSerializer,
    OrderSerializer,
    PaymentFailureSerializer,
    PaymentMessageSerializer,
    PaymentOrderResponseSerializer,
    VerifyPaymentResponseSerializer,
    VerifyPaymentSerializer,
)
from payments.services import CheckoutService

GATEWAY_RESPONSES = {
    400: OpenApiResponse(description="Invalid amount or rejected by the gateway"),
    502: OpenApiResponse(description="Gateway error"),
    503: OpenApiResponse(description="Gateway not configured"),
    504: OpenApiResponse(description="Gateway timed out"),
}

SETTLEMENT_RESPONSES = {
    400: OpenApiResponse(description="Signature mismatch or invalid request"),
    404: OpenApiResponse(description="Order not found"),
    409: OpenApiResponse(description="Order already settled differently"),
}


class CreatePaymentOrderView(APIView):
    """
    POST: Create a Razorpay order for checkout

    URL: /api/v1/payments/orders/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Create payment order",
        description=(
            "Create a Razorpay order for the given amount in minor units. "
            "The amount is rounded to an integer and must be within the "
            "configured bounds."
        ),
        request=CreatePaymentOrderSerializer,
        responses={200: PaymentOrderResponseSerializer, **GATEWAY_RESPONSES},
        tags=["Payments"],
    )
    def post(self, request):
        serializer = CreatePaymentOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = CheckoutService.create_payment_order(
            request.user,
            amount=data["amount"],
            currency=data.get("currency") or None,
            order_id=data.get("order_id") or None,
            receipt=data.get("receipt") or None,
        )
        return result_response(result, success_body=result.data)


class VerifyPaymentView(APIView):
    """
    POST: Verify the payment proof from Razorpay Checkout and mark the order paid

    URL: /api/v1/payments/verify/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Verify payment",
        description=(
            "Check the Razorpay payment signature and settle the order as "
            "paid. Repeating a successful verification is harmless."
        ),
        request=VerifyPaymentSerializer,
        responses={200: VerifyPaymentResponseSerializer, **SETTLEMENT_RESPONSES},
        tags=["Payments"],
    )
    def post(self, request):
        serializer = VerifyPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = CheckoutService.verify_payment(
            request.user,
            order_id=data["order_id"],
            gateway_order_id=data["razorpay_order_id"],
            payment_id=data["razorpay_payment_id"],
            signature=data["razorpay_signature"],
        )
        if not result:
            return result_response(result)

        return result_response(
            result,
            success_body={
                "success": True,
                "message": "Payment verified successfully",
                "order": OrderSerializer(result.data).data,
            },
        )


class PaymentFailureView(APIView):
    """
    POST: Record a failed payment reported by Razorpay Checkout

    URL: /api/v1/payments/failure/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Record payment failure",
        request=PaymentFailureSerializer,
        responses={200: PaymentMessageSerializer, **SETTLEMENT_RESPONSES},
        tags=["Payments"],
    )
    def post(self, request):
        serializer = PaymentFailureSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = CheckoutService.record_payment_failure(
            request.user,
            order_id=serializer.validated_data["order_id"],
            error=serializer.validated_data.get("error"),
        )
        return result_response(
            result,
            success_body={"success": True, "message": "Payment failure recorded"},
        )


class PaymentDetailView(APIView):
    """
    GET: Fetch payment details from Razorpay

    URL: /api/v1/payments/<payment_id>/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Get payment details",
        responses={
            200: OpenApiResponse(description="Razorpay payment entity"),
            404: OpenApiResponse(description="Payment not found for this user"),
            **GATEWAY_RESPONSES,
        },
        tags=["Payments"],
    )
    def get(self, request, payment_id):
        result = CheckoutService.fetch_payment(request.user, payment_id)
        return result_response(
            result,
            success_body={"success": True, "payment": result.data},
        )
