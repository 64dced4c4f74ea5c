"""
URL configuration for the payments app.

Routes:
    - POST /orders/             - Create a Razorpay order for checkout
    - POST /verify/             - Verify the client's payment proof
    - POST /failure/            - Record a failed payment
    - GET  /<payment_id>/       - Fetch payment details from Razorpay
    - POST /webhooks/razorpay/  - Razorpay webhook endpoint

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.
"""

from django.urls import path

from payments.views import (
    CreatePaymentOrderView,
    PaymentDetailView,
    PaymentFailureView,
    VerifyPaymentView,
)
from payments.webhooks.views import razorpay_webhook

app_name = "payments"

urlpatterns = [
    path("orders/", CreatePaymentOrderView.as_view(), name="create-order"),
    path("verify/", VerifyPaymentView.as_view(), name="verify"),
    path("failure/", PaymentFailureView.as_view(), name="failure"),
    # Webhook endpoints
    path("webhooks/razorpay/", razorpay_webhook, name="razorpay-webhook"),
    path("<str:payment_id>/", PaymentDetailView.as_view(), name="payment-detail"),
]
