"""
Webhook endpoint view for Razorpay.

Razorpay signs the raw request body with the webhook secret and sends the
hex digest in X-Razorpay-Signature. The view hands the untouched body and
header to handle_webhook() and maps the outcome:

    accepted -> 200 {"status": "ok"}
    rejected -> 400 {"error": "..."}

Usage:
    # In urls.py
    from payments.webhooks.views import razorpay_webhook

    urlpatterns = [
        path("webhooks/razorpay/", razorpay_webhook, name="razorpay-webhook"),
    ]
"""

from __future__ import annotations

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from payments.webhooks.handlers import handle_webhook


@csrf_exempt
@require_POST
def razorpay_webhook(request: HttpRequest) -> JsonResponse:
    """
    Receive a Razorpay webhook delivery.

    Settlement happens inside the request; there is no background queue.
    Settlement outcomes do not change the response: an authentic delivery
    is always acknowledged so Razorpay stops redelivering it.

    Security:
    - Signature verification prevents spoofed webhooks
    - CSRF exemption required for external webhooks
    - Only POST requests accepted
    """
    result = handle_webhook(request.body, request.headers.get("X-Razorpay-Signature", ""))

    if not result:
        return JsonResponse(
            {"error": result.error, "error_code": str(result.error_code)},
            status=400,
        )
    return JsonResponse({"status": "ok"})
