"""
ASGI config for the Django application.

This file exposes the ASGI callable as a module-level variable named
`application`. Request handling is synchronous; gateway calls block the
worker for at most RAZORPAY_API_TIMEOUT_SECONDS per attempt.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/asgi/
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_asgi_application()
