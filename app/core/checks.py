"""
System checks for core configuration.

These run on ``manage.py check`` and on server start, replacing a
hand-written environment validator with Django's check framework.

Checks:
    core.E001: SECRET_KEY shorter than 32 characters
    core.W002: OTP_EXPIRATION_MS longer than ten minutes
"""

from __future__ import annotations

from django.conf import settings
from django.core.checks import Error, Tags, Warning, register

MIN_SECRET_KEY_LENGTH = 32
MAX_RECOMMENDED_OTP_MS = 10 * 60 * 1000


@register(Tags.security, deploy=False)
def check_secret_key_length(app_configs=None, **kwargs):
    errors = []
    secret_key = getattr(settings, "SECRET_KEY", "") or ""
    if len(secret_key) < MIN_SECRET_KEY_LENGTH:
        errors.append(
            Error(
                "SECRET_KEY must be at least %d characters long."
                % MIN_SECRET_KEY_LENGTH,
                hint="Generate one with secrets.token_urlsafe(50).",
                id="core.E001",
            )
        )
    return errors


@register()
def check_otp_expiration(app_configs=None, **kwargs):
    warnings = []
    otp_ms = getattr(settings, "OTP_EXPIRATION_MS", 0)
    if otp_ms > MAX_RECOMMENDED_OTP_MS:
        warnings.append(
            Warning(
                "OTP_EXPIRATION_MS is longer than 10 minutes.",
                hint="Short-lived codes limit the window for guessing.",
                id="core.W002",
            )
        )
    return warnings
