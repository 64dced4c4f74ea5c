"""
Issuance of time-bound secrets.

SecretIssuer generates a secret, stores only its hash, and mails the
plaintext to the user. Issuing for a (user, purpose) pair replaces any
earlier secret for that pair.

Secret formats:
    EMAIL_VERIFICATION: OTP_LENGTH decimal digits
    PASSWORD_RESET: 32 random bytes, hex-encoded, delivered as a link
        FRONTEND_ORIGIN/reset-password/<user_id>/<token>

Delivery failures:
    If mail delivery fails the stored secret is kept, and the result is a
    failure with ErrorKind.ISSUANCE_FAILED carrying the IssuedSecret as data.
    A later resend supersedes it, or the user can still verify it if the
    mail eventually arrives.

Usage:
    from authentication.issuer import SecretIssuer
    from authentication.models import SecretPurpose

    result = SecretIssuer.issue(user, SecretPurpose.EMAIL_VERIFICATION)
    if not result:
        return result_response(result)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from django.conf import settings
from django.contrib.auth.hashers import make_password
from django.template.loader import render_to_string
from django.utils import timezone

from authentication.models import SecretPurpose
from authentication.store import SecretStore
from core.helpers import generate_numeric_code, generate_token
from core.services import BaseService, ErrorKind, ServiceResult
from toolkit.helpers import mask_email
from toolkit.services.email import EmailService

if TYPE_CHECKING:
    from authentication.models import User

RESET_TOKEN_BYTES = 32

SUBJECTS = {
    SecretPurpose.EMAIL_VERIFICATION: "Verify your email address",
    SecretPurpose.PASSWORD_RESET: "Reset your password",
}

TEMPLATES = {
    SecretPurpose.EMAIL_VERIFICATION: "authentication/emails/otp",
    SecretPurpose.PASSWORD_RESET: "authentication/emails/password_reset",
}


@dataclass(frozen=True)
class IssuedSecret:
    """What the caller learns about an issued secret. Never holds plaintext."""

    user_id: int
    purpose: str
    expires_at: datetime
    delivered: bool


def default_ttl(purpose: str) -> timedelta:
    """TTL configured for a purpose, from the *_EXPIRATION_MS settings."""
    if purpose == SecretPurpose.PASSWORD_RESET:
        return timedelta(milliseconds=settings.PASSWORD_RESET_EXPIRATION_MS)
    return timedelta(milliseconds=settings.OTP_EXPIRATION_MS)


def reset_link(user_id, token: str) -> str:
    origin = settings.FRONTEND_ORIGIN.rstrip("/")
    return f"{origin}/reset-password/{user_id}/{token}"


class SecretIssuer(BaseService):
    """Generates, stores and delivers time-bound secrets."""

    @classmethod
    def issue(
        cls,
        user: User,
        purpose: str,
        ttl: timedelta | None = None,
    ) -> ServiceResult[IssuedSecret]:
        """
        Issue a new secret for (user, purpose), superseding any prior one.

        Args:
            user: Recipient; the secret is mailed to user.email
            purpose: SecretPurpose value
            ttl: Lifetime of the secret (defaults per purpose from settings)

        Returns:
            ServiceResult[IssuedSecret]. On delivery failure the result is a
            failure (ISSUANCE_FAILED) whose data still describes the stored
            secret.
        """
        logger = cls.get_logger()
        ttl = ttl if ttl is not None else default_ttl(purpose)

        plaintext = cls._generate(purpose)
        expires_at = timezone.now() + ttl

        SecretStore.put(
            subject_id=user.pk,
            purpose=purpose,
            hashed_value=make_password(plaintext),
            expires_at=expires_at,
        )

        delivered = cls._deliver(user, purpose, plaintext, ttl)
        issued = IssuedSecret(
            user_id=user.pk,
            purpose=purpose,
            expires_at=expires_at,
            delivered=delivered,
        )

        if not delivered:
            logger.warning(
                "Secret stored but delivery failed",
                extra={
                    "user_id": user.pk,
                    "purpose": purpose,
                    "email": mask_email(user.email),
                },
            )
            return ServiceResult.failure(
                "Secret could not be delivered",
                error_code=ErrorKind.ISSUANCE_FAILED,
                data=issued,
            )

        logger.info(
            "Secret issued",
            extra={
                "user_id": user.pk,
                "purpose": purpose,
                "email": mask_email(user.email),
                "expires_at": expires_at.isoformat(),
            },
        )
        return ServiceResult.success(issued)

    @staticmethod
    def _generate(purpose: str) -> str:
        if purpose == SecretPurpose.EMAIL_VERIFICATION:
            return generate_numeric_code(settings.OTP_LENGTH)
        if purpose == SecretPurpose.PASSWORD_RESET:
            return generate_token(RESET_TOKEN_BYTES)
        raise ValueError(f"Unknown secret purpose: {purpose!r}")

    @staticmethod
    def _deliver(user: User, purpose: str, plaintext: str, ttl: timedelta) -> bool:
        context = {
            "user": user,
            "ttl_minutes": max(1, math.ceil(ttl.total_seconds() / 60)),
        }
        if purpose == SecretPurpose.PASSWORD_RESET:
            context["reset_url"] = reset_link(user.pk, plaintext)
        else:
            context["code"] = plaintext

        template = TEMPLATES[purpose]
        return EmailService.send_raw(
            to=user.email,
            subject=SUBJECTS[purpose],
            body_text=render_to_string(f"{template}.txt", context),
            body_html=render_to_string(f"{template}.html", context),
        )
