"""
Email service for centralized email sending.

This module provides the EmailService class, the mail collaborator used by
secret issuance. It wraps Django's mail framework so callers see a plain
success flag and never deal with transport exceptions.

Configuration:
    Email settings are read from Django settings:
    - EMAIL_BACKEND
    - EMAIL_HOST, EMAIL_PORT
    - DEFAULT_FROM_EMAIL

Usage:
    from toolkit.services.email import EmailService

    sent = EmailService.send_raw(
        to="user@example.com",
        subject="Verify your email",
        body_text="Your code is 123456",
        body_html="<p>Your code is <b>123456</b></p>",
    )
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives

from toolkit.helpers import mask_email

logger = logging.getLogger(__name__)


class EmailService:
    """
    Centralized email sending.

    Delivery failures are logged and reported as False so that callers can
    tell a transport failure apart from a persistence failure.
    """

    @staticmethod
    def send_raw(
        to: str | list[str],
        subject: str,
        body_text: str,
        body_html: str | None = None,
        from_email: str | None = None,
        reply_to: str | None = None,
    ) -> bool:
        """
        Send email with raw content (no template).

        Args:
            to: Recipient email address(es)
            subject: Email subject line
            body_text: Plain text email body
            body_html: HTML email body (optional)
            from_email: Sender email (defaults to DEFAULT_FROM_EMAIL)
            reply_to: Reply-to address

        Returns:
            True if email was sent successfully
        """
        if isinstance(to, str):
            to = [to]

        from_email = from_email or settings.DEFAULT_FROM_EMAIL
        masked = [mask_email(address) for address in to]

        email = EmailMultiAlternatives(
            subject=subject,
            body=body_text,
            from_email=from_email,
            to=to,
            reply_to=[reply_to] if reply_to else None,
        )

        if body_html:
            email.attach_alternative(body_html, "text/html")

        try:
            email.send(fail_silently=False)
        except Exception:
            logger.exception(
                "Failed to send email",
                extra={"recipients": masked, "subject": subject},
            )
            return False

        logger.info(
            "Email sent",
            extra={"recipients": masked, "subject": subject},
        )
        return True
