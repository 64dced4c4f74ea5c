"""
Helper functions for domain-specific operations.

This module provides PII masking used wherever user data reaches logs.

Usage:
    from toolkit.helpers import mask_email

    masked = mask_email("user@example.com")  # u***@example.com

Note:
    - For generic infrastructure helpers (token generation), see core.helpers
"""

from __future__ import annotations


def mask_email(email: str) -> str:
    """
    Mask email for display.

    Keeps first character and the domain visible.

    Args:
        email: Email address to mask

    Returns:
        Masked email (e.g., "j***@example.com")

    Example:
        masked = mask_email("john.doe@example.com")  # "j***@example.com"
    """
    if not email or "@" not in email:
        return "***"

    local, domain = email.rsplit("@", 1)

    if len(local) > 1:
        masked_local = local[0] + "***"
    else:
        masked_local = "***"

    return f"{masked_local}@{domain}"
