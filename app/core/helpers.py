"""
Helper functions for common infrastructure operations.

This module provides domain-agnostic utility functions for:
- Token generation (cryptographic)
- Numeric one-time code generation
- Millisecond timestamps

These utilities are pure infrastructure - they have no knowledge
of domain concepts like users, orders, or payments.

Usage:
    from core.helpers import generate_numeric_code, generate_token

    token = generate_token(32)
    code = generate_numeric_code(6)

Note:
    - For domain-aware helpers (PII masking), see toolkit.helpers
"""

from __future__ import annotations

import secrets
import time


def generate_token(length: int = 32) -> str:
    """
    Generate a cryptographically secure random token.

    Uses secrets module for secure random generation.

    Args:
        length: Number of bytes (resulting string is 2x length in hex)

    Returns:
        Hexadecimal token string

    Example:
        token = generate_token(32)  # Returns 64-character hex string
    """
    return secrets.token_hex(length)


def generate_numeric_code(length: int = 6) -> str:
    """
    Generate a cryptographically secure numeric code.

    Each digit is drawn independently, so leading zeros are possible
    and the code always has exactly ``length`` characters.

    Args:
        length: Number of digits

    Returns:
        String of decimal digits

    Example:
        code = generate_numeric_code(6)  # e.g. "048213"
    """
    if length < 1:
        raise ValueError("length must be positive")
    return "".join(str(secrets.randbelow(10)) for _ in range(length))


def epoch_ms() -> int:
    """Current Unix time in milliseconds."""
    return int(time.time() * 1000)
