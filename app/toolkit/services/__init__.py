"""
Service classes for toolkit app.

This package contains service classes for common operations:
- EmailService: Email delivery over Django's mail framework

Usage:
    from toolkit.services import EmailService
    from toolkit.services.email import EmailService  # Alternative import
"""

from toolkit.services.email import EmailService

__all__ = ["EmailService"]
