"""
Toolkit - Domain-Specific Utilities & Services.

This app provides domain-aware utilities and services:
- EmailService: Email delivery used by secret issuance
- Helper functions: PII masking for logs

Key components:
    - services/email.py: EmailService class
    - helpers.py: Domain-aware utility functions (mask_email)

Usage:
    from toolkit.services.email import EmailService
    from toolkit.helpers import mask_email

Note:
    - This app has no models.
    - For generic infrastructure (tokens, numeric codes), see core/
"""
