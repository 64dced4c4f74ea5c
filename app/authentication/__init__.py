"""
Authentication application.

This app provides email-based users and the time-bound secrets that prove
control of an email address or authorize a password reset.

Key components:
    - User model: Custom email-based user
    - TimeBoundSecret model: Hashed OTPs and reset tokens
    - SecretStore / SecretIssuer / SecretVerifier: Secret lifecycle
    - AuthService: OTP verification, resend, password reset flows

Usage:
    from authentication.models import SecretPurpose, User
    from authentication.services import AuthService
"""
