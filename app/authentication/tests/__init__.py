"""
Tests for authentication app.

This package contains test modules for:
- test_store.py: SecretStore atomic primitives
- test_issuer.py: SecretIssuer generation, storage and delivery
- test_verifier.py: SecretVerifier outcomes, single use, attempt policy
- test_services.py: AuthService flows (OTP, password reset)
- test_views.py: API endpoint tests
- test_admin.py: Admin smoke tests

Usage:
    pytest authentication/tests/
    pytest authentication/tests/test_verifier.py
"""
