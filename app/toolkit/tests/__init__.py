"""
Tests for toolkit app.

This package contains test modules for:
- test_helpers.py: mask_email
- test_email.py: EmailService

Usage:
    pytest toolkit/tests/
"""
