"""
Test configuration and fixtures for authentication tests.

This module provides:
- Users in common states
- Live, expired and reset-token secrets with known plaintext
- Known plaintexts come from factories.TEST_OTP and TEST_RESET_TOKEN

Usage:
    def test_example(user, live_otp):
        result = SecretVerifier.verify(user.id, SecretPurpose.EMAIL_VERIFICATION, TEST_OTP)
        assert result.success
"""

from datetime import timedelta

import pytest
from django.utils import timezone
from freezegun import freeze_time

from authentication.models import SecretPurpose
from authentication.tests.factories import (
    TEST_OTP,
    TEST_RESET_TOKEN,
    TimeBoundSecretFactory,
    UserFactory,
)


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """Create an unverified user, the usual subject of an OTP."""
    return UserFactory(email="buyer@example.com", name="Asha Rao")


@pytest.fixture
def verified_user(db):
    """Create a user whose email is already verified."""
    return UserFactory(email_verified=True)


# =============================================================================
# Secret Fixtures
# =============================================================================


@pytest.fixture
def live_otp(user):
    """A valid, unexpired email verification OTP whose plaintext is TEST_OTP."""
    return TimeBoundSecretFactory(
        user=user,
        purpose=SecretPurpose.EMAIL_VERIFICATION,
        plaintext=TEST_OTP,
    )


@pytest.fixture
def expired_otp(user):
    """An email verification OTP issued three minutes ago with a two minute TTL."""
    with freeze_time(timezone.now() - timedelta(minutes=3)):
        return TimeBoundSecretFactory(
            user=user,
            purpose=SecretPurpose.EMAIL_VERIFICATION,
            plaintext=TEST_OTP,
        )


@pytest.fixture
def live_reset_token(user):
    """A valid password reset token whose plaintext is TEST_RESET_TOKEN."""
    return TimeBoundSecretFactory(
        user=user,
        purpose=SecretPurpose.PASSWORD_RESET,
        plaintext=TEST_RESET_TOKEN,
    )
