"""
Factory Boy factories for authentication models.

Provides realistic test data generation for:
- User: Custom user model with email-based authentication
- TimeBoundSecret: Hashed OTPs and reset tokens

Usage:
    from authentication.tests.factories import TimeBoundSecretFactory, UserFactory

    user = UserFactory()
    secret = TimeBoundSecretFactory(user=user, plaintext="123456")

    # Expired secret: issue it in the past
    with freeze_time(timezone.now() - timedelta(minutes=3)):
        secret = TimeBoundSecretFactory(user=user)
"""

from datetime import timedelta

import factory
from django.contrib.auth.hashers import make_password
from django.utils import timezone

from authentication.models import SecretPurpose, TimeBoundSecret, User

TEST_OTP = "482913"
TEST_RESET_TOKEN = "ab" * 32


class UserFactory(factory.django.DjangoModelFactory):
    """
    Factory for User model.

    By default, users are unverified and active.

    Examples:
        user = UserFactory()
        user = UserFactory(email_verified=True)
    """

    class Meta:
        model = User
        skip_postgeneration_save = True

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    name = factory.Sequence(lambda n: f"Buyer {n}")
    email_verified = False
    is_active = True
    is_staff = False

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Override create to use UserManager.create_user()."""
        password = kwargs.pop("password", "TestPass123!")
        return model_class.objects.create_user(
            email=kwargs.pop("email"), password=password, **kwargs
        )


class TimeBoundSecretFactory(factory.django.DjangoModelFactory):
    """
    Factory for TimeBoundSecret.

    Pass ``plaintext`` to choose the secret value; only its hash is stored.
    Defaults to a live email-verification OTP.
    """

    class Meta:
        model = TimeBoundSecret

    class Params:
        plaintext = "123456"

    user = factory.SubFactory(UserFactory)
    purpose = SecretPurpose.EMAIL_VERIFICATION
    hashed_value = factory.LazyAttribute(lambda o: make_password(o.plaintext))
    issued_at = factory.LazyFunction(timezone.now)
    expires_at = factory.LazyFunction(lambda: timezone.now() + timedelta(minutes=2))
