"""
Authentication models.

This module defines the authentication models:
- User: Custom user model with email-based authentication (slim, auth-focused)
- TimeBoundSecret: Hashed, short-lived secrets (email OTPs, password reset tokens)

Related files:
    - managers.py: Custom user manager for email-based creation
    - store.py: SecretStore, the only writer of TimeBoundSecret rows
    - issuer.py / verifier.py: Secret lifecycle

Security:
    - User passwords hashed with Django's PBKDF2
    - Secrets are stored only as salted hashes; plaintext never touches the DB
    - At most one secret exists per (user, purpose), enforced by a constraint
"""

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models
from django.utils import timezone

from authentication.managers import UserManager
from core.models import BaseModel


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    Fields:
        email: Primary identifier, unique, used for login
        email_verified: Set once the user proves control of the address with an OTP
        is_active: Whether the user account is active
        is_staff: Whether the user can access Django admin
        date_joined: When the user account was created
        updated_at: When the user record was last modified

    Usage:
        user = User.objects.create_user(
            email='user@example.com',
            password='securepassword'
        )
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )
    name = models.CharField(
        max_length=150,
        blank=True,
        default="",
        help_text="Display name used in outgoing mail",
    )

    email_verified = models.BooleanField(
        default=False,
        help_text="Whether the user's email has been verified",
    )

    # Account status flags
    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    # Timestamps
    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    def get_full_name(self):
        return self.name or self.email

    def get_short_name(self):
        return self.name.split(" ")[0] if self.name else self.email.split("@")[0]


class SecretPurpose(models.TextChoices):
    """What a time-bound secret proves."""

    EMAIL_VERIFICATION = "email_verification", "Email Verification"
    PASSWORD_RESET = "password_reset", "Password Reset"


class TimeBoundSecret(BaseModel):
    """
    A hashed one-time secret bound to a user and a purpose.

    Fields:
        user: Subject the secret was issued to
        purpose: EMAIL_VERIFICATION (numeric OTP) or PASSWORD_RESET (hex token)
        hashed_value: Output of make_password(); never the plaintext
        issued_at: When the secret was generated
        expires_at: After this instant verification reports EXPIRED

    Lifecycle:
        A row is deleted when it is verified, when a verify attempt finds
        it expired, or when a reissue for the same (user, purpose) replaces
        it. There is no background sweep.

    Note:
        All writes go through authentication.store.SecretStore.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="time_bound_secrets",
        help_text="User this secret was issued to",
    )
    purpose = models.CharField(
        max_length=32,
        choices=SecretPurpose.choices,
        help_text="What this secret proves",
    )
    hashed_value = models.CharField(
        max_length=128,
        help_text="Salted hash of the secret",
    )
    issued_at = models.DateTimeField(
        default=timezone.now,
        help_text="When this secret was generated",
    )
    expires_at = models.DateTimeField(
        help_text="When this secret stops being accepted",
    )

    class Meta:
        db_table = "authentication_time_bound_secret"
        verbose_name = "time-bound secret"
        verbose_name_plural = "time-bound secrets"
        constraints = [
            models.UniqueConstraint(
                fields=["user", "purpose"],
                name="unique_secret_per_user_purpose",
            ),
        ]

    def __str__(self):
        return f"{self.get_purpose_display()} for user {self.user_id}"

    def is_expired(self, now=None) -> bool:
        """True once the current time is strictly past expires_at."""
        now = now or timezone.now()
        return now > self.expires_at
