"""
Authentication services.

This module provides the AuthService class for the account flows built on
time-bound secrets: email OTP verification and password reset.

Related files:
    - issuer.py: SecretIssuer (generate, store, deliver)
    - verifier.py: SecretVerifier (check, consume once)
    - views.py: HTTP endpoints

Security:
    - OTPs and reset tokens are stored hashed; see authentication.store
    - A successful OTP verification logs the user in with a JWT pair
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rest_framework_simplejwt.tokens import RefreshToken

from authentication.issuer import SecretIssuer
from authentication.models import SecretPurpose, User
from authentication.verifier import SecretVerifier
from core.services import ErrorKind, ServiceResult
from toolkit.helpers import mask_email

if TYPE_CHECKING:
    from authentication.issuer import IssuedSecret

logger = logging.getLogger(__name__)


def _user_not_found() -> ServiceResult:
    return ServiceResult.failure("User not found", error_code=ErrorKind.NOT_FOUND)


class AuthService:
    """
    Centralized authentication business logic.

    Usage:
        from authentication.services import AuthService

        result = AuthService.verify_email_otp(user_id, "123456")
        if result:
            tokens = result.data["tokens"]
    """

    @staticmethod
    def tokens_for(user: User) -> dict[str, str]:
        """Issue a JWT refresh/access pair for a user."""
        refresh = RefreshToken.for_user(user)
        return {"refresh": str(refresh), "access": str(refresh.access_token)}

    @staticmethod
    def send_verification_otp(user: User) -> ServiceResult[IssuedSecret]:
        """Issue (or reissue) the email verification OTP for a user."""
        return SecretIssuer.issue(user, SecretPurpose.EMAIL_VERIFICATION)

    @staticmethod
    def resend_otp(user_id) -> ServiceResult[IssuedSecret]:
        """
        Reissue the email verification OTP.

        The new OTP supersedes any previous one, so an older code stops
        working immediately.

        Returns:
            ServiceResult[IssuedSecret]; NOT_FOUND for an unknown user
        """
        user = User.objects.filter(pk=user_id).first()
        if user is None:
            return _user_not_found()

        return AuthService.send_verification_otp(user)

    @staticmethod
    def verify_email_otp(user_id, otp: str) -> ServiceResult[dict]:
        """
        Verify an email OTP and log the user in.

        Args:
            user_id: Primary key of the user the OTP was issued to
            otp: Code the user typed

        Returns:
            ServiceResult with {"user": User, "tokens": {...}} on success.
            Failures carry NOT_FOUND, EXPIRED or INVALID from SecretVerifier.
        """
        user = User.objects.filter(pk=user_id).first()
        if user is None:
            return _user_not_found()

        verified = SecretVerifier.verify(user.pk, SecretPurpose.EMAIL_VERIFICATION, otp)
        if not verified:
            return verified

        if not user.email_verified:
            user.email_verified = True
            user.save(update_fields=["email_verified", "updated_at"])

        logger.info(
            "Email verified",
            extra={"user_id": user.pk, "email": mask_email(user.email)},
        )
        return ServiceResult.success({"user": user, "tokens": AuthService.tokens_for(user)})

    @staticmethod
    def request_password_reset(email: str) -> ServiceResult[IssuedSecret]:
        """
        Issue a password reset token and mail the reset link.

        Returns:
            ServiceResult[IssuedSecret]; NOT_FOUND when no user has this email
        """
        user = User.objects.get_by_email(email)
        if user is None:
            logger.info(
                "Password reset requested for unknown email",
                extra={"email": mask_email(email)},
            )
            return ServiceResult.failure(
                "Provided email does not exist", error_code=ErrorKind.NOT_FOUND
            )

        return SecretIssuer.issue(user, SecretPurpose.PASSWORD_RESET)

    @staticmethod
    def reset_password(user_id, token: str, new_password: str) -> ServiceResult[User]:
        """
        Consume a reset token and set a new password.

        The token is consumed before the password changes, so a token can
        change the password at most once.

        Returns:
            ServiceResult[User]; NOT_FOUND, EXPIRED or INVALID on failure
        """
        user = User.objects.filter(pk=user_id).first()
        if user is None:
            return _user_not_found()

        verified = SecretVerifier.verify(user.pk, SecretPurpose.PASSWORD_RESET, token)
        if not verified:
            return verified

        user.set_password(new_password)
        user.save(update_fields=["password", "updated_at"])

        logger.info(
            "Password reset",
            extra={"user_id": user.pk, "email": mask_email(user.email)},
        )
        return ServiceResult.success(user)
