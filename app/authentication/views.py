"""
Authentication views.

This module provides API views for the secret-based account flows:
- Email OTP verification (logs the user in with a JWT pair)
- OTP resend
- Forgot password (mails a reset link)
- Reset password (consumes the reset token)

All endpoints are anonymous; DRF's anon throttle bounds guessing.
Failures are rendered by core.responses.result_response, so status codes
follow the ErrorKind table there.

Related files:
    - serializers.py: Request/response serialization
    - services.py: AuthService
    - urls.py: URL routing
"""

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

from authentication.serializers import (
    ForgotPasswordSerializer,
    LoginResponseSerializer,
    MessageSerializer,
    ResendOtpSerializer,
    ResetPasswordSerializer,
    UserSerializer,
    VerifyOtpSerializer,
)
from authentication.services import AuthService
from core.responses import result_response

ERROR_RESPONSES = {
    400: OpenApiResponse(description="Invalid, expired or malformed input"),
    404: OpenApiResponse(description="Unknown user or no pending secret"),
    502: OpenApiResponse(description="Secret stored but mail delivery failed"),
}


class VerifyOtpView(APIView):
    """
    POST: Verify the email OTP for a user

    URL: /api/v1/auth/verify-otp/
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="Verify email OTP",
        description=(
            "Verify the one-time password mailed to the user. On success the "
            "email is marked verified and a JWT pair is returned. A code can "
            "be used once; an expired code is discarded."
        ),
        request=VerifyOtpSerializer,
        responses={200: LoginResponseSerializer, **ERROR_RESPONSES},
        tags=["Auth"],
    )
    def post(self, request):
        serializer = VerifyOtpSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.verify_email_otp(
            serializer.validated_data["user_id"],
            serializer.validated_data["otp"],
        )
        if not result:
            return result_response(result)

        return result_response(
            result,
            success_body={
                "message": "Email verified successfully",
                "user": UserSerializer(result.data["user"]).data,
                "tokens": result.data["tokens"],
            },
        )


class ResendOtpView(APIView):
    """
    POST: Issue a fresh OTP, replacing the previous one

    URL: /api/v1/auth/resend-otp/
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="Resend email OTP",
        description="Generate a new OTP and mail it. Any earlier OTP stops working.",
        request=ResendOtpSerializer,
        responses={201: MessageSerializer, **ERROR_RESPONSES},
        tags=["Auth"],
    )
    def post(self, request):
        serializer = ResendOtpSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.resend_otp(serializer.validated_data["user_id"])
        return result_response(
            result,
            success_body={"message": "OTP sent"},
            success_status=status.HTTP_201_CREATED,
        )


class ForgotPasswordView(APIView):
    """
    POST: Mail a password reset link

    URL: /api/v1/auth/forgot-password/
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="Request password reset",
        description="Mail a single-use reset link to the account with this email.",
        request=ForgotPasswordSerializer,
        responses={200: MessageSerializer, **ERROR_RESPONSES},
        tags=["Auth"],
    )
    def post(self, request):
        serializer = ForgotPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.request_password_reset(serializer.validated_data["email"])
        return result_response(
            result,
            success_body={"message": "Password reset link sent"},
        )


class ResetPasswordView(APIView):
    """
    POST: Consume a reset token and set a new password

    URL: /api/v1/auth/reset-password/
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="Reset password",
        description="Verify the reset token from the emailed link and set a new password.",
        request=ResetPasswordSerializer,
        responses={200: MessageSerializer, **ERROR_RESPONSES},
        tags=["Auth"],
    )
    def post(self, request):
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.reset_password(
            serializer.validated_data["user_id"],
            serializer.validated_data["token"],
            serializer.validated_data["password"],
        )
        return result_response(
            result,
            success_body={"message": "Password updated successfully"},
        )
