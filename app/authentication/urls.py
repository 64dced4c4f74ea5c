"""
URL configuration for authentication app.

URL structure:
    /api/v1/auth/verify-otp/        - Verify email OTP, returns JWT pair
    /api/v1/auth/resend-otp/        - Reissue email OTP
    /api/v1/auth/forgot-password/   - Mail a password reset link
    /api/v1/auth/reset-password/    - Consume reset token, set password
"""

from django.urls import path

from authentication.views import (
    ForgotPasswordView,
    ResendOtpView,
    ResetPasswordView,
    VerifyOtpView,
)

app_name = "authentication"

urlpatterns = [
    path("verify-otp/", VerifyOtpView.as_view(), name="verify-otp"),
    path("resend-otp/", ResendOtpView.as_view(), name="resend-otp"),
    path("forgot-password/", ForgotPasswordView.as_view(), name="forgot-password"),
    path("reset-password/", ResetPasswordView.as_view(), name="reset-password"),
]
