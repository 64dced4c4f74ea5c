"""
Serializers for the authentication endpoints.

This module provides DRF serializers for:
- User model (read operations)
- OTP verification and resend requests
- Password reset requests

Field names follow the storefront client (camelCase ids), mapped onto
snake_case attributes with ``source``.

Related files:
    - views.py: Views that use these serializers
    - services.py: AuthService business logic

Security:
    - Password fields are write-only
    - New passwords go through Django's AUTH_PASSWORD_VALIDATORS
"""

from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from authentication.models import User


class UserSerializer(serializers.ModelSerializer):
    """Read-only representation of a user returned after login."""

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "name",
            "email_verified",
            "date_joined",
        ]
        read_only_fields = fields


class VerifyOtpSerializer(serializers.Serializer):
    userId = serializers.IntegerField(source="user_id")
    otp = serializers.CharField(max_length=12, trim_whitespace=True)


class ResendOtpSerializer(serializers.Serializer):
    user = serializers.IntegerField(source="user_id")


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()


class ResetPasswordSerializer(serializers.Serializer):
    """Reset token plus the new password, validated against password rules."""

    userId = serializers.IntegerField(source="user_id")
    token = serializers.CharField(max_length=128)
    password = serializers.CharField(write_only=True, style={"input_type": "password"})

    def validate_password(self, value):
        validate_password(value)
        return value


class TokenPairSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class LoginResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user = UserSerializer()
    tokens = TokenPairSerializer()


class MessageSerializer(serializers.Serializer):
    message = serializers.CharField()
