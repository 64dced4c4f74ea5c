"""
Base exception classes for unexpected and adapter-internal failures.

Public service operations report expected failures through
core.services.ServiceResult. Exceptions remain for two cases:
- Truly unexpected failures (bugs, database outages) that should propagate
- Signalling between the internal steps of an adapter, which converts them
  back into a ServiceResult before returning

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ConfigurationError - Missing or malformed settings
    └── ExternalServiceError - Third-party service failures
        └── GatewayTimeoutError - Third-party call exceeded its deadline

Usage:
    from core.exceptions import ExternalServiceError

    raise ExternalServiceError(
        "Gateway unavailable",
        error_code="GATEWAY_ERROR",
        details={"status_code": 503},
        retryable=True,
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code, matching core.services.ErrorKind values
        details: Additional error context (status codes, reasons, metadata)
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for logging or API response.

        Example:
            {
                "error": "Gateway timed out",
                "error_code": "GATEWAY_TIMEOUT",
                "details": {"timeout_seconds": 30}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ConfigurationError(BaseApplicationError):
    """
    Raised when required settings are missing or malformed.

    Example:
        if not key_id.startswith("rzp_"):
            raise ConfigurationError(
                "Gateway key id is malformed",
                details={"setting": "RAZORPAY_KEY_ID"},
            )
    """

    default_error_code: str = "CONFIGURATION_ERROR"


class ExternalServiceError(BaseApplicationError):
    """
    Raised when an external service call fails.

    Use for:
    - Payment gateway API failures
    - Network errors reaching a third party
    - Unexpected external service responses

    Attributes:
        retryable: Whether repeating the call could succeed. Network
            failures and 5xx responses are retryable; 4xx responses are not.

    Note:
        Log the original error for debugging but don't expose
        internal details to clients in production.
    """

    default_error_code: str = "GATEWAY_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ):
        super().__init__(message, error_code=error_code, details=details)
        self.retryable = retryable

    @property
    def status_code(self) -> int | None:
        return self.details.get("status_code")


class GatewayTimeoutError(ExternalServiceError):
    """Raised when an external call does not complete within its timeout."""

    default_error_code: str = "GATEWAY_TIMEOUT"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool = True,
    ):
        super().__init__(
            message, error_code=error_code, details=details, retryable=retryable
        )
