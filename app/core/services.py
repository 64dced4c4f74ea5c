"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ErrorKind: Closed set of machine-readable failure kinds
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from views and models.
    Views handle HTTP concerns, models handle data, services handle logic.

Pattern Comparison:
    - ServiceResult: Use for expected failures (expired secrets, bad signatures,
      state conflicts, gateway outages)
    - Exceptions: Use for unexpected failures (database errors, bugs)

Usage:
    from core.services import BaseService, ErrorKind, ServiceResult

    class OrderService(BaseService):
        @classmethod
        def cancel(cls, order_id) -> ServiceResult[Order]:
            order = Order.objects.filter(pk=order_id).first()
            if order is None:
                return ServiceResult.failure(
                    "Order not found", error_code=ErrorKind.NOT_FOUND
                )
            ...
            return ServiceResult.success(order)

    # In view
    result = OrderService.cancel(order_id)
    return result_response(result)  # see core.responses

Related:
    - core.responses: Maps ErrorKind to HTTP status codes
    - core.exceptions: For unexpected/exceptional errors
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

# Generic type for ServiceResult data
T = TypeVar("T")


class ErrorKind(str, Enum):
    """
    Every failure a core operation can report.

    Values are plain strings so they serialize directly into API
    responses and compare equal to their string form.
    """

    NOT_FOUND = "NOT_FOUND"
    EXPIRED = "EXPIRED"
    INVALID = "INVALID"
    CONFLICT = "CONFLICT"
    ISSUANCE_FAILED = "ISSUANCE_FAILED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    GATEWAY_TIMEOUT = "GATEWAY_TIMEOUT"
    GATEWAY_ERROR = "GATEWAY_ERROR"
    SIGNATURE_MISMATCH = "SIGNATURE_MISMATCH"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    def __str__(self) -> str:
        return self.value


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Provides consistent success/failure handling without exceptions.
    Use this for expected failures (validation errors, business rule violations).

    Attributes:
        success: Whether the operation succeeded
        data: Result data (set on success, optionally on failure for context)
        error: Error message if failed (None if successful)
        error_code: ErrorKind describing the failure
        errors: Field-level errors for validation failures
        details: Structured failure context (reason, status_code, ...)

    Usage:
        # Success case
        return ServiceResult.success(order)

        # Failure case
        return ServiceResult.failure("Order already paid", ErrorKind.CONFLICT)

        # Failure with structured context
        return ServiceResult.failure(
            "Amount too small",
            error_code=ErrorKind.VALIDATION_ERROR,
            details={"reason": "AMOUNT_TOO_SMALL"},
        )

        # Check result
        result = OrderSettlement.mark_failed(order_id, error_info)
        if result.success:
            order = result.data
        else:
            print(f"Error: {result.error} ({result.error_code})")

    Note:
        This pattern is inspired by Result types in Rust/Swift.
        It makes error handling explicit without try/except blocks.
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: ErrorKind | None = None
    errors: dict[str, list[str]] | None = field(default=None)
    details: dict[str, Any] | None = field(default=None)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: ErrorKind | None = None,
        errors: dict[str, list[str]] | None = None,
        details: dict[str, Any] | None = None,
        data: T | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: ErrorKind for client handling
            errors: Field-level errors (for validation failures)
            details: Structured context such as a validation reason
            data: Optional payload that is still meaningful on failure

        Returns:
            ServiceResult with success=False and error details

        Example:
            return ServiceResult.failure(
                "Gateway returned an error",
                error_code=ErrorKind.GATEWAY_ERROR,
                details={"status_code": 502},
            )
        """
        return cls(
            success=False,
            data=data,
            error=error,
            error_code=error_code,
            errors=errors,
            details=details,
        )

    @property
    def reason(self) -> str | None:
        """Validation reason, when the failure carries one."""
        if self.details:
            return self.details.get("reason")
        return None

    def to_response(self) -> dict[str, Any]:
        """
        Convert to API response format.

        Returns:
            Dict with success status and data or error details
        """
        if self.success:
            return {"success": True, "data": self.data}

        response: dict[str, Any] = {
            "success": False,
            "error": self.error,
        }
        if self.error_code:
            response["error_code"] = str(self.error_code)
        if self.errors:
            response["errors"] = self.errors
        if self.details:
            response["details"] = self.details
        return response

    def map(self, func) -> ServiceResult:
        """
        Transform the data if successful.

        Applies a function to the data if the result is successful.
        Returns unchanged if failed.

        Example:
            result = OrderSettlement.mark_paid(...)
            serialized = result.map(lambda o: OrderSerializer(o).data)
        """
        if self.success and self.data is not None:
            return ServiceResult.success(func(self.data))
        return self  # type: ignore

    def __bool__(self) -> bool:
        """
        Allow using result in boolean context.

        Example:
            if SecretVerifier.verify(user.id, purpose, otp):
                ...
        """
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management

    Design Notes:
        - Use @staticmethod or @classmethod (no instance state)
        - Services should be stateless
        - Use ServiceResult for expected failures
        - Raise exceptions for unexpected failures
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        All database operations within this context manager are
        wrapped in a transaction. If any operation fails, all
        changes are rolled back.

        Example:
            with cls.atomic():
                SecretStore.delete_if_present(user.id, purpose)
                TimeBoundSecret.objects.create(...)
        """
        with transaction.atomic():
            yield
