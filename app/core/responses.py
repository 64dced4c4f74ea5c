"""
HTTP boundary for service results.

Services return ServiceResult values tagged with an ErrorKind. This module
is the single place where those kinds become HTTP status codes, so views
stay free of status tables.

Usage:
    from core.responses import result_response, status_for

    result = CheckoutService.verify_payment(...)
    return result_response(result, success_body={"success": True, ...})
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import status
from rest_framework.response import Response

from core.services import ErrorKind

if TYPE_CHECKING:
    from typing import Any

    from core.services import ServiceResult


ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.EXPIRED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.ISSUANCE_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorKind.GATEWAY_TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    ErrorKind.GATEWAY_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.SIGNATURE_MISMATCH: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFIGURATION_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(result: ServiceResult) -> int:
    """
    Return the HTTP status code for a service result.

    Gateway errors that the gateway itself rejected as a bad request are
    surfaced as 400 so the client can correct its input.
    """
    if result.success:
        return status.HTTP_200_OK

    if (
        result.error_code == ErrorKind.GATEWAY_ERROR
        and result.details
        and result.details.get("status_code") == status.HTTP_400_BAD_REQUEST
    ):
        return status.HTTP_400_BAD_REQUEST

    return ERROR_STATUS.get(result.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)


def result_response(
    result: ServiceResult,
    success_body: dict[str, Any] | None = None,
    success_status: int = status.HTTP_200_OK,
) -> Response:
    """
    Render a ServiceResult as a DRF Response.

    Args:
        result: The service outcome
        success_body: Body to send on success (defaults to result.to_response())
        success_status: Status code to use on success

    Returns:
        Response with the mapped status code
    """
    if result.success:
        body = success_body if success_body is not None else result.to_response()
        return Response(body, status=success_status)

    return Response(result.to_response(), status=status_for(result))
