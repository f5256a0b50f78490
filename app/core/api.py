"""
Helpers for rendering domain failures as DRF responses.

Views call services that either raise BaseApplicationError subclasses or
return failed ServiceResults. Both carry an error code; this module maps
the error family to an HTTP status so every endpoint answers the same way.

Usage:
    from core.api import error_response

    result = PaymentService.submit_payment(booking_id, amount)
    if not result.success:
        return error_response(result)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import status
from rest_framework.response import Response

from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from core.services import ServiceResult


# Error codes that are not tied to a single exception family.
STATUS_BY_ERROR_CODE: dict[str, int] = {
    "PERSISTENCE_ERROR": status.HTTP_503_SERVICE_UNAVAILABLE,
    "RECONCILIATION_FAILED": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for_error(exc: BaseApplicationError) -> int:
    """Return the HTTP status code for a domain exception."""
    if exc.error_code in STATUS_BY_ERROR_CODE:
        return STATUS_BY_ERROR_CODE[exc.error_code]
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ConflictError):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_400_BAD_REQUEST


def error_response(
    failure: BaseApplicationError | ServiceResult,
    status_code: int | None = None,
) -> Response:
    """
    Build an error Response from an exception or a failed ServiceResult.

    ServiceResults lose the exception type, so their status is chosen from
    the error code suffix (``*_NOT_FOUND`` → 404, ``DUPLICATE_*`` and
    ``INVALID_STATE_TRANSITION`` → 409) unless status_code is given.
    """
    if isinstance(failure, BaseApplicationError):
        return Response(
            failure.to_dict(),
            status=status_code or status_for_error(failure),
        )

    body = failure.to_response()
    if status_code is None:
        code = failure.error_code or ""
        if code in STATUS_BY_ERROR_CODE:
            status_code = STATUS_BY_ERROR_CODE[code]
        elif code.endswith("NOT_FOUND"):
            status_code = status.HTTP_404_NOT_FOUND
        elif code.startswith("DUPLICATE_") or code in {
            "INVALID_STATE_TRANSITION",
            "LOCK_ACQUISITION_FAILED",
            "RECONCILIATION_IN_PROGRESS",
        }:
            status_code = status.HTTP_409_CONFLICT
        else:
            status_code = status.HTTP_400_BAD_REQUEST
    return Response(body, status=status_code)
