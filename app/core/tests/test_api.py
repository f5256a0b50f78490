"""
Tests for mapping domain failures to HTTP responses.
"""

import pytest
from rest_framework import status

from core.api import error_response
from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
    PersistenceError,
)
from core.services import ServiceResult


class TestErrorResponseFromException:
    """Exceptions map to a status by family."""

    @pytest.mark.parametrize(
        "exc, expected",
        [
            (InvalidInputError("bad duration"), status.HTTP_400_BAD_REQUEST),
            (NotFoundError("missing"), status.HTTP_404_NOT_FOUND),
            (ConflictError("already paid"), status.HTTP_409_CONFLICT),
            (PersistenceError("db down"), status.HTTP_503_SERVICE_UNAVAILABLE),
            (BaseApplicationError("other"), status.HTTP_400_BAD_REQUEST),
        ],
    )
    def test_status_by_family(self, exc, expected):
        response = error_response(exc)

        assert response.status_code == expected
        assert response.data["error_code"] == exc.error_code

    def test_explicit_status_wins(self):
        response = error_response(NotFoundError("missing"), status.HTTP_403_FORBIDDEN)

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestErrorResponseFromResult:
    """Failed ServiceResults map to a status by error code."""

    @pytest.mark.parametrize(
        "code, expected",
        [
            ("PRICING_NOT_FOUND", status.HTTP_404_NOT_FOUND),
            ("DUPLICATE_PAYMENT", status.HTTP_409_CONFLICT),
            ("DUPLICATE_REFUND", status.HTTP_409_CONFLICT),
            ("INVALID_STATE_TRANSITION", status.HTTP_409_CONFLICT),
            ("PERSISTENCE_ERROR", status.HTTP_503_SERVICE_UNAVAILABLE),
            ("INVALID_INPUT", status.HTTP_400_BAD_REQUEST),
        ],
    )
    def test_status_by_code(self, code, expected):
        result = ServiceResult.failure("failed", error_code=code)

        response = error_response(result)

        assert response.status_code == expected
        assert response.data["success"] is False
        assert response.data["error_code"] == code
