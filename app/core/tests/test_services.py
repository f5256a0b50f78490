"""
Tests for ServiceResult and BaseService.
"""

import logging

import pytest

from core.exceptions import ConflictError, NotFoundError
from core.services import BaseService, ServiceResult


class TestServiceResult:
    """Tests for the success/failure wrapper."""

    def test_success_carries_data(self):
        """A successful result is truthy and exposes its data."""
        result = ServiceResult.success({"total_amount": 120})

        assert result.success is True
        assert bool(result) is True
        assert result.data == {"total_amount": 120}
        assert result.to_response() == {"success": True, "data": {"total_amount": 120}}

    def test_failure_carries_error_code(self):
        """A failed result is falsy and renders its error code."""
        result = ServiceResult.failure("Booking already paid", "DUPLICATE_PAYMENT")

        assert not result
        assert result.to_response() == {
            "success": False,
            "error": "Booking already paid",
            "error_code": "DUPLICATE_PAYMENT",
        }

    def test_from_error_copies_details(self):
        """from_error keeps the exception's message, code and details."""
        exc = NotFoundError(
            "Booking missing",
            error_code="BOOKING_NOT_FOUND",
            details={"booking_id": "abc"},
        )

        result = ServiceResult.from_error(exc)

        assert result.error == "Booking missing"
        assert result.error_code == "BOOKING_NOT_FOUND"
        assert result.details == {"booking_id": "abc"}


class TestBaseService:
    """Tests for BaseService helpers."""

    def test_logger_named_after_service(self):
        """Each service logs under module.ClassName."""

        class ExampleService(BaseService):
            pass

        assert ExampleService.get_logger().name.endswith("ExampleService")

    def test_handle_exception_logs_and_converts(self, caplog):
        """handle_exception logs with the error code and returns a failure."""
        exc = ConflictError("Already refunded", error_code="DUPLICATE_REFUND")

        with caplog.at_level(logging.WARNING):
            result = BaseService.handle_exception(exc, "Refund failed")

        assert result.error_code == "DUPLICATE_REFUND"
        record = caplog.records[-1]
        assert "Refund failed" in record.getMessage()
        assert record.error_code == "DUPLICATE_REFUND"

    @pytest.mark.django_db
    def test_atomic_rolls_back_on_error(self):
        """Writes inside BaseService.atomic() roll back when it raises."""
        from django.contrib.auth import get_user_model

        User = get_user_model()

        with pytest.raises(RuntimeError):
            with BaseService.atomic():
                User.objects.create_user(username="rolled-back")
                raise RuntimeError("boom")

        assert not User.objects.filter(username="rolled-back").exists()
