"""
Payment submission handler.

PaymentService is what the API calls when a patient pays for a booking or
staff refund one. It resolves the ledger accounts for the booking, checks
the submitted amount against the amount fixed on the booking and hands
over to LedgerService. Domain errors come back as failed ServiceResults
carrying the error code, so callers can tell "already paid" from "try
again later".

Usage:
    from payments.services import PaymentService

    result = PaymentService.submit_payment(booking_id, amount=120)
    if result.success:
        application = result.data
        application.payment.hospital_share  # 84
    elif result.error_code == "PERSISTENCE_ERROR":
        ...  # nothing was recorded; safe to retry
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bookings.services import BookingService
from core.exceptions import BaseApplicationError, InvalidInputError, PersistenceError
from core.services import BaseService, ServiceResult
from payments.ledger.services import LedgerService

if TYPE_CHECKING:
    import uuid

    from payments.ledger.types import PaymentApplication, RefundApplication


class PaymentService(BaseService):
    """
    Service for submitting payments and refunds.

    Methods return ServiceResult. Failure codes include INVALID_INPUT,
    BOOKING_NOT_FOUND, DUPLICATE_PAYMENT, PAYMENT_NOT_FOUND,
    DUPLICATE_REFUND, INVALID_STATE_TRANSITION and PERSISTENCE_ERROR.
    """

    @classmethod
    def submit_payment(
        cls,
        booking_id: uuid.UUID,
        amount: int,
        created_by: str | None = None,
    ) -> ServiceResult[PaymentApplication]:
        """
        Apply a confirmed payment to a booking.

        Args:
            booking_id: UUID of the booking
            amount: Amount paid in minor units; must equal the booking total
            created_by: Identifier of the submitter, for the audit trail

        Returns:
            ServiceResult with the PaymentApplication on success
        """
        try:
            booking = BookingService.get_booking(booking_id)
            if amount != booking.total_amount:
                raise InvalidInputError(
                    "Payment amount does not match the booking total",
                    details={
                        "booking_id": str(booking_id),
                        "expected_amount": booking.total_amount,
                        "amount": amount,
                    },
                )
            hospital = LedgerService.get_hospital_account(
                booking.hospital_id, booking.currency
            )
            platform = LedgerService.get_platform_account(booking.currency)
            payer = LedgerService.get_payer_account(booking.currency)

            application = LedgerService.apply_payment(
                booking_id=booking.id,
                amount=amount,
                hospital_account_id=hospital.id,
                admin_account_id=platform.id,
                hospital_share=booking.hospital_share,
                service_charge_share=booking.service_charge_share,
                payer_account_id=payer.id,
                created_by=created_by,
            )
        except PersistenceError as e:
            return cls.handle_exception(e, "Payment submission failed", logging.ERROR)
        except BaseApplicationError as e:
            return cls.handle_exception(e, "Payment submission rejected")

        cls.get_logger().info(
            "Payment submitted",
            extra={
                "booking_id": str(booking_id),
                "payment_id": str(application.payment.id),
                "amount": amount,
            },
        )
        return ServiceResult.success(application)

    @classmethod
    def submit_refund(
        cls,
        booking_id: uuid.UUID,
        created_by: str | None = None,
    ) -> ServiceResult[RefundApplication]:
        """
        Refund a booking's payment in full.

        Args:
            booking_id: UUID of the booking
            created_by: Identifier of the staff member, for the audit trail

        Returns:
            ServiceResult with the RefundApplication on success
        """
        try:
            application = LedgerService.apply_refund(booking_id, created_by=created_by)
        except PersistenceError as e:
            return cls.handle_exception(e, "Refund failed", logging.ERROR)
        except BaseApplicationError as e:
            return cls.handle_exception(e, "Refund rejected")

        cls.get_logger().info(
            "Refund submitted",
            extra={
                "booking_id": str(booking_id),
                "payment_id": str(application.payment.id),
                "amount": application.payment.amount,
            },
        )
        return ServiceResult.success(application)
