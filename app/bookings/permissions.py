"""
Permission classes for booking endpoints.

- IsBookingPatientOrStaff: The booking's patient, or any staff user

Staff users stand in for hospital authorities and platform admins; the
external auth service sets is_staff on their accounts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView

    from bookings.models import Booking


class IsBookingPatientOrStaff(permissions.BasePermission):
    """
    Allows access to the patient who made the booking and to staff.

    Views call check_object_permissions() after loading the booking.
    """

    message = "You do not have access to this booking."

    def has_object_permission(
        self, request: Request, view: APIView, obj: Booking
    ) -> bool:
        return bool(request.user.is_staff or obj.patient_id == request.user.pk)
