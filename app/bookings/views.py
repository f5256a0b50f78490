"""
API views for bookings.

Endpoints:
    POST /api/v1/bookings/quote/ - Amounts for a prospective booking
    GET  /api/v1/bookings/ - Current user's bookings
    POST /api/v1/bookings/ - Create a booking
    GET  /api/v1/bookings/{id}/ - Booking detail
    POST /api/v1/bookings/{id}/approve|decline|complete/ - Staff workflow
    POST /api/v1/bookings/{id}/cancel/ - Patient or staff

Payment endpoints under /bookings/{id}/ live in payments.views.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from bookings.exceptions import BookingNotFoundError
from bookings.permissions import IsBookingPatientOrStaff
from bookings.serializers import (
    BookingQuoteSerializer,
    BookingSerializer,
    CreateBookingSerializer,
    QuoteRequestSerializer,
)
from bookings.services import BookingService
from core.api import error_response


class BookingQuoteView(APIView):
    """
    Quote the amounts for a prospective booking.

    POST /api/v1/bookings/quote/

    Request body:
        {"hospital_id": "...", "resource_type": "icu", "duration_hours": 2}

    Response:
        200 OK: {"total_amount": 1200, "hospital_share": 840,
                 "service_charge_share": 360, "currency": "bdt",
                 "pricing_id": "..."}
        400 Bad Request: Invalid duration or resource type
        404 Not Found: Hospital has no pricing for the resource
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="quote_booking",
        summary="Quote booking amounts",
        request=QuoteRequestSerializer,
        responses={
            200: BookingQuoteSerializer,
            400: OpenApiResponse(description="Invalid input"),
            404: OpenApiResponse(description="No pricing for this resource"),
        },
        tags=["Bookings"],
    )
    def post(self, request):
        serializer = QuoteRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = BookingService.quote(**serializer.validated_data)
        if not result.success:
            return error_response(result)

        return Response(BookingQuoteSerializer(result.data).data)


class BookingListCreateView(APIView):
    """
    List the current user's bookings or create a new one.

    GET  /api/v1/bookings/
    POST /api/v1/bookings/

    Response (POST):
        201 Created: The booking with amounts fixed at the current price
        400 Bad Request: Invalid input
        404 Not Found: Hospital has no pricing for the resource
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_bookings",
        summary="List my bookings",
        responses={200: BookingSerializer(many=True)},
        tags=["Bookings"],
    )
    def get(self, request):
        bookings = request.user.bookings.all()
        return Response(BookingSerializer(bookings, many=True).data)

    @extend_schema(
        operation_id="create_booking",
        summary="Create booking",
        request=CreateBookingSerializer,
        responses={
            201: BookingSerializer,
            400: OpenApiResponse(description="Invalid input"),
            404: OpenApiResponse(description="No pricing for this resource"),
        },
        tags=["Bookings"],
    )
    def post(self, request):
        serializer = CreateBookingSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = BookingService.create_booking(
            patient=request.user, **serializer.validated_data
        )
        if not result.success:
            return error_response(result)

        return Response(
            BookingSerializer(result.data).data,
            status=status.HTTP_201_CREATED,
        )


class BookingDetailView(APIView):
    """
    Booking detail.

    GET /api/v1/bookings/{booking_id}/

    Response:
        200 OK: Booking
        403 Forbidden: Not the patient and not staff
        404 Not Found: Unknown booking
    """

    permission_classes = [IsAuthenticated, IsBookingPatientOrStaff]

    @extend_schema(
        operation_id="get_booking",
        summary="Get booking",
        responses={
            200: BookingSerializer,
            403: OpenApiResponse(description="Access denied"),
            404: OpenApiResponse(description="Booking not found"),
        },
        tags=["Bookings"],
    )
    def get(self, request, booking_id):
        try:
            booking = BookingService.get_booking(booking_id)
        except BookingNotFoundError as e:
            return error_response(e)
        self.check_object_permissions(request, booking)
        return Response(BookingSerializer(booking).data)


class BookingWorkflowView(APIView):
    """
    Move a booking through its approval workflow.

    POST /api/v1/bookings/{booking_id}/{action}/

    approve, decline and complete are staff actions; cancel is also open to
    the booking's patient.

    Response:
        200 OK: Updated booking
        403 Forbidden: Not allowed to perform the action
        404 Not Found: Unknown booking
        409 Conflict: Action not allowed from the current status
    """

    permission_classes = [IsAuthenticated, IsBookingPatientOrStaff]
    workflow_action = None
    patient_actions = ("cancel",)

    @extend_schema(
        summary="Change booking status",
        request=None,
        responses={
            200: BookingSerializer,
            403: OpenApiResponse(description="Access denied"),
            404: OpenApiResponse(description="Booking not found"),
            409: OpenApiResponse(description="Transition not allowed"),
        },
        tags=["Bookings - Workflow"],
    )
    def post(self, request, booking_id):
        try:
            booking = BookingService.get_booking(booking_id)
        except BookingNotFoundError as e:
            return error_response(e)
        self.check_object_permissions(request, booking)
        staff_only = self.workflow_action not in self.patient_actions
        if staff_only and not request.user.is_staff:
            self.permission_denied(request, message="Staff only.")

        result = getattr(BookingService, self.workflow_action)(booking_id)
        if not result.success:
            return error_response(result)
        return Response(BookingSerializer(result.data).data)
