"""
API views for payments and the ledger.

Endpoints:
    POST /api/v1/bookings/{id}/pay/ - Apply a confirmed payment (patient or staff)
    POST /api/v1/bookings/{id}/refund/ - Refund a paid booking (staff)
    GET  /api/v1/payments/accounts/{id}/ - Ledger account (staff)
    GET  /api/v1/payments/accounts/{id}/transactions/ - Account history (staff)
    POST /api/v1/payments/accounts/{id}/reconcile/ - Reconcile one account (staff)
    POST /api/v1/payments/accounts/{id}/correct/ - Correct cached balance (staff)
    GET  /api/v1/payments/accounts/{id}/corrections/ - Correction history (staff)
    GET  /api/v1/payments/alerts/ - Open discrepancy alerts (staff)
    POST /api/v1/payments/alerts/{id}/resolve/ - Close an alert (staff)
    GET  /api/v1/payments/reconciliation/runs/ - Run history (staff)
    POST /api/v1/payments/reconciliation/runs/ - Run reconciliation now (staff)
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from bookings.exceptions import BookingNotFoundError
from bookings.permissions import IsBookingPatientOrStaff
from bookings.services import BookingService
from core.api import error_response
from core.exceptions import BaseApplicationError
from payments.ledger.services import LedgerService
from payments.models import DiscrepancyAlert, ReconciliationRun
from payments.serializers import (
    AccountReconciliationSerializer,
    BalanceCorrectionRequestSerializer,
    BalanceCorrectionSerializer,
    BookingPaymentSerializer,
    DiscrepancyAlertSerializer,
    LedgerAccountSerializer,
    LedgerTransactionSerializer,
    PaymentRequestSerializer,
    ReconciliationRunSerializer,
    ResolveAlertSerializer,
)
from payments.services import PaymentService, ReconciliationService

MAX_PAGE_SIZE = 500


class BookingPaymentView(APIView):
    """
    Apply a confirmed payment to a booking.

    POST /api/v1/bookings/{booking_id}/pay/

    Request body:
        {"amount": 120}

    Response:
        201 Created: BookingPayment with the hospital and platform shares
        400 Bad Request: Amount doesn't match the booking total
        403 Forbidden: Not the patient and not staff
        404 Not Found: Unknown booking
        409 Conflict: Already paid, or booking not payable
        503 Service Unavailable: Nothing recorded; safe to retry
    """

    permission_classes = [IsAuthenticated, IsBookingPatientOrStaff]

    @extend_schema(
        operation_id="pay_booking",
        summary="Pay booking",
        request=PaymentRequestSerializer,
        responses={
            201: BookingPaymentSerializer,
            400: OpenApiResponse(description="Invalid amount"),
            403: OpenApiResponse(description="Access denied"),
            404: OpenApiResponse(description="Booking not found"),
            409: OpenApiResponse(description="Already paid or not payable"),
            503: OpenApiResponse(description="Payment could not be stored"),
        },
        tags=["Payments"],
    )
    def post(self, request, booking_id):
        try:
            booking = BookingService.get_booking(booking_id)
        except BookingNotFoundError as e:
            return error_response(e)
        self.check_object_permissions(request, booking)

        serializer = PaymentRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = PaymentService.submit_payment(
            booking_id,
            amount=serializer.validated_data["amount"],
            created_by=str(request.user.pk),
        )
        if not result.success:
            return error_response(result)

        return Response(
            BookingPaymentSerializer(result.data.payment).data,
            status=status.HTTP_201_CREATED,
        )


class BookingRefundView(APIView):
    """
    Refund a paid booking in full.

    POST /api/v1/bookings/{booking_id}/refund/

    Response:
        200 OK: BookingPayment with refunded_at set
        404 Not Found: Unknown booking or booking was never paid
        409 Conflict: Already refunded
    """

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="refund_booking",
        summary="Refund booking",
        request=None,
        responses={
            200: BookingPaymentSerializer,
            404: OpenApiResponse(description="Booking or payment not found"),
            409: OpenApiResponse(description="Already refunded"),
        },
        tags=["Payments"],
    )
    def post(self, request, booking_id):
        result = PaymentService.submit_refund(
            booking_id, created_by=str(request.user.pk)
        )
        if not result.success:
            return error_response(result)
        return Response(BookingPaymentSerializer(result.data.payment).data)


class LedgerAccountDetailView(APIView):
    """
    Ledger account with its cached balance.

    GET /api/v1/payments/accounts/{account_id}/
    """

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="get_ledger_account",
        summary="Get ledger account",
        responses={
            200: LedgerAccountSerializer,
            404: OpenApiResponse(description="Account not found"),
        },
        tags=["Ledger"],
    )
    def get(self, request, account_id):
        try:
            account = LedgerService.get_account(account_id)
        except BaseApplicationError as e:
            return error_response(e)
        return Response(LedgerAccountSerializer(account).data)


class LedgerAccountTransactionsView(APIView):
    """
    Transactions debiting or crediting an account, newest first.

    GET /api/v1/payments/accounts/{account_id}/transactions/?limit=100&offset=0
    """

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="list_ledger_transactions",
        summary="List account transactions",
        parameters=[
            OpenApiParameter("limit", int, description="Page size (max 500)"),
            OpenApiParameter("offset", int, description="Rows to skip"),
        ],
        responses={
            200: LedgerTransactionSerializer(many=True),
            404: OpenApiResponse(description="Account not found"),
        },
        tags=["Ledger"],
    )
    def get(self, request, account_id):
        try:
            limit = min(int(request.query_params.get("limit", 100)), MAX_PAGE_SIZE)
            offset = int(request.query_params.get("offset", 0))
        except ValueError:
            return Response(
                {"detail": "limit and offset must be integers."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        if limit < 1 or offset < 0:
            return Response(
                {"detail": "limit must be positive and offset non-negative."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            LedgerService.get_account(account_id)
        except BaseApplicationError as e:
            return error_response(e)
        transactions = LedgerService.get_transactions_for_account(
            account_id, limit=limit, offset=offset
        )
        return Response(LedgerTransactionSerializer(transactions, many=True).data)


class AccountReconcileView(APIView):
    """
    Compare an account's cached balance with its transaction history.

    POST /api/v1/payments/accounts/{account_id}/reconcile/

    Never changes the balance.
    """

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="reconcile_ledger_account",
        summary="Reconcile account",
        request=None,
        responses={
            200: AccountReconciliationSerializer,
            404: OpenApiResponse(description="Account not found"),
        },
        tags=["Ledger"],
    )
    def post(self, request, account_id):
        try:
            report = ReconciliationService.reconcile(account_id)
        except BaseApplicationError as e:
            return error_response(e)
        return Response(AccountReconciliationSerializer(report).data)


class BalanceCorrectionView(APIView):
    """
    Reset an account's cached balance to the balance of its transactions.

    POST /api/v1/payments/accounts/{account_id}/correct/

    Request body:
        {"reason": "...", "evidence": "...", "alert_id": "..."}
    """

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="correct_ledger_balance",
        summary="Correct account balance",
        request=BalanceCorrectionRequestSerializer,
        responses={
            201: BalanceCorrectionSerializer,
            400: OpenApiResponse(
                description="Reason missing or alert is for another account"
            ),
            404: OpenApiResponse(description="Account or alert not found"),
            409: OpenApiResponse(description="Alert already resolved"),
        },
        tags=["Ledger"],
    )
    def post(self, request, account_id):
        serializer = BalanceCorrectionRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            correction = ReconciliationService.correct_balance(
                account_id,
                corrected_by=request.user,
                **serializer.validated_data,
            )
        except BaseApplicationError as e:
            return error_response(e)
        return Response(
            BalanceCorrectionSerializer(correction).data,
            status=status.HTTP_201_CREATED,
        )


class DiscrepancyAlertListView(APIView):
    """
    Unresolved discrepancy alerts, high severity first.

    GET /api/v1/payments/alerts/
    """

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="list_discrepancy_alerts",
        summary="List open alerts",
        responses={200: DiscrepancyAlertSerializer(many=True)},
        tags=["Ledger"],
    )
    def get(self, request):
        alerts = DiscrepancyAlert.objects.filter(resolved=False).order_by(
            "severity", "-created_at"
        )
        return Response(DiscrepancyAlertSerializer(alerts, many=True).data)


class ResolveAlertView(APIView):
    """
    Close a discrepancy alert after review.

    POST /api/v1/payments/alerts/{alert_id}/resolve/
    """

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="resolve_discrepancy_alert",
        summary="Resolve alert",
        request=ResolveAlertSerializer,
        responses={
            200: DiscrepancyAlertSerializer,
            404: OpenApiResponse(description="Alert not found"),
            409: OpenApiResponse(description="Alert already resolved"),
        },
        tags=["Ledger"],
    )
    def post(self, request, alert_id):
        serializer = ResolveAlertSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            alert = ReconciliationService.resolve_alert(
                alert_id,
                resolved_by=request.user,
                notes=serializer.validated_data["notes"],
            )
        except BaseApplicationError as e:
            return error_response(e)
        return Response(DiscrepancyAlertSerializer(alert).data)


class ReconciliationRunListView(APIView):
    """
    Reconciliation runs: history and on-demand trigger.

    GET  /api/v1/payments/reconciliation/runs/?limit=30
    POST /api/v1/payments/reconciliation/runs/

    POST runs the same full pass as the daily beat task and waits for it
    to finish.
    """

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="list_reconciliation_runs",
        summary="List reconciliation runs",
        parameters=[
            OpenApiParameter("limit", int, description="Runs to return (max 500)"),
        ],
        responses={200: ReconciliationRunSerializer(many=True)},
        tags=["Ledger"],
    )
    def get(self, request):
        try:
            limit = min(int(request.query_params.get("limit", 30)), MAX_PAGE_SIZE)
        except ValueError:
            return Response(
                {"detail": "limit must be an integer."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        if limit < 1:
            return Response(
                {"detail": "limit must be positive."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        runs = ReconciliationService.get_run_history(limit=limit)
        return Response(ReconciliationRunSerializer(runs, many=True).data)

    @extend_schema(
        operation_id="trigger_reconciliation_run",
        summary="Run reconciliation now",
        request=None,
        responses={
            201: ReconciliationRunSerializer,
            409: OpenApiResponse(description="Another run is in progress"),
            503: OpenApiResponse(description="Run failed part-way"),
        },
        tags=["Ledger"],
    )
    def post(self, request):
        try:
            result = ReconciliationService.run_reconciliation()
        except BaseApplicationError as e:
            return error_response(e)

        run = ReconciliationRun.objects.get(pk=result.data.run_id)
        return Response(
            ReconciliationRunSerializer(run).data,
            status=status.HTTP_201_CREATED,
        )


class BalanceCorrectionListView(APIView):
    """
    Audited balance corrections applied to an account, newest first.

    GET /api/v1/payments/accounts/{account_id}/corrections/
    """

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="list_balance_corrections",
        summary="List account corrections",
        responses={
            200: BalanceCorrectionSerializer(many=True),
            404: OpenApiResponse(description="Account not found"),
        },
        tags=["Ledger"],
    )
    def get(self, request, account_id):
        try:
            corrections = ReconciliationService.get_correction_history(account_id)
        except BaseApplicationError as e:
            return error_response(e)
        return Response(BalanceCorrectionSerializer(corrections, many=True).data)
