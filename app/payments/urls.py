"""
URL configuration for the payments app.

Routes:
    - GET  accounts/<id>/ - Ledger account
    - GET  accounts/<id>/transactions/ - Account transaction history
    - POST accounts/<id>/reconcile/ - Reconcile one account
    - POST accounts/<id>/correct/ - Correct cached balance
    - GET  accounts/<id>/corrections/ - Correction history
    - GET  alerts/ - Open discrepancy alerts
    - POST alerts/<id>/resolve/ - Close an alert
    - GET  reconciliation/runs/ - Run history
    - POST reconciliation/runs/ - Run reconciliation now

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.
The pay and refund endpoints hang off bookings (see bookings/urls.py).
"""

from django.urls import path

from payments import views

app_name = "payments"

urlpatterns = [
    path(
        "accounts/<uuid:account_id>/",
        views.LedgerAccountDetailView.as_view(),
        name="account-detail",
    ),
    path(
        "accounts/<uuid:account_id>/transactions/",
        views.LedgerAccountTransactionsView.as_view(),
        name="account-transactions",
    ),
    path(
        "accounts/<uuid:account_id>/reconcile/",
        views.AccountReconcileView.as_view(),
        name="account-reconcile",
    ),
    path(
        "accounts/<uuid:account_id>/correct/",
        views.BalanceCorrectionView.as_view(),
        name="account-correct",
    ),
    path(
        "accounts/<uuid:account_id>/corrections/",
        views.BalanceCorrectionListView.as_view(),
        name="account-corrections",
    ),
    path("alerts/", views.DiscrepancyAlertListView.as_view(), name="alert-list"),
    path(
        "alerts/<uuid:alert_id>/resolve/",
        views.ResolveAlertView.as_view(),
        name="alert-resolve",
    ),
    path(
        "reconciliation/runs/",
        views.ReconciliationRunListView.as_view(),
        name="reconciliation-runs",
    ),
]
