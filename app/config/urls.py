"""
URL configuration for the RapidCare billing core.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/hospitals/             - Hospital pricing
        {hospital_id}/pricing/                 - Current pricing rows (GET)
        {hospital_id}/pricing/{resource_type}/ - Update pricing (PUT, staff)
    /api/v1/bookings/              - Bookings
        quote/                     - Compute amounts for a prospective booking
        {id}/                      - Booking detail
        {id}/pay/                  - Submit payment
        {id}/refund/               - Full refund (staff)
    /api/v1/payments/              - Ledger
        accounts/{id}/                  - Account with cached balance
        accounts/{id}/transactions/     - Account transaction history
        accounts/{id}/reconcile/        - Reconcile one account (staff)
        accounts/{id}/correct/          - Audited balance correction (staff)
        accounts/{id}/corrections/      - Correction history (staff)
        alerts/                         - Open discrepancy alerts (staff)
        alerts/{id}/resolve/            - Resolve an alert (staff)
        reconciliation/runs/            - Run history and on-demand run (staff)

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    path("hospitals/", include("hospitals.urls")),
    path("bookings/", include("bookings.urls")),
    path("payments/", include("payments.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "RapidCare Billing Admin"
admin.site.site_title = "RapidCare Billing"
admin.site.index_title = "Ledger and pricing administration"
