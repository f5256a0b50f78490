"""
URL configuration for the hospitals app.

All URLs are prefixed with /api/v1/hospitals/ (configured in config/urls.py).
"""

from django.urls import path

from hospitals import views

app_name = "hospitals"

urlpatterns = [
    path(
        "<uuid:hospital_id>/pricing/",
        views.HospitalPricingListView.as_view(),
        name="pricing-list",
    ),
    path(
        "<uuid:hospital_id>/pricing/<str:resource_type>/",
        views.HospitalPricingUpdateView.as_view(),
        name="pricing-update",
    ),
]
