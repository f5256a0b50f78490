"""
URL configuration for the bookings app.

All URLs are prefixed with /api/v1/bookings/ (configured in config/urls.py).
"""

from django.urls import path

from bookings import views
from bookings.services import BookingService
from payments import views as payment_views

app_name = "bookings"

urlpatterns = [
    path("", views.BookingListCreateView.as_view(), name="booking-list"),
    path("quote/", views.BookingQuoteView.as_view(), name="booking-quote"),
    path(
        "<uuid:booking_id>/",
        views.BookingDetailView.as_view(),
        name="booking-detail",
    ),
    path(
        "<uuid:booking_id>/pay/",
        payment_views.BookingPaymentView.as_view(),
        name="booking-pay",
    ),
    path(
        "<uuid:booking_id>/refund/",
        payment_views.BookingRefundView.as_view(),
        name="booking-refund",
    ),
]

urlpatterns += [
    path(
        f"<uuid:booking_id>/{action}/",
        views.BookingWorkflowView.as_view(workflow_action=action),
        name=f"booking-{action}",
    )
    for action in BookingService.WORKFLOW_ACTIONS
]
