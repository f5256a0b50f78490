"""
API views for hospital pricing.

Endpoints:
    GET /api/v1/hospitals/{hospital_id}/pricing/ - Prices currently in force
    PUT /api/v1/hospitals/{hospital_id}/pricing/{resource_type}/ - Publish a price

Security:
    - Reads require authentication
    - Writes require staff (hospital authority) accounts
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.api import error_response
from core.exceptions import BaseApplicationError
from hospitals.serializers import HospitalPricingSerializer, UpdatePricingSerializer
from hospitals.services import PricingService


class HospitalPricingListView(APIView):
    """
    List the prices a hospital currently charges.

    GET /api/v1/hospitals/{hospital_id}/pricing/

    Response:
        200 OK: One row per priced resource type
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_hospital_pricing",
        summary="Current hospital pricing",
        responses={200: HospitalPricingSerializer(many=True)},
        tags=["Hospitals - Pricing"],
    )
    def get(self, request, hospital_id):
        rows = PricingService.get_hospital_pricing(hospital_id)
        return Response(HospitalPricingSerializer(rows, many=True).data)


class HospitalPricingUpdateView(APIView):
    """
    Publish a new price for one resource type.

    PUT /api/v1/hospitals/{hospital_id}/pricing/{resource_type}/

    Request body:
        {"base_rate": 12000, "service_charge_rate": "0.30"}

    Response:
        200 OK: The new pricing row
        400 Bad Request: Invalid rate or resource type
        403 Forbidden: Not a hospital authority
        409 Conflict: Concurrent update for the same resource
    """

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="update_hospital_pricing",
        summary="Publish hospital pricing",
        request=UpdatePricingSerializer,
        responses={
            200: HospitalPricingSerializer,
            400: OpenApiResponse(description="Invalid rate or resource type"),
            409: OpenApiResponse(description="Concurrent pricing update"),
        },
        tags=["Hospitals - Pricing"],
    )
    def put(self, request, hospital_id, resource_type):
        serializer = UpdatePricingSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            pricing = PricingService.update_pricing(
                hospital_id=hospital_id,
                resource_type=resource_type,
                created_by=request.user,
                **serializer.validated_data,
            )
        except BaseApplicationError as e:
            return error_response(e)

        return Response(HospitalPricingSerializer(pricing).data)
