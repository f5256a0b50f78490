"""
Tests for HospitalPricing database constraints.
"""

import pytest
from django.db import IntegrityError, transaction

from hospitals.models import HospitalPricing
from hospitals.tests.factories import HospitalPricingFactory


@pytest.mark.django_db
class TestHospitalPricingConstraints:
    """The database rejects rows that would break pricing rules."""

    def test_second_active_row_rejected(self, bed_pricing, hospital_id):
        with pytest.raises(IntegrityError), transaction.atomic():
            HospitalPricingFactory(hospital_id=hospital_id)

    def test_inactive_rows_may_repeat(self, bed_pricing, hospital_id):
        HospitalPricingFactory(hospital_id=hospital_id, is_active=False)
        HospitalPricingFactory(hospital_id=hospital_id, is_active=False)

        assert HospitalPricing.objects.filter(hospital_id=hospital_id).count() == 3

    def test_zero_base_rate_rejected(self, db):
        with pytest.raises(IntegrityError), transaction.atomic():
            HospitalPricingFactory(base_rate=0)

    def test_rate_above_one_rejected(self, db):
        with pytest.raises(IntegrityError), transaction.atomic():
            HospitalPricingFactory(service_charge_rate="1.5000")

    def test_str(self, bed_pricing):
        assert "Bed" in str(bed_pricing)
        assert "BDT" in str(bed_pricing)
