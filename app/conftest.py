"""
Root pytest configuration for the Django project.

This module configures pytest-django and provides project-wide fixtures
(users, API clients and hospital pricing). App-specific fixtures are
defined in each app's tests/conftest.py.
"""

import os
import uuid

import django
import pytest

# Ensure Django settings are configured before any tests run
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")


def pytest_configure():
    """Configure Django settings before tests run."""
    django.setup()

    from django.conf import settings

    # Disable throttling during tests to prevent rate limit failures
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {}

    # Tests never talk to Redis; distributed locks are patched per test
    settings.CACHES = {
        "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}
    }

    # Use fast password hasher for tests (PBKDF2 is too slow with 870K iterations)
    settings.PASSWORD_HASHERS = [
        "django.contrib.auth.hashers.MD5PasswordHasher",
    ]


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_integration.py → e2e (full booking-to-reconciliation journeys)
    - test_views.py, test_services.py, test_tasks.py, etc. → integration
    - test_models.py, test_calculator.py, test_locks.py, etc. → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    e2e_patterns = ["test_integration.py"]

    integration_patterns = [
        "test_views.py",
        "test_services.py",
        "test_tasks.py",
        "test_concurrency.py",
        "test_reconciliation_service.py",
        "test_payment_service.py",
    ]

    unit_patterns = [
        "test_models.py",
        "test_serializers.py",
        "test_validators.py",
        "test_calculator.py",
        "test_state_transitions.py",
        "test_locks.py",
        "test_api.py",
    ]

    for item in items:
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration", "e2e"}:
            continue

        filename = str(item.fspath).split("/")[-1]

        if any(pattern in filename for pattern in e2e_patterns):
            item.add_marker(pytest.mark.e2e)
        elif any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)


def _patch_postgresql_flush_for_cascade():
    """
    Patch PostgreSQL flush to always use CASCADE.

    TransactionTestCase (used by the concurrent payment tests) resets the
    database with TRUNCATE, which fails without CASCADE when tables have
    foreign key constraints.
    """
    from django.db.backends.postgresql import operations

    original_sql_flush = operations.DatabaseOperations.sql_flush

    def sql_flush_with_cascade(
        self, style, tables, *, reset_sequences=False, allow_cascade=False
    ):
        return original_sql_flush(
            self, style, tables, reset_sequences=reset_sequences, allow_cascade=True
        )

    operations.DatabaseOperations.sql_flush = sql_flush_with_cascade


_patch_postgresql_flush_for_cascade()


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """A patient account."""
    from core.tests.factories import UserFactory

    return UserFactory()


@pytest.fixture
def staff_user(db):
    """A hospital authority / platform admin account."""
    from core.tests.factories import UserFactory

    return UserFactory(is_staff=True)


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def authenticated_client_factory(db):
    """
    Factory to create JWT-authenticated clients for any user.

    Usage:
        def test_example(authenticated_client_factory, some_user):
            client = authenticated_client_factory(some_user)
    """
    from rest_framework.test import APIClient
    from rest_framework_simplejwt.tokens import RefreshToken

    def _make_client(for_user):
        client = APIClient()
        refresh = RefreshToken.for_user(for_user)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
        return client

    return _make_client


@pytest.fixture
def authenticated_client(authenticated_client_factory, user):
    """API client authenticated as the patient fixture."""
    return authenticated_client_factory(user)


@pytest.fixture
def staff_client(authenticated_client_factory, staff_user):
    """API client authenticated as the staff fixture."""
    return authenticated_client_factory(staff_user)


# =============================================================================
# Pricing Fixtures
# =============================================================================


@pytest.fixture
def hospital_id():
    """UUID of a hospital; it has no pricing unless a pricing fixture is used."""
    return uuid.uuid4()


@pytest.fixture
def bed_pricing(db, hospital_id):
    """Active bed pricing: 120 per hour, 30% service charge."""
    from hospitals.tests.factories import HospitalPricingFactory

    return HospitalPricingFactory(hospital_id=hospital_id, base_rate=120)


@pytest.fixture
def icu_pricing(db, hospital_id):
    """Active ICU pricing: 600 per hour, 30% service charge."""
    from hospitals.models import ResourceType
    from hospitals.tests.factories import HospitalPricingFactory

    return HospitalPricingFactory(
        hospital_id=hospital_id,
        resource_type=ResourceType.ICU,
        base_rate=600,
    )
