"""
Tests for payments app.

This package contains test modules for:
- test_payment_service.py: Payment and refund submission
- test_reconciliation_service.py: Balance checks, alerts and corrections
- test_locks.py: Redis distributed lock
- test_tasks.py: Celery reconciliation tasks
- test_concurrency.py: Racing payments (PostgreSQL only)
- test_views.py: API endpoint tests

Ledger primitives are tested in payments/ledger/tests/.

Usage:
    pytest payments/tests/
    pytest payments/tests/test_reconciliation_service.py
"""
