"""
Factory Boy factories for ledger test data.

Usage:
    from payments.ledger.tests.factories import LedgerAccountFactory

    hospital = LedgerAccountFactory(owner_id=booking.hospital_id)
    platform = LedgerAccountFactory(
        type=AccountType.PLATFORM_REVENUE,
        owner_id=None,
    )

Accounts are created with a zero balance. Balances should only move
through LedgerService so that the cached value matches the transactions.
"""

import uuid

import factory

from payments.ledger.models import AccountType, LedgerAccount


class LedgerAccountFactory(factory.django.DjangoModelFactory):
    """
    Factory for creating LedgerAccount instances.

    Default creates a HOSPITAL_REVENUE account with a unique owner_id.
    """

    class Meta:
        model = LedgerAccount
        skip_postgeneration_save = True

    type = AccountType.HOSPITAL_REVENUE
    owner_id = factory.LazyFunction(uuid.uuid4)
    currency = "bdt"
    allow_negative = False
    is_active = True
