"""
Payments app: balance ledger, payment submission and reconciliation.

This app handles:
- Applying a booking's payment as payer->hospital and payer->platform
  movements with cached account balances
- Full refunds and audited reversals
- Scheduled reconciliation of cached balances against transaction history

Related apps:
    - bookings: Amounts fixed on the booking and its payment status
    - hospitals: Hospital ids owning revenue accounts

Usage:
    from payments.services import PaymentService

    result = PaymentService.submit_payment(booking.id, booking.total_amount)
"""
