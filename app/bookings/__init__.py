"""
Bookings app: patient requests for hospital resources.

A booking's amounts are computed once, at creation, from the pricing in
force at that moment (see bookings.calculator). The payment ledger later
credits the hospital and the platform with exactly those shares.
"""
