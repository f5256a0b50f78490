"""
Hospitals app: per-hospital resource pricing.

Hospital authorities publish a base rate and service charge rate for each
bookable resource type. The booking flow reads the currently effective row
through PricingService.get_rate().
"""
