"""
Core Application - Infrastructure & Base Classes

Generic building blocks shared by the hospitals, bookings and payments apps.
Nothing in here knows about money, pricing or bookings.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ValidationError: Input validation failures
    - NotFoundError: Resource not found
    - ConflictError: State conflicts (duplicates, invalid transitions)
    - InvalidInputError: Bad amount, rate or duration
    - PersistenceError: Database write failed and was rolled back

API helpers (import from core.api):
    - error_response: Render a domain error or failed ServiceResult

Views (import from core.views):
    - health_check: Database/cache health endpoint
"""
