"""
Core Application - Infrastructure & Base Classes

Shared building blocks used by the order, catalog and payment apps. Nothing
in here knows about orders or escrow; domain apps extend these classes.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key

Services (import from core.services):
    - BaseService: Base class for service layer (logging, transactions)

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes and HTTP status
    - ValidationError: Input validation failures
    - NotFoundError: Resource not found
    - PermissionDeniedError: Authorization failures
    - ConflictError: State conflicts (duplicates, concurrent modifications)
    - ExternalServiceError: Third-party service failures

Exception Handlers (import from core.exception_handlers):
    - application_exception_handler: DRF hook rendering BaseApplicationError

Views (import from core.views):
    - health_check: Liveness endpoint for load balancers
"""
