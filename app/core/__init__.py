"""
Core Application - Infrastructure & Base Classes

This app contains infrastructure code shared by the domain apps. It holds
no domain-specific logic.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key

Services (import from core.services):
    - ErrorKind: Closed set of failure kinds
    - ServiceResult: Standard result wrapper for success/failure handling
    - BaseService: Base class for service layer

Responses (import from core.responses):
    - result_response: Render a ServiceResult as a DRF Response
    - status_for: HTTP status for a ServiceResult

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ConfigurationError: Missing or malformed settings
    - ExternalServiceError: Third-party service failures
    - GatewayTimeoutError: Third-party call exceeded its deadline

Helpers (import from core.helpers):
    - generate_token: Cryptographically secure hex token
    - generate_numeric_code: Cryptographically secure digit string
    - epoch_ms: Current Unix time in milliseconds

Checks (core.checks):
    - core.E001, core.W002: registered in CoreConfig.ready()
"""
