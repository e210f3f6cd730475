"""
Domain Exceptions for pricing and the document pipeline.

Custom exceptions enforcing business rules:
- Base rate authority (medium tier is never overridden)
- Document status transitions and required statuses
- Record lookup
- Routing collaborator failures
"""


class DomainError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


# =============================================================================
# Pricing Exceptions
# =============================================================================

class BaseRateOverrideError(DomainError):
    """Raised when an override operation targets the base (medium) tier."""

    def __init__(self, operation: str):
        message = (
            f"Cannot {operation} the medium tier: its rate is the base rate. "
            f"Use set_base_rate to change it."
        )
        super().__init__(message, code="BASE_RATE_OVERRIDE")
        self.operation = operation


class UnknownTierError(DomainError):
    """Raised when a package tier value is not recognised."""

    def __init__(self, tier: str):
        message = f"Unknown package tier '{tier}'"
        super().__init__(message, code="UNKNOWN_TIER")
        self.tier = tier


# =============================================================================
# Document Exceptions
# =============================================================================

class InvalidStatusTransitionError(DomainError):
    """Raised when a document status change is not allowed."""

    def __init__(self, document_type: str, current: str, target: str):
        message = (
            f"{document_type} cannot move from '{current}' to '{target}'"
        )
        super().__init__(message, code="INVALID_STATUS_TRANSITION")
        self.document_type = document_type
        self.current = current
        self.target = target


class DocumentStateError(DomainError):
    """Raised when a document is not in the status an action requires."""

    def __init__(self, document_type: str, current: str, required: str, action: str):
        message = (
            f"{document_type} must be '{required}' to {action} (currently '{current}')"
        )
        super().__init__(message, code="INVALID_DOCUMENT_STATE")
        self.document_type = document_type
        self.current = current
        self.required = required


class RecordNotFoundError(DomainError):
    """Raised when a stored record cannot be found."""

    def __init__(self, record_type: str, record_id: str):
        message = f"{record_type} with id '{record_id}' not found"
        super().__init__(message, code="RECORD_NOT_FOUND")
        self.record_type = record_type
        self.record_id = record_id


# =============================================================================
# Validation Exceptions
# =============================================================================

class ValidationError(DomainError):
    """Raised when data validation fails."""

    def __init__(self, field: str, message: str):
        super().__init__(f"Validation failed for '{field}': {message}", code="VALIDATION_ERROR")
        self.field = field


# =============================================================================
# Collaborator Exceptions
# =============================================================================

class RoutingError(DomainError):
    """Raised by geocoding/routing collaborators when a lookup fails."""

    def __init__(self, message: str):
        super().__init__(message, code="ROUTING_ERROR")
