class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised by use cases when a referenced entity does not exist."""


class ConflictError(DomainError):
    """Raised when an operation collides with existing state."""


class CapacityExceededError(ConflictError):
    """Raised when adding a student would exceed a class's capacity."""


class UniquenessViolationError(ConflictError):
    """Raised when a value that must be unique is already taken."""
