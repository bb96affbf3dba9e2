class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "DOMAIN_ERROR"
    http_status = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"
    http_status = 400


class NotFoundError(DomainError):
    """Raised when a referenced user, record or request does not exist."""

    code = "NOT_FOUND"
    http_status = 404


class ConflictError(DomainError):
    """Raised when an operation is not allowed in the current state."""

    code = "CONFLICT"
    http_status = 409


class AuthenticationError(DomainError):
    """Raised when login credentials or tokens are invalid."""

    code = "AUTHENTICATION_ERROR"
    http_status = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "AUTHORIZATION_ERROR"
    http_status = 403
