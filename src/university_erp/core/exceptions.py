class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400
    code = "DOMAIN_ERROR"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class InvalidTransitionError(ValidationError):
    """Raised when a status change is not allowed from the current status."""

    status_code = 422
    code = "INVALID_STATUS_TRANSITION"


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")
        self.resource = resource


class ConflictError(DomainError):
    """Raised on uniqueness violations or when another actor changed the record first."""

    status_code = 409
    code = "CONFLICT"


class AuthenticationError(DomainError):
    """Raised when the bearer token is missing or invalid."""

    status_code = 401
    code = "AUTHENTICATION_ERROR"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403
    code = "AUTHORIZATION_ERROR"


class RepositoryError(Exception):
    """Raised when the datastore fails. The driver error is kept as ``__cause__``."""

    status_code = 500
    code = "REPOSITORY_ERROR"
