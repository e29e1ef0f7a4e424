"""Custom exceptions for the PropDesk application."""


class PropDeskError(Exception):
    """Base exception for PropDesk application."""

    pass


class ValidationError(PropDeskError):
    """Raised when validation fails."""

    pass


class NotFoundError(PropDeskError):
    """Raised when a resource is not found."""

    pass


class DatabaseError(PropDeskError):
    """Raised when a database operation fails."""

    pass


class ServiceError(PropDeskError):
    """Raised when a service operation fails."""

    pass


class ConfigurationError(PropDeskError):
    """Raised when configuration is invalid."""

    pass


class AuthenticationError(PropDeskError):
    """Raised when authentication fails."""

    pass


class AuthorizationError(PropDeskError):
    """Raised when an authenticated user lacks access."""

    pass
