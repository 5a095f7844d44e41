"""Custom exceptions for the service layer."""

from typing import Any


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, code: str = "SERVICE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidInputError(ServiceError):
    """Request data failed validation before any store access."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_INPUT")


class NotFoundError(ServiceError):
    """Resource not found error."""

    def __init__(self, resource_type: str, resource_id: Any):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            message=f"{resource_type} with ID {resource_id} not found",
            code=f"{resource_type.upper()}_NOT_FOUND"
        )


class SnippetNotFoundError(NotFoundError):
    """Snippet not found error."""

    def __init__(self, snippet_id: Any):
        super().__init__("Snippet", snippet_id)


class UserNotFoundError(NotFoundError):
    """User not found error."""

    def __init__(self, user_id: Any):
        super().__init__("User", user_id)


class AuthenticationError(ServiceError):
    """Authentication failed error."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message=message, code="AUTHENTICATION_FAILED")


class EmailNotVerifiedError(ServiceError):
    """Credentials are valid but the email address is not yet verified."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(
            message="Please verify your email before logging in",
            code="EMAIL_NOT_VERIFIED"
        )


class AuthorizationError(ServiceError):
    """Authorization failed error."""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message=message, code="ACCESS_DENIED")


class ConflictError(ServiceError):
    """Request conflicts with the current state of a resource."""

    def __init__(self, message: str, code: str = "CONFLICT"):
        super().__init__(message=message, code=code)


class UserAlreadyExistsError(ConflictError):
    """A verified account already uses this email."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(message="User already exists", code="USER_EXISTS")


class RevisionConflictError(ConflictError):
    """Snippet changed since the revision the caller last saw."""

    def __init__(self, snippet_id: Any, expected: int, actual: int):
        self.snippet_id = snippet_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            message=f"Snippet {snippet_id} is at revision {actual}, not {expected}",
            code="REVISION_CONFLICT"
        )


class DeliveryError(ServiceError):
    """An upstream provider (email, storage, identity) failed."""

    def __init__(self, message: str):
        super().__init__(message=message, code="DELIVERY_FAILED")
