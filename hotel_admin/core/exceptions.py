"""
Domain exceptions raised by the service layer.

The API layer turns every DomainException into a JSON body of the form
{"error": message} with the exception's status code.
"""

from typing import Any, Dict, Optional


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = 400


class UnauthorizedException(DomainException):
    """Raised when no valid session is attached to the request."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)


class ForbiddenException(DomainException):
    """Raised when the session's role may not perform the action."""

    status_code = 403

    def __init__(self, message: str = "Forbidden", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = 404

    def __init__(self, message: str = "Not found", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = 409


class ServicesUnavailableException(ConflictException):
    """Raised when exclusive services are already booked in the requested window."""

    def __init__(self, service_ids: Optional[list] = None) -> None:
        super().__init__(
            "Selected services are not available in this time range",
            {"serviceIds": service_ids or []},
        )
