"""
Base exception classes for the Subgate backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application.
"""

from typing import Optional, Any


class SubgateError(Exception):
    """
    Base exception for all Subgate errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(SubgateError):
    """Input validation failed."""

    pass


class ExternalServiceError(SubgateError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service


class TransportError(ExternalServiceError):
    """
    The request never produced an HTTP response.

    Raised for connection failures and timeouts. Never translated into a
    domain error.
    """

    def __init__(self, message: str, service: str, operation: Optional[str] = None):
        super().__init__(
            message,
            service,
            code="TRANSPORT_ERROR",
            details={"operation": operation} if operation else {},
        )
        self.operation = operation


class BackendError(ExternalServiceError):
    """
    An external service answered with a non-2xx status.

    Callers pattern-match on ``status_code``; ``message`` is the service's
    own error message when it sent one.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        service: str,
        body: Any = None,
        operation: Optional[str] = None,
    ):
        details: dict[str, Any] = {"status_code": status_code}
        if operation:
            details["operation"] = operation
        super().__init__(message, service, code="BACKEND_ERROR", details=details)
        self.status_code = status_code
        self.body = body
        self.operation = operation


class InvalidResponseError(ExternalServiceError):
    """A 2xx response body did not match the expected shape."""

    def __init__(self, message: str, service: str, operation: Optional[str] = None):
        super().__init__(
            message,
            service,
            code="INVALID_RESPONSE",
            details={"operation": operation} if operation else {},
        )
        self.operation = operation
