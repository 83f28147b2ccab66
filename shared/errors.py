"""
Shared error handling for the delegate pool gateway.

Two families live here:

- ``GatewayException`` and subclasses: per-request failures rendered as an
  ``ErrorResponse`` body with the exception's HTTP status.
- ``StartupError`` and subclasses: fatal bootstrap failures. The process
  entry point reports them and exits before serving.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class GatewayException(Exception):
    """Base exception for request-scoped gateway failures."""

    status_code: int = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None,
                 status_code: Optional[int] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class ServiceSuspendedError(GatewayException):
    """Raised when the pool service is suspended for maintenance."""

    status_code = 503

    def __init__(self, message: str = "Service temporarily suspended", details: Optional[Dict[str, Any]] = None):
        super().__init__("SERVICE_SUSPENDED", message, details)


class NotLocalOriginError(GatewayException):
    """Raised when a control endpoint is called from a remote host."""

    status_code = 403

    def __init__(self, message: str = "Only local calls are allowed", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_LOCAL_ORIGIN", message, details)


class ExternalServiceError(GatewayException):
    """External service errors."""

    status_code = 502

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)


class BackendUnavailableError(GatewayException):
    """Raised when an operation needs a backend this deployment does not provide."""

    status_code = 501

    def __init__(self, operation: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            "NOT_PROVIDED",
            f"{operation} is not provided by this gateway deployment",
            details
        )


class StartupError(Exception):
    """Base class for fatal errors raised before the listener is serving."""


class ConfigLoadError(StartupError):
    """Neither the production nor the sample configuration could be loaded."""

    def __init__(self, message: str, searched: Optional[list] = None):
        self.searched = searched or []
        super().__init__(message)


class BindError(StartupError):
    """The listener socket could not be bound."""

    def __init__(self, host: str, port: int, reason: str):
        self.host = host
        self.port = port
        self.reason = reason
        super().__init__(f"Cannot bind {host}:{port}: {reason}")
