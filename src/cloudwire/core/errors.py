"""Custom exception hierarchy for the SDK."""

from __future__ import annotations

from typing import Any

from .enums import ErrorCategory, ErrorType


class CloudWireError(Exception):
    """Base exception for all SDK errors."""


# --- Configuration ---
class ConfigError(CloudWireError):
    """Invalid or missing configuration."""


class NoCredentialsError(ConfigError):
    """No credentials could be resolved for signing."""


# --- Service model ---
class ServiceModelError(CloudWireError):
    """Malformed service model document."""


class UnknownServiceError(ServiceModelError):
    """No bundled or discoverable model for the requested service."""

    def __init__(self, service_name: str, available: list[str] | None = None):
        self.service_name = service_name
        self.available = available or []
        msg = f"Unknown service: {service_name!r}"
        if self.available:
            msg += f". Valid service names: {', '.join(self.available)}"
        super().__init__(msg)


class UnknownOperationError(ServiceModelError):
    """Operation is not defined by the service model."""

    def __init__(self, service_name: str, operation_name: str):
        self.service_name = service_name
        self.operation_name = operation_name
        super().__init__(
            f"Service {service_name!r} has no operation {operation_name!r}"
        )


class OperationNotPageableError(ServiceModelError):
    """The model declares no pagination for the operation."""

    def __init__(self, operation_name: str):
        self.operation_name = operation_name
        super().__init__(f"Operation {operation_name!r} cannot be paginated")


# --- Request ---
class ParamValidationError(CloudWireError):
    """Request parameters do not satisfy the input shape."""

    def __init__(self, operation_name: str, report: str):
        self.operation_name = operation_name
        self.report = report
        super().__init__(f"Invalid parameters for {operation_name}: {report}")


# --- Transport ---
class TransportError(CloudWireError):
    """The request never produced an HTTP response."""


class EndpointConnectionError(TransportError):
    """Could not connect to the endpoint."""


class ConnectTimeoutError(TransportError):
    """Connecting to or reading from the endpoint timed out."""


# --- Response ---
class ResponseParseError(CloudWireError):
    """Response body could not be decoded against the output shape."""

    def __init__(self, reason: str, status_code: int | None = None, body: bytes = b""):
        self.reason = reason
        self.status_code = status_code
        self.body = body
        super().__init__(f"Unable to parse response ({status_code}): {reason}")


# --- Service errors ---
class ServiceError(CloudWireError):
    """An error response returned by the remote service.

    Concrete service errors are built at run time from the service
    model (see ``runtime.errors.ErrorFactory``); each one also derives
    from exactly one of the category classes below.
    """

    category: ErrorCategory = ErrorCategory.CLIENT_INPUT

    def __init__(
        self,
        message: str,
        *,
        error_code: str = "",
        error_type: ErrorType = ErrorType.UNKNOWN,
        request_id: str = "",
        status_code: int = 0,
        operation_name: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.error_type = error_type
        self.request_id = request_id
        self.status_code = status_code
        self.operation_name = operation_name
        self.details = details or {}
        super().__init__(self._format())

    def _format(self) -> str:
        op = f" when calling {self.operation_name}" if self.operation_name else ""
        return f"{self.error_code or 'Unknown'} ({self.status_code}){op}: {self.message}"


class ClientInputError(ServiceError):
    """Invalid input supplied by the caller."""

    category = ErrorCategory.CLIENT_INPUT


class ServerSideError(ServiceError):
    """The service failed while processing a valid request."""

    category = ErrorCategory.SERVER


class ThrottlingError(ServiceError):
    """Request rate or resource limit exceeded."""

    category = ErrorCategory.THROTTLING


class ResourceNotFoundError(ServiceError):
    """A referenced resource does not exist."""

    category = ErrorCategory.NOT_FOUND


class AuthenticationError(ServiceError):
    """Credentials missing, invalid or not authorised."""

    category = ErrorCategory.AUTHENTICATION


CATEGORY_CLASSES: dict[ErrorCategory, type[ServiceError]] = {
    ErrorCategory.CLIENT_INPUT: ClientInputError,
    ErrorCategory.SERVER: ServerSideError,
    ErrorCategory.THROTTLING: ThrottlingError,
    ErrorCategory.NOT_FOUND: ResourceNotFoundError,
    ErrorCategory.AUTHENTICATION: AuthenticationError,
}
