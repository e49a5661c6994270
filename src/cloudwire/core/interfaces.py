"""Protocol interfaces for the SDK runtime.

All module boundaries are defined here as Protocol classes.
Implementations can be swapped (per wire protocol, or faked in tests)
without changing callers.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from .models import HttpRequest, HttpResponse, ParsedError


# ---------------------------------------------------------------------------
# Marshalling
# ---------------------------------------------------------------------------

@runtime_checkable
class ISerializer(Protocol):
    """Turns operation parameters (wire names) into an HTTP request."""

    def serialize(
        self, operation: Any, params: dict[str, Any], endpoint: str
    ) -> HttpRequest: ...


@runtime_checkable
class IParser(Protocol):
    """Turns an HTTP response into output members or an error."""

    def parse(self, operation: Any, response: HttpResponse) -> dict[str, Any]: ...

    def parse_error(self, response: HttpResponse) -> ParsedError: ...

    def request_id(self, response: HttpResponse) -> str: ...


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

@runtime_checkable
class ISigner(Protocol):
    """Adds authentication headers to a request in place."""

    def sign(self, request: HttpRequest, credentials: Any) -> None: ...


@runtime_checkable
class ITransport(Protocol):
    """Sends a signed request and returns the raw response."""

    def send(self, request: HttpRequest) -> HttpResponse: ...

    async def asend(self, request: HttpRequest) -> HttpResponse: ...

    def close(self) -> None: ...

    async def aclose(self) -> None: ...
