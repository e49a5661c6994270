"""Core wire-level models shared by serializers, parsers and the transport.

Everything here is protocol-agnostic: a serializer produces an
``HttpRequest``, the transport turns it into an ``HttpResponse``, and a
parser reads either the output members or a ``ParsedError`` from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, Field

from .enums import ErrorType


@dataclass
class HttpRequest:
    """A fully serialized (not yet signed) request."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    operation_name: str = ""


@dataclass
class HttpResponse:
    """Raw response; header names are lower-cased."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str, default: str = "") -> str:
        return self.headers.get(name.lower(), default)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(frozen=True)
class ParsedError:
    """Error fields extracted from an error response body/headers."""

    code: str
    message: str = ""
    error_type: ErrorType = ErrorType.UNKNOWN
    request_id: str = ""
    status_code: int = 0


class ResponseMetadata(BaseModel):
    """Transport details attached to every typed response."""

    request_id: str = ""
    http_status_code: int = 200
    http_headers: dict[str, str] = Field(default_factory=dict)
    retry_attempts: int = 0
