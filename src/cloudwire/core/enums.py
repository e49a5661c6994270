"""Enumerations used across the SDK."""

from enum import Enum


class Protocol(str, Enum):
    """Wire protocol declared in a service model's ``metadata.protocol``."""

    JSON = "json"
    QUERY = "query"
    EC2 = "ec2"


class ShapeType(str, Enum):
    STRUCTURE = "structure"
    LIST = "list"
    MAP = "map"
    STRING = "string"
    INTEGER = "integer"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    BLOB = "blob"


class ErrorCategory(str, Enum):
    """Client-side classification of a service error."""

    CLIENT_INPUT = "client_input"
    SERVER = "server"
    THROTTLING = "throttling"
    NOT_FOUND = "not_found"
    AUTHENTICATION = "authentication"


class ErrorType(str, Enum):
    """Which party the service blames for an error."""

    SENDER = "Sender"  # Caller fault (4xx)
    RECEIVER = "Receiver"  # Service fault (5xx)
    UNKNOWN = "Unknown"


class TimestampFormat(str, Enum):
    ISO8601 = "iso8601"
    UNIX = "unixTimestamp"
    RFC822 = "rfc822"
