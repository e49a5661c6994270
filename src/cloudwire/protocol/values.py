"""Scalar encoders/decoders shared by every wire protocol."""

from __future__ import annotations

import base64
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Any


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_iso8601(value: datetime) -> str:
    """``2015-04-15T10:30:00Z``; fractional seconds only when present."""
    value = to_utc(value)
    if value.microsecond:
        return value.strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def format_epoch(value: datetime) -> int | float:
    """Epoch seconds; an int for whole seconds so the body stays compact."""
    value = to_utc(value)
    if value.microsecond:
        return value.timestamp()
    return int(value.timestamp())


def format_rfc822(value: datetime) -> str:
    """``Wed, 15 Apr 2015 10:30:00 GMT``."""
    return format_datetime(to_utc(value), usegmt=True)


def parse_timestamp(value: Any) -> datetime:
    """Accept epoch seconds (number or numeric string), ISO-8601 or RFC 822.

    Raises ``ValueError`` when ``value`` is none of those.
    """
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if not isinstance(value, str):
        raise ValueError(f"not a timestamp: {value!r}")
    text = value.strip()
    try:
        return datetime.fromtimestamp(float(text), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        pass
    iso = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return to_utc(datetime.fromisoformat(iso))
    except ValueError:
        pass
    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        parsed = None
    if parsed is None:
        raise ValueError(f"not a timestamp: {value!r}")
    return to_utc(parsed)


def encode_blob(value: bytes | str) -> str:
    if isinstance(value, str):
        value = value.encode("utf-8")
    return base64.b64encode(value).decode("ascii")


def decode_blob(value: str) -> bytes:
    return base64.b64decode(value)


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text not in ("true", "false"):
        raise ValueError(f"not a boolean: {value!r}")
    return text == "true"
