"""Request serializers (marshallers), one per wire protocol.

Input is the wire-named dict produced by ``WireModel.to_wire()``; the
walk is driven by the operation's input shape, so members the shape
does not define never reach the wire.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import urlencode

from cloudwire.core.enums import ShapeType, TimestampFormat
from cloudwire.core.models import HttpRequest
from cloudwire.model.shapes import OperationModel, ServiceModel, Shape, ShapeRef

from .values import encode_blob, format_epoch, format_iso8601, format_rfc822

logger = logging.getLogger(__name__)


def _join_url(endpoint: str, request_uri: str) -> str:
    return endpoint.rstrip("/") + (request_uri or "/")


# ---------------------------------------------------------------------------
# JSON protocol
# ---------------------------------------------------------------------------

class JSONSerializer:
    """``application/x-amz-json-*`` bodies targeted via ``X-Amz-Target``."""

    def __init__(self, service_model: ServiceModel) -> None:
        self._model = service_model

    def serialize(
        self, operation: OperationModel, params: dict[str, Any], endpoint: str
    ) -> HttpRequest:
        meta = self._model.metadata
        headers = {
            "Content-Type": f"application/x-amz-json-{meta.json_version}",
        }
        if meta.target_prefix:
            headers["X-Amz-Target"] = f"{meta.target_prefix}.{operation.name}"

        body: dict[str, Any] = {}
        shape = operation.input_shape
        if shape is not None:
            body = self._structure(shape, params)

        logger.debug("Serialized %s as JSON (%d members)", operation.name, len(body))
        return HttpRequest(
            method=operation.http.method,
            url=_join_url(endpoint, operation.http.request_uri),
            headers=headers,
            body=json.dumps(body, separators=(",", ":")).encode("utf-8"),
            operation_name=operation.name,
        )

    def _value(self, ref: ShapeRef, value: Any) -> Any:
        shape = self._model.shape(ref.shape)
        if shape.type is ShapeType.STRUCTURE:
            return self._structure(shape, value)
        if shape.type is ShapeType.LIST:
            return [self._value(shape.member, item) for item in value]  # type: ignore[arg-type]
        if shape.type is ShapeType.MAP:
            return {
                str(k): self._value(shape.value, v)  # type: ignore[arg-type]
                for k, v in value.items()
            }
        if shape.type is ShapeType.TIMESTAMP:
            fmt = ref.timestamp_format or shape.timestamp_format
            if fmt is TimestampFormat.ISO8601:
                return format_iso8601(value)
            if fmt is TimestampFormat.RFC822:
                return format_rfc822(value)
            return format_epoch(value)
        if shape.type is ShapeType.BLOB:
            return encode_blob(value)
        return value

    def _structure(self, shape: Shape, value: dict[str, Any]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for member_name, ref in shape.members.items():
            if member_name not in value or value[member_name] is None:
                continue
            key = ref.location_name or member_name
            out[key] = self._value(ref, value[member_name])
        return out


# ---------------------------------------------------------------------------
# Query protocol
# ---------------------------------------------------------------------------

class QuerySerializer:
    """Form-encoded ``Action=...&Version=...`` requests."""

    def __init__(self, service_model: ServiceModel) -> None:
        self._model = service_model

    def serialize(
        self, operation: OperationModel, params: dict[str, Any], endpoint: str
    ) -> HttpRequest:
        form: dict[str, str] = {
            "Action": operation.name,
            "Version": self._model.metadata.api_version,
        }
        shape = operation.input_shape
        if shape is not None:
            self._structure(form, shape, params, prefix="")

        logger.debug("Serialized %s as query form (%d fields)", operation.name, len(form))
        return HttpRequest(
            method="POST",
            url=_join_url(endpoint, operation.http.request_uri),
            headers={"Content-Type": "application/x-www-form-urlencoded; charset=utf-8"},
            body=urlencode(form).encode("utf-8"),
            operation_name=operation.name,
        )

    # -- Naming hooks (overridden by the ec2 dialect) ------------------------

    def _member_key(self, member_name: str, ref: ShapeRef) -> str:
        return ref.location_name or member_name

    def _list_prefix(self, prefix: str, shape: Shape, ref: ShapeRef | None) -> str:
        flattened = shape.flattened or bool(ref and ref.flattened)
        if flattened:
            member = shape.member
            if member is not None and member.location_name:
                # Flattened members may rename the repeated element
                parent = prefix.rsplit(".", 1)[0] if "." in prefix else ""
                return f"{parent}.{member.location_name}" if parent else member.location_name
            return prefix
        item = (shape.member.location_name if shape.member else None) or "member"
        return f"{prefix}.{item}"

    # -- Walk ----------------------------------------------------------------

    def _value(
        self, form: dict[str, str], ref: ShapeRef, value: Any, prefix: str
    ) -> None:
        shape = self._model.shape(ref.shape)
        if shape.type is ShapeType.STRUCTURE:
            self._structure(form, shape, value, prefix)
        elif shape.type is ShapeType.LIST:
            self._list(form, shape, ref, value, prefix)
        elif shape.type is ShapeType.MAP:
            self._map(form, shape, ref, value, prefix)
        elif shape.type is ShapeType.BOOLEAN:
            form[prefix] = "true" if value else "false"
        elif shape.type is ShapeType.TIMESTAMP:
            fmt = ref.timestamp_format or shape.timestamp_format
            if fmt is TimestampFormat.UNIX:
                form[prefix] = str(format_epoch(value))
            elif fmt is TimestampFormat.RFC822:
                form[prefix] = format_rfc822(value)
            else:
                form[prefix] = format_iso8601(value)
        elif shape.type is ShapeType.BLOB:
            form[prefix] = encode_blob(value)
        else:
            form[prefix] = str(value)

    def _structure(
        self, form: dict[str, str], shape: Shape, value: dict[str, Any], prefix: str
    ) -> None:
        for member_name, ref in shape.members.items():
            if member_name not in value or value[member_name] is None:
                continue
            key = self._member_key(member_name, ref)
            self._value(form, ref, value[member_name], f"{prefix}.{key}" if prefix else key)

    def _list(
        self,
        form: dict[str, str],
        shape: Shape,
        ref: ShapeRef,
        value: list[Any],
        prefix: str,
    ) -> None:
        if not value:
            form[prefix] = ""
            return
        list_prefix = self._list_prefix(prefix, shape, ref)
        for i, item in enumerate(value, 1):
            self._value(form, shape.member, item, f"{list_prefix}.{i}")  # type: ignore[arg-type]

    def _map(
        self,
        form: dict[str, str],
        shape: Shape,
        ref: ShapeRef,
        value: dict[str, Any],
        prefix: str,
    ) -> None:
        flattened = shape.flattened or bool(ref.flattened)
        entry_prefix = prefix if flattened else f"{prefix}.entry"
        key_name = (shape.key.location_name if shape.key else None) or "key"
        value_name = (shape.value.location_name if shape.value else None) or "value"
        for i, (k, v) in enumerate(value.items(), 1):
            base = f"{entry_prefix}.{i}"
            self._value(form, shape.key, k, f"{base}.{key_name}")  # type: ignore[arg-type]
            self._value(form, shape.value, v, f"{base}.{value_name}")  # type: ignore[arg-type]


class EC2Serializer(QuerySerializer):
    """The ec2 dialect of the query protocol.

    Lists are always flattened as ``Name.N`` and member keys come from
    ``queryName``, else the capitalised ``locationName``.
    """

    def _member_key(self, member_name: str, ref: ShapeRef) -> str:
        if ref.query_name:
            return ref.query_name
        if ref.location_name:
            return ref.location_name[:1].upper() + ref.location_name[1:]
        return member_name

    def _list(
        self,
        form: dict[str, str],
        shape: Shape,
        ref: ShapeRef,
        value: list[Any],
        prefix: str,
    ) -> None:
        # ec2 omits empty lists entirely
        for i, item in enumerate(value, 1):
            self._value(form, shape.member, item, f"{prefix}.{i}")  # type: ignore[arg-type]
