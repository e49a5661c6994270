"""Response parsers (unmarshallers), one per wire protocol.

``parse`` walks the operation's output shape and returns a wire-named
dict with decoded scalars (aware ``datetime`` for timestamps, ``bytes``
for blobs). Keys the shape does not define are dropped. ``parse_error``
extracts the error code, message, fault side and request id from an
error response.
"""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from typing import Any, Callable

from cloudwire.core.enums import ErrorType, ShapeType
from cloudwire.core.errors import ResponseParseError
from cloudwire.core.models import HttpResponse, ParsedError
from cloudwire.model.shapes import OperationModel, ServiceModel, Shape, ShapeRef

from .values import decode_blob, parse_bool, parse_timestamp

logger = logging.getLogger(__name__)


def _error_type_for(status_code: int) -> ErrorType:
    if 400 <= status_code < 500:
        return ErrorType.SENDER
    if status_code >= 500:
        return ErrorType.RECEIVER
    return ErrorType.UNKNOWN


_DECODERS: dict[ShapeType, Callable[[Any], Any]] = {
    ShapeType.INTEGER: int,
    ShapeType.LONG: int,
    ShapeType.FLOAT: float,
    ShapeType.DOUBLE: float,
    ShapeType.BOOLEAN: parse_bool,
    ShapeType.TIMESTAMP: parse_timestamp,
    ShapeType.BLOB: decode_blob,
}


def _decode(shape: Shape, value: Any) -> Any:
    """Decode one scalar; bad input raises ``ValueError`` naming the shape."""
    try:
        return _DECODERS[shape.type](value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"bad {shape.type.value} value {value!r} for {shape.name or 'member'}"
        ) from exc


# ---------------------------------------------------------------------------
# JSON protocol
# ---------------------------------------------------------------------------

class JSONParser:
    def __init__(self, service_model: ServiceModel) -> None:
        self._model = service_model

    def request_id(self, response: HttpResponse) -> str:
        return response.header("x-amzn-requestid") or response.header("x-amz-request-id")

    def _load(self, response: HttpResponse) -> Any:
        if not response.body.strip():
            return {}
        try:
            return json.loads(response.body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ResponseParseError(str(exc), response.status_code, response.body) from exc

    def parse(self, operation: OperationModel, response: HttpResponse) -> dict[str, Any]:
        shape = operation.output_shape
        data = self._load(response)
        if shape is None:
            return {}
        if not isinstance(data, dict):
            raise ResponseParseError(
                f"expected a JSON object, got {type(data).__name__}",
                response.status_code,
                response.body,
            )
        try:
            parsed = self._structure(shape, data)
        except (ValueError, TypeError, AttributeError) as exc:
            raise ResponseParseError(str(exc), response.status_code, response.body) from exc
        logger.debug("Parsed %s JSON response (%d members)", operation.name, len(parsed))
        return parsed

    def parse_error(self, response: HttpResponse) -> ParsedError:
        try:
            body = self._load(response)
        except ResponseParseError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        # x-amzn-ErrorType: "Code:http://internal.amazon.com/..."
        code = response.header("x-amzn-errortype").split(":", 1)[0]
        if not code:
            code = str(body.get("__type") or body.get("code") or body.get("Code") or "")
        code = code.rsplit("#", 1)[-1]

        message = body.get("message") or body.get("Message") or body.get("errorMessage") or ""
        if not message and not body:
            message = response.body.decode("utf-8", errors="replace").strip()

        return ParsedError(
            code=code,
            message=str(message),
            error_type=_error_type_for(response.status_code),
            request_id=self.request_id(response),
            status_code=response.status_code,
        )

    # -- Walk ----------------------------------------------------------------

    def _value(self, ref: ShapeRef, value: Any) -> Any:
        if value is None:
            return None
        shape = self._model.shape(ref.shape)
        if shape.type is ShapeType.STRUCTURE:
            return self._structure(shape, value)
        if shape.type is ShapeType.LIST:
            return [self._value(shape.member, item) for item in value]  # type: ignore[arg-type]
        if shape.type is ShapeType.MAP:
            return {k: self._value(shape.value, v) for k, v in value.items()}  # type: ignore[arg-type]
        if shape.type in (ShapeType.TIMESTAMP, ShapeType.BLOB, ShapeType.BOOLEAN):
            return _decode(shape, value)
        return value

    def _structure(self, shape: Shape, data: dict[str, Any]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for member_name, ref in shape.members.items():
            key = ref.location_name or member_name
            if key in data and data[key] is not None:
                out[member_name] = self._value(ref, data[key])
        return out


# ---------------------------------------------------------------------------
# XML protocols (query, ec2)
# ---------------------------------------------------------------------------

def _local(tag: str) -> str:
    """Strip the ``{namespace}`` prefix ElementTree puts on tags."""
    return tag.rsplit("}", 1)[-1]


def _child(node: ET.Element, name: str) -> ET.Element | None:
    for child in node:
        if _local(child.tag) == name:
            return child
    return None


def _children(node: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in node if _local(child.tag) == name]


def _find_text(root: ET.Element, *names: str) -> str:
    for node in root.iter():
        if _local(node.tag) in names and node.text:
            return node.text.strip()
    return ""


class QueryParser:
    """XML responses shaped ``<OpResponse><OpResult>...</OpResult>``."""

    LIST_ITEM = "member"

    def __init__(self, service_model: ServiceModel) -> None:
        self._model = service_model

    def _root(self, response: HttpResponse) -> ET.Element | None:
        if not response.body.strip():
            return None
        try:
            return ET.fromstring(response.body)
        except ET.ParseError as exc:
            raise ResponseParseError(str(exc), response.status_code, response.body) from exc

    def request_id(self, response: HttpResponse) -> str:
        header = response.header("x-amzn-requestid") or response.header("x-amz-request-id")
        if header:
            return header
        try:
            root = self._root(response)
        except ResponseParseError:
            return ""
        return _find_text(root, "RequestId", "requestId", "RequestID") if root is not None else ""

    def _result_node(self, operation: OperationModel, root: ET.Element) -> ET.Element | None:
        wrapper = operation.output.result_wrapper if operation.output else None
        if wrapper:
            return _child(root, wrapper)
        return root

    def parse(self, operation: OperationModel, response: HttpResponse) -> dict[str, Any]:
        shape = operation.output_shape
        root = self._root(response)
        if shape is None or root is None:
            return {}
        node = self._result_node(operation, root)
        if node is None:
            return {}
        try:
            parsed = self._structure(shape, node)
        except ValueError as exc:
            raise ResponseParseError(str(exc), response.status_code, response.body) from exc
        logger.debug("Parsed %s XML response (%d members)", operation.name, len(parsed))
        return parsed

    def parse_error(self, response: HttpResponse) -> ParsedError:
        code = message = side = ""
        try:
            root = self._root(response)
        except ResponseParseError:
            root = None
        if root is not None:
            error = next((n for n in root.iter() if _local(n.tag) == "Error"), None)
            if error is not None:
                code = _find_text(error, "Code")
                message = _find_text(error, "Message")
                side = _find_text(error, "Type")
        elif response.body:
            message = response.body.decode("utf-8", errors="replace").strip()

        try:
            error_type = ErrorType(side) if side else _error_type_for(response.status_code)
        except ValueError:
            error_type = _error_type_for(response.status_code)
        return ParsedError(
            code=code,
            message=message,
            error_type=error_type,
            request_id=self.request_id(response),
            status_code=response.status_code,
        )

    # -- Walk ----------------------------------------------------------------

    def _xml_name(self, member_name: str, ref: ShapeRef) -> str:
        return ref.location_name or member_name

    def _value(self, shape: Shape, node: ET.Element) -> Any:
        if shape.type is ShapeType.STRUCTURE:
            return self._structure(shape, node)
        if shape.type is ShapeType.LIST:
            item = (shape.member.location_name if shape.member else None) or self.LIST_ITEM
            return self._items(shape, _children(node, item))
        if shape.type is ShapeType.MAP:
            return self._map(shape, _children(node, "entry"))
        if shape.type in _DECODERS:
            return _decode(shape, (node.text or "").strip())
        return node.text or ""

    def _items(self, shape: Shape, nodes: list[ET.Element]) -> list[Any]:
        member = self._model.shape(shape.member.shape)  # type: ignore[union-attr]
        return [self._value(member, n) for n in nodes]

    def _map(self, shape: Shape, entries: list[ET.Element]) -> dict[str, Any]:
        key_name = (shape.key.location_name if shape.key else None) or "key"
        value_name = (shape.value.location_name if shape.value else None) or "value"
        key_shape = self._model.shape(shape.key.shape)  # type: ignore[union-attr]
        value_shape = self._model.shape(shape.value.shape)  # type: ignore[union-attr]
        out: dict[str, Any] = {}
        for entry in entries:
            k, v = _child(entry, key_name), _child(entry, value_name)
            if k is None:
                continue
            out[self._value(key_shape, k)] = self._value(value_shape, v) if v is not None else None
        return out

    def _structure(self, shape: Shape, node: ET.Element) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for member_name, ref in shape.members.items():
            member_shape = self._model.shape(ref.shape)
            name = self._xml_name(member_name, ref)
            flattened = member_shape.flattened or bool(ref.flattened)
            if member_shape.type is ShapeType.LIST and flattened:
                item_name = (
                    member_shape.member.location_name if member_shape.member else None
                ) or name
                nodes = _children(node, item_name)
                if nodes:
                    out[member_name] = self._items(member_shape, nodes)
                continue
            child = _child(node, name)
            if child is not None:
                out[member_name] = self._value(member_shape, child)
        return out


class EC2Parser(QueryParser):
    """ec2 responses: no result wrapper, list items are ``<item>``."""

    LIST_ITEM = "item"

    def _result_node(self, operation: OperationModel, root: ET.Element) -> ET.Element | None:
        return root
