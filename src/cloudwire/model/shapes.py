"""Service model document types.

A service model is the JSON document that describes one API version of
one service: its metadata (protocol, endpoint prefix, signing name),
its operations, the shapes those operations exchange, and optional
pagination hints. These pydantic models mirror the published document
layout (camelCase keys are accepted via aliases) so a model file can be
validated with ``ServiceModel.from_dict``.
"""

from __future__ import annotations

from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from cloudwire.core.enums import Protocol, ShapeType, TimestampFormat
from cloudwire.core.errors import ServiceModelError, UnknownOperationError

from .naming import xform_name


class _DocModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------

class ShapeRef(_DocModel):
    """A reference from a member/operation to a named shape."""

    shape: str
    location_name: str | None = Field(default=None, alias="locationName")
    query_name: str | None = Field(default=None, alias="queryName")
    flattened: bool | None = None
    result_wrapper: str | None = Field(default=None, alias="resultWrapper")
    timestamp_format: TimestampFormat | None = Field(default=None, alias="timestampFormat")
    deprecated: bool = False
    documentation: str = ""


class ErrorTrait(_DocModel):
    code: str | None = None
    http_status_code: int | None = Field(default=None, alias="httpStatusCode")
    sender_fault: bool = Field(default=False, alias="senderFault")


class Shape(_DocModel):
    name: str = ""
    type: ShapeType
    members: dict[str, ShapeRef] = Field(default_factory=dict)
    member: ShapeRef | None = None  # list element
    key: ShapeRef | None = None  # map key
    value: ShapeRef | None = None  # map value
    required: list[str] = Field(default_factory=list)
    enum: list[str] = Field(default_factory=list)
    location_name: str | None = Field(default=None, alias="locationName")
    flattened: bool = False
    timestamp_format: TimestampFormat | None = Field(default=None, alias="timestampFormat")
    exception: bool = False
    fault: bool = False
    error: ErrorTrait | None = None
    documentation: str = ""

    @property
    def error_code(self) -> str:
        """Wire error code for exception shapes (``error.code`` or the name)."""
        if self.error and self.error.code:
            return self.error.code
        return self.name

    def refs(self) -> Iterator[ShapeRef]:
        yield from self.members.values()
        for ref in (self.member, self.key, self.value):
            if ref is not None:
                yield ref


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

class HttpTrait(_DocModel):
    method: str = "POST"
    request_uri: str = Field(default="/", alias="requestUri")


class OperationModel(_DocModel):
    name: str
    http: HttpTrait = Field(default_factory=HttpTrait)
    input: ShapeRef | None = None
    output: ShapeRef | None = None
    errors: list[ShapeRef] = Field(default_factory=list)
    documentation: str = ""
    deprecated: bool = False

    _service: Any = PrivateAttr(default=None)

    @property
    def python_name(self) -> str:
        return xform_name(self.name)

    @property
    def service(self) -> ServiceModel:
        if self._service is None:
            raise ServiceModelError(f"Operation {self.name} is not bound to a service")
        return self._service

    @property
    def input_shape(self) -> Shape | None:
        return self.service.shape(self.input.shape) if self.input else None

    @property
    def output_shape(self) -> Shape | None:
        return self.service.shape(self.output.shape) if self.output else None

    @property
    def error_shapes(self) -> list[Shape]:
        return [self.service.shape(ref.shape) for ref in self.errors]


class PaginatorConfig(_DocModel):
    input_token: str
    output_token: str
    result_key: str | None = None
    limit_key: str | None = None


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class ServiceMetadata(_DocModel):
    api_version: str = Field(alias="apiVersion")
    endpoint_prefix: str = Field(alias="endpointPrefix")
    protocol: Protocol
    service_full_name: str = Field(default="", alias="serviceFullName")
    service_id: str = Field(default="", alias="serviceId")
    json_version: str = Field(default="1.1", alias="jsonVersion")
    target_prefix: str | None = Field(default=None, alias="targetPrefix")
    signature_version: str = Field(default="v4", alias="signatureVersion")
    signing_name: str | None = Field(default=None, alias="signingName")
    xml_namespace: str | None = Field(default=None, alias="xmlNamespace")
    uid: str | None = None


class ServiceModel:
    """A validated, cross-referenced service model document."""

    def __init__(
        self,
        metadata: ServiceMetadata,
        operations: dict[str, OperationModel],
        shapes: dict[str, Shape],
        pagination: dict[str, PaginatorConfig] | None = None,
        service_name: str | None = None,
    ) -> None:
        self.metadata = metadata
        self.shapes = shapes
        self.operations = operations
        self.pagination = pagination or {}
        self.service_name = service_name or metadata.endpoint_prefix
        self._by_python_name = {op.python_name: op for op in operations.values()}
        for op in operations.values():
            op._service = self
        self._check_refs()

    @classmethod
    def from_dict(
        cls, doc: dict[str, Any], service_name: str | None = None
    ) -> ServiceModel:
        """Build a model from a parsed service-2.json document."""
        try:
            metadata = ServiceMetadata.model_validate(doc["metadata"])
            shapes = {
                name: Shape.model_validate({**body, "name": name})
                for name, body in doc.get("shapes", {}).items()
            }
            operations = {
                name: OperationModel.model_validate({**body, "name": name})
                for name, body in doc.get("operations", {}).items()
            }
            pagination = {
                name: PaginatorConfig.model_validate(body)
                for name, body in doc.get("pagination", {}).items()
            }
        except KeyError as exc:
            raise ServiceModelError(f"Service model missing section {exc}") from exc
        except ValueError as exc:
            raise ServiceModelError(f"Invalid service model: {exc}") from exc
        return cls(metadata, operations, shapes, pagination, service_name)

    # -- Lookup --------------------------------------------------------------

    @property
    def protocol(self) -> Protocol:
        return self.metadata.protocol

    @property
    def signing_name(self) -> str:
        return self.metadata.signing_name or self.metadata.endpoint_prefix

    @property
    def service_id(self) -> str:
        """CamelCase identifier used for class names."""
        raw = self.metadata.service_id or self.metadata.service_full_name or self.service_name
        return "".join(part[:1].upper() + part[1:] for part in raw.replace("-", " ").split())

    @property
    def operation_names(self) -> list[str]:
        return sorted(self.operations)

    def operation(self, name: str) -> OperationModel:
        """Look an operation up by wire name (``DescribeVpcs``) or python name."""
        op = self.operations.get(name) or self._by_python_name.get(name)
        if op is None:
            raise UnknownOperationError(self.service_name, name)
        return op

    def has_operation(self, name: str) -> bool:
        return name in self.operations or name in self._by_python_name

    def shape(self, name: str) -> Shape:
        try:
            return self.shapes[name]
        except KeyError:
            raise ServiceModelError(
                f"Shape {name!r} is not defined in {self.service_name}"
            ) from None

    @property
    def error_shapes(self) -> list[Shape]:
        return [s for s in self.shapes.values() if s.exception]

    def pagination_for(self, operation_name: str) -> PaginatorConfig | None:
        return self.pagination.get(self.operation(operation_name).name)

    # -- Validation ----------------------------------------------------------

    def _check_refs(self) -> None:
        for shape in self.shapes.values():
            for ref in shape.refs():
                self.shape(ref.shape)
            missing = set(shape.required) - set(shape.members)
            if missing:
                raise ServiceModelError(
                    f"Shape {shape.name} requires undefined members {sorted(missing)}"
                )
        for op in self.operations.values():
            refs = [op.input, op.output, *op.errors]
            for ref in refs:
                if ref is not None:
                    self.shape(ref.shape)
        for name in self.pagination:
            self.operation(name)

    def __repr__(self) -> str:
        return (
            f"ServiceModel({self.service_name!r}, "
            f"api_version={self.metadata.api_version!r}, "
            f"operations={len(self.operations)})"
        )
