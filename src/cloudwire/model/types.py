"""Typed request/response models built from structure shapes.

Every structure shape becomes a pydantic model whose fields are the
snake_case member names, aliased to the wire names. Two families are
built per shape: input models enforce the shape's ``required`` list,
output models make every member optional (services may omit members
they consider required on input).
"""

from __future__ import annotations

import keyword
import warnings
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from cloudwire.core.enums import ShapeType
from cloudwire.core.errors import ParamValidationError
from cloudwire.core.models import ResponseMetadata

from .naming import xform_name
from .shapes import OperationModel, ServiceModel, ShapeRef

_SCALARS: dict[ShapeType, Any] = {
    ShapeType.STRING: str,
    ShapeType.INTEGER: int,
    ShapeType.LONG: int,
    ShapeType.FLOAT: float,
    ShapeType.DOUBLE: float,
    ShapeType.BOOLEAN: bool,
    ShapeType.TIMESTAMP: datetime,
    ShapeType.BLOB: bytes,
}

_RESERVED = set(dir(BaseModel))


class WireModel(BaseModel):
    """Base for all generated structure models."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    def to_wire(self) -> dict[str, Any]:
        """Wire-named dict of the members that are set."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ResponseBase(WireModel):
    """Base for generated ``<Operation>Response`` models."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    response_metadata: ResponseMetadata = Field(
        default_factory=ResponseMetadata, exclude=True
    )

    def __getattr__(self, name: str) -> Any:
        # <Op>Response used to wrap a separate <Op>Result; keep the old accessor
        op_name = type(self).__name__.removesuffix("Response")
        if op_name and name == f"{xform_name(op_name)}_result":
            warnings.warn(
                f"{name} is deprecated; all members of {op_name}Result are "
                f"available directly on {type(self).__name__}.",
                DeprecationWarning,
                stacklevel=2,
            )
            return self
        return super().__getattr__(name)


def field_name(member_name: str) -> str:
    """Python attribute name for a wire member name."""
    name = xform_name(member_name)
    if keyword.iskeyword(name) or name in _RESERVED or name.startswith("model_"):
        name += "_"
    return name


class ModelFactory:
    """Builds and caches the pydantic classes for one service model."""

    def __init__(self, service_model: ServiceModel) -> None:
        self._service = service_model
        self._cache: dict[tuple[str, bool], type[WireModel]] = {}
        self._building: set[tuple[str, bool]] = set()
        self._operation_classes: dict[str, type[WireModel]] = {}

    # -- Shapes --------------------------------------------------------------

    def model_for(self, shape_name: str, *, for_input: bool = False) -> type[WireModel]:
        key = (shape_name, for_input)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        model = self._create(shape_name, shape_name, for_input, WireModel)
        self._cache[key] = model
        return model

    def _create(
        self,
        class_name: str,
        shape_name: str,
        for_input: bool,
        base: type[WireModel],
    ) -> type[WireModel]:
        shape = self._service.shape(shape_name)
        key = (shape_name, for_input)
        self._building.add(key)
        try:
            fields: dict[str, Any] = {}
            for member_name, ref in shape.members.items():
                annotation = self._annotation(ref, for_input)
                if for_input and member_name in shape.required:
                    fields[field_name(member_name)] = (
                        annotation, Field(..., alias=member_name),
                    )
                else:
                    fields[field_name(member_name)] = (
                        annotation | None, Field(default=None, alias=member_name),
                    )
        finally:
            self._building.discard(key)
        model = create_model(class_name, __base__=base, **fields)
        model.__doc__ = shape.documentation or f"{class_name} ({self._service.service_name})"
        return model

    def _annotation(self, ref: ShapeRef, for_input: bool) -> Any:
        shape = self._service.shape(ref.shape)
        if shape.type is ShapeType.STRUCTURE:
            if (shape.name, for_input) in self._building:
                return dict[str, Any]  # recursive shape
            return self.model_for(shape.name, for_input=for_input)
        if shape.type is ShapeType.LIST:
            return list[self._annotation(shape.member, for_input)]  # type: ignore[arg-type]
        if shape.type is ShapeType.MAP:
            return dict[  # type: ignore[misc]
                self._annotation(shape.key, for_input),  # type: ignore[arg-type]
                self._annotation(shape.value, for_input),  # type: ignore[arg-type]
            ]
        return _SCALARS[shape.type]

    # -- Operations ----------------------------------------------------------

    def request_class(self, operation: OperationModel) -> type[WireModel]:
        name = f"{operation.name}Request"
        if name not in self._operation_classes:
            if operation.input is None:
                self._operation_classes[name] = create_model(name, __base__=WireModel)
            else:
                self._operation_classes[name] = self._create(
                    name, operation.input.shape, True, WireModel
                )
        return self._operation_classes[name]

    def response_class(self, operation: OperationModel) -> type[ResponseBase]:
        name = f"{operation.name}Response"
        if name not in self._operation_classes:
            if operation.output is None:
                self._operation_classes[name] = create_model(name, __base__=ResponseBase)
            else:
                self._operation_classes[name] = self._create(
                    name, operation.output.shape, False, ResponseBase
                )
        return self._operation_classes[name]  # type: ignore[return-value]

    def build_request(
        self,
        operation: OperationModel,
        request: WireModel | dict[str, Any] | None = None,
        **params: Any,
    ) -> WireModel:
        """Validate caller input into the operation's request model.

        ``request`` may be a request instance or a dict; keyword
        parameters (wire or snake_case names) are merged on top. Keys
        are folded to field names first, so ``{"NextToken": ...}`` and
        ``next_token=...`` name the same member and the later one wins.
        """
        cls = self.request_class(operation)
        if isinstance(request, cls) and not params:
            return request
        names = {info.alias or name: name for name, info in cls.model_fields.items()}
        sources: list[dict[str, Any]] = []
        if isinstance(request, WireModel):
            sources.append(request.model_dump(exclude_none=True))
        elif request is not None:
            sources.append(dict(request))
        sources.append(params)
        data: dict[str, Any] = {}
        for source in sources:
            for key, value in source.items():
                data[names.get(key, key)] = value
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ParamValidationError(operation.name, str(exc)) from exc

    def build_response(
        self,
        operation: OperationModel,
        data: dict[str, Any],
        metadata: ResponseMetadata | None = None,
    ) -> ResponseBase:
        cls = self.response_class(operation)
        response = cls.model_validate(data)
        if metadata is not None:
            response.response_metadata = metadata
        return response
