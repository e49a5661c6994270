"""Generic service client.

One ``ServiceClient`` class serves every service: operations are looked
up in the service model, and each one is exposed as a snake_case method
(``client.describe_vpcs(...)``) plus an ``a``-prefixed coroutine twin
(``await client.adescribe_vpcs(...)``). Both share the same
validate -> serialize -> sign -> send -> parse path.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

from cloudwire.core.config import RetryConfig
from cloudwire.core.errors import CloudWireError, OperationNotPageableError
from cloudwire.core.interfaces import IParser, ISerializer, ITransport
from cloudwire.core.models import HttpRequest, HttpResponse, ResponseMetadata
from cloudwire.model.shapes import OperationModel, ServiceModel
from cloudwire.model.types import ModelFactory, ResponseBase, WireModel
from cloudwire.observability.logger import get_logger, invocation
from cloudwire.protocol import get_parser, get_serializer
from cloudwire.runtime.credentials import Credentials, require_credentials
from cloudwire.runtime.errors import ErrorFactory
from cloudwire.runtime.retry import RetryPolicy
from cloudwire.runtime.signer import SigV4Signer

from .paginate import Paginator

log = get_logger(__name__)


class ServiceClient:
    """Client for one service in one region.

    Usually built with ``cloudwire.create_client``; the constructor
    takes already-resolved collaborators.
    """

    def __init__(
        self,
        service_model: ServiceModel,
        *,
        region: str,
        endpoint_url: str,
        transport: ITransport,
        credentials: Credentials | None = None,
        retry: RetryConfig | None = None,
    ) -> None:
        self._model = service_model
        self._region = region
        self._endpoint_url = endpoint_url
        self._transport = transport
        self._credentials = credentials
        self._serializer: ISerializer = get_serializer(service_model)
        self._parser: IParser = get_parser(service_model)
        self._signer = SigV4Signer(service_model.signing_name, region)
        self._retry = RetryPolicy(retry)
        self._types = ModelFactory(service_model)
        self._exceptions = ErrorFactory(service_model)

    # -- Introspection -------------------------------------------------------

    @property
    def service_model(self) -> ServiceModel:
        return self._model

    @property
    def region(self) -> str:
        return self._region

    @property
    def endpoint_url(self) -> str:
        return self._endpoint_url

    @property
    def exceptions(self) -> ErrorFactory:
        """Modeled error classes, e.g. ``client.exceptions.InvalidDocument``."""
        return self._exceptions

    @property
    def types(self) -> ModelFactory:
        return self._types

    def request_class(self, operation_name: str) -> type[WireModel]:
        return self._types.request_class(self._model.operation(operation_name))

    def response_class(self, operation_name: str) -> type[ResponseBase]:
        return self._types.response_class(self._model.operation(operation_name))

    def can_paginate(self, operation_name: str) -> bool:
        return self._model.pagination_for(operation_name) is not None

    def get_paginator(self, operation_name: str) -> Paginator:
        config = self._model.pagination_for(operation_name)
        if config is None:
            raise OperationNotPageableError(operation_name)
        return Paginator(self, self._model.operation(operation_name), config)

    # -- Invocation ----------------------------------------------------------

    def _prepare(
        self,
        op: OperationModel,
        request: WireModel | dict[str, Any] | None,
        params: dict[str, Any],
    ) -> HttpRequest:
        payload = self._types.build_request(op, request, **params)
        return self._serializer.serialize(op, payload.to_wire(), self._endpoint_url)

    def _sign(self, http_request: HttpRequest) -> None:
        self._signer.sign(http_request, require_credentials(self._credentials))

    def _handle(self, op: OperationModel, response: HttpResponse, attempt: int) -> ResponseBase:
        request_id = self._parser.request_id(response)
        if not response.ok:
            parsed = self._parser.parse_error(response)
            error = self._exceptions.build(parsed, op.name)
            log.info(
                "service_error",
                request_id=parsed.request_id or request_id,
                status_code=response.status_code,
                error_code=parsed.code,
                category=error.category.value,
                attempt=attempt,
            )
            raise error
        data = self._parser.parse(op, response)
        metadata = ResponseMetadata(
            request_id=request_id,
            http_status_code=response.status_code,
            http_headers=dict(response.headers),
            retry_attempts=attempt - 1,
        )
        log.debug(
            "call_succeeded",
            request_id=request_id,
            status_code=response.status_code,
            attempt=attempt,
        )
        return self._types.build_response(op, data, metadata)

    def invoke(
        self,
        operation_name: str,
        request: WireModel | dict[str, Any] | None = None,
        **params: Any,
    ) -> ResponseBase:
        """Call ``operation_name`` and block until the typed response arrives.

        Args:
            operation_name: Wire (``DescribeVpcs``) or snake_case name.
            request: A ``<Op>Request`` instance or a dict of members.
            **params: Members by wire or snake_case name, merged over ``request``.

        Raises:
            ParamValidationError: Input does not satisfy the input shape.
            ServiceError: The service answered with an error (a modeled
                subclass from ``client.exceptions`` when the code is known).
            TransportError: No response after the last retry.
        """
        op = self._model.operation(operation_name)
        with invocation(self._model.service_name, op.name):
            http_request = self._prepare(op, request, params)
            attempt = 0
            while True:
                attempt += 1
                self._sign(http_request)
                try:
                    response = self._transport.send(http_request)
                    return self._handle(op, response, attempt)
                except CloudWireError as exc:
                    if not self._retry.should_retry(exc, attempt):
                        raise
                    wait = self._retry.backoff_delay(attempt)
                    self._retry.log_retry(op.name, exc, attempt, wait)
                    time.sleep(wait)

    async def ainvoke(
        self,
        operation_name: str,
        request: WireModel | dict[str, Any] | None = None,
        **params: Any,
    ) -> ResponseBase:
        """Async variant of :meth:`invoke`."""
        op = self._model.operation(operation_name)
        with invocation(self._model.service_name, op.name):
            http_request = self._prepare(op, request, params)
            attempt = 0
            while True:
                attempt += 1
                self._sign(http_request)
                try:
                    response = await self._transport.asend(http_request)
                    return self._handle(op, response, attempt)
                except CloudWireError as exc:
                    if not self._retry.should_retry(exc, attempt):
                        raise
                    wait = self._retry.backoff_delay(attempt)
                    self._retry.log_retry(op.name, exc, attempt, wait)
                    await asyncio.sleep(wait)

    # -- Per-operation methods -----------------------------------------------

    def __getattr__(self, name: str) -> Any:
        model: ServiceModel | None = self.__dict__.get("_model")
        if model is None or name.startswith("_"):
            raise AttributeError(name)
        if model.has_operation(name):
            return self._bind(model.operation(name), is_async=False)
        if name.startswith("a") and model.has_operation(name[1:]):
            return self._bind(model.operation(name[1:]), is_async=True)
        raise AttributeError(
            f"{type(self).__name__} for {model.service_name!r} has no attribute {name!r}"
        )

    def __dir__(self) -> list[str]:
        names = set(super().__dir__())
        for op in self._model.operations.values():
            names.add(op.python_name)
            names.add("a" + op.python_name)
        return sorted(names)

    def _bind(self, op: OperationModel, *, is_async: bool) -> Any:
        if is_async:
            async def method(request: WireModel | dict[str, Any] | None = None, **params: Any) -> ResponseBase:
                return await self.ainvoke(op.name, request, **params)
            method.__name__ = "a" + op.python_name
        else:
            def method(request: WireModel | dict[str, Any] | None = None, **params: Any) -> ResponseBase:  # type: ignore[misc]
                return self.invoke(op.name, request, **params)
            method.__name__ = op.python_name
        method.__doc__ = op.documentation or f"Call {self._model.service_name} {op.name}."
        return method

    # -- Lifecycle -----------------------------------------------------------

    def close(self) -> None:
        """Release the sync connection pool.

        A client that made async calls must be closed with ``aclose``
        (or ``async with``); ``close`` only logs a warning for it.
        """
        self._transport.close()

    async def aclose(self) -> None:
        await self._transport.aclose()

    def __enter__(self) -> ServiceClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    async def __aenter__(self) -> ServiceClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return (
            f"ServiceClient({self._model.service_name!r}, region={self._region!r}, "
            f"endpoint_url={self._endpoint_url!r})"
        )
