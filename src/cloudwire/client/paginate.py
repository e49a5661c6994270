"""Token-driven pagination over list/describe operations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, AsyncIterator, Iterator

from cloudwire.model.shapes import OperationModel, PaginatorConfig
from cloudwire.model.types import ResponseBase, field_name

if TYPE_CHECKING:
    from .base import ServiceClient

logger = logging.getLogger(__name__)


class Paginator:
    """Iterates the pages of one operation.

    Stops when the response carries no output token, or when the service
    hands back a token it already returned.
    """

    def __init__(
        self,
        client: ServiceClient,
        operation: OperationModel,
        config: PaginatorConfig,
    ) -> None:
        self._client = client
        self._operation = operation
        self._config = config

    @property
    def result_key(self) -> str | None:
        return self._config.result_key

    def _page_params(self, params: dict[str, Any], token: str | None) -> dict[str, Any]:
        page_params = dict(params)
        if token:
            page_params[self._config.input_token] = token
        return page_params

    def _next_token(self, page: ResponseBase, seen: set[str]) -> str | None:
        token = getattr(page, field_name(self._config.output_token), None)
        if not token:
            return None
        if token in seen:
            logger.warning(
                "%s returned a repeated pagination token, stopping", self._operation.name
            )
            return None
        seen.add(token)
        return token

    def paginate(self, **params: Any) -> Iterator[ResponseBase]:
        token: str | None = None
        seen: set[str] = set()
        page_no = 0
        while True:
            page = self._client.invoke(self._operation.name, **self._page_params(params, token))
            page_no += 1
            yield page
            token = self._next_token(page, seen)
            if token is None:
                logger.debug("%s: %d pages", self._operation.name, page_no)
                return

    async def apaginate(self, **params: Any) -> AsyncIterator[ResponseBase]:
        token: str | None = None
        seen: set[str] = set()
        while True:
            page = await self._client.ainvoke(
                self._operation.name, **self._page_params(params, token)
            )
            yield page
            token = self._next_token(page, seen)
            if token is None:
                return

    def build_full_result(self, **params: Any) -> list[Any]:
        """All ``result_key`` items across every page."""
        if not self._config.result_key:
            raise ValueError(f"{self._operation.name} pagination has no result_key")
        attr = field_name(self._config.result_key)
        items: list[Any] = []
        for page in self.paginate(**params):
            items.extend(getattr(page, attr, None) or [])
        return items
