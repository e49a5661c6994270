"""HTTP transport over httpx.

One sync and one async client are created lazily and reused for every
request a service client sends. Tests inject an ``httpx.MockTransport``.
"""

from __future__ import annotations

import logging

import httpx

from cloudwire.core.config import HttpConfig
from cloudwire.core.errors import ConnectTimeoutError, EndpointConnectionError
from cloudwire.core.models import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)


class HttpTransport:
    def __init__(
        self,
        config: HttpConfig | None = None,
        *,
        transport: httpx.BaseTransport | httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or HttpConfig()
        self._transport = transport
        self._client: httpx.Client | None = None
        self._async_client: httpx.AsyncClient | None = None

    # -- Lifecycle -----------------------------------------------------------

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self._config.timeout, connect=self._config.connect_timeout)

    def _sync_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=self._timeout(),
                verify=self._config.verify_ssl,
                headers={"User-Agent": self._config.user_agent},
                transport=self._transport,  # type: ignore[arg-type]
            )
        return self._client

    def _aclient(self) -> httpx.AsyncClient:
        if self._async_client is None:
            self._async_client = httpx.AsyncClient(
                timeout=self._timeout(),
                verify=self._config.verify_ssl,
                headers={"User-Agent": self._config.user_agent},
                transport=self._transport,  # type: ignore[arg-type]
            )
        return self._async_client

    def close(self) -> None:
        """Close the sync client. The async client needs ``aclose``."""
        if self._async_client is not None:
            logger.warning(
                "close() called with the async HTTP client still open; "
                "await aclose() to release its connections"
            )
        if self._client is not None:
            self._client.close()
            self._client = None

    async def aclose(self) -> None:
        """Close both clients."""
        if self._async_client is not None:
            await self._async_client.aclose()
            self._async_client = None
        self.close()

    # -- Send ----------------------------------------------------------------

    def send(self, request: HttpRequest) -> HttpResponse:
        try:
            resp = self._sync_client().request(
                request.method, request.url, headers=request.headers, content=request.body
            )
        except httpx.TimeoutException as exc:
            raise ConnectTimeoutError(f"Timed out calling {request.url}: {exc}") from exc
        except (httpx.ConnectError, httpx.NetworkError) as exc:
            raise EndpointConnectionError(f"Could not connect to {request.url}: {exc}") from exc
        return _to_response(resp)

    async def asend(self, request: HttpRequest) -> HttpResponse:
        try:
            resp = await self._aclient().request(
                request.method, request.url, headers=request.headers, content=request.body
            )
        except httpx.TimeoutException as exc:
            raise ConnectTimeoutError(f"Timed out calling {request.url}: {exc}") from exc
        except (httpx.ConnectError, httpx.NetworkError) as exc:
            raise EndpointConnectionError(f"Could not connect to {request.url}: {exc}") from exc
        return _to_response(resp)


def _to_response(resp: httpx.Response) -> HttpResponse:
    logger.debug("HTTP %d from %s (%d bytes)", resp.status_code, resp.url, len(resp.content))
    return HttpResponse(
        status_code=resp.status_code,
        headers={k.lower(): v for k, v in resp.headers.items()},
        body=resp.content,
    )
