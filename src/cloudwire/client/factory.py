"""Build a ``ServiceClient`` from settings."""

from __future__ import annotations

import logging

import httpx

from cloudwire.core.config import Settings, load_settings
from cloudwire.core.interfaces import ITransport
from cloudwire.model.loader import load_service_model
from cloudwire.runtime.credentials import Credentials, resolve_credentials
from cloudwire.runtime.endpoints import resolve_endpoint
from cloudwire.runtime.transport import HttpTransport

from .base import ServiceClient

logger = logging.getLogger(__name__)


def create_client(
    service_name: str,
    *,
    region: str | None = None,
    endpoint_url: str | None = None,
    credentials: Credentials | None = None,
    settings: Settings | None = None,
    transport: ITransport | httpx.BaseTransport | httpx.AsyncBaseTransport | None = None,
    api_version: str | None = None,
) -> ServiceClient:
    """Create a client for ``service_name``.

    Explicit arguments win over ``settings``; settings default to the
    environment (``CLOUDWIRE_*``).

    Args:
        service_name: Model directory name, e.g. ``"ssm"``.
        region: Region to sign for and resolve the endpoint in.
        endpoint_url: Send requests here instead of the resolved endpoint.
        credentials: Static credentials; resolved from settings/env when omitted.
        settings: Pre-loaded settings.
        transport: An ``ITransport``, or an httpx transport (e.g.
            ``httpx.MockTransport``) to wrap in the default ``HttpTransport``.
        api_version: Model API version; newest available when omitted.
    """
    settings = settings or load_settings()
    region = region or settings.region
    model = load_service_model(service_name, api_version, settings.model_paths)
    endpoint = resolve_endpoint(model.metadata, region, endpoint_url or settings.endpoint_url)

    if transport is None or isinstance(transport, (httpx.BaseTransport, httpx.AsyncBaseTransport)):
        http = HttpTransport(settings.http, transport=transport)
    else:
        http = transport

    if credentials is None:
        credentials = resolve_credentials(settings)

    logger.debug("Created %s client for %s at %s", service_name, region, endpoint)
    return ServiceClient(
        model,
        region=region,
        endpoint_url=endpoint,
        transport=http,
        credentials=credentials,
        retry=settings.retry,
    )
