"""Endpoint resolution for a service + region."""

from __future__ import annotations

from cloudwire.core.errors import ConfigError
from cloudwire.model.shapes import ServiceMetadata

# Partitions whose DNS suffix differs from the default
_DNS_SUFFIXES: dict[str, str] = {
    "cn-": "amazonaws.com.cn",
}
_DEFAULT_SUFFIX = "amazonaws.com"


def dns_suffix(region: str) -> str:
    for prefix, suffix in _DNS_SUFFIXES.items():
        if region.startswith(prefix):
            return suffix
    return _DEFAULT_SUFFIX


def resolve_endpoint(
    metadata: ServiceMetadata,
    region: str,
    endpoint_url: str | None = None,
) -> str:
    """Return the base URL requests for this service are sent to.

    An explicit ``endpoint_url`` always wins; otherwise
    ``https://<endpointPrefix>.<region>.<dns suffix>``.
    """
    if endpoint_url:
        if "://" not in endpoint_url:
            endpoint_url = f"https://{endpoint_url}"
        return endpoint_url.rstrip("/")
    if not region:
        raise ConfigError(
            f"A region is required to resolve the {metadata.endpoint_prefix} endpoint"
        )
    return f"https://{metadata.endpoint_prefix}.{region}.{dns_suffix(region)}"
