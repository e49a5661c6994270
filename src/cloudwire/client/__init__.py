"""Service clients built from service models."""

from cloudwire.client.base import ServiceClient
from cloudwire.client.factory import create_client
from cloudwire.client.paginate import Paginator

__all__ = ["Paginator", "ServiceClient", "create_client"]
