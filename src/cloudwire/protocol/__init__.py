"""Wire protocol serializers and parsers, selected by ``metadata.protocol``."""

from __future__ import annotations

from cloudwire.core.enums import Protocol
from cloudwire.core.interfaces import IParser, ISerializer
from cloudwire.model.shapes import ServiceModel

from .parse import EC2Parser, JSONParser, QueryParser
from .serialize import EC2Serializer, JSONSerializer, QuerySerializer

_SERIALIZERS = {
    Protocol.JSON: JSONSerializer,
    Protocol.QUERY: QuerySerializer,
    Protocol.EC2: EC2Serializer,
}

_PARSERS = {
    Protocol.JSON: JSONParser,
    Protocol.QUERY: QueryParser,
    Protocol.EC2: EC2Parser,
}


def get_serializer(service_model: ServiceModel) -> ISerializer:
    return _SERIALIZERS[service_model.protocol](service_model)


def get_parser(service_model: ServiceModel) -> IParser:
    return _PARSERS[service_model.protocol](service_model)


__all__ = [
    "EC2Parser",
    "EC2Serializer",
    "JSONParser",
    "JSONSerializer",
    "QueryParser",
    "QuerySerializer",
    "get_parser",
    "get_serializer",
]
