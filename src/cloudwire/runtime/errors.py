"""Service error classification and per-service exception classes.

Every error code resolves to exactly one ``ErrorCategory``. Modeled
codes are classified once, from the model's error trait, when the
``ErrorFactory`` is built; unmodeled codes are classified from the
code and the HTTP status of the response that carried them.
"""

from __future__ import annotations

import logging

from cloudwire.core.enums import ErrorCategory
from cloudwire.core.errors import CATEGORY_CLASSES, ServiceError
from cloudwire.core.models import ParsedError
from cloudwire.model.shapes import ServiceModel, Shape

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Classification tables
# ---------------------------------------------------------------------------

_THROTTLING_CODES = frozenset({
    "Throttling",
    "ThrottlingException",
    "ThrottledException",
    "RequestThrottled",
    "RequestThrottledException",
    "RequestLimitExceeded",
    "ProvisionedThroughputExceededException",
    "BandwidthLimitExceeded",
    "SlowDown",
    "PriorRequestNotComplete",
    "EC2ThrottledException",
})
_THROTTLING_MARKERS = ("Throttl", "LimitExceeded", "TooMany")

_NOT_FOUND_MARKERS = ("NotFound", "DoesNotExist", "NoSuch")

_AUTH_CODES = frozenset({
    "AccessDenied",
    "AccessDeniedException",
    "AuthFailure",
    "ExpiredToken",
    "ExpiredTokenException",
    "IncompleteSignature",
    "InvalidClientTokenId",
    "InvalidSignatureException",
    "MissingAuthenticationToken",
    "NotAuthorized",
    "SignatureDoesNotMatch",
    "UnauthorizedOperation",
    "UnrecognizedClientException",
})

_SERVER_MARKERS = (
    "InternalServer",
    "InternalFailure",
    "InternalError",
    "ServerException",
    "ServiceUnavailable",
)

# Codes worth retrying; a quota error such as AssociationLimitExceeded is not
_TRANSIENT_CODES = _THROTTLING_CODES | {
    "TooManyRequestsException",
    "TooManyUpdates",
    "LimitExceededException",
    "RequestTimeout",
    "RequestTimeoutException",
}


def categorize(code: str, status_code: int = 0, shape: Shape | None = None) -> ErrorCategory:
    """Map an error code + HTTP status to exactly one category.

    Precedence: throttling, not-found, authentication, server, then
    client input for everything else.
    """
    if code in _THROTTLING_CODES or any(m in code for m in _THROTTLING_MARKERS) or status_code == 429:
        return ErrorCategory.THROTTLING
    if any(m in code for m in _NOT_FOUND_MARKERS) or status_code == 404:
        return ErrorCategory.NOT_FOUND
    if code in _AUTH_CODES or status_code in (401, 403):
        return ErrorCategory.AUTHENTICATION
    if (
        (shape is not None and shape.fault)
        or any(m in code for m in _SERVER_MARKERS)
        or status_code >= 500
    ):
        return ErrorCategory.SERVER
    return ErrorCategory.CLIENT_INPUT


def is_transient(error: ServiceError) -> bool:
    """Whether retrying the same request may succeed."""
    if error.category is ErrorCategory.SERVER:
        return True
    return error.error_code in _TRANSIENT_CODES or error.status_code == 429


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class ErrorFactory:
    """Builds one exception class per modeled error code.

    Classes are reachable as attributes (``factory.InvalidDocumentException``)
    and all derive from the service base (``SimpleSystemsManagementError``)
    plus their category class.
    """

    def __init__(self, service_model: ServiceModel) -> None:
        self.service_name = service_model.service_name
        self.base: type[ServiceError] = type(
            f"{service_model.service_id}Error",
            (ServiceError,),
            {"__doc__": f"Base class for {service_model.service_name} service errors."},
        )
        self._by_code: dict[str, type[ServiceError]] = {}
        self._by_name: dict[str, type[ServiceError]] = {}
        self._fallbacks: dict[ErrorCategory, type[ServiceError]] = {}

        for shape in service_model.error_shapes:
            status = shape.error.http_status_code if shape.error else None
            category = categorize(shape.error_code, status or 0, shape)
            cls = type(
                shape.name,
                (self.base, CATEGORY_CLASSES[category]),
                {
                    "__doc__": shape.documentation or f"{shape.name} ({category.value})",
                    "category": category,
                    "code": shape.error_code,
                },
            )
            self._by_code[shape.error_code] = cls
            self._by_name[shape.name] = cls

    def __getattr__(self, name: str) -> type[ServiceError]:
        try:
            return self.__dict__["_by_name"][name]
        except KeyError:
            raise AttributeError(
                f"{self.__dict__.get('service_name')} has no modeled error {name!r}"
            ) from None

    @property
    def codes(self) -> dict[str, type[ServiceError]]:
        return dict(self._by_code)

    def class_for(self, code: str, status_code: int = 0) -> type[ServiceError]:
        cls = self._by_code.get(code)
        if cls is not None:
            return cls
        category = categorize(code, status_code)
        fallback = self._fallbacks.get(category)
        if fallback is None:
            category_cls = CATEGORY_CLASSES[category]
            fallback = type(
                f"{self.base.__name__[:-len('Error')]}{category_cls.__name__}",
                (self.base, category_cls),
                {"category": category, "code": ""},
            )
            self._fallbacks[category] = fallback
        return fallback

    def build(self, parsed: ParsedError, operation_name: str = "") -> ServiceError:
        cls = self.class_for(parsed.code, parsed.status_code)
        logger.debug(
            "Mapped %s error %r (HTTP %d) to %s",
            self.service_name, parsed.code, parsed.status_code, cls.__name__,
        )
        return cls(
            parsed.message,
            error_code=parsed.code,
            error_type=parsed.error_type,
            request_id=parsed.request_id,
            status_code=parsed.status_code,
            operation_name=operation_name,
        )
