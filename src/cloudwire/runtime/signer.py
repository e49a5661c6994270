"""Signature Version 4 request signing."""

from __future__ import annotations

import hashlib
import hmac
from datetime import datetime, timezone
from urllib.parse import quote, urlsplit

from cloudwire.core.models import HttpRequest

from .credentials import Credentials

ALGORITHM = "AWS4-HMAC-SHA256"

# Only these headers take part in the signature; proxies may add others
_SIGNED_HEADERS = frozenset(
    {"content-type", "host", "x-amz-date", "x-amz-security-token", "x-amz-target"}
)


def _hmac(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def signing_key(secret_key: str, date_stamp: str, region: str, service: str) -> bytes:
    k_date = _hmac(("AWS4" + secret_key).encode("utf-8"), date_stamp)
    k_region = _hmac(k_date, region)
    k_service = _hmac(k_region, service)
    return _hmac(k_service, "aws4_request")


def _canonical_query(query: str) -> str:
    if not query:
        return ""
    pairs = []
    for part in query.split("&"):
        key, _, value = part.partition("=")
        pairs.append((quote(key, safe="-_.~"), quote(value, safe="-_.~")))
    return "&".join(f"{k}={v}" for k, v in sorted(pairs))


class SigV4Signer:
    """Adds ``X-Amz-Date``, ``Authorization`` (and the session token)."""

    def __init__(self, signing_name: str, region: str) -> None:
        self.signing_name = signing_name
        self.region = region

    def sign(
        self,
        request: HttpRequest,
        credentials: Credentials,
        now: datetime | None = None,
    ) -> None:
        now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
        amz_date = now.strftime("%Y%m%dT%H%M%SZ")
        date_stamp = now.strftime("%Y%m%d")

        url = urlsplit(request.url)
        request.headers["X-Amz-Date"] = amz_date
        request.headers.setdefault("Host", url.netloc)
        if credentials.session_token:
            request.headers["X-Amz-Security-Token"] = credentials.session_token

        canonical, signed = self.canonical_request(request)
        scope = f"{date_stamp}/{self.region}/{self.signing_name}/aws4_request"
        string_to_sign = "\n".join(
            [ALGORITHM, amz_date, scope, hashlib.sha256(canonical.encode("utf-8")).hexdigest()]
        )
        key = signing_key(credentials.secret_access_key, date_stamp, self.region, self.signing_name)
        signature = hmac.new(key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

        request.headers["Authorization"] = (
            f"{ALGORITHM} Credential={credentials.access_key_id}/{scope}, "
            f"SignedHeaders={signed}, Signature={signature}"
        )

    def canonical_request(self, request: HttpRequest) -> tuple[str, str]:
        """Return ``(canonical_request, signed_headers)``."""
        url = urlsplit(request.url)
        headers = {
            k.lower(): " ".join(v.strip().split())
            for k, v in request.headers.items()
            if k.lower() in _SIGNED_HEADERS
        }
        names = sorted(headers)
        canonical_headers = "".join(f"{n}:{headers[n]}\n" for n in names)
        signed = ";".join(names)
        canonical = "\n".join(
            [
                request.method.upper(),
                quote(url.path or "/", safe="/-_.~"),
                _canonical_query(url.query),
                canonical_headers,
                signed,
                hashlib.sha256(request.body).hexdigest(),
            ]
        )
        return canonical, signed
