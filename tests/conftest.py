"""Shared fixtures for the cloudwire test suite."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from cloudwire.client.factory import create_client
from cloudwire.core.config import RetryConfig, Settings
from cloudwire.model.loader import load_service_model
from cloudwire.model.shapes import ServiceModel


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep credentials and overrides from the developer's shell out of tests."""
    for key in (
        "CLOUDWIRE_ACCESS_KEY_ID",
        "CLOUDWIRE_SECRET_ACCESS_KEY",
        "CLOUDWIRE_SESSION_TOKEN",
        "CLOUDWIRE_REGION",
        "CLOUDWIRE_ENDPOINT_URL",
        "CLOUDWIRE_CONFIG_FILE",
        "AWS_ACCESS_KEY_ID",
        "AWS_SECRET_ACCESS_KEY",
        "AWS_SESSION_TOKEN",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings() -> Settings:
    """Settings with static test credentials and zero retry backoff."""
    return Settings(
        region="us-east-1",
        access_key_id="AKIDEXAMPLE",
        secret_access_key="wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY",
        retry=RetryConfig(max_attempts=3, base_backoff=0.0, max_backoff=0.0),
    )


# ---------------------------------------------------------------------------
# Service models
# ---------------------------------------------------------------------------

@pytest.fixture
def ssm_model() -> ServiceModel:
    return load_service_model("ssm")


@pytest.fixture
def ec2_model() -> ServiceModel:
    return load_service_model("ec2")


@pytest.fixture
def rds_model() -> ServiceModel:
    return load_service_model("rds")


@pytest.fixture
def ml_model() -> ServiceModel:
    return load_service_model("machinelearning")


# ---------------------------------------------------------------------------
# HTTP helpers
# ---------------------------------------------------------------------------

def _json_response(
    body: dict[str, Any] | None = None,
    status_code: int = 200,
    request_id: str = "req-0001",
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """An ``application/x-amz-json-1.1`` response."""
    all_headers = {
        "Content-Type": "application/x-amz-json-1.1",
        "x-amzn-RequestId": request_id,
    }
    all_headers.update(headers or {})
    return httpx.Response(
        status_code=status_code,
        content=json.dumps(body or {}).encode("utf-8"),
        headers=all_headers,
    )


def _xml_response(body: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code=status_code,
        content=body.encode("utf-8"),
        headers={"Content-Type": "text/xml"},
    )


class RecordingHandler:
    """MockTransport handler that replays responses and keeps every request."""

    def __init__(self, *responses: httpx.Response) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        # The last response repeats once the list runs out
        canned = self._responses[min(len(self.requests), len(self._responses)) - 1]
        return httpx.Response(
            status_code=canned.status_code,
            headers=canned.headers,
            content=canned.content,
        )

    @property
    def last_json(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)

    @property
    def last_target(self) -> str:
        return self.requests[-1].headers.get("X-Amz-Target", "")


@pytest.fixture
def make_client(settings: Settings) -> Callable[..., Any]:
    """Build a client whose HTTP traffic goes to ``handler``."""

    def _make(service_name: str, handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any):
        return create_client(
            service_name,
            settings=settings,
            transport=httpx.MockTransport(handler),
            **kwargs,
        )

    return _make


@pytest.fixture
def json_response() -> Callable[..., httpx.Response]:
    return _json_response


@pytest.fixture
def xml_response() -> Callable[..., httpx.Response]:
    return _xml_response


@pytest.fixture
def recorder() -> type[RecordingHandler]:
    return RecordingHandler
