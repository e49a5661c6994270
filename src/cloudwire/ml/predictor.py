"""Real-time predictions against a Machine Learning model endpoint.

Usage::

    with RealtimePredictor("ml-abc123") as predictor:
        prediction = predictor.predict({"age": "42", "plan": "gold"})
        print(prediction.predicted_label)
"""

from __future__ import annotations

import logging
from typing import Any

from cloudwire.client.base import ServiceClient
from cloudwire.client.factory import create_client
from cloudwire.core.errors import CloudWireError

logger = logging.getLogger(__name__)

SERVICE_NAME = "machinelearning"


class RealtimePredictor:
    """Calls ``Predict`` for one model.

    The real-time endpoint is looked up with ``GetMLModel`` on first use
    and cached unless one is passed in.

    Accepted forms::

        RealtimePredictor(client, "ml-abc123")
        RealtimePredictor(client, "ml-abc123", endpoint_url)
        RealtimePredictor("ml-abc123", region="eu-west-1")

    A predictor built from a bare model id creates (and later closes)
    its own client; ``client_kwargs`` go to ``create_client``.
    """

    def __init__(
        self,
        client_or_model_id: ServiceClient | str | None = None,
        model_id: str | None = None,
        endpoint: str | None = None,
        **client_kwargs: Any,
    ) -> None:
        client: ServiceClient | None
        if isinstance(client_or_model_id, str):
            if model_id is not None:
                raise TypeError("model_id given both as the first argument and as model_id")
            client, model_id = None, client_or_model_id
        else:
            client = client_or_model_id
        if client is not None and client_kwargs:
            raise TypeError(
                f"unexpected arguments with an existing client: {', '.join(sorted(client_kwargs))}"
            )
        if not model_id:
            raise ValueError("model_id is required")
        self._owns_client = client is None
        self._client = client if client is not None else create_client(SERVICE_NAME, **client_kwargs)
        self._model_id = model_id
        self._endpoint = endpoint
        self._closed = False

    @property
    def model_id(self) -> str:
        return self._model_id

    @property
    def client(self) -> ServiceClient:
        return self._client

    @property
    def endpoint(self) -> str:
        """Real-time endpoint URL of the model (looked up once)."""
        if self._endpoint is None:
            self._endpoint = self._endpoint_from(
                self._client.get_ml_model(ml_model_id=self._model_id)
            )
        return self._endpoint

    async def aendpoint(self) -> str:
        if self._endpoint is None:
            self._endpoint = self._endpoint_from(
                await self._client.aget_ml_model(ml_model_id=self._model_id)
            )
        return self._endpoint

    def _endpoint_from(self, response: Any) -> str:
        info = response.endpoint_info
        if info is None or not info.endpoint_url:
            raise CloudWireError(f"Model {self._model_id} has no real-time endpoint")
        logger.debug("Resolved endpoint for %s: %s", self._model_id, info.endpoint_url)
        return info.endpoint_url

    def predict(self, record: dict[str, str]) -> Any:
        """Predict ``record`` and return the ``Prediction`` member.

        Service errors (``PredictorNotMountedException``,
        ``InvalidInputException``, ...) propagate unchanged.
        """
        response = self._client.predict(
            ml_model_id=self._model_id,
            predict_endpoint=self.endpoint,
            record=record,
        )
        return response.prediction

    async def apredict(self, record: dict[str, str]) -> Any:
        response = await self._client.apredict(
            ml_model_id=self._model_id,
            predict_endpoint=await self.aendpoint(),
            record=record,
        )
        return response.prediction

    # -- Lifecycle -----------------------------------------------------------

    def close(self) -> None:
        """Release the client if this predictor created it.

        After ``apredict`` use ``aclose`` (or ``async with``) instead;
        ``close`` cannot release the async connection pool.
        """
        if self._closed:
            return
        self._closed = True
        if self._owns_client:
            self._client.close()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_client:
            await self._client.aclose()

    def __enter__(self) -> RealtimePredictor:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    async def __aenter__(self) -> RealtimePredictor:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()
