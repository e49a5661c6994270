"""cloudwire: typed, model-driven clients for cloud service APIs."""

from cloudwire.client.base import ServiceClient
from cloudwire.client.factory import create_client
from cloudwire.core.config import Settings, load_settings
from cloudwire.ml.predictor import RealtimePredictor
from cloudwire.model.loader import list_available_services, load_service_model

__version__ = "0.1.0"

__all__ = [
    "RealtimePredictor",
    "ServiceClient",
    "Settings",
    "__version__",
    "create_client",
    "list_available_services",
    "load_service_model",
    "load_settings",
]
