"""Machine Learning convenience wrappers."""

from cloudwire.ml.predictor import RealtimePredictor

__all__ = ["RealtimePredictor"]
