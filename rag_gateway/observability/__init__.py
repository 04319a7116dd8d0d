"""Observability module for metrics."""

from rag_gateway.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    get_metrics_content_type,
    track_inference_request,
    track_model_pull,
    track_query,
)

__all__ = [
    "MetricsMiddleware",
    "get_metrics",
    "get_metrics_content_type",
    "track_inference_request",
    "track_model_pull",
    "track_query",
]
