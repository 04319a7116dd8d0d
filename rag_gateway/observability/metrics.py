"""Prometheus metrics for the gateway.

Provides metrics instrumentation for:
- HTTP request latency and counts
- Ollama request latency by operation
- Model auto-pulls
- Query mode and retrieved source counts
"""

import re
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware

from rag_gateway.logging_config import get_logger

logger = get_logger(__name__)

# HTTP Request Metrics
HTTP_REQUEST_DURATION = Histogram(
    "gateway_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status_code"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

HTTP_REQUEST_TOTAL = Counter(
    "gateway_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

# Ollama Metrics
INFERENCE_REQUEST_DURATION = Histogram(
    "gateway_inference_request_duration_seconds",
    "Ollama request duration in seconds",
    ["operation", "status"],
    buckets=[0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 300.0],
)

INFERENCE_REQUEST_TOTAL = Counter(
    "gateway_inference_requests_total",
    "Total Ollama requests",
    ["operation", "status"],
)

MODEL_PULL_TOTAL = Counter(
    "gateway_model_auto_pulls_total",
    "Models pulled on first use",
    ["status"],
)

# Query Metrics
QUERY_TOTAL = Counter(
    "gateway_queries_total",
    "Total unified queries",
    ["mode", "stream"],
)

QUERY_SOURCES_RETURNED = Histogram(
    "gateway_query_sources_returned",
    "Number of sources retrieved per RAG query",
    buckets=[0, 1, 2, 3, 5, 10, 20, 50],
)

_COLLECTION_PATH = re.compile(r"^/collections/[^/]+(?P<rest>/documents|/search)?$")
_TOKEN_PATH = re.compile(r"^/api-tokens/[^/]+$")

# Fixed paths served by the gateway; anything unmatched shares one label.
KNOWN_ENDPOINTS = frozenset(
    {
        "/",
        "/health",
        "/metrics",
        "/query",
        "/embed",
        "/generate",
        "/chat",
        "/collections",
        "/models",
        "/models/pull",
        "/models/copy",
        "/api-tokens",
    }
)
OTHER_ENDPOINT = "other"


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request and collect metrics."""
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        endpoint = normalize_endpoint(request.url.path)

        HTTP_REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).observe(duration)

        HTTP_REQUEST_TOTAL.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()

        return response


def normalize_endpoint(path: str) -> str:
    """Collapse resource names so label cardinality stays bounded.

    Paths outside the gateway's route families map to "other".
    """
    if path in KNOWN_ENDPOINTS:
        return path
    match = _COLLECTION_PATH.match(path)
    if match:
        return f"/collections/{{name}}{match.group('rest') or ''}"
    if path.startswith("/models/"):
        return "/models/{name}"
    if _TOKEN_PATH.match(path):
        return "/api-tokens/{id}"
    return OTHER_ENDPOINT


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST


def track_inference_request(operation: str, duration: float, success: bool = True) -> None:
    """Track one Ollama call.

    Args:
        operation: Ollama endpoint name (chat, embed, pull, ...).
        duration: Request duration in seconds.
        success: Whether the request succeeded.
    """
    status = "success" if success else "error"
    INFERENCE_REQUEST_DURATION.labels(operation=operation, status=status).observe(duration)
    INFERENCE_REQUEST_TOTAL.labels(operation=operation, status=status).inc()


def track_model_pull(success: bool) -> None:
    MODEL_PULL_TOTAL.labels(status="success" if success else "error").inc()


def track_query(rag: bool, stream: bool, sources: int = 0) -> None:
    """Track a unified query.

    Args:
        rag: Whether retrieval ran.
        stream: Whether the answer was streamed.
        sources: Number of sources retrieved.
    """
    QUERY_TOTAL.labels(mode="rag" if rag else "direct", stream=str(stream).lower()).inc()
    if rag:
        QUERY_SOURCES_RETURNED.observe(sources)
