"""Inference client module."""

from rag_gateway.llm.client import InferenceClient, OllamaClient
from rag_gateway.llm.models import Message, Role, SamplingOptions
from rag_gateway.llm.provision import ensure_model
from rag_gateway.llm.streaming import NDJSON_MEDIA_TYPE, UpstreamStream

__all__ = [
    "NDJSON_MEDIA_TYPE",
    "InferenceClient",
    "Message",
    "OllamaClient",
    "Role",
    "SamplingOptions",
    "UpstreamStream",
    "ensure_model",
]
