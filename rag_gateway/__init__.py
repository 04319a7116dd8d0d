"""Unified RAG gateway over Qdrant and Ollama."""

__version__ = "1.0.0"
