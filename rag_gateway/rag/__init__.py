"""RAG query module."""

from rag_gateway.rag.models import QueryRequest, RAGSource
from rag_gateway.rag.pipeline import PreparedQuery, QueryPipeline
from rag_gateway.rag.prompts import RAGPromptTemplate
from rag_gateway.rag.streaming import append_trailer

__all__ = [
    "PreparedQuery",
    "QueryPipeline",
    "QueryRequest",
    "RAGPromptTemplate",
    "RAGSource",
    "append_trailer",
]
