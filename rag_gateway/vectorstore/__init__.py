"""Vector store module."""

from rag_gateway.vectorstore.models import PointId, ScrollPage, SearchResult, VectorRecord
from rag_gateway.vectorstore.service import QdrantVectorStore, VectorStore

__all__ = [
    "PointId",
    "QdrantVectorStore",
    "ScrollPage",
    "SearchResult",
    "VectorRecord",
    "VectorStore",
]
