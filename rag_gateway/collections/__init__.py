"""Collection lifecycle module."""

from rag_gateway.collections.models import Document, InsertResult, SearchHit
from rag_gateway.collections.service import CollectionService

__all__ = [
    "CollectionService",
    "Document",
    "InsertResult",
    "SearchHit",
]
