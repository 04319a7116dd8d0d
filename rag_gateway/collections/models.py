"""Collection workflow data models."""

from typing import Any

from pydantic import BaseModel, Field

from rag_gateway.vectorstore.models import PointId

# Payload key holding the document text.
CONTENT_KEY = "content"


class Document(BaseModel):
    """A document to embed and store.

    Attributes:
        id: Caller-supplied identifier; generated when omitted.
        content: Text that is embedded.
        metadata: Extra payload fields stored alongside the content.
    """

    id: PointId | None = Field(default=None, description="Document identifier")
    content: str = Field(min_length=1, description="Document text")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Extra payload")


class InsertResult(BaseModel):
    inserted: int = Field(description="Number of documents stored")
    ids: list[PointId] = Field(description="Stored identifiers, in input order")


class SearchHit(BaseModel):
    """Formatted search result.

    `metadata` is the stored payload without the content key.
    """

    id: PointId = Field(description="Document identifier")
    content: str = Field(description="Document text")
    score: float = Field(description="Similarity score")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Document metadata")
