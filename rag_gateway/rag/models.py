"""Unified query data models."""

from pydantic import BaseModel, Field

from rag_gateway.llm.models import Message, Role, SamplingOptions
from rag_gateway.vectorstore.models import PointId

DEFAULT_QUERY_LIMIT = 5


class RAGSource(BaseModel):
    """A retrieved document used as context.

    Attributes:
        id: Point identifier in the collection.
        score: Similarity score.
        content: Document text.
    """

    id: PointId = Field(description="Document identifier")
    score: float = Field(description="Similarity score")
    content: str = Field(description="Document content")


class QueryRequest(BaseModel):
    """Body of POST /query.

    Either `prompt` or `messages` drives the conversation. With a
    `collection`, the query text is embedded and the closest documents are
    injected as context.
    """

    model: str = Field(min_length=1, description="Chat model")
    prompt: str | None = Field(default=None, description="Single-turn prompt")
    messages: list[Message] | None = Field(default=None, description="Chat history")

    # Retrieval
    collection: str | None = Field(default=None, description="Collection to search")
    query: str | None = Field(default=None, description="Search text override")
    limit: int | None = Field(default=None, ge=1, description="Documents to retrieve")
    top_k: int | None = Field(default=None, ge=1, description="Alias for limit, wins if both set")
    score_threshold: float | None = Field(default=None, description="Minimum similarity score")

    # Generation
    system: str | None = Field(default=None, description="System prompt override")
    stream: bool = Field(default=True, description="Stream NDJSON tokens")
    temperature: float | None = Field(default=None)
    top_p: float | None = Field(default=None)
    max_tokens: int | None = Field(default=None, ge=1)

    @property
    def search_limit(self) -> int:
        return self.top_k or self.limit or DEFAULT_QUERY_LIMIT

    def resolve_query_text(self) -> str | None:
        """Explicit query, else prompt, else the last user message."""
        if self.query:
            return self.query
        if self.prompt:
            return self.prompt
        for message in reversed(self.messages or []):
            if message.role == Role.USER:
                return message.content or None
        return None

    def sampling(self) -> SamplingOptions:
        return SamplingOptions(
            temperature=self.temperature,
            top_p=self.top_p,
            max_tokens=self.max_tokens,
        )
