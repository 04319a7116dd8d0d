"""Unified query orchestrator."""

from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

from rag_gateway.exceptions import ErrorCode, NotFoundError, ValidationError
from rag_gateway.llm.client import InferenceClient
from rag_gateway.llm.models import Message
from rag_gateway.llm.provision import ensure_model
from rag_gateway.logging_config import get_logger
from rag_gateway.observability import track_query
from rag_gateway.rag.models import QueryRequest, RAGSource
from rag_gateway.rag.prompts import RAGPromptTemplate
from rag_gateway.rag.streaming import append_trailer
from rag_gateway.store.collections import CollectionRegistry
from rag_gateway.vectorstore.service import VectorStore

logger = get_logger(__name__)


@dataclass
class PreparedQuery:
    """Chat request ready to send, plus the sources behind it.

    `sources` is None when no collection was searched.
    """

    payload: dict[str, Any]
    sources: list[RAGSource] | None

    def sources_payload(self) -> list[dict[str, Any]]:
        return [s.model_dump(mode="json") for s in self.sources or []]


class QueryPipeline:
    """Orchestrates retrieval and chat for POST /query.

    Steps run strictly in sequence: resolve query text, provision the chat
    model, retrieve (optional), assemble messages, then chat.
    """

    def __init__(
        self,
        inference: InferenceClient,
        vector_store: VectorStore,
        registry: CollectionRegistry,
        prompt_template: RAGPromptTemplate | None = None,
    ) -> None:
        """Initialize the query pipeline.

        Args:
            inference: Ollama client.
            vector_store: Vector store client.
            registry: Collection registry (read-only here).
            prompt_template: Prompt builder.
        """
        self._inference = inference
        self._vector_store = vector_store
        self._registry = registry
        self._prompt_template = prompt_template or RAGPromptTemplate()

    async def retrieve(
        self,
        collection: str,
        text: str,
        limit: int,
        score_threshold: float | None = None,
    ) -> list[RAGSource]:
        """Embed `text` with the collection's model and search it.

        Raises:
            NotFoundError: If the collection is not registered.
        """
        config = self._registry.get(collection)
        if config is None:
            raise NotFoundError(
                f'Collection "{collection}" not found',
                code=ErrorCode.COLLECTION_NOT_FOUND,
                details={"collection": collection},
            )

        vector = await self._inference.embed_text(config.embedding_model, text)
        results = await self._vector_store.search(
            collection,
            vector,
            limit=limit,
            score_threshold=score_threshold,
        )

        return [
            RAGSource(id=r.id, score=r.score, content=str(r.payload.get("content") or ""))
            for r in results
        ]

    async def prepare(self, request: QueryRequest) -> PreparedQuery:
        """Run everything up to (not including) the chat call.

        Raises:
            ValidationError: If there is nothing to ask.
            ModelProvisionError: If the chat model is missing and cannot be pulled.
            NotFoundError: If the collection is not registered.
        """
        query_text = request.resolve_query_text()
        if not query_text and not request.messages:
            raise ValidationError("prompt, query, or messages required")
        if request.collection and not query_text:
            raise ValidationError("query text required to search a collection")

        await ensure_model(self._inference, request.model)

        sources: list[RAGSource] | None = None
        context = ""
        if request.collection:
            sources = await self.retrieve(
                request.collection,
                query_text or "",
                limit=request.search_limit,
                score_threshold=request.score_threshold,
            )
            context = self._prompt_template.format_context([s.content for s in sources])
            logger.info(
                f"Retrieved {len(sources)} sources",
                extra={"collection": request.collection, "limit": request.search_limit},
            )

        messages: list[Message] = self._prompt_template.build_messages(
            prompt=query_text,
            messages=request.messages,
            context=context,
            system=request.system,
            retrieval=sources is not None,
        )

        payload: dict[str, Any] = {
            "model": request.model,
            "messages": [m.to_payload() for m in messages],
        }
        options = request.sampling().to_options()
        if options:
            payload["options"] = options

        track_query(rag=sources is not None, stream=request.stream, sources=len(sources or []))
        return PreparedQuery(payload=payload, sources=sources)

    async def answer(self, request: QueryRequest) -> dict[str, Any]:
        """Buffered query: the chat result, with `sources` merged in after retrieval."""
        prepared = await self.prepare(request)
        data = await self._inference.chat(prepared.payload)

        result = dict(data)
        if prepared.sources is not None:
            result["sources"] = prepared.sources_payload()
        return result

    async def answer_stream(self, request: QueryRequest) -> AsyncIterator[bytes]:
        """Streaming query.

        The upstream chat is opened before returning, so setup failures
        surface as ordinary errors rather than a broken stream.
        """
        prepared = await self.prepare(request)
        upstream = await self._inference.stream_chat(prepared.payload)

        trailer = None
        if prepared.sources is not None:
            trailer = {"sources": prepared.sources_payload()}
        return append_trailer(upstream, trailer)
