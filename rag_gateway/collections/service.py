"""Collection lifecycle workflows."""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from rag_gateway.collections.models import CONTENT_KEY, Document, InsertResult, SearchHit
from rag_gateway.exceptions import (
    ConflictError,
    ErrorCode,
    GatewayError,
    NotFoundError,
    ValidationError,
)
from rag_gateway.llm.client import InferenceClient
from rag_gateway.llm.provision import ensure_model
from rag_gateway.logging_config import get_logger
from rag_gateway.store.collections import CollectionRegistry
from rag_gateway.store.models import CollectionConfig
from rag_gateway.vectorstore.models import PointId, ScrollPage, VectorRecord
from rag_gateway.vectorstore.service import VectorStore

logger = get_logger(__name__)

DEFAULT_SEARCH_LIMIT = 10
PROBE_TEXT = "test"


class CollectionService:
    """Create, inspect, fill, search and delete collections.

    Each collection is bound to one embedding model in the registry; every
    document and query in it is embedded with that model.
    """

    def __init__(
        self,
        inference: InferenceClient,
        vector_store: VectorStore,
        registry: CollectionRegistry,
    ) -> None:
        self._inference = inference
        self._vector_store = vector_store
        self._registry = registry

    def _require(self, name: str, hint: str = "") -> CollectionConfig:
        config = self._registry.get(name)
        if config is None:
            raise NotFoundError(
                f'Collection "{name}" not found{hint}',
                code=ErrorCode.COLLECTION_NOT_FOUND,
                details={"collection": name},
            )
        return config

    def list_collections(self) -> list[CollectionConfig]:
        return self._registry.list()

    async def get(self, name: str) -> dict[str, Any]:
        """Registry config merged with the vector store's collection info."""
        config = self._require(name)
        info = await self._vector_store.get_collection(name)
        return {**config.model_dump(by_alias=True), "qdrant": info}

    async def create(
        self,
        name: str,
        embedding_model: str,
        dimension: int | None = None,
        distance: str = "Cosine",
    ) -> CollectionConfig:
        """Create a collection bound to `embedding_model`.

        Without an explicit dimension the model is provisioned and probed
        with one throwaway embedding. The registry entry is written only
        after the vector store collection exists; earlier steps are not
        rolled back on failure.

        Raises:
            ModelProvisionError: If the model is missing and cannot be pulled.
            ValidationError: If the probe embedding fails.
            ConflictError: If the collection already exists.
        """
        if dimension is None:
            await ensure_model(self._inference, embedding_model)
            try:
                probe = await self._inference.embed_text(embedding_model, PROBE_TEXT)
            except GatewayError as e:
                raise GatewayError(
                    f'Failed to get embedding dimension from "{embedding_model}": {e.message}',
                    code=ErrorCode.EMBEDDING_PROBE_FAILED,
                    details={"model": embedding_model},
                ) from e
            dimension = len(probe)

        if await self._vector_store.collection_exists(name):
            raise ConflictError(
                f'Collection "{name}" already exists',
                details={"collection": name},
            )

        await self._vector_store.create_collection(name, dimension, distance)

        config = CollectionConfig(
            name=name,
            embedding_model=embedding_model,
            dimension=dimension,
            created_at=datetime.now(UTC).isoformat(),
        )
        self._registry.set(config)

        logger.info(
            f"Registered collection: {name}",
            extra={"embedding_model": embedding_model, "dimension": dimension},
        )
        return config

    async def delete(self, name: str) -> None:
        """Drop the vector store collection, then its registry entry."""
        await self._vector_store.delete_collection(name)
        self._registry.remove(name)

    async def insert(self, name: str, documents: list[Document]) -> InsertResult:
        """Embed documents in one batch and upsert them.

        The embedding model is not provisioned here; it was pulled when the
        collection was created.
        """
        if not documents:
            raise ValidationError("documents required")

        config = self._require(name, ". Create it first.")

        embeddings = await self._inference.embed_texts(
            config.embedding_model,
            [doc.content for doc in documents],
        )

        records = [
            VectorRecord(
                id=doc.id if doc.id is not None else str(uuid4()),
                vector=vector,
                payload=self._build_payload(doc),
            )
            for doc, vector in zip(documents, embeddings, strict=True)
        ]
        await self._vector_store.upsert(name, records)

        logger.info(f"Inserted {len(records)} documents", extra={"collection": name})
        return InsertResult(inserted=len(records), ids=[r.id for r in records])

    @staticmethod
    def _build_payload(document: Document) -> dict[str, Any]:
        # The stored content always reflects the embedded text.
        if CONTENT_KEY in document.metadata:
            logger.warning(
                "Ignoring reserved metadata key",
                extra={"key": CONTENT_KEY, "document_id": document.id},
            )
        return {**document.metadata, CONTENT_KEY: document.content}

    async def list_documents(
        self,
        name: str,
        limit: int = 10,
        offset: PointId | None = None,
    ) -> ScrollPage:
        return await self._vector_store.scroll(name, limit=limit, offset=offset)

    async def delete_documents(self, name: str, ids: list[PointId]) -> int:
        return await self._vector_store.delete(name, ids)

    async def search(
        self,
        name: str,
        query: str,
        limit: int | None = None,
        top_k: int | None = None,
        filters: dict[str, Any] | None = None,
        score_threshold: float | None = None,
    ) -> list[SearchHit]:
        """Embed `query` with the collection's model and search.

        `top_k` takes precedence over `limit`.
        """
        config = self._require(name)
        vector = await self._inference.embed_text(config.embedding_model, query)

        results = await self._vector_store.search(
            name,
            vector,
            limit=top_k or limit or DEFAULT_SEARCH_LIMIT,
            score_threshold=score_threshold,
            filters=filters,
        )

        return [
            SearchHit(
                id=r.id,
                content=str(r.payload.get(CONTENT_KEY) or ""),
                score=r.score,
                metadata={k: v for k, v in r.payload.items() if k != CONTENT_KEY},
            )
            for r in results
        ]
