"""Vector store interface and Qdrant implementation."""

from abc import ABC, abstractmethod
from typing import Any

from qdrant_client import AsyncQdrantClient
from qdrant_client.http.exceptions import UnexpectedResponse
from qdrant_client.models import (
    Distance,
    Filter,
    PointIdsList,
    PointStruct,
    VectorParams,
)

from rag_gateway.config import QdrantSettings, get_settings
from rag_gateway.exceptions import ErrorCode, NotFoundError, VectorStoreError
from rag_gateway.logging_config import get_logger
from rag_gateway.vectorstore.models import PointId, ScrollPage, SearchResult, VectorRecord

logger = get_logger(__name__)


class VectorStore(ABC):
    """Abstract base class for vector stores.

    Defines the interface for storing and searching vectors.
    """

    async def close(self) -> None:
        """Release client resources."""

    @abstractmethod
    async def create_collection(
        self,
        name: str,
        dimensions: int,
        distance: str = "Cosine",
    ) -> None:
        """Create a new collection.

        Args:
            name: Collection name.
            dimensions: Vector dimensions.
            distance: Distance metric name (Cosine, Euclid, Dot, Manhattan).

        Raises:
            VectorStoreError: If creation fails.
        """
        ...

    @abstractmethod
    async def delete_collection(self, name: str) -> None:
        """Delete a collection.

        Raises:
            VectorStoreError: If deletion fails.
        """
        ...

    @abstractmethod
    async def get_collection(self, name: str) -> dict[str, Any]:
        """Get collection info as returned by the database.

        Raises:
            NotFoundError: If the collection does not exist.
            VectorStoreError: If the lookup fails.
        """
        ...

    @abstractmethod
    async def collection_exists(self, name: str) -> bool:
        """Check if a collection exists."""
        ...

    @abstractmethod
    async def upsert(
        self,
        collection: str,
        records: list[VectorRecord],
    ) -> int:
        """Insert or update records.

        Returns:
            Number of records upserted.

        Raises:
            VectorStoreError: If upsert fails.
        """
        ...

    @abstractmethod
    async def search(
        self,
        collection: str,
        vector: list[float],
        limit: int = 10,
        score_threshold: float | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[SearchResult]:
        """Search for similar vectors.

        Args:
            collection: Collection name.
            vector: Query vector.
            limit: Maximum results to return.
            score_threshold: Drop results scoring below this.
            filters: Optional Qdrant filter in its JSON form.

        Returns:
            List of search results, best match first.

        Raises:
            VectorStoreError: If search fails.
        """
        ...

    @abstractmethod
    async def scroll(
        self,
        collection: str,
        limit: int = 10,
        offset: PointId | None = None,
    ) -> ScrollPage:
        """Page through stored points without vectors.

        Raises:
            VectorStoreError: If the scroll fails.
        """
        ...

    @abstractmethod
    async def delete(
        self,
        collection: str,
        ids: list[PointId],
    ) -> int:
        """Delete records by ID.

        Returns:
            Number of records deleted.

        Raises:
            VectorStoreError: If deletion fails.
        """
        ...


class QdrantVectorStore(VectorStore):
    """Qdrant vector store implementation."""

    def __init__(
        self,
        settings: QdrantSettings | None = None,
        client: AsyncQdrantClient | None = None,
    ) -> None:
        """Initialize Qdrant vector store.

        Args:
            settings: Qdrant configuration.
            client: Existing client (for testing).
        """
        self._settings = settings or get_settings().qdrant
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> AsyncQdrantClient:
        """Get or create Qdrant client."""
        if self._client is None:
            api_key = None
            if self._settings.api_key:
                api_key = self._settings.api_key.get_secret_value()

            self._client = AsyncQdrantClient(
                url=self._settings.url,
                api_key=api_key,
                timeout=self._settings.timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the Qdrant client."""
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None

    async def create_collection(
        self,
        name: str,
        dimensions: int,
        distance: str = "Cosine",
    ) -> None:
        """Create a new Qdrant collection."""
        try:
            metric = Distance(distance)
        except ValueError as e:
            raise VectorStoreError(
                f"Unsupported distance: {distance}",
                code=ErrorCode.VALIDATION_ERROR,
                details={"distance": distance},
            ) from e

        client = await self._get_client()

        try:
            await client.create_collection(
                collection_name=name,
                vectors_config=VectorParams(size=dimensions, distance=metric),
            )
            logger.info(
                f"Created collection: {name}",
                extra={"dimensions": dimensions, "distance": distance},
            )

        except Exception as e:
            raise VectorStoreError(
                f"Failed to create collection: {e}",
                details={"collection": name, "error": str(e)},
            ) from e

    async def delete_collection(self, name: str) -> None:
        """Delete a Qdrant collection."""
        client = await self._get_client()

        try:
            await client.delete_collection(name)
            logger.info(f"Deleted collection: {name}")

        except Exception as e:
            raise VectorStoreError(
                f"Failed to delete collection: {e}",
                details={"collection": name, "error": str(e)},
            ) from e

    async def get_collection(self, name: str) -> dict[str, Any]:
        """Fetch collection info from Qdrant."""
        client = await self._get_client()

        try:
            info = await client.get_collection(name)
        except UnexpectedResponse as e:
            if e.status_code == 404:
                raise NotFoundError(
                    f'Collection "{name}" not found',
                    code=ErrorCode.COLLECTION_NOT_FOUND,
                    details={"collection": name},
                ) from e
            raise VectorStoreError(
                f"Failed to get collection: {e}",
                details={"collection": name, "status_code": e.status_code},
            ) from e
        except Exception as e:
            raise VectorStoreError(
                f"Failed to get collection: {e}",
                details={"collection": name, "error": str(e)},
            ) from e

        return info.model_dump(mode="json")

    async def collection_exists(self, name: str) -> bool:
        """Probe the collection; a not-found answer means it does not exist."""
        try:
            await self.get_collection(name)
        except NotFoundError:
            return False
        return True

    async def upsert(
        self,
        collection: str,
        records: list[VectorRecord],
    ) -> int:
        """Upsert records into collection."""
        if not records:
            return 0

        client = await self._get_client()

        try:
            points = [
                PointStruct(id=record.id, vector=record.vector, payload=record.payload)
                for record in records
            ]

            await client.upsert(collection_name=collection, points=points)

            logger.debug(
                f"Upserted {len(points)} records",
                extra={"collection": collection},
            )
            return len(points)

        except Exception as e:
            raise VectorStoreError(
                f"Failed to upsert records: {e}",
                details={"collection": collection, "error": str(e)},
            ) from e

    async def search(
        self,
        collection: str,
        vector: list[float],
        limit: int = 10,
        score_threshold: float | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[SearchResult]:
        """Search for similar vectors."""
        client = await self._get_client()

        try:
            query_filter = Filter.model_validate(filters) if filters else None

            results = await client.query_points(
                collection_name=collection,
                query=vector,
                limit=limit,
                query_filter=query_filter,
                score_threshold=score_threshold,
                with_payload=True,
            )

            return [
                SearchResult(
                    id=point.id,
                    score=point.score if point.score is not None else 0.0,
                    payload=dict(point.payload) if point.payload else {},
                )
                for point in results.points
            ]

        except Exception as e:
            raise VectorStoreError(
                f"Failed to search: {e}",
                details={"collection": collection, "error": str(e)},
            ) from e

    async def scroll(
        self,
        collection: str,
        limit: int = 10,
        offset: PointId | None = None,
    ) -> ScrollPage:
        """Scroll stored points with payload."""
        client = await self._get_client()

        try:
            records, next_offset = await client.scroll(
                collection_name=collection,
                limit=limit,
                offset=offset,
                with_payload=True,
                with_vectors=False,
            )
        except Exception as e:
            raise VectorStoreError(
                f"Failed to scroll records: {e}",
                details={"collection": collection, "error": str(e)},
            ) from e

        return ScrollPage(
            points=[
                {"id": record.id, "payload": dict(record.payload or {})}
                for record in records
            ],
            next_page_offset=next_offset,
        )

    async def delete(
        self,
        collection: str,
        ids: list[PointId],
    ) -> int:
        """Delete records by ID."""
        if not ids:
            return 0

        client = await self._get_client()

        try:
            await client.delete(
                collection_name=collection,
                points_selector=PointIdsList(points=ids),
            )

            logger.debug(
                f"Deleted {len(ids)} records",
                extra={"collection": collection},
            )
            return len(ids)

        except Exception as e:
            raise VectorStoreError(
                f"Failed to delete records: {e}",
                details={"collection": collection, "error": str(e)},
            ) from e
