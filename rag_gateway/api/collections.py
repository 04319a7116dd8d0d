"""Collection routes: lifecycle, documents and search."""

from typing import Any, Literal

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ConfigDict, Field

from rag_gateway.api.deps import get_collection_service
from rag_gateway.api.responses import success
from rag_gateway.collections.models import Document
from rag_gateway.collections.service import CollectionService
from rag_gateway.vectorstore.models import PointId

router = APIRouter(prefix="/collections", tags=["Collections"])


class CreateCollectionRequest(BaseModel):
    """Request body for collection creation.

    `dimension` is measured from the model when omitted.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, description="Collection name")
    embedding_model: str = Field(
        min_length=1,
        alias="embeddingModel",
        description="Embedding model bound to the collection",
    )
    dimension: int | None = Field(default=None, gt=0, description="Vector dimension")
    distance: Literal["Cosine", "Euclid", "Dot", "Manhattan"] = Field(
        default="Cosine",
        description="Distance metric",
    )


class InsertDocumentsRequest(BaseModel):
    """Either `{documents: [...]}` or a single document inline."""

    documents: list[Document] | None = Field(default=None)
    id: PointId | None = Field(default=None)
    content: str | None = Field(default=None)
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_documents(self) -> list[Document]:
        if self.documents is not None:
            return self.documents
        if self.content:
            return [Document(id=self.id, content=self.content, metadata=self.metadata)]
        return []


class DeleteDocumentsRequest(BaseModel):
    ids: list[PointId] = Field(description="Document identifiers to delete")


class SearchRequest(BaseModel):
    """Request body for collection search."""

    query: str = Field(min_length=1, description="Search text")
    limit: int | None = Field(default=None, ge=1)
    top_k: int | None = Field(default=None, ge=1, description="Alias for limit, wins if both set")
    filter: dict[str, Any] | None = Field(default=None, description="Qdrant filter")
    score_threshold: float | None = Field(default=None)


def _parse_offset(offset: str | None) -> PointId | None:
    # Qdrant offsets are either integer ids or UUID strings.
    if offset is None or offset == "":
        return None
    return int(offset) if offset.isdigit() else offset


@router.get("")
def list_collections(
    service: CollectionService = Depends(get_collection_service),
) -> dict[str, Any]:
    return success([c.model_dump(by_alias=True) for c in service.list_collections()])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_collection(
    body: CreateCollectionRequest,
    service: CollectionService = Depends(get_collection_service),
) -> dict[str, Any]:
    config = await service.create(
        body.name,
        body.embedding_model,
        dimension=body.dimension,
        distance=body.distance,
    )
    return success(config.model_dump(by_alias=True))


@router.get("/{name}")
async def get_collection(
    name: str,
    service: CollectionService = Depends(get_collection_service),
) -> dict[str, Any]:
    return success(await service.get(name))


@router.delete("/{name}")
async def delete_collection(
    name: str,
    service: CollectionService = Depends(get_collection_service),
) -> dict[str, Any]:
    await service.delete(name)
    return success()


@router.post("/{name}/documents")
async def insert_documents(
    name: str,
    body: InsertDocumentsRequest,
    service: CollectionService = Depends(get_collection_service),
) -> dict[str, Any]:
    result = await service.insert(name, body.to_documents())
    return success(result.model_dump())


@router.get("/{name}/documents")
async def list_documents(
    name: str,
    limit: int = Query(default=10, ge=1),
    offset: str | None = Query(default=None),
    service: CollectionService = Depends(get_collection_service),
) -> dict[str, Any]:
    page = await service.list_documents(name, limit=limit, offset=_parse_offset(offset))
    return success(page.model_dump())


@router.delete("/{name}/documents")
async def delete_documents(
    name: str,
    body: DeleteDocumentsRequest,
    service: CollectionService = Depends(get_collection_service),
) -> dict[str, Any]:
    await service.delete_documents(name, body.ids)
    return success()


@router.post("/{name}/search")
async def search_collection(
    name: str,
    body: SearchRequest,
    service: CollectionService = Depends(get_collection_service),
) -> dict[str, Any]:
    hits = await service.search(
        name,
        body.query,
        limit=body.limit,
        top_k=body.top_k,
        filters=body.filter,
        score_threshold=body.score_threshold,
    )
    return success([hit.model_dump() for hit in hits])
