"""Unified query route."""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from rag_gateway.api.deps import get_query_pipeline
from rag_gateway.api.responses import success
from rag_gateway.llm.streaming import NDJSON_MEDIA_TYPE
from rag_gateway.rag.models import QueryRequest
from rag_gateway.rag.pipeline import QueryPipeline

router = APIRouter(tags=["Query"])


@router.post("/query", response_model=None)
async def query_endpoint(
    body: QueryRequest,
    pipeline: QueryPipeline = Depends(get_query_pipeline),
) -> dict[str, Any] | StreamingResponse:
    """Prompt a model, optionally grounding it in a collection.

    Streams NDJSON by default; after retrieval the last line is
    `{"sources": [...]}`.
    """
    if body.stream:
        chunks = await pipeline.answer_stream(body)
        return StreamingResponse(chunks, media_type=NDJSON_MEDIA_TYPE)

    return success(await pipeline.answer(body))
