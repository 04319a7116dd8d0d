"""Model management routes."""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from rag_gateway.api.deps import get_inference
from rag_gateway.api.responses import success
from rag_gateway.llm.client import InferenceClient
from rag_gateway.llm.streaming import NDJSON_MEDIA_TYPE
from rag_gateway.rag.streaming import append_trailer

router = APIRouter(prefix="/models", tags=["Models"])


class PullModelRequest(BaseModel):
    name: str = Field(min_length=1, description="Model to pull")


class CopyModelRequest(BaseModel):
    source: str = Field(min_length=1, description="Existing model")
    destination: str = Field(min_length=1, description="New model name")


@router.get("")
async def list_models(inference: InferenceClient = Depends(get_inference)) -> dict[str, Any]:
    return success(await inference.list_models())


@router.post("/pull")
async def pull_model(
    body: PullModelRequest,
    inference: InferenceClient = Depends(get_inference),
) -> StreamingResponse:
    """Pull a model, streaming Ollama's progress lines.

    This is the non-blocking way to warm a model before first use.
    """
    upstream = await inference.stream_pull(body.name)
    return StreamingResponse(append_trailer(upstream), media_type=NDJSON_MEDIA_TYPE)


@router.post("/copy")
async def copy_model(
    body: CopyModelRequest,
    inference: InferenceClient = Depends(get_inference),
) -> dict[str, Any]:
    await inference.copy_model(body.source, body.destination)
    return success()


# Model names may contain slashes (namespace/model:tag).
@router.get("/{name:path}")
async def show_model(
    name: str,
    inference: InferenceClient = Depends(get_inference),
) -> dict[str, Any]:
    return success(await inference.show_model(name))


@router.delete("/{name:path}")
async def delete_model(
    name: str,
    inference: InferenceClient = Depends(get_inference),
) -> dict[str, Any]:
    await inference.delete_model(name)
    return success()
