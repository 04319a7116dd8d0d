"""Direct Ollama passthrough routes: /embed, /generate, /chat.

Each route provisions its model first. Fields the gateway does not know
are forwarded to Ollama untouched.
"""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from rag_gateway.api.deps import get_inference
from rag_gateway.api.responses import success
from rag_gateway.llm.client import InferenceClient
from rag_gateway.llm.models import Message
from rag_gateway.llm.provision import ensure_model
from rag_gateway.llm.streaming import NDJSON_MEDIA_TYPE
from rag_gateway.rag.streaming import append_trailer

router = APIRouter(tags=["LLM"])


class PassthroughRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    model: str = Field(min_length=1, description="Ollama model")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True, exclude={"stream"})


class EmbedRequest(PassthroughRequest):
    input: str | list[str] = Field(description="Text(s) to embed")


class GenerateRequest(PassthroughRequest):
    prompt: str = Field(default="", description="Prompt; empty only loads the model")
    stream: bool = Field(default=True)


class ChatRequest(PassthroughRequest):
    messages: list[Message] = Field(description="Conversation")
    stream: bool = Field(default=True)


@router.post("/embed")
async def embed(
    body: EmbedRequest,
    inference: InferenceClient = Depends(get_inference),
) -> dict[str, Any]:
    await ensure_model(inference, body.model)
    return success(await inference.embed(body.to_payload()))


@router.post("/generate", response_model=None)
async def generate(
    body: GenerateRequest,
    inference: InferenceClient = Depends(get_inference),
) -> dict[str, Any] | StreamingResponse:
    await ensure_model(inference, body.model)

    if body.stream:
        upstream = await inference.stream_generate(body.to_payload())
        return StreamingResponse(append_trailer(upstream), media_type=NDJSON_MEDIA_TYPE)

    return success(await inference.generate(body.to_payload()))


@router.post("/chat", response_model=None)
async def chat(
    body: ChatRequest,
    inference: InferenceClient = Depends(get_inference),
) -> dict[str, Any] | StreamingResponse:
    await ensure_model(inference, body.model)

    if body.stream:
        upstream = await inference.stream_chat(body.to_payload())
        return StreamingResponse(append_trailer(upstream), media_type=NDJSON_MEDIA_TYPE)

    return success(await inference.chat(body.to_payload()))
