"""Live byte streams from the inference server."""

from collections.abc import AsyncIterator

import httpx

from rag_gateway.exceptions import ErrorCode, LLMError
from rag_gateway.logging_config import get_logger

logger = get_logger(__name__)

NDJSON_MEDIA_TYPE = "application/x-ndjson"


class UpstreamStream:
    """An open streaming response from Ollama.

    Chunks are read once, in order. The caller must `aclose()` it, which
    also aborts the upstream request if it is still running.
    """

    def __init__(self, response: httpx.Response, operation: str) -> None:
        self._response = response
        self._operation = operation

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes():
                yield chunk
        except httpx.HTTPError as e:
            logger.error(
                f"Upstream stream failed: {e}",
                extra={"operation": self._operation},
            )
            raise LLMError(
                f"Ollama {self._operation} stream failed: {e}",
                code=ErrorCode.STREAM_ERROR,
                details={"operation": self._operation},
            ) from e

    async def aclose(self) -> None:
        await self._response.aclose()
