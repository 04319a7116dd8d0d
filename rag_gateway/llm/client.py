"""Inference client interface and Ollama implementation."""

import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

from rag_gateway.config import OllamaSettings, get_settings
from rag_gateway.exceptions import ErrorCode, GatewayError, LLMError, NotFoundError
from rag_gateway.llm.streaming import UpstreamStream
from rag_gateway.logging_config import get_logger
from rag_gateway.observability import track_inference_request

logger = get_logger(__name__)


class InferenceClient(ABC):
    """Abstract base class for inference servers.

    Covers model management, embeddings, generation and chat. Generation
    and chat come in a buffered flavour returning the JSON result and a
    streaming flavour returning the live NDJSON body.
    """

    async def close(self) -> None:
        """Release client resources."""

    @abstractmethod
    async def list_models(self) -> list[dict[str, Any]]:
        """List locally available models."""
        ...

    @abstractmethod
    async def show_model(self, name: str) -> dict[str, Any]:
        """Get model details.

        Raises:
            NotFoundError: If the model is not available locally.
            LLMError: If the request fails.
        """
        ...

    async def model_exists(self, name: str) -> bool:
        """Check whether a model is available locally.

        Any failure of the details lookup counts as absence.
        """
        try:
            await self.show_model(name)
        except GatewayError:
            return False
        return True

    @abstractmethod
    async def pull_model(self, name: str) -> dict[str, Any]:
        """Pull a model and block until the download completes.

        Raises:
            LLMError: If the pull fails.
        """
        ...

    @abstractmethod
    async def stream_pull(self, name: str) -> UpstreamStream:
        """Pull a model, streaming progress updates."""
        ...

    @abstractmethod
    async def copy_model(self, source: str, destination: str) -> None:
        """Copy a model under a new name."""
        ...

    @abstractmethod
    async def delete_model(self, name: str) -> None:
        """Delete a local model."""
        ...

    @abstractmethod
    async def embed(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create embeddings; `payload` holds at least `model` and `input`."""
        ...

    async def embed_texts(self, model: str, texts: list[str]) -> list[list[float]]:
        """Embed several texts in one call.

        Returns:
            One vector per text, in input order.
        """
        result = await self.embed({"model": model, "input": texts})
        embeddings = result.get("embeddings") or []
        if len(embeddings) != len(texts):
            raise LLMError(
                f"Expected {len(texts)} embeddings from model, got {len(embeddings)}",
                details={"model": model},
            )
        return embeddings

    async def embed_text(self, model: str, text: str) -> list[float]:
        """Embed a single text."""
        result = await self.embed({"model": model, "input": text})
        embeddings = result.get("embeddings") or []
        if not embeddings or not embeddings[0]:
            raise LLMError("No embedding returned from model", details={"model": model})
        return embeddings[0]

    @abstractmethod
    async def generate(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Generate a completion and wait for the full result."""
        ...

    @abstractmethod
    async def stream_generate(self, payload: dict[str, Any]) -> UpstreamStream:
        """Generate a completion as an NDJSON stream."""
        ...

    @abstractmethod
    async def chat(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Run a chat completion and wait for the full result."""
        ...

    @abstractmethod
    async def stream_chat(self, payload: dict[str, Any]) -> UpstreamStream:
        """Run a chat completion as an NDJSON stream."""
        ...


class OllamaClient(InferenceClient):
    """Client for Ollama's native REST API (`/api/*`)."""

    def __init__(
        self,
        settings: OllamaSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Ollama client.

        Args:
            settings: Ollama configuration.
            client: HTTP client (for testing).
        """
        self._settings = settings or get_settings().ollama
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _url(self, path: str) -> str:
        return f"{self._settings.url.rstrip('/')}{path}"

    def _status_error(self, operation: str, status: int, body: str) -> GatewayError:
        message = f"Ollama error: {status} - {body}"
        if status == 404:
            return NotFoundError(
                message,
                code=ErrorCode.MODEL_NOT_FOUND,
                details={"operation": operation, "status_code": status},
            )
        return LLMError(message, details={"operation": operation, "status_code": status})

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a buffered request and decode the JSON body."""
        client = await self._get_client()
        url = self._url(path)
        start = time.perf_counter()

        try:
            response = await client.request(method, url, json=payload)
            response.raise_for_status()

        except httpx.HTTPStatusError as e:
            track_inference_request(operation, time.perf_counter() - start, success=False)
            status = e.response.status_code
            logger.error(f"Ollama {operation} failed: {status}")
            raise self._status_error(operation, status, e.response.text) from e

        except httpx.RequestError as e:
            track_inference_request(operation, time.perf_counter() - start, success=False)
            logger.error(f"Ollama connection error: {e}", extra={"operation": operation})
            raise LLMError(
                f"Failed to connect to Ollama: {e}",
                details={"url": url, "operation": operation},
            ) from e

        track_inference_request(operation, time.perf_counter() - start)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise LLMError(
                f"Invalid response from Ollama: {e}",
                details={"operation": operation},
            ) from e

    async def _stream(self, operation: str, path: str, payload: dict[str, Any]) -> UpstreamStream:
        """Open a streaming request; the body is left unread."""
        client = await self._get_client()
        url = self._url(path)
        start = time.perf_counter()

        try:
            request = client.build_request("POST", url, json=payload)
            response = await client.send(request, stream=True)
        except httpx.RequestError as e:
            track_inference_request(operation, time.perf_counter() - start, success=False)
            logger.error(f"Ollama connection error: {e}", extra={"operation": operation})
            raise LLMError(
                f"Failed to connect to Ollama: {e}",
                details={"url": url, "operation": operation},
            ) from e

        if response.is_error:
            track_inference_request(operation, time.perf_counter() - start, success=False)
            try:
                await response.aread()
                body = response.text
            finally:
                await response.aclose()
            logger.error(f"Ollama {operation} failed: {response.status_code}")
            raise self._status_error(operation, response.status_code, body)

        # Time to first byte; generation time is the caller's concern.
        track_inference_request(operation, time.perf_counter() - start)
        return UpstreamStream(response, operation)

    async def list_models(self) -> list[dict[str, Any]]:
        data = await self._request("tags", "GET", "/api/tags")
        return data.get("models", [])

    async def show_model(self, name: str) -> dict[str, Any]:
        return await self._request("show", "POST", "/api/show", {"model": name})

    async def pull_model(self, name: str) -> dict[str, Any]:
        logger.info(f"Pulling model: {name}")
        result = await self._request(
            "pull", "POST", "/api/pull", {"model": name, "stream": False}
        )
        logger.info(f"Pulled model: {name}", extra={"status": result.get("status")})
        return result

    async def stream_pull(self, name: str) -> UpstreamStream:
        return await self._stream("pull", "/api/pull", {"model": name, "stream": True})

    async def copy_model(self, source: str, destination: str) -> None:
        await self._request(
            "copy", "POST", "/api/copy", {"source": source, "destination": destination}
        )
        logger.info(f"Copied model {source} to {destination}")

    async def delete_model(self, name: str) -> None:
        await self._request("delete", "DELETE", "/api/delete", {"model": name})
        logger.info(f"Deleted model: {name}")

    async def embed(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("embed", "POST", "/api/embed", payload)

    async def generate(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("generate", "POST", "/api/generate", {**payload, "stream": False})

    async def stream_generate(self, payload: dict[str, Any]) -> UpstreamStream:
        return await self._stream("generate", "/api/generate", {**payload, "stream": True})

    async def chat(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("chat", "POST", "/api/chat", {**payload, "stream": False})

    async def stream_chat(self, payload: dict[str, Any]) -> UpstreamStream:
        return await self._stream("chat", "/api/chat", {**payload, "stream": True})
