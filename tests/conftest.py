"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator, AsyncIterator
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from rag_gateway.api.app import create_app
from rag_gateway.api.deps import Services
from rag_gateway.config import Settings
from rag_gateway.llm.client import InferenceClient
from rag_gateway.store import CollectionRegistry, ConfigFileStore, TokenStore
from rag_gateway.vectorstore.service import VectorStore


class FakeUpstream:
    """Stand-in for an open Ollama NDJSON stream."""

    def __init__(self, chunks: list[bytes], error: Exception | None = None) -> None:
        self.chunks = chunks
        self.error = error
        self.closed = False

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_upstream() -> type[FakeUpstream]:
    """The FakeUpstream class, for building streams in tests."""
    return FakeUpstream


@pytest.fixture
def config_store(tmp_path: Path) -> ConfigFileStore:
    return ConfigFileStore(tmp_path / "config.json")


@pytest.fixture
def registry(config_store: ConfigFileStore) -> CollectionRegistry:
    return CollectionRegistry(config_store)


@pytest.fixture
def token_store(config_store: ConfigFileStore) -> TokenStore:
    return TokenStore(config_store)


@pytest.fixture
def inference() -> AsyncMock:
    """Inference client mock; every model is already available."""
    mock = AsyncMock(spec=InferenceClient)
    mock.model_exists.return_value = True
    return mock


@pytest.fixture
def vector_store() -> AsyncMock:
    mock = AsyncMock(spec=VectorStore)
    mock.search.return_value = []
    return mock


@pytest.fixture
def services(
    inference: AsyncMock,
    vector_store: AsyncMock,
    registry: CollectionRegistry,
    token_store: TokenStore,
) -> Services:
    return Services(
        inference=inference,
        vector_store=vector_store,
        registry=registry,
        tokens=token_store,
    )


@pytest.fixture
def app(services: Services) -> FastAPI:
    return create_app(settings=Settings(), services=services)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client for the gateway.

    Yields:
        AsyncClient configured for testing.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
