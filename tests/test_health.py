"""Integration tests for health check endpoints."""

import pytest
from httpx import AsyncClient

from rag_gateway import __version__
from rag_gateway.store import TokenStore


class TestHealthEndpoint:
    """Tests for / and /health."""

    @pytest.mark.parametrize("path", ["/", "/health"])
    async def test_health_returns_ok(self, client: AsyncClient, path: str) -> None:
        """Both health paths report ok with the version."""
        response = await client.get(path)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["version"] == __version__

    async def test_health_lists_endpoints(self, client: AsyncClient) -> None:
        """Health body advertises the route families."""
        response = await client.get("/health")
        endpoints = response.json()["endpoints"]

        assert endpoints["query"] == "/query"
        assert endpoints["collections"] == "/collections"
        assert endpoints["apiTokens"] == "/api-tokens"

    async def test_auth_disabled_without_tokens(self, client: AsyncClient) -> None:
        """authEnabled is false while no token exists."""
        response = await client.get("/health")
        assert response.json()["authEnabled"] is False

    async def test_auth_enabled_with_tokens(
        self,
        client: AsyncClient,
        token_store: TokenStore,
    ) -> None:
        """authEnabled flips once a token is registered."""
        token_store.create("ci")

        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["authEnabled"] is True
