"""Tests for the HTTP routes and error envelopes."""

import json
from unittest.mock import AsyncMock

from httpx import AsyncClient

from rag_gateway.exceptions import LLMError, VectorStoreError
from rag_gateway.store import CollectionConfig, CollectionRegistry
from rag_gateway.vectorstore.models import ScrollPage, SearchResult


def _register(registry: CollectionRegistry, name: str = "docs") -> None:
    registry.set(
        CollectionConfig(
            name=name,
            embedding_model="nomic-embed-text",
            dimension=3,
            created_at="2024-01-01T00:00:00+00:00",
        )
    )


class TestEnvelopes:
    """Every non-streaming response uses the success/error envelope."""

    async def test_unknown_route(self, client: AsyncClient) -> None:
        response = await client.get("/nope")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Not Found"}

    async def test_wrong_method(self, client: AsyncClient) -> None:
        response = await client.get("/query")

        assert response.status_code == 405
        assert response.json() == {"success": False, "error": "Method Not Allowed"}

    async def test_validation_error_is_400(self, client: AsyncClient) -> None:
        response = await client.post("/query", json={"prompt": "hi"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert "model" in body["error"]

    async def test_malformed_json_is_400(self, client: AsyncClient) -> None:
        response = await client.post(
            "/query",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400

    async def test_gateway_error_mapping(
        self,
        client: AsyncClient,
        inference: AsyncMock,
    ) -> None:
        """Backend failures without a specific status become 500s."""
        inference.list_models.side_effect = LLMError("Failed to connect to Ollama: refused")

        response = await client.get("/models")

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "Failed to connect to Ollama: refused",
        }

    async def test_unhandled_exception_is_500_envelope(
        self,
        client: AsyncClient,
        inference: AsyncMock,
    ) -> None:
        inference.list_models.side_effect = RuntimeError("kaboom")

        response = await client.get("/models")

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "kaboom"}


class TestQueryRoute:
    """Tests for POST /query."""

    async def test_buffered_query(
        self,
        client: AsyncClient,
        inference: AsyncMock,
    ) -> None:
        inference.chat.return_value = {"message": {"role": "assistant", "content": "Hi!"}}

        response = await client.post(
            "/query",
            json={"model": "llama3.2", "prompt": "Hello", "stream": False},
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "data": {"message": {"role": "assistant", "content": "Hi!"}},
        }

    async def test_streaming_rag_query(
        self,
        client: AsyncClient,
        inference: AsyncMock,
        vector_store: AsyncMock,
        registry: CollectionRegistry,
        fake_upstream: type,
    ) -> None:
        _register(registry)
        inference.embed_text.return_value = [0.1, 0.2, 0.3]
        vector_store.search.return_value = [
            SearchResult(id="a", score=0.9, payload={"content": "Paris is in France"}),
            SearchResult(id="b", score=0.8, payload={"content": "Lyon is in France"}),
        ]
        inference.stream_chat.return_value = fake_upstream(
            [b'{"message":{"content":"France"}}\n', b'{"done":true}\n']
        )

        response = await client.post(
            "/query",
            json={
                "model": "llama3.2",
                "prompt": "Where is Paris?",
                "collection": "docs",
                "top_k": 2,
            },
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/x-ndjson")
        lines = response.text.strip().split("\n")
        assert json.loads(lines[0]) == {"message": {"content": "France"}}
        assert json.loads(lines[-1]) == {
            "sources": [
                {"id": "a", "score": 0.9, "content": "Paris is in France"},
                {"id": "b", "score": 0.8, "content": "Lyon is in France"},
            ]
        }

    async def test_unknown_collection_is_404(self, client: AsyncClient) -> None:
        response = await client.post(
            "/query",
            json={"model": "llama3.2", "prompt": "?", "collection": "nope"},
        )

        assert response.status_code == 404
        assert response.json()["error"] == 'Collection "nope" not found'


class TestLLMRoutes:
    """Tests for /embed, /generate and /chat."""

    async def test_embed_forwards_payload(
        self,
        client: AsyncClient,
        inference: AsyncMock,
    ) -> None:
        inference.embed.return_value = {"embeddings": [[0.1, 0.2]]}

        response = await client.post(
            "/embed",
            json={"model": "nomic-embed-text", "input": "hello", "truncate": True},
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"embeddings": [[0.1, 0.2]]}
        inference.embed.assert_awaited_once_with(
            {"model": "nomic-embed-text", "input": "hello", "truncate": True}
        )

    async def test_embed_pull_failure(
        self,
        client: AsyncClient,
        inference: AsyncMock,
    ) -> None:
        """A model that cannot be pulled is reported by name; embed never runs."""
        inference.model_exists.return_value = False
        inference.pull_model.side_effect = LLMError("Ollama error: 500 - pull failed")

        response = await client.post("/embed", json={"model": "nomic-embed-text", "input": "x"})

        assert response.status_code == 400
        assert "nomic-embed-text" in response.json()["error"]
        inference.embed.assert_not_called()

    async def test_generate_streams(
        self,
        client: AsyncClient,
        inference: AsyncMock,
        fake_upstream: type,
    ) -> None:
        upstream = fake_upstream([b'{"response":"Hi"}\n', b'{"done":true}\n'])
        inference.stream_generate.return_value = upstream

        response = await client.post("/generate", json={"model": "llama3.2", "prompt": "Hi"})

        assert response.status_code == 200
        assert response.content == b'{"response":"Hi"}\n{"done":true}\n'
        assert "stream" not in inference.stream_generate.call_args.args[0]
        assert upstream.closed

    async def test_chat_buffered(
        self,
        client: AsyncClient,
        inference: AsyncMock,
    ) -> None:
        inference.chat.return_value = {"message": {"role": "assistant", "content": "Hi"}}

        response = await client.post(
            "/chat",
            json={
                "model": "llama3.2",
                "messages": [{"role": "user", "content": "Hello"}],
                "stream": False,
            },
        )

        assert response.status_code == 200
        payload = inference.chat.call_args.args[0]
        assert payload["messages"] == [{"role": "user", "content": "Hello"}]


class TestModelRoutes:
    """Tests for /models."""

    async def test_list(self, client: AsyncClient, inference: AsyncMock) -> None:
        inference.list_models.return_value = [{"name": "llama3.2:latest"}]

        response = await client.get("/models")

        assert response.json() == {"success": True, "data": [{"name": "llama3.2:latest"}]}

    async def test_show_namespaced_model(
        self,
        client: AsyncClient,
        inference: AsyncMock,
    ) -> None:
        inference.show_model.return_value = {"details": {"family": "llama"}}

        response = await client.get("/models/library/llama3:latest")

        assert response.status_code == 200
        inference.show_model.assert_awaited_once_with("library/llama3:latest")

    async def test_pull_streams_progress(
        self,
        client: AsyncClient,
        inference: AsyncMock,
        fake_upstream: type,
    ) -> None:
        inference.stream_pull.return_value = fake_upstream([b'{"status":"success"}\n'])

        response = await client.post("/models/pull", json={"name": "llama3.2"})

        assert response.status_code == 200
        assert response.content == b'{"status":"success"}\n'
        inference.stream_pull.assert_awaited_once_with("llama3.2")

    async def test_copy_and_delete(
        self,
        client: AsyncClient,
        inference: AsyncMock,
    ) -> None:
        response = await client.post(
            "/models/copy",
            json={"source": "llama3.2", "destination": "my-llama"},
        )
        assert response.json() == {"success": True}
        inference.copy_model.assert_awaited_once_with("llama3.2", "my-llama")

        response = await client.delete("/models/my-llama")
        assert response.json() == {"success": True}
        inference.delete_model.assert_awaited_once_with("my-llama")


class TestCollectionRoutes:
    """Tests for /collections."""

    async def test_create(
        self,
        client: AsyncClient,
        inference: AsyncMock,
        vector_store: AsyncMock,
    ) -> None:
        inference.embed_text.return_value = [0.0] * 768
        vector_store.collection_exists.return_value = False

        response = await client.post(
            "/collections",
            json={"name": "docs", "embeddingModel": "nomic-embed-text"},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["name"] == "docs"
        assert data["embeddingModel"] == "nomic-embed-text"
        assert data["dimension"] == 768
        assert "createdAt" in data

    async def test_create_conflict(
        self,
        client: AsyncClient,
        vector_store: AsyncMock,
    ) -> None:
        vector_store.collection_exists.return_value = True

        response = await client.post(
            "/collections",
            json={"name": "docs", "embeddingModel": "nomic-embed-text", "dimension": 3},
        )

        assert response.status_code == 409

    async def test_list_and_get(
        self,
        client: AsyncClient,
        vector_store: AsyncMock,
        registry: CollectionRegistry,
    ) -> None:
        _register(registry)
        vector_store.get_collection.return_value = {"points_count": 0}

        listed = await client.get("/collections")
        assert [c["name"] for c in listed.json()["data"]] == ["docs"]

        detail = await client.get("/collections/docs")
        assert detail.json()["data"]["qdrant"] == {"points_count": 0}

    async def test_insert_single_document(
        self,
        client: AsyncClient,
        inference: AsyncMock,
        registry: CollectionRegistry,
    ) -> None:
        _register(registry)
        inference.embed_texts.return_value = [[0.1, 0.2, 0.3]]

        response = await client.post(
            "/collections/docs/documents",
            json={"id": 7, "content": "hello", "metadata": {"tag": "x"}},
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"inserted": 1, "ids": [7]}

    async def test_collection_named_documents(
        self,
        client: AsyncClient,
        inference: AsyncMock,
        vector_store: AsyncMock,
        registry: CollectionRegistry,
    ) -> None:
        """A collection may be called "documents" without clashing with its sub-routes."""
        _register(registry, "documents")
        inference.embed_texts.return_value = [[0.1, 0.2, 0.3]]

        response = await client.post(
            "/collections/documents/documents",
            json={"documents": [{"content": "hello"}]},
        )

        assert response.status_code == 200
        assert vector_store.upsert.call_args.args[0] == "documents"

    async def test_insert_requires_documents(
        self,
        client: AsyncClient,
        registry: CollectionRegistry,
    ) -> None:
        _register(registry)

        response = await client.post("/collections/docs/documents", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "documents required"

    async def test_list_documents_pagination(
        self,
        client: AsyncClient,
        vector_store: AsyncMock,
    ) -> None:
        vector_store.scroll.return_value = ScrollPage(
            points=[{"id": 1, "payload": {"content": "a"}}],
            next_page_offset=2,
        )

        response = await client.get("/collections/docs/documents?limit=1&offset=1")

        assert response.json()["data"] == {
            "points": [{"id": 1, "payload": {"content": "a"}}],
            "next_page_offset": 2,
        }
        vector_store.scroll.assert_awaited_once_with("docs", limit=1, offset=1)

    async def test_delete_documents(
        self,
        client: AsyncClient,
        vector_store: AsyncMock,
    ) -> None:
        response = await client.request(
            "DELETE",
            "/collections/docs/documents",
            json={"ids": ["a", 2]},
        )

        assert response.json() == {"success": True}
        vector_store.delete.assert_awaited_once_with("docs", ["a", 2])

    async def test_search(
        self,
        client: AsyncClient,
        inference: AsyncMock,
        vector_store: AsyncMock,
        registry: CollectionRegistry,
    ) -> None:
        _register(registry)
        inference.embed_text.return_value = [0.1, 0.2, 0.3]
        vector_store.search.return_value = [
            SearchResult(id="a", score=0.7, payload={"content": "hello", "tag": "x"}),
        ]

        response = await client.post(
            "/collections/docs/search",
            json={"query": "greeting", "top_k": 1},
        )

        assert response.json()["data"] == [
            {"id": "a", "content": "hello", "score": 0.7, "metadata": {"tag": "x"}},
        ]

    async def test_vector_store_failure(
        self,
        client: AsyncClient,
        vector_store: AsyncMock,
        registry: CollectionRegistry,
    ) -> None:
        _register(registry)
        vector_store.delete_collection.side_effect = VectorStoreError("Qdrant down")

        response = await client.delete("/collections/docs")

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Qdrant down"}
        assert registry.get("docs") is not None


class TestTokenRoutes:
    """Tests for /api-tokens."""

    async def test_lifecycle(self, client: AsyncClient) -> None:
        created = await client.post("/api-tokens", json={"name": "ci"})
        data = created.json()["data"]
        headers = {"Authorization": f"Bearer {data['token']}"}

        listed = await client.get("/api-tokens", headers=headers)
        assert listed.json()["data"] == [
            {"id": data["id"], "name": "ci", "createdAt": data["createdAt"]}
        ]

        fetched = await client.get(f"/api-tokens/{data['id']}", headers=headers)
        assert "token" not in fetched.json()["data"]

        deleted = await client.delete(f"/api-tokens/{data['id']}", headers=headers)
        assert deleted.json() == {"success": True}

    async def test_unknown_token(self, client: AsyncClient) -> None:
        response = await client.get("/api-tokens/missing")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Token not found"}

    async def test_blank_name_rejected(self, client: AsyncClient) -> None:
        response = await client.post("/api-tokens", json={"name": "   "})

        assert response.status_code == 400
        assert response.json()["error"] == "name cannot be empty"


class TestPassthroughBodies:
    """Direct Ollama routes forward bodies the gateway does not interpret."""

    async def test_generate_empty_prompt_loads_model(
        self,
        client: AsyncClient,
        inference: AsyncMock,
    ) -> None:
        inference.generate.return_value = {"done": True, "done_reason": "load"}

        response = await client.post(
            "/generate",
            json={"model": "llama3.2", "stream": False},
        )

        assert response.status_code == 200
        assert inference.generate.call_args.args[0] == {"model": "llama3.2", "prompt": ""}

    async def test_chat_unknown_role(
        self,
        client: AsyncClient,
        inference: AsyncMock,
    ) -> None:
        inference.chat.return_value = {"message": {"role": "assistant", "content": "ok"}}

        response = await client.post(
            "/chat",
            json={
                "model": "llama3.2",
                "messages": [{"role": "developer", "content": "Be brief."}],
                "stream": False,
            },
        )

        assert response.status_code == 200
        payload = inference.chat.call_args.args[0]
        assert payload["messages"] == [{"role": "developer", "content": "Be brief."}]
