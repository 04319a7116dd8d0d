"""Service wiring and FastAPI dependencies."""

from dataclasses import dataclass

from fastapi import Depends, Request

from rag_gateway.collections.service import CollectionService
from rag_gateway.config import Settings
from rag_gateway.llm.client import InferenceClient, OllamaClient
from rag_gateway.rag.pipeline import QueryPipeline
from rag_gateway.store.collections import CollectionRegistry
from rag_gateway.store.file_store import ConfigFileStore
from rag_gateway.store.tokens import TokenStore
from rag_gateway.vectorstore.service import QdrantVectorStore, VectorStore


@dataclass
class Services:
    """Backend clients and stores shared by all requests."""

    inference: InferenceClient
    vector_store: VectorStore
    registry: CollectionRegistry
    tokens: TokenStore

    @classmethod
    def from_settings(cls, settings: Settings) -> "Services":
        store = ConfigFileStore(settings.config_path)
        return cls(
            inference=OllamaClient(settings=settings.ollama),
            vector_store=QdrantVectorStore(settings=settings.qdrant),
            registry=CollectionRegistry(store),
            tokens=TokenStore(store),
        )

    async def close(self) -> None:
        await self.inference.close()
        await self.vector_store.close()


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_inference(services: Services = Depends(get_services)) -> InferenceClient:
    return services.inference


def get_token_store(services: Services = Depends(get_services)) -> TokenStore:
    return services.tokens


def get_collection_service(services: Services = Depends(get_services)) -> CollectionService:
    return CollectionService(services.inference, services.vector_store, services.registry)


def get_query_pipeline(services: Services = Depends(get_services)) -> QueryPipeline:
    return QueryPipeline(services.inference, services.vector_store, services.registry)
