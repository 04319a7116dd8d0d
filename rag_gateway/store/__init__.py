"""Flat-file collection registry and credential store."""

from rag_gateway.store.collections import CollectionRegistry
from rag_gateway.store.file_store import ConfigFileStore
from rag_gateway.store.models import ApiToken, ApiTokenInfo, AppConfig, CollectionConfig
from rag_gateway.store.tokens import TokenStore

__all__ = [
    "ApiToken",
    "ApiTokenInfo",
    "AppConfig",
    "CollectionConfig",
    "CollectionRegistry",
    "ConfigFileStore",
    "TokenStore",
]
