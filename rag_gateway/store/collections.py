"""Collection registry: collection name -> embedding model binding."""

from rag_gateway.store.file_store import ConfigFileStore
from rag_gateway.store.models import CollectionConfig


class CollectionRegistry:
    """Durable get/set/remove/list over the collections section."""

    def __init__(self, store: ConfigFileStore) -> None:
        self._store = store

    def get(self, name: str) -> CollectionConfig | None:
        return self._store.load().collections.get(name)

    def set(self, collection: CollectionConfig) -> None:
        config = self._store.load()
        config.collections[collection.name] = collection
        self._store.save(config)

    def remove(self, name: str) -> None:
        config = self._store.load()
        config.collections.pop(name, None)
        self._store.save(config)

    def list(self) -> list[CollectionConfig]:
        return list(self._store.load().collections.values())
