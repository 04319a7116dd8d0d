"""Persistent config file models.

Field names are camelCase on disk and on the wire.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialising field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CollectionConfig(CamelModel):
    """Registry entry binding a collection to its embedding model.

    Attributes:
        name: Collection name (unique).
        embedding_model: Ollama model used to embed documents and queries.
        dimension: Vector size produced by the embedding model.
        created_at: ISO-8601 creation timestamp.
    """

    name: str = Field(description="Collection name")
    embedding_model: str = Field(description="Embedding model")
    dimension: int = Field(gt=0, description="Vector dimension")
    created_at: str = Field(description="Creation timestamp")


class ApiTokenInfo(CamelModel):
    """Public view of an API token (never includes the hash)."""

    id: str = Field(description="Token identifier")
    name: str = Field(description="Token label")
    created_at: str = Field(description="Creation timestamp")


class ApiToken(ApiTokenInfo):
    """Stored API token.

    Attributes:
        token_hash: SHA-256 hex digest of the plaintext token.
    """

    token_hash: str = Field(description="SHA-256 of the token")

    def info(self) -> ApiTokenInfo:
        """Strip the hash."""
        return ApiTokenInfo(id=self.id, name=self.name, created_at=self.created_at)


class AppConfig(CamelModel):
    """Whole config file contents."""

    collections: dict[str, CollectionConfig] = Field(default_factory=dict)
    api_tokens: list[ApiToken] = Field(default_factory=list)
