"""API token credential store.

Only SHA-256 digests are persisted. The plaintext token is handed back
exactly once, from `create`.
"""

import hashlib
import hmac
import secrets
import string
from datetime import UTC, datetime
from uuid import uuid4

from rag_gateway.logging_config import get_logger
from rag_gateway.store.file_store import ConfigFileStore
from rag_gateway.store.models import ApiToken, ApiTokenInfo

logger = get_logger(__name__)

TOKEN_ALPHABET = string.ascii_letters + string.digits
TOKEN_LENGTH = 75


def generate_token() -> str:
    """Generate a random alphanumeric token."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH))


def hash_token(token: str) -> str:
    """One-way hash of a token (hex SHA-256)."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def verify_token(token: str, token_hash: str) -> bool:
    """Check a candidate token against a stored hash."""
    return hmac.compare_digest(hash_token(token), token_hash)


class TokenStore:
    """Credential store over the apiTokens section of the config file."""

    def __init__(self, store: ConfigFileStore) -> None:
        self._store = store

    def exists(self) -> bool:
        """Whether any token is registered (protected mode)."""
        return len(self._store.load().api_tokens) > 0

    def validate(self, token: str) -> bool:
        """Match the token against any stored hash."""
        return any(verify_token(token, t.token_hash) for t in self._store.load().api_tokens)

    def create(self, name: str) -> tuple[str, ApiTokenInfo]:
        """Create a token.

        Args:
            name: Human-readable label.

        Returns:
            Tuple of (plaintext token, public token info).
        """
        config = self._store.load()
        plaintext = generate_token()
        token = ApiToken(
            id=str(uuid4()),
            name=name,
            token_hash=hash_token(plaintext),
            created_at=datetime.now(UTC).isoformat(),
        )
        config.api_tokens.append(token)
        self._store.save(config)

        logger.info("Created API token", extra={"token_id": token.id, "token_name": name})
        return plaintext, token.info()

    def list(self) -> list[ApiTokenInfo]:
        return [t.info() for t in self._store.load().api_tokens]

    def get(self, token_id: str) -> ApiTokenInfo | None:
        for token in self._store.load().api_tokens:
            if token.id == token_id:
                return token.info()
        return None

    def delete(self, token_id: str) -> bool:
        """Delete a token by id.

        Returns:
            False when no token has that id.
        """
        config = self._store.load()
        remaining = [t for t in config.api_tokens if t.id != token_id]
        if len(remaining) == len(config.api_tokens):
            return False

        config.api_tokens = remaining
        self._store.save(config)
        logger.info("Deleted API token", extra={"token_id": token_id})
        return True
