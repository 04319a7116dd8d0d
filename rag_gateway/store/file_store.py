"""JSON file backing the collection registry and the token store."""

import os
import tempfile
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from rag_gateway.exceptions import ConfigurationError
from rag_gateway.logging_config import get_logger
from rag_gateway.store.models import AppConfig

logger = get_logger(__name__)


class ConfigFileStore:
    """Reads and writes the whole config file on every call.

    Nothing is cached, so several processes can share the file. Writers are
    not synchronised; the last write wins. Each write replaces the file
    atomically, so readers never see a partial file.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> AppConfig:
        """Load the config; a missing file is an empty config.

        Raises:
            ConfigurationError: If the file exists but cannot be read or parsed.
        """
        if not self._path.exists():
            return AppConfig()

        try:
            return AppConfig.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, PydanticValidationError) as e:
            logger.error(
                f"Unreadable config file: {e}",
                extra={"path": str(self._path)},
            )
            raise ConfigurationError(
                f"Config file {self._path} is unreadable",
                details={"path": str(self._path)},
            ) from e

    def save(self, config: AppConfig) -> None:
        """Write the config back to disk via a temp file and rename."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(config.model_dump_json(by_alias=True, indent=2))
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
