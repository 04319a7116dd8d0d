"""Application exception hierarchy.

All custom exceptions inherit from GatewayError.
Each exception has an error code for structured error handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "GW-1000"
    VALIDATION_ERROR = "GW-1001"
    NOT_FOUND = "GW-1002"
    METHOD_NOT_ALLOWED = "GW-1003"
    CONFIGURATION_ERROR = "GW-1004"

    # Auth errors (2xxx)
    UNAUTHORIZED = "GW-2000"
    TOKEN_NOT_FOUND = "GW-2001"

    # Vector store errors (3xxx)
    VECTOR_STORE_ERROR = "GW-3000"
    COLLECTION_NOT_FOUND = "GW-3001"
    COLLECTION_EXISTS = "GW-3002"

    # Inference errors (4xxx)
    LLM_SERVICE_ERROR = "GW-4000"
    MODEL_NOT_FOUND = "GW-4001"
    MODEL_PULL_FAILED = "GW-4002"
    EMBEDDING_PROBE_FAILED = "GW-4003"
    STREAM_ERROR = "GW-4004"


class GatewayError(Exception):
    """Base exception for all gateway errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to the API error envelope."""
        return {"success": False, "error": self.message}


class ConfigurationError(GatewayError):
    """The config file exists but cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class ValidationError(GatewayError):
    """Input validation error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class AuthenticationError(GatewayError):
    """Missing or invalid bearer token."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.UNAUTHORIZED, details)


class NotFoundError(GatewayError):
    """A collection, token or model does not exist."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.NOT_FOUND,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class ConflictError(GatewayError):
    """Resource already exists."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.COLLECTION_EXISTS,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class VectorStoreError(GatewayError):
    """Vector store operation error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VECTOR_STORE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class LLMError(GatewayError):
    """Inference server error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.LLM_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class ModelProvisionError(LLMError):
    """A required model was missing and could not be pulled."""

    def __init__(
        self,
        model: str,
        cause: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.model = model
        super().__init__(
            f'Model "{model}" not found and failed to pull: {cause}',
            ErrorCode.MODEL_PULL_FAILED,
            {"model": model, **(details or {})},
        )
