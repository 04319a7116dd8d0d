"""LLM data models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Message role in a conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class Message(BaseModel):
    """A message in a conversation.

    Unknown fields (images, tool calls) are kept and forwarded to Ollama.

    Attributes:
        role: The role of the message sender.
        content: The message content.
    """

    model_config = ConfigDict(extra="allow")

    role: Role | str = Field(description="Message role; unknown roles are forwarded as-is")
    content: str = Field(default="", description="Message content")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class SamplingOptions(BaseModel):
    """Caller sampling parameters mapped onto Ollama's `options`."""

    temperature: float | None = Field(default=None, description="Sampling temperature")
    top_p: float | None = Field(default=None, description="Nucleus sampling cutoff")
    max_tokens: int | None = Field(default=None, description="Maximum tokens to predict")

    def to_options(self) -> dict[str, Any] | None:
        """Build the Ollama options object, or None if nothing was set."""
        options: dict[str, Any] = {}
        if self.temperature is not None:
            options["temperature"] = self.temperature
        if self.top_p is not None:
            options["top_p"] = self.top_p
        if self.max_tokens is not None:
            options["num_predict"] = self.max_tokens
        return options or None
