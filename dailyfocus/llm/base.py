"""Provider-agnostic LLM interfaces."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Literal


@dataclass
class Message:
    """A single chat message."""
    role: Literal["system", "user", "assistant"]
    content: str


@dataclass
class LLMConfig:
    """Per-request generation options."""
    model: str | None = None
    temperature: float = 0.7
    max_tokens: int | None = None
    json_schema: dict[str, Any] | None = None


@dataclass
class LLMResponse:
    """Normalized chat completion result."""
    content: str
    structured_data: dict[str, Any] | None = None
    usage: dict[str, int | None] = field(default_factory=dict)
    model: str | None = None
    finish_reason: str | None = None


class LLMProvider(ABC):
    """Base class for chat-completion providers."""

    @abstractmethod
    async def chat(self, messages: list[Message], config: LLMConfig) -> LLMResponse:
        """Send a chat request and return the full response."""

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True when the provider is reachable."""

    async def close(self) -> None:
        """Release network resources."""
