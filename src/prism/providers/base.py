"""Base protocol and models for backend capability clients.

This module defines the BackendClient protocol and the data models every
backend shares, so the router and resilience controller can treat each
remote text-generation service as an interchangeable capability.
"""

from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

from prism.core.errors import BackendError
from prism.core.types import CostUSD, Result, TokenCount

TOKENS_PER_PRICE_UNIT = 1_000_000


class BackendId(StrEnum):
    """Identifier of a remote backend.

    AUTO is a sentinel meaning "let the router decide"; it never names a
    registered backend.
    """

    GEMINI = "gemini"
    DEEPSEEK = "deepseek"
    CLAUDE = "claude"
    OPENAI = "openai"
    AUTO = "auto"

    @classmethod
    def concrete(cls) -> tuple["BackendId", ...]:
        """Return every real backend, excluding AUTO."""
        return tuple(member for member in cls if member is not cls.AUTO)


class MessageRole(StrEnum):
    """Role of a message in the conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True, slots=True)
class Message:
    """A single message in a conversation.

    Attributes:
        role: The role of the message sender.
        content: The text content of the message.
    """

    role: MessageRole
    content: str

    def to_dict(self) -> dict[str, str]:
        """Convert message to the dict format chat APIs expect."""
        return {"role": self.role.value, "content": self.content}


@dataclass(frozen=True, slots=True)
class ChatOptions:
    """Per-call options for a chat completion.

    Attributes:
        model: Model identifier. None means the backend's configured model.
        temperature: Sampling temperature. Default 0.7.
        max_tokens: Maximum tokens to generate. Default 4096.
        stop: Optional stop sequences.
        top_p: Nucleus sampling parameter. Default 1.0.
    """

    model: str | None = None
    temperature: float = 0.7
    max_tokens: int = 4096
    stop: list[str] | None = None
    top_p: float = 1.0


@dataclass(frozen=True, slots=True)
class ModelPricing:
    """Price per million tokens, in US dollars."""

    input: float
    output: float

    def cost(self, input_tokens: TokenCount, output_tokens: TokenCount) -> CostUSD:
        """Cost of a call with the given token counts."""
        return (input_tokens / TOKENS_PER_PRICE_UNIT) * self.input + (
            output_tokens / TOKENS_PER_PRICE_UNIT
        ) * self.output


@dataclass(frozen=True, slots=True)
class ModelCatalogueEntry:
    """One model a backend offers.

    Attributes:
        id: Model identifier as the backend API expects it.
        name: Display name.
        description: Short description.
        context_window: Maximum context size in tokens.
        pricing: Price per million tokens.
    """

    id: str
    name: str
    description: str
    context_window: int
    pricing: ModelPricing


@dataclass(frozen=True, slots=True)
class ModelInfo:
    """Static, informational metadata about a backend's default model.

    Not used in routing decisions.
    """

    name: str
    model: str
    context_window: int
    pricing: ModelPricing
    description: str = ""
    strengths: tuple[str, ...] = field(default_factory=tuple)
    weaknesses: tuple[str, ...] = field(default_factory=tuple)


def estimate_cost_from_table(
    table: Mapping[str, ModelPricing],
    default_model: str,
    input_tokens: TokenCount,
    output_tokens: TokenCount,
    model: str | None = None,
) -> CostUSD:
    """Price a call from a static table.

    Unknown or missing model ids fall back to the default model's prices.

    Args:
        table: Model id to pricing.
        default_model: Model whose prices apply when model is unknown.
        input_tokens: Estimated input tokens.
        output_tokens: Estimated output tokens.
        model: Model id to price.

    Returns:
        Estimated cost in US dollars.
    """
    pricing = table.get(model or default_model) or table[default_model]
    return pricing.cost(input_tokens, output_tokens)


class BackendClient(Protocol):
    """Uniform capability every backend implements.

    Example:
        backend: BackendClient = GeminiBackend(api_key="AIzaSy...")
        result = await backend.send_chat(
            [Message(role=MessageRole.USER, content="Hello!")],
            ChatOptions(),
        )
        if result.is_ok:
            print(result.value)
    """

    @property
    def backend_id(self) -> BackendId:
        """Identifier of this backend."""
        ...

    @property
    def model_id(self) -> str:
        """Model this client sends requests to."""
        ...

    def resolve_model(self, model: str | None = None) -> str:
        """Model id a call with ChatOptions(model=model) is sent to."""
        ...

    async def send_chat(
        self,
        messages: list[Message],
        options: ChatOptions | None = None,
    ) -> Result[str, BackendError]:
        """Return the complete answer, or a BackendError.

        An empty answer is a failure, never an Ok.
        """
        ...

    def stream_chat(
        self,
        messages: list[Message],
        options: ChatOptions | None = None,
    ) -> AsyncIterator[str]:
        """Yield answer fragments in order.

        Raises:
            BackendError: From the iterator on any failure, including after
                some fragments were already yielded.
        """
        ...

    def estimate_cost(
        self,
        input_tokens: TokenCount,
        output_tokens: TokenCount,
        model: str | None = None,
    ) -> CostUSD:
        """Price a call; unknown models use the default model's prices."""
        ...

    def describe_model(self) -> ModelInfo:
        """Static metadata for the default model."""
        ...

    def available_models(self) -> list[ModelCatalogueEntry]:
        """Models this backend offers."""
        ...

    async def validate_credential(self) -> bool:
        """Send a minimal real request and report whether it succeeded."""
        ...
