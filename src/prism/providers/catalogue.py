"""Static model catalogue and price tables for every backend.

Prices are US dollars per million tokens. Each backend has a designated
default model whose prices apply whenever an unknown model id is priced.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Mapping
from types import MappingProxyType

from prism.core.errors import BackendError
from prism.core.types import CostUSD, Result, TokenCount
from prism.providers.base import (
    BackendId,
    ChatOptions,
    Message,
    MessageRole,
    ModelCatalogueEntry,
    ModelInfo,
    ModelPricing,
    estimate_cost_from_table,
)

GEMINI_MODELS: tuple[ModelCatalogueEntry, ...] = (
    ModelCatalogueEntry(
        id="gemini-2.0-flash-exp",
        name="Gemini 2.0 Flash",
        description="Fastest and cheapest, recommended",
        context_window=1_000_000,
        pricing=ModelPricing(input=0.10, output=0.40),
    ),
    ModelCatalogueEntry(
        id="gemini-1.5-flash",
        name="Gemini 1.5 Flash",
        description="Fast and cheap, good for medium tasks",
        context_window=1_000_000,
        pricing=ModelPricing(input=0.075, output=0.30),
    ),
    ModelCatalogueEntry(
        id="gemini-1.5-pro",
        name="Gemini 1.5 Pro",
        description="Strong on complex tasks",
        context_window=2_000_000,
        pricing=ModelPricing(input=1.25, output=5.00),
    ),
    ModelCatalogueEntry(
        id="gemini-1.0-pro",
        name="Gemini 1.0 Pro",
        description="Balanced price and quality",
        context_window=30_720,
        pricing=ModelPricing(input=0.50, output=1.50),
    ),
)

DEEPSEEK_MODELS: tuple[ModelCatalogueEntry, ...] = (
    ModelCatalogueEntry(
        id="deepseek-chat",
        name="DeepSeek Chat",
        description="Cheap and fast general model",
        context_window=32_768,
        pricing=ModelPricing(input=0.14, output=0.28),
    ),
)

CLAUDE_MODELS: tuple[ModelCatalogueEntry, ...] = (
    ModelCatalogueEntry(
        id="claude-3-5-sonnet-20241022",
        name="Claude 3.5 Sonnet",
        description="Smartest and fastest, recommended",
        context_window=200_000,
        pricing=ModelPricing(input=3.0, output=15.0),
    ),
    ModelCatalogueEntry(
        id="claude-3-opus-20240229",
        name="Claude 3 Opus",
        description="Strongest for very complex tasks",
        context_window=200_000,
        pricing=ModelPricing(input=15.0, output=75.0),
    ),
    ModelCatalogueEntry(
        id="claude-3-sonnet-20240229",
        name="Claude 3 Sonnet",
        description="Balanced quality and speed",
        context_window=200_000,
        pricing=ModelPricing(input=3.0, output=15.0),
    ),
)

OPENAI_MODELS: tuple[ModelCatalogueEntry, ...] = (
    ModelCatalogueEntry(
        id="gpt-4o",
        name="GPT-4o",
        description="Newest, faster and cheaper than GPT-4",
        context_window=128_000,
        pricing=ModelPricing(input=5.0, output=15.0),
    ),
    ModelCatalogueEntry(
        id="gpt-4o-mini",
        name="GPT-4o Mini",
        description="Small, fast and very cheap",
        context_window=128_000,
        pricing=ModelPricing(input=0.15, output=0.60),
    ),
    ModelCatalogueEntry(
        id="gpt-4-turbo-preview",
        name="GPT-4 Turbo",
        description="Strong and fast, recommended",
        context_window=128_000,
        pricing=ModelPricing(input=10.0, output=30.0),
    ),
    ModelCatalogueEntry(
        id="gpt-4",
        name="GPT-4",
        description="The original, strongest GPT-4",
        context_window=8_192,
        pricing=ModelPricing(input=30.0, output=60.0),
    ),
    ModelCatalogueEntry(
        id="gpt-3.5-turbo",
        name="GPT-3.5 Turbo",
        description="Fast and cheap for simple tasks",
        context_window=16_384,
        pricing=ModelPricing(input=0.5, output=1.5),
    ),
)

MODEL_CATALOGUE: Mapping[BackendId, tuple[ModelCatalogueEntry, ...]] = MappingProxyType({
    BackendId.GEMINI: GEMINI_MODELS,
    BackendId.DEEPSEEK: DEEPSEEK_MODELS,
    BackendId.CLAUDE: CLAUDE_MODELS,
    BackendId.OPENAI: OPENAI_MODELS,
})

DEFAULT_MODELS: Mapping[BackendId, str] = MappingProxyType({
    BackendId.GEMINI: "gemini-2.0-flash-exp",
    BackendId.DEEPSEEK: "deepseek-chat",
    BackendId.CLAUDE: "claude-3-5-sonnet-20241022",
    BackendId.OPENAI: "gpt-4-turbo-preview",
})

DISPLAY_NAMES: Mapping[BackendId, str] = MappingProxyType({
    BackendId.GEMINI: "Gemini (Google)",
    BackendId.DEEPSEEK: "DeepSeek",
    BackendId.CLAUDE: "Claude (Anthropic)",
    BackendId.OPENAI: "OpenAI (GPT-4)",
})

_DESCRIPTIONS: Mapping[BackendId, tuple[str, tuple[str, ...], tuple[str, ...]]] = MappingProxyType({
    BackendId.GEMINI: (
        "Fastest and cheapest, good at code",
        ("very fast", "very cheap", "good at code", "1M token context"),
        ("less capable than GPT-4o or Claude Opus",),
    ),
    BackendId.DEEPSEEK: (
        "Cheap, fast model for general tasks",
        ("very low price", "fast", "good quality on simple tasks"),
        ("weaker than Claude or GPT-4 on complex tasks",),
    ),
    BackendId.CLAUDE: (
        "Best model for complex tasks and programming",
        ("high intelligence", "strong at code", "deep context understanding", "safe"),
        ("relatively expensive", "somewhat slower"),
    ),
    BackendId.OPENAI: (
        "Balanced quality and price",
        ("high intelligence", "fast", "reliable", "broad support"),
        ("more expensive than DeepSeek", "slightly weaker than Claude"),
    ),
})


def price_table(backend: BackendId) -> dict[str, ModelPricing]:
    """Return model id to pricing for a backend."""
    return {entry.id: entry.pricing for entry in MODEL_CATALOGUE[backend]}


class CatalogueBackend(ABC):
    """Shared catalogue behaviour for concrete backends.

    Subclasses set ``_backend_id`` and ``_model`` and implement
    ``send_chat``/``stream_chat``.
    """

    _backend_id: BackendId
    _model: str

    @property
    def backend_id(self) -> BackendId:
        return self._backend_id

    @property
    def model_id(self) -> str:
        return self._model

    def resolve_model(self, model: str | None = None) -> str:
        return model or self._model

    def estimate_cost(
        self,
        input_tokens: TokenCount,
        output_tokens: TokenCount,
        model: str | None = None,
    ) -> CostUSD:
        return estimate_cost_from_table(
            price_table(self._backend_id),
            DEFAULT_MODELS[self._backend_id],
            input_tokens,
            output_tokens,
            model or self._model,
        )

    def describe_model(self) -> ModelInfo:
        table = price_table(self._backend_id)
        entry = next(
            (e for e in MODEL_CATALOGUE[self._backend_id] if e.id == self._model),
            None,
        )
        description, strengths, weaknesses = _DESCRIPTIONS[self._backend_id]
        return ModelInfo(
            name=DISPLAY_NAMES[self._backend_id],
            model=self._model,
            context_window=entry.context_window if entry else 0,
            pricing=table.get(self._model) or table[DEFAULT_MODELS[self._backend_id]],
            description=description,
            strengths=strengths,
            weaknesses=weaknesses,
        )

    def available_models(self) -> list[ModelCatalogueEntry]:
        return list(MODEL_CATALOGUE[self._backend_id])

    @abstractmethod
    async def send_chat(
        self,
        messages: list[Message],
        options: ChatOptions | None = None,
    ) -> Result[str, BackendError]:
        """Return the complete answer, or a BackendError."""

    @abstractmethod
    def stream_chat(
        self,
        messages: list[Message],
        options: ChatOptions | None = None,
    ) -> AsyncIterator[str]:
        """Yield answer fragments in order."""

    async def validate_credential(self) -> bool:
        """Send a short "Hello" prompt; consumes quota."""
        result = await self.send_chat(
            [Message(role=MessageRole.USER, content="Hello")],
            ChatOptions(max_tokens=10),
        )
        return result.is_ok
