"""Backend capability clients for Prism.

Every remote text-generation service is reached through the BackendClient
protocol. ClaudeBackend uses the Anthropic SDK directly; OpenAI, DeepSeek and
Gemini go through LiteLLM.
"""

from prism.providers.anthropic_adapter import ClaudeBackend
from prism.providers.base import (
    BackendClient,
    BackendId,
    ChatOptions,
    Message,
    MessageRole,
    ModelCatalogueEntry,
    ModelInfo,
    ModelPricing,
)
from prism.providers.litellm_adapter import (
    DeepSeekBackend,
    GeminiBackend,
    LiteLLMBackend,
    OpenAIBackend,
)
from prism.providers.registry import (
    BACKEND_FACTORIES,
    DEFAULT_PRIORITY,
    ProviderRegistry,
    make_factories,
)

__all__ = [
    # Protocol
    "BackendClient",
    # Models
    "BackendId",
    "Message",
    "MessageRole",
    "ChatOptions",
    "ModelInfo",
    "ModelPricing",
    "ModelCatalogueEntry",
    # Implementations
    "ClaudeBackend",
    "LiteLLMBackend",
    "OpenAIBackend",
    "DeepSeekBackend",
    "GeminiBackend",
    # Registry
    "ProviderRegistry",
    "BACKEND_FACTORIES",
    "DEFAULT_PRIORITY",
    "make_factories",
]
