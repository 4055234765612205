"""LiteLLM backends for OpenAI, DeepSeek and Gemini.

This module provides LiteLLMBackend, which implements the BackendClient
protocol on top of litellm.acompletion, and one thin subclass per backend
that fixes the backend identifier and LiteLLM model prefix.
"""

from collections.abc import AsyncIterator
from typing import Any

import litellm
import stamina
import structlog

from prism.core.errors import BackendError, ErrorCategory
from prism.core.security import MAX_RESPONSE_LENGTH, truncate_response
from prism.core.types import Result
from prism.providers.base import BackendId, ChatOptions, Message
from prism.providers.catalogue import DEFAULT_MODELS, CatalogueBackend

log = structlog.get_logger()

# Transient failures retried in place. Rate limits are left to the fallback
# chain so a throttled backend hands over promptly.
RETRIABLE_EXCEPTIONS = (
    litellm.ServiceUnavailableError,
    litellm.InternalServerError,
    litellm.Timeout,
    litellm.APIConnectionError,
)

_NETWORK_EXCEPTIONS = (litellm.Timeout, litellm.APIConnectionError)


class LiteLLMBackend(CatalogueBackend):
    """Backend client using LiteLLM's unified completion interface.

    Subclasses set ``_backend_id`` and ``_litellm_prefix``. The model id is
    kept bare for pricing and prefixed only when calling LiteLLM.

    Example:
        backend = GeminiBackend(api_key="AIzaSy...")
        result = await backend.send_chat(
            [Message(role=MessageRole.USER, content="Hello!")],
            ChatOptions(temperature=0.2),
        )
    """

    _litellm_prefix: str = ""

    def __init__(
        self,
        *,
        api_key: str,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float = 60.0,
        max_retries: int = 2,
    ) -> None:
        """Initialize the backend.

        Args:
            api_key: Credential for this backend.
            model: Model id. Defaults to the backend's default model.
            base_url: Optional API base URL for custom endpoints.
            timeout: Request timeout in seconds. Default 60.0.
            max_retries: Attempts for transient errors. Default 2.
        """
        self._api_key = api_key
        self._model = self._strip_prefix(model or DEFAULT_MODELS[self._backend_id])
        self._base_url = base_url
        self._timeout = timeout
        self._max_retries = max(1, max_retries)

    def _strip_prefix(self, model: str) -> str:
        if self._litellm_prefix and model.startswith(self._litellm_prefix):
            return model[len(self._litellm_prefix) :]
        return model

    def resolve_model(self, model: str | None = None) -> str:
        return self._strip_prefix(model) if model else self._model

    def _litellm_model(self, model: str) -> str:
        """Return the model id in LiteLLM's provider/model form."""
        return f"{self._litellm_prefix}{self._strip_prefix(model)}"

    def _build_completion_kwargs(
        self,
        messages: list[Message],
        options: ChatOptions,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self._litellm_model(self.resolve_model(options.model)),
            "messages": [m.to_dict() for m in messages],
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
            "top_p": options.top_p,
            "timeout": self._timeout,
            "api_key": self._api_key,
        }
        if options.stop:
            kwargs["stop"] = options.stop
        if self._base_url:
            kwargs["api_base"] = self._base_url
        return kwargs

    async def _raw_complete(self, kwargs: dict[str, Any]) -> litellm.ModelResponse:
        """Make the raw completion call. Exceptions bubble up for stamina."""
        log.debug(
            "llm.request.started",
            backend=self._backend_id.value,
            model=kwargs["model"],
            message_count=len(kwargs["messages"]),
        )
        response = await litellm.acompletion(**kwargs)
        log.debug(
            "llm.request.completed",
            backend=self._backend_id.value,
            model=kwargs["model"],
            finish_reason=response.choices[0].finish_reason,
        )
        return response

    async def send_chat(
        self,
        messages: list[Message],
        options: ChatOptions | None = None,
    ) -> Result[str, BackendError]:
        """Send a chat request through LiteLLM.

        Transient errors are retried with stamina; everything else becomes
        Result.err(BackendError).

        Args:
            messages: The conversation messages to send.
            options: Per-call options.

        Returns:
            Result containing the answer text or a BackendError.
        """
        kwargs = self._build_completion_kwargs(messages, options or ChatOptions())

        @stamina.retry(
            on=RETRIABLE_EXCEPTIONS,
            attempts=self._max_retries,
            wait_initial=1.0,
            wait_max=10.0,
            wait_jitter=1.0,
        )
        async def _with_retry() -> litellm.ModelResponse:
            return await self._raw_complete(kwargs)

        try:
            response = await _with_retry()
        except Exception as e:
            return Result.err(self._to_backend_error(e, kwargs["model"]))

        content = response.choices[0].message.content or ""
        if not content:
            log.warning("llm.response.empty", backend=self._backend_id.value)
            return Result.err(
                BackendError(
                    f"Empty response from {self._backend_id.value}",
                    backend=self._backend_id.value,
                )
            )

        content, truncated = truncate_response(content)
        if truncated:
            log.warning(
                "llm.response.truncated",
                backend=self._backend_id.value,
                max_length=MAX_RESPONSE_LENGTH,
            )
        return Result.ok(content)

    async def stream_chat(
        self,
        messages: list[Message],
        options: ChatOptions | None = None,
    ) -> AsyncIterator[str]:
        """Yield answer fragments from a streamed LiteLLM completion.

        Raises:
            BackendError: On any failure, including mid-stream.
        """
        kwargs = self._build_completion_kwargs(messages, options or ChatOptions())
        kwargs["stream"] = True
        try:
            response = await litellm.acompletion(**kwargs)
            async for chunk in response:
                if not chunk.choices:
                    continue
                text = chunk.choices[0].delta.content
                if text:
                    yield text
        except Exception as e:
            raise self._to_backend_error(e, kwargs["model"]) from e

    def _to_backend_error(self, exc: Exception, model: str) -> BackendError:
        """Convert LiteLLM exceptions to BackendError."""
        backend = self._backend_id.value

        if isinstance(exc, litellm.AuthenticationError):
            log.warning("llm.request.failed.auth_error", backend=backend, model=model)
            error = BackendError(
                f"Authentication failed - check the {backend} API key: {exc}",
                backend=backend,
                status_code=401,
            )
        elif isinstance(exc, litellm.RateLimitError):
            log.warning("llm.request.failed.rate_limit", backend=backend, model=model)
            error = BackendError(
                str(exc) or "Rate limit exceeded",
                backend=backend,
                status_code=429,
            )
        elif isinstance(exc, _NETWORK_EXCEPTIONS):
            log.warning(
                "llm.request.failed.retries_exhausted",
                backend=backend,
                model=model,
                error=str(exc),
                max_retries=self._max_retries,
            )
            error = BackendError(
                str(exc) or type(exc).__name__,
                backend=backend,
                category=ErrorCategory.NETWORK_ERROR,
            )
        elif isinstance(exc, (litellm.APIError, litellm.BadRequestError, *RETRIABLE_EXCEPTIONS)):
            log.warning(
                "llm.request.failed.api_error",
                backend=backend,
                model=model,
                error=str(exc),
                status_code=getattr(exc, "status_code", None),
            )
            error = BackendError.from_exception(exc, backend=backend)
        else:
            log.exception("llm.request.failed.unexpected", backend=backend, error=str(exc))
            error = BackendError(f"Unexpected error: {exc!s}", backend=backend)

        error.details.setdefault("original_exception", type(exc).__name__)
        error.__cause__ = exc
        return error


class OpenAIBackend(LiteLLMBackend):
    """OpenAI chat models (gpt-4-turbo-preview by default)."""

    _backend_id = BackendId.OPENAI
    _litellm_prefix = "openai/"


class DeepSeekBackend(LiteLLMBackend):
    """DeepSeek's OpenAI-compatible chat API."""

    _backend_id = BackendId.DEEPSEEK
    _litellm_prefix = "deepseek/"


class GeminiBackend(LiteLLMBackend):
    """Google Gemini via the Google AI Studio API."""

    _backend_id = BackendId.GEMINI
    _litellm_prefix = "gemini/"
