"""Anthropic SDK backend for Claude.

This module provides the ClaudeBackend class that implements the
BackendClient protocol using the official Anthropic Python SDK.
"""

from collections.abc import AsyncIterator
from typing import Any

import anthropic
import structlog

from prism.core.errors import BackendError, ErrorCategory
from prism.core.security import MAX_RESPONSE_LENGTH, truncate_response
from prism.core.types import Result
from prism.providers.base import BackendId, ChatOptions, Message, MessageRole
from prism.providers.catalogue import DEFAULT_MODELS, CatalogueBackend

log = structlog.get_logger()

DEFAULT_MODEL = DEFAULT_MODELS[BackendId.CLAUDE]


class ClaudeBackend(CatalogueBackend):
    """Backend client using the official Anthropic Python SDK.

    Example:
        backend = ClaudeBackend(api_key="sk-ant-...")
        result = await backend.send_chat(
            [Message(role=MessageRole.USER, content="Hello!")],
        )
    """

    _backend_id = BackendId.CLAUDE

    def __init__(
        self,
        *,
        api_key: str,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float = 60.0,
        max_retries: int = 2,
    ) -> None:
        """Initialize the Claude backend.

        Args:
            api_key: Anthropic API key.
            model: Model id. Defaults to claude-3-5-sonnet-20241022.
            base_url: Optional API base URL.
            timeout: Request timeout in seconds. Default 60.0.
            max_retries: Max retries for transient errors (handled by SDK). Default 2.
        """
        self._api_key = api_key
        self._model = self._resolve_model(model or DEFAULT_MODEL)
        self._base_url = base_url
        self._timeout = timeout
        self._max_retries = max_retries
        self._client: anthropic.AsyncAnthropic | None = None

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
                max_retries=self._max_retries,
            )
        return self._client

    @staticmethod
    def _resolve_model(model: str) -> str:
        """Strip an 'anthropic/' prefix; non-Claude ids fall back to the default."""
        if model.startswith("anthropic/"):
            model = model[len("anthropic/") :]
        if model.startswith("claude"):
            return model
        return DEFAULT_MODEL

    def resolve_model(self, model: str | None = None) -> str:
        return self._resolve_model(model) if model else self._model

    def _build_kwargs(self, messages: list[Message], options: ChatOptions) -> dict[str, Any]:
        # Anthropic takes system text as a top-level param
        system_parts: list[str] = []
        api_messages: list[dict[str, str]] = []
        for msg in messages:
            if msg.role == MessageRole.SYSTEM:
                system_parts.append(msg.content)
            else:
                api_messages.append(msg.to_dict())

        if not api_messages:
            api_messages.append({"role": "user", "content": "(empty)"})

        kwargs: dict[str, Any] = {
            "model": self.resolve_model(options.model),
            "messages": api_messages,
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
            "top_p": options.top_p,
        }
        if system_parts:
            kwargs["system"] = "\n\n".join(system_parts)
        if options.stop:
            kwargs["stop_sequences"] = options.stop
        return kwargs

    async def send_chat(
        self,
        messages: list[Message],
        options: ChatOptions | None = None,
    ) -> Result[str, BackendError]:
        """Send a chat request to the Anthropic API.

        Args:
            messages: The conversation messages to send.
            options: Per-call options.

        Returns:
            Result containing the answer text or a BackendError.
        """
        kwargs = self._build_kwargs(messages, options or ChatOptions())
        model = kwargs["model"]

        log.debug(
            "anthropic.request.started",
            model=model,
            message_count=len(kwargs["messages"]),
            has_system="system" in kwargs,
        )

        try:
            response = await self._get_client().messages.create(**kwargs)
        except Exception as e:
            return Result.err(self._to_backend_error(e, model))

        content = "".join(block.text for block in response.content if block.type == "text")
        if not content:
            log.warning("anthropic.response.empty", model=model)
            return Result.err(
                BackendError("Empty response from Claude", backend=BackendId.CLAUDE.value)
            )

        content, truncated = truncate_response(content)
        if truncated:
            log.warning(
                "anthropic.response.truncated",
                model=model,
                max_length=MAX_RESPONSE_LENGTH,
            )
        return Result.ok(content)

    async def stream_chat(
        self,
        messages: list[Message],
        options: ChatOptions | None = None,
    ) -> AsyncIterator[str]:
        """Yield answer fragments as the Anthropic API streams them.

        Raises:
            BackendError: On any SDK failure, including mid-stream.
        """
        kwargs = self._build_kwargs(messages, options or ChatOptions())
        model = kwargs["model"]
        try:
            async with self._get_client().messages.stream(**kwargs) as stream:
                async for text in stream.text_stream:
                    if text:
                        yield text
        except BackendError:
            raise
        except Exception as e:
            raise self._to_backend_error(e, model) from e

    def _to_backend_error(self, exc: Exception, model: str) -> BackendError:
        """Convert Anthropic SDK exceptions to BackendError."""
        backend = BackendId.CLAUDE.value

        if isinstance(exc, anthropic.AuthenticationError):
            log.warning("anthropic.request.failed.auth", model=model)
            error = BackendError(
                f"Authentication failed - check the Claude API key: {exc}",
                backend=backend,
                status_code=401,
            )
        elif isinstance(exc, anthropic.RateLimitError):
            log.warning("anthropic.request.failed.rate_limit", model=model)
            error = BackendError(
                str(exc) or "Rate limit exceeded", backend=backend, status_code=429
            )
        elif isinstance(exc, anthropic.APIStatusError):
            log.warning(
                "anthropic.request.failed.api_error",
                model=model,
                error=str(exc),
                status_code=exc.status_code,
            )
            error = BackendError(
                f"API error: {exc}",
                backend=backend,
                status_code=exc.status_code,
            )
        elif isinstance(exc, anthropic.APIConnectionError):
            log.warning("anthropic.request.failed.connection", model=model, error=str(exc))
            error = BackendError(
                f"Connection error: {exc}",
                backend=backend,
                category=ErrorCategory.NETWORK_ERROR,
            )
        else:
            log.exception("anthropic.request.failed.unexpected", model=model, error=str(exc))
            error = BackendError(f"Unexpected error: {exc}", backend=backend)

        error.details.setdefault("original_exception", type(exc).__name__)
        error.__cause__ = exc
        return error
