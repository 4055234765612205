"""Shared fixtures for Prism tests.

Provides scripted in-memory backends so the registry, router, resilience
controller and gateway can be exercised without network access.
"""

import asyncio
from collections.abc import AsyncIterator, Callable, Iterable, Mapping, Sequence
from typing import Any

import pytest
import stamina

from prism.observability.logging import (
    LoggingConfig,
    configure_logging,
    reset_logging,
    set_console_logging,
)

# Logging must be configured before any prism logger is first used
configure_logging(LoggingConfig(enable_file_logging=False))
set_console_logging(False)

from prism.core.errors import BackendError  # noqa: E402
from prism.core.types import Result  # noqa: E402
from prism.providers.base import BackendId, ChatOptions, Message  # noqa: E402
from prism.providers.catalogue import DEFAULT_MODELS, CatalogueBackend  # noqa: E402
from prism.providers.registry import ProviderRegistry  # noqa: E402

VALID_KEYS: dict[BackendId, str] = {
    BackendId.GEMINI: "AIzaSy-test-gemini-key",
    BackendId.DEEPSEEK: "sk-test-deepseek-key",
    BackendId.CLAUDE: "sk-ant-test-claude-key",
    BackendId.OPENAI: "sk-proj-test-openai-key",
}

Outcome = str | BackendError


class FakeBackend(CatalogueBackend):
    """Backend whose send_chat outcomes are scripted.

    Each call pops the next outcome: a str becomes Result.ok, a
    BackendError becomes Result.err. With no outcomes left every call
    succeeds with "answer from <backend>".
    """

    def __init__(
        self,
        backend_id: BackendId,
        outcomes: Iterable[Outcome] = (),
        *,
        delay: float = 0.0,
        fragments: Sequence[str] = (),
        stream_error: BackendError | None = None,
    ) -> None:
        self._backend_id = backend_id
        self._model = DEFAULT_MODELS[backend_id]
        self.outcomes = list(outcomes)
        self.delay = delay
        self.fragments = list(fragments)
        self.stream_error = stream_error
        self.calls: list[list[Message]] = []
        self.options: list[ChatOptions | None] = []

    async def send_chat(
        self,
        messages: list[Message],
        options: ChatOptions | None = None,
    ) -> Result[str, BackendError]:
        self.calls.append(list(messages))
        self.options.append(options)
        if self.delay:
            await asyncio.sleep(self.delay)
        outcome = self.outcomes.pop(0) if self.outcomes else f"answer from {self._backend_id}"
        if isinstance(outcome, BackendError):
            return Result.err(outcome)
        return Result.ok(outcome)

    async def stream_chat(
        self,
        messages: list[Message],
        options: ChatOptions | None = None,
    ) -> AsyncIterator[str]:
        self.calls.append(list(messages))
        for fragment in self.fragments:
            yield fragment
        if self.stream_error is not None:
            raise self.stream_error


def backend_error(
    backend: BackendId,
    message: str = "Rate limit exceeded",
    status_code: int | None = 429,
) -> BackendError:
    return BackendError(message, backend=backend.value, status_code=status_code)


RegistryBuilder = Callable[..., tuple[ProviderRegistry, dict[BackendId, FakeBackend]]]


@pytest.fixture(autouse=True)
def fast_retries() -> Any:
    """Disable stamina backoff; one attempt unless a test asks for more."""
    stamina.set_testing(True, attempts=1)
    yield
    stamina.set_testing(False)


@pytest.fixture(autouse=True)
def quiet_logging() -> Any:
    """Keep log output off the console and out of ~/.prism."""
    yield
    reset_logging()
    configure_logging(LoggingConfig(enable_file_logging=False))
    set_console_logging(False)


@pytest.fixture
def valid_keys() -> dict[BackendId, str]:
    """Credentials that pass every backend's shape check."""
    return dict(VALID_KEYS)


@pytest.fixture
def fake_backend() -> type[FakeBackend]:
    """The FakeBackend class, for tests that build clients directly."""
    return FakeBackend


@pytest.fixture
def make_error() -> Callable[..., BackendError]:
    """Build a BackendError for a backend (429 by default)."""
    return backend_error


@pytest.fixture
def fake_registry() -> RegistryBuilder:
    """Build a ProviderRegistry of FakeBackends.

    Usage:
        registry, fakes = fake_registry(
            BackendId.CLAUDE,
            BackendId.GEMINI,
            outcomes={BackendId.CLAUDE: [make_error(BackendId.CLAUDE)]},
        )
    """

    def build(
        *backends: BackendId,
        outcomes: Mapping[BackendId, Iterable[Outcome]] | None = None,
        default: BackendId | None = None,
        **fake_kwargs: Any,
    ) -> tuple[ProviderRegistry, dict[BackendId, FakeBackend]]:
        outcomes = outcomes or {}
        fakes = {b: FakeBackend(b, outcomes.get(b, ()), **fake_kwargs) for b in backends}
        registry = ProviderRegistry(
            {b: VALID_KEYS[b] for b in backends},
            default=default,
            factories={b: (lambda _key, b=b: fakes[b]) for b in backends},
        )
        return registry, fakes

    return build
