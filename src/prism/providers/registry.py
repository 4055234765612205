"""Provider registry: the set of backends usable in this process.

The registry is built once from a credential map. Each credential is shape
checked; backends whose credential is missing or mis-shaped are skipped
without error. After construction the set of registered backends never
changes; only the default-backend pointer can move, through set_default().

Usage:
    registry = ProviderRegistry(
        {BackendId.GEMINI: "AIzaSy...", BackendId.CLAUDE: "sk-ant-..."},
    )
    registry.registered   # (BackendId.GEMINI, BackendId.CLAUDE)
    registry.default      # BackendId.GEMINI
    client = registry.get(BackendId.CLAUDE)
"""

from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType

from prism.core.errors import NoProviderConfiguredError, NotRegisteredError
from prism.core.security import mask_api_key, validate_credential_shape
from prism.observability.logging import get_logger
from prism.providers.anthropic_adapter import ClaudeBackend
from prism.providers.base import BackendClient, BackendId
from prism.providers.litellm_adapter import (
    DeepSeekBackend,
    GeminiBackend,
    LiteLLMBackend,
    OpenAIBackend,
)

log = get_logger(__name__)

BackendFactory = Callable[[str], BackendClient]
"""Builds a backend client from a shape-checked credential."""

# Default-backend priority when no preferred default is registered.
DEFAULT_PRIORITY: tuple[BackendId, ...] = (
    BackendId.GEMINI,
    BackendId.DEEPSEEK,
    BackendId.OPENAI,
    BackendId.CLAUDE,
)

_BACKEND_CLASSES: Mapping[BackendId, type[ClaudeBackend | LiteLLMBackend]] = MappingProxyType({
    BackendId.GEMINI: GeminiBackend,
    BackendId.DEEPSEEK: DeepSeekBackend,
    BackendId.CLAUDE: ClaudeBackend,
    BackendId.OPENAI: OpenAIBackend,
})


def make_factories(
    *,
    models: Mapping[BackendId, str] | None = None,
    base_urls: Mapping[BackendId, str] | None = None,
    timeout: float = 60.0,
    max_retries: int = 2,
) -> dict[BackendId, BackendFactory]:
    """Build one client factory per backend with shared transport settings.

    Args:
        models: Model id per backend; absent backends use their default model.
        base_urls: Custom API base URL per backend.
        timeout: HTTP timeout in seconds for every client.
        max_retries: Transport-level attempts for every client.
    """
    models = models or {}
    base_urls = base_urls or {}

    def factory_for(backend: BackendId) -> BackendFactory:
        cls = _BACKEND_CLASSES[backend]

        def build(api_key: str) -> BackendClient:
            return cls(
                api_key=api_key,
                model=models.get(backend),
                base_url=base_urls.get(backend),
                timeout=timeout,
                max_retries=max_retries,
            )

        return build

    return {backend: factory_for(backend) for backend in _BACKEND_CLASSES}


BACKEND_FACTORIES: Mapping[BackendId, BackendFactory] = MappingProxyType(make_factories())


class ProviderRegistry:
    """Immutable set of registered backends plus a movable default pointer.

    Attributes:
        registered: Registered backends in construction order.
        default: The current default backend.
    """

    def __init__(
        self,
        credentials: Mapping[BackendId, str | None],
        *,
        default: BackendId | None = None,
        factories: Mapping[BackendId, BackendFactory] | None = None,
    ) -> None:
        """Build the registry.

        Args:
            credentials: Credential per backend. Missing, empty or mis-shaped
                entries are skipped.
            default: Preferred default backend. Ignored unless registered.
            factories: Client factory per backend. Defaults to
                BACKEND_FACTORIES.

        Raises:
            NoProviderConfiguredError: If no backend passes its shape check.
        """
        factories = factories if factories is not None else BACKEND_FACTORIES
        clients: dict[BackendId, BackendClient] = {}

        for backend in BackendId.concrete():
            credential = credentials.get(backend)
            if not validate_credential_shape(backend.value, credential):
                log.debug(
                    "registry.backend.skipped",
                    backend=backend.value,
                    reason="invalid_shape" if credential else "missing",
                    hint=mask_api_key(credential or ""),
                )
                continue
            factory = factories.get(backend)
            if factory is None:
                log.debug("registry.backend.skipped", backend=backend.value, reason="no factory")
                continue
            clients[backend] = factory(credential or "")
            log.debug("registry.backend.registered", backend=backend.value)

        if not clients:
            raise NoProviderConfiguredError(checked=[b.value for b in credentials])

        self._clients: Mapping[BackendId, BackendClient] = MappingProxyType(clients)

        if default is not None and default is not BackendId.AUTO and default in clients:
            self._default = default
        else:
            self._default = next(b for b in DEFAULT_PRIORITY if b in clients)

        log.info(
            "registry.built",
            registered=[b.value for b in clients],
            default=self._default.value,
        )

    @property
    def registered(self) -> tuple[BackendId, ...]:
        return tuple(self._clients)

    @property
    def default(self) -> BackendId:
        return self._default

    def has(self, backend: BackendId) -> bool:
        """Return True if backend is registered. AUTO is never registered."""
        return backend in self._clients

    def get(self, backend: BackendId) -> BackendClient:
        """Return the client for a registered backend.

        Raises:
            NotRegisteredError: If backend is not registered.
        """
        try:
            return self._clients[backend]
        except KeyError:
            raise NotRegisteredError(
                str(backend), registered=[b.value for b in self._clients]
            ) from None

    def set_default(self, backend: BackendId) -> None:
        """Move the default pointer.

        Raises:
            NotRegisteredError: If backend is not registered.
        """
        if not self.has(backend):
            raise NotRegisteredError(str(backend), registered=[b.value for b in self._clients])
        self._default = backend
        log.info("registry.default.changed", backend=backend.value)

    def clients(self) -> Iterator[tuple[BackendId, BackendClient]]:
        """Iterate (backend, client) pairs in registration order."""
        return iter(self._clients.items())

    def __contains__(self, backend: object) -> bool:
        return backend in self._clients

    def __len__(self) -> int:
        return len(self._clients)
