"""Gateway: the single entry point the rest of an application talks to.

The gateway wires the provider registry, router, resilience controller and
usage tracker together and exposes one-shot completions, streaming, the
quick task helpers, backend listings and the default-backend mutator.

Usage:
    gateway = Gateway.from_config(load_config(), resolve_credentials())

    result = await gateway.complete(Role.REVIEWER, "Review this function", context=code)
    if result.is_ok:
        print(result.value.text, result.value.backend, result.value.cost)

    async for fragment in gateway.stream(Role.CODER, "write a loop"):
        print(fragment, end="")
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Mapping
import uuid

from prism.config.models import CredentialsConfig, PrismConfig
from prism.core.errors import (
    AllProvidersExhaustedError,
    NotRegisteredError,
    RequestCancelledError,
)
from prism.core.types import Result
from prism.gateway.models import BackendAvailability, CostComparison
from prism.observability.logging import bind_context, get_logger, unbind_context
from prism.providers.base import BackendId, ChatOptions
from prism.providers.catalogue import DISPLAY_NAMES
from prism.providers.registry import BackendFactory, ProviderRegistry, make_factories
from prism.resilience.controller import ResilienceController, RoutedResponse, build_messages
from prism.routing.complexity import ComplexityStrategy, estimate_complexity
from prism.routing.roles import ROLE_CATALOGUE, Role
from prism.routing.router import BackendRouter, RoutingDecision
from prism.routing.tables import DEFAULT_TABLES, RoutingTables
from prism.usage.tracker import UsageTracker

log = get_logger(__name__)

RequestError = AllProvidersExhaustedError | RequestCancelledError

# Order used by list_backends().
LISTING_ORDER: tuple[BackendId, ...] = (
    BackendId.GEMINI,
    BackendId.DEEPSEEK,
    BackendId.CLAUDE,
    BackendId.OPENAI,
)


def _new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class Gateway:
    """Routes requests to backends with fallback and usage estimation."""

    def __init__(
        self,
        registry: ProviderRegistry,
        *,
        tables: RoutingTables = DEFAULT_TABLES,
        complexity_strategy: ComplexityStrategy = estimate_complexity,
        attempt_timeout: float = 120.0,
        tracker: UsageTracker | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            registry: Registered backends.
            tables: Routing tables.
            complexity_strategy: Prompt complexity heuristic.
            attempt_timeout: Seconds allowed per backend attempt.
            tracker: Usage tracker.
        """
        self._registry = registry
        self._router = BackendRouter(registry, tables, complexity_strategy)
        self._controller = ResilienceController(
            registry,
            self._router,
            tracker=tracker,
            attempt_timeout=attempt_timeout,
        )

    @classmethod
    def from_config(
        cls,
        config: PrismConfig,
        credentials: CredentialsConfig,
        *,
        factories: Mapping[BackendId, BackendFactory] | None = None,
    ) -> Gateway:
        """Build a gateway from configuration and resolved credentials.

        Args:
            config: Prism configuration.
            credentials: Credentials, usually from resolve_credentials().
            factories: Client factories. Defaults to factories built from
                config.models and config.resilience.

        Raises:
            NoProviderConfiguredError: If no credential passes its shape check.
        """
        if factories is None:
            factories = make_factories(
                models=config.models,
                base_urls=credentials.base_urls(),
                timeout=config.resilience.backend_timeout_seconds,
                max_retries=config.resilience.backend_max_retries,
            )

        registry = ProviderRegistry(
            credentials.api_keys(),
            default=None if config.default_backend is BackendId.AUTO else config.default_backend,
            factories=factories,
        )
        routing = config.routing
        tables = DEFAULT_TABLES.with_overrides(
            role_preferences=routing.role_preferences,
            high_complexity_shortlist=routing.high_complexity_shortlist,
            low_complexity_shortlist=routing.low_complexity_shortlist,
            fallback_chains=routing.fallback_chains,
        )
        return cls(
            registry,
            tables=tables,
            attempt_timeout=config.resilience.attempt_timeout_seconds,
        )

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def default_backend(self) -> BackendId:
        return self._registry.default

    async def complete(
        self,
        role: Role,
        prompt: str,
        context: str | None = None,
        backend: BackendId = BackendId.AUTO,
        options: ChatOptions | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[RoutedResponse, RequestError]:
        """Answer one request, falling back across backends on failure.

        Args:
            role: Role of the request.
            prompt: Task text.
            context: Optional context placed ahead of the task.
            backend: Backend to try first, or AUTO. An unregistered backend
                is ignored and the router decides.
            options: Per-call chat options.
            cancel_event: Set it to cancel the request.

        Returns:
            Result with the RoutedResponse, or the request's failure.
        """
        request_id = _new_request_id()
        bind_context(request_id=request_id, role=role.value)
        try:
            return await self._controller.execute(
                role,
                prompt,
                context=context,
                override=backend,
                options=options,
                cancel_event=cancel_event,
            )
        finally:
            unbind_context("request_id", "role")

    async def process(
        self,
        prompt: str,
        context: str | None = None,
        backend: BackendId = BackendId.AUTO,
    ) -> Result[RoutedResponse, RequestError]:
        """complete() with the coder role."""
        return await self.complete(Role.CODER, prompt, context, backend)

    async def stream(
        self,
        role: Role,
        prompt: str,
        context: str | None = None,
        backend: BackendId = BackendId.AUTO,
        options: ChatOptions | None = None,
    ) -> AsyncIterator[str]:
        """Stream one request from a single routed backend.

        Streams are one attempt: a failure is not retried through the
        fallback chain and no usage is estimated.

        Raises:
            NotRegisteredError: If backend is explicit and not registered.
            BackendError: If the backend fails, before or mid-stream.
        """
        if backend is not BackendId.AUTO and not self._registry.has(backend):
            raise NotRegisteredError(
                backend.value, registered=[b.value for b in self._registry.registered]
            )

        bind_context(request_id=_new_request_id(), role=role.value)
        try:
            decision = self._router.route(backend, role, prompt)
            client = self._registry.get(decision.backend)
            messages = build_messages(ROLE_CATALOGUE[role], prompt, context)

            log.info("gateway.stream.started", backend=decision.backend.value)
            fragments = 0
            async for fragment in client.stream_chat(messages, options):
                fragments += 1
                yield fragment
            log.info(
                "gateway.stream.completed",
                backend=decision.backend.value,
                fragments=fragments,
            )
        finally:
            unbind_context("request_id", "role")

    async def quick_code_help(
        self,
        prompt: str,
        code_context: str | None = None,
        backend: BackendId = BackendId.AUTO,
    ) -> Result[str, RequestError]:
        """Coder-role request returning only the answer text."""
        result = await self.complete(Role.CODER, prompt, code_context, backend)
        return result.map(lambda r: r.text)

    async def quick_review(
        self,
        code: str,
        backend: BackendId = BackendId.AUTO,
    ) -> Result[str, RequestError]:
        result = await self.complete(Role.REVIEWER, "Review this code", code, backend)
        return result.map(lambda r: r.text)

    async def quick_optimize(
        self,
        code: str,
        backend: BackendId = BackendId.AUTO,
    ) -> Result[str, RequestError]:
        result = await self.complete(
            Role.OPTIMIZER, "Optimize the performance of this code", code, backend
        )
        return result.map(lambda r: r.text)

    async def quick_debug(
        self,
        error: str,
        code: str | None = None,
        backend: BackendId = BackendId.AUTO,
    ) -> Result[str, RequestError]:
        """Debugger-role request; the error (and code, if given) is the context."""
        context = f"Code:\n{code}\n\nError:\n{error}" if code else error
        result = await self.complete(Role.DEBUGGER, "Analyze and fix this error", context, backend)
        return result.map(lambda r: r.text)

    def route(
        self,
        prompt: str,
        role: Role = Role.CODER,
        backend: BackendId = BackendId.AUTO,
    ) -> RoutingDecision:
        """Return the routing decision for a request without sending it."""
        return self._router.route(backend, role, prompt)

    def list_backends(self) -> list[BackendAvailability]:
        """Every concrete backend with its availability and default flag."""
        return [
            BackendAvailability(
                id=backend,
                name=DISPLAY_NAMES[backend],
                available=self._registry.has(backend),
                is_default=backend is self._registry.default,
            )
            for backend in LISTING_ORDER
        ]

    def set_default_backend(self, backend: BackendId) -> None:
        """Change the default backend.

        Raises:
            NotRegisteredError: If backend is not registered.
        """
        self._registry.set_default(backend)

    def cost_comparison(self) -> list[CostComparison]:
        """Default-model prices of every registered backend."""
        rows = []
        for backend, client in self._registry.clients():
            info = client.describe_model()
            rows.append(
                CostComparison(
                    backend=backend,
                    name=info.name,
                    model=info.model,
                    input_price=info.pricing.input,
                    output_price=info.pricing.output,
                )
            )
        return rows

    async def validate_credentials(self) -> dict[BackendId, bool]:
        """Check each registered backend's credential with a real request.

        Runs sequentially and consumes a little quota per backend.
        """
        results: dict[BackendId, bool] = {}
        for backend, client in self._registry.clients():
            results[backend] = await client.validate_credential()
            log.info(
                "gateway.credential.validated",
                backend=backend.value,
                valid=results[backend],
            )
        return results
