"""Resilience controller: runs one request across the fallback chain.

Per request the controller moves through Selecting -> Attempting and then
either Success, or Retrying -> Attempting with the next fallback candidate,
until the candidates run out (Exhausted). Attempts are strictly sequential
and no backend is attempted twice within one request.

Each attempt is bounded by a timeout. A caller may pass an asyncio.Event to
cancel the request; it is checked before every attempt and raced against
the attempt in flight. Task cancellation (asyncio.CancelledError) is never
swallowed.

Usage:
    controller = ResilienceController(registry, router)
    result = await controller.execute(Role.CODER, "write a loop")
    if result.is_ok:
        print(result.value.text, result.value.backend, result.value.cost)
    else:
        print(result.error)  # AllProvidersExhaustedError or RequestCancelledError
"""

import asyncio
from dataclasses import dataclass, replace

from prism.core.errors import (
    AllProvidersExhaustedError,
    BackendError,
    ErrorCategory,
    RequestCancelledError,
)
from prism.core.types import CostUSD, Result
from prism.observability.logging import get_logger
from prism.providers.base import BackendClient, BackendId, ChatOptions, Message, MessageRole
from prism.providers.registry import ProviderRegistry
from prism.resilience.fallback import next_pending
from prism.routing.roles import ROLE_CATALOGUE, Role, RoleProfile
from prism.routing.router import BackendRouter
from prism.usage.tracker import UsageRecord, UsageTracker

log = get_logger(__name__)

DEFAULT_ATTEMPT_TIMEOUT_SECONDS = 120.0


def build_messages(profile: RoleProfile, prompt: str, context: str | None = None) -> list[Message]:
    """Build the system + user message pair for a request.

    Context, when given, is placed ahead of the task text.
    """
    if context:
        user_content = f"Context:\n{context}\n\nTask:\n{prompt}"
    else:
        user_content = prompt
    return [
        Message(role=MessageRole.SYSTEM, content=profile.system_prompt),
        Message(role=MessageRole.USER, content=user_content),
    ]


@dataclass(frozen=True, slots=True)
class RoutedResponse:
    """A successful routed request.

    Attributes:
        text: The answer text.
        backend: Backend that produced it.
        model: Model id that produced it.
        usage: Estimated token usage and cost.
    """

    text: str
    backend: BackendId
    model: str
    usage: UsageRecord

    @property
    def cost(self) -> CostUSD:
        return self.usage.cost


class ResilienceController:
    """Executes requests with per-attempt timeouts and fallback."""

    def __init__(
        self,
        registry: ProviderRegistry,
        router: BackendRouter,
        *,
        tracker: UsageTracker | None = None,
        attempt_timeout: float = DEFAULT_ATTEMPT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the controller.

        Args:
            registry: Registered backends.
            router: Router for the first candidate.
            tracker: Usage tracker. Defaults to a new UsageTracker.
            attempt_timeout: Seconds allowed per attempt.
        """
        self._registry = registry
        self._router = router
        self._tracker = tracker or UsageTracker()
        self._attempt_timeout = attempt_timeout

    async def execute(
        self,
        role: Role,
        prompt: str,
        context: str | None = None,
        override: BackendId = BackendId.AUTO,
        options: ChatOptions | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[RoutedResponse, AllProvidersExhaustedError | RequestCancelledError]:
        """Run one request.

        Args:
            role: Role of the request.
            prompt: Task text.
            context: Optional context placed ahead of the task.
            override: Specific backend for the first attempt, or AUTO.
            options: Per-call chat options. A pinned model applies to the
                first attempt only; fallbacks use their own model.
            cancel_event: Set it to cancel the request.

        Returns:
            Result with the RoutedResponse, or AllProvidersExhaustedError when
            every reachable backend failed, or RequestCancelledError.
        """
        messages = build_messages(ROLE_CATALOGUE[role], prompt, context)
        decision = self._router.route(override, role, prompt)
        original = decision.backend

        attempted: list[BackendId] = []
        pending: list[BackendId] = [original]
        last_error: BackendError | None = None

        while pending:
            if cancel_event is not None and cancel_event.is_set():
                return self._cancelled(attempted)

            backend = pending.pop(0)
            attempted.append(backend)
            client = self._registry.get(backend)

            log.info(
                "resilience.attempt.started",
                backend=backend.value,
                attempt=len(attempted),
                is_fallback=backend is not original,
            )

            attempt_options = options
            if options is not None and options.model and backend is not original:
                # A pinned model belongs to the first backend only
                attempt_options = replace(options, model=None)
            model = client.resolve_model(attempt_options.model if attempt_options else None)

            outcome = await self._attempt(client, messages, attempt_options, cancel_event)
            if outcome is None:
                return self._cancelled(attempted)

            if outcome.is_ok:
                usage = self._tracker.record(client, backend, messages, outcome.value, model)
                log.info(
                    "resilience.request.succeeded",
                    backend=backend.value,
                    attempts=len(attempted),
                    cost=usage.cost,
                )
                return Result.ok(
                    RoutedResponse(
                        text=outcome.value,
                        backend=backend,
                        model=model,
                        usage=usage,
                    )
                )

            last_error = outcome.error
            pending = next_pending(
                self._router.tables, self._registry, backend, attempted, pending
            )
            log.warning(
                "resilience.attempt.failed",
                backend=backend.value,
                category=last_error.category.value,
                status_code=last_error.status_code,
                error=last_error.message,
                next_backend=pending[0].value if pending else None,
            )

        assert last_error is not None
        registered = [b.value for b in self._registry.registered]
        log.error(
            "resilience.chain.exhausted",
            original_backend=original.value,
            attempted=[b.value for b in attempted],
            registered=registered,
            category=last_error.category.value,
        )
        return Result.err(
            AllProvidersExhaustedError(
                original.value,
                last_error,
                registered=registered,
                attempted=[b.value for b in attempted],
            )
        )

    async def _attempt(
        self,
        client: BackendClient,
        messages: list[Message],
        options: ChatOptions | None,
        cancel_event: asyncio.Event | None,
    ) -> Result[str, BackendError] | None:
        """Run one attempt; None means the caller cancelled it."""
        if cancel_event is None:
            return await self._send_with_timeout(client, messages, options)

        call = asyncio.ensure_future(self._send_with_timeout(client, messages, options))
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait({call, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not call.done():
                call.cancel()

        if call in done and not call.cancelled():
            return call.result()

        await asyncio.wait({call})
        return None

    async def _send_with_timeout(
        self,
        client: BackendClient,
        messages: list[Message],
        options: ChatOptions | None,
    ) -> Result[str, BackendError]:
        try:
            async with asyncio.timeout(self._attempt_timeout):
                return await client.send_chat(messages, options)
        except TimeoutError:
            return Result.err(
                BackendError(
                    f"Attempt timed out after {self._attempt_timeout:g}s",
                    backend=client.backend_id.value,
                    category=ErrorCategory.NETWORK_ERROR,
                )
            )
        except BackendError as e:
            return Result.err(e)

    def _cancelled(
        self, attempted: list[BackendId]
    ) -> Result[RoutedResponse, AllProvidersExhaustedError | RequestCancelledError]:
        log.info("resilience.request.cancelled", attempted=[b.value for b in attempted])
        return Result.err(RequestCancelledError(attempted=[b.value for b in attempted]))
