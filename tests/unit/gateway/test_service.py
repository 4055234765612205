"""Unit tests for prism.gateway.service module."""

import pytest
import structlog

from prism.config.models import CredentialsConfig, PrismConfig, ProviderCredentials
from prism.core.errors import (
    AllProvidersExhaustedError,
    BackendError,
    NoProviderConfiguredError,
    NotRegisteredError,
)
from prism.gateway.service import LISTING_ORDER, Gateway
from prism.providers.base import BackendId
from prism.routing.roles import Role
from prism.routing.router import RoutingReason

G, D, C, O = BackendId.GEMINI, BackendId.DEEPSEEK, BackendId.CLAUDE, BackendId.OPENAI


def credentials_for(*backends: BackendId, keys: dict[BackendId, str]) -> CredentialsConfig:
    return CredentialsConfig(
        providers={b: ProviderCredentials(api_key=keys[b]) for b in backends}
    )


class TestFromConfig:
    """Test Gateway.from_config."""

    def test_builds_registry_and_default(self, valid_keys) -> None:
        config = PrismConfig(default_backend=C)

        gateway = Gateway.from_config(config, credentials_for(G, C, keys=valid_keys))

        assert gateway.registry.registered == (G, C)
        assert gateway.default_backend is C

    def test_auto_default_uses_priority(self, valid_keys) -> None:
        gateway = Gateway.from_config(PrismConfig(), credentials_for(C, D, keys=valid_keys))

        assert gateway.default_backend is D

    def test_applies_models_and_transport_settings(self, valid_keys) -> None:
        config = PrismConfig.model_validate(
            {
                "models": {"openai": "gpt-4o-mini"},
                "resilience": {"backend_timeout_seconds": 7, "backend_max_retries": 4},
            }
        )

        gateway = Gateway.from_config(config, credentials_for(O, keys=valid_keys))

        client = gateway.registry.get(O)
        assert client.model_id == "gpt-4o-mini"
        assert client._timeout == 7.0
        assert client._max_retries == 4

    def test_applies_routing_overrides(self, valid_keys, fake_backend) -> None:
        config = PrismConfig.model_validate(
            {"routing": {"role_preferences": {"coder": ["claude", "gemini"]}}}
        )
        fakes = {b: fake_backend(b) for b in (G, C)}

        gateway = Gateway.from_config(
            config,
            credentials_for(G, C, keys=valid_keys),
            factories={b: (lambda _key, b=b: fakes[b]) for b in fakes},
        )

        assert gateway.route("write a loop").backend is C

    def test_no_credentials_fails(self) -> None:
        with pytest.raises(NoProviderConfiguredError):
            Gateway.from_config(PrismConfig(), CredentialsConfig())


class TestComplete:
    """Test one-shot completions."""

    async def test_complete_returns_routed_response(self, fake_registry) -> None:
        registry, fakes = fake_registry(G, C, outcomes={C: ["Use layers"]})
        gateway = Gateway(registry)

        result = await gateway.complete(Role.ARCHITECT, "Design the architecture")

        assert result.is_ok
        assert result.value.text == "Use layers"
        assert result.value.backend is C
        assert result.value.usage.input_tokens > 0

    async def test_complete_falls_back(self, fake_registry, make_error) -> None:
        registry, _ = fake_registry(G, C, outcomes={C: [make_error(C)]})
        gateway = Gateway(registry)

        result = await gateway.complete(Role.ARCHITECT, "Design the architecture")

        assert result.value.backend is G

    async def test_unregistered_backend_ignored(self, fake_registry) -> None:
        registry, _ = fake_registry(G)
        gateway = Gateway(registry)

        result = await gateway.complete(Role.CODER, "write a loop", backend=O)

        assert result.value.backend is G

    async def test_exhausted_error_surfaces(self, fake_registry, make_error) -> None:
        registry, _ = fake_registry(G, outcomes={G: [make_error(G)]})
        gateway = Gateway(registry)

        result = await gateway.complete(Role.CODER, "write a loop")

        assert isinstance(result.error, AllProvidersExhaustedError)

    async def test_process_uses_coder_role(self, fake_registry) -> None:
        registry, fakes = fake_registry(G)
        gateway = Gateway(registry)

        await gateway.process("write a loop", context="x = []")

        sent = fakes[G].calls[0]
        assert "expert programmer" in sent[0].content
        assert sent[1].content == "Context:\nx = []\n\nTask:\nwrite a loop"


class TestQuickHelpers:
    """Test the quick task helpers."""

    async def test_quick_code_help(self, fake_registry) -> None:
        registry, fakes = fake_registry(G, outcomes={G: ["done"]})

        result = await Gateway(registry).quick_code_help("write a loop", "items = [1]")

        assert result.unwrap() == "done"
        assert "items = [1]" in fakes[G].calls[0][1].content

    async def test_quick_review(self, fake_registry) -> None:
        registry, fakes = fake_registry(C, G)

        result = await Gateway(registry).quick_review("def f(): pass")

        assert result.is_ok
        assert fakes[C].calls[0][1].content == "Context:\ndef f(): pass\n\nTask:\nReview this code"

    async def test_quick_optimize(self, fake_registry) -> None:
        registry, fakes = fake_registry(O)

        result = await Gateway(registry).quick_optimize("for x in y: pass")

        assert result.is_ok
        assert "Optimize the performance of this code" in fakes[O].calls[0][1].content

    async def test_quick_debug_with_code(self, fake_registry) -> None:
        registry, fakes = fake_registry(D)

        await Gateway(registry).quick_debug("KeyError: 'a'", code="d['a']")

        content = fakes[D].calls[0][1].content
        assert content == (
            "Context:\nCode:\nd['a']\n\nError:\nKeyError: 'a'\n\nTask:\nAnalyze and fix this error"
        )

    async def test_quick_debug_without_code(self, fake_registry) -> None:
        registry, fakes = fake_registry(D)

        await Gateway(registry).quick_debug("KeyError: 'a'")

        assert fakes[D].calls[0][1].content.startswith("Context:\nKeyError: 'a'\n\nTask:")

    async def test_quick_helper_error(self, fake_registry, make_error) -> None:
        registry, _ = fake_registry(G, outcomes={G: [make_error(G)]})

        result = await Gateway(registry).quick_code_help("write a loop")

        assert result.is_err


class TestStream:
    """Test streaming."""

    async def test_streams_from_routed_backend(self, fake_registry) -> None:
        registry, fakes = fake_registry(G, D, fragments=["for ", "i ", "in x"])
        gateway = Gateway(registry)

        fragments = [f async for f in gateway.stream(Role.CODER, "write a loop")]

        assert fragments == ["for ", "i ", "in x"]
        assert len(fakes[G].calls) == 1
        assert fakes[D].calls == []

    async def test_stream_binds_request_context(self, fake_registry) -> None:
        registry, _ = fake_registry(G, fragments=["a", "b"])
        bound: list[dict] = []

        async for _fragment in Gateway(registry).stream(Role.TESTER, "write tests"):
            bound.append(structlog.contextvars.get_contextvars())

        assert bound[0]["request_id"].startswith("req_")
        assert bound[0]["role"] == "tester"
        assert bound[0]["request_id"] == bound[1]["request_id"]
        assert "request_id" not in structlog.contextvars.get_contextvars()

    async def test_stream_override(self, fake_registry) -> None:
        registry, fakes = fake_registry(G, D, fragments=["x"])

        _ = [f async for f in Gateway(registry).stream(Role.CODER, "loop", backend=D)]

        assert fakes[G].calls == []
        assert len(fakes[D].calls) == 1

    async def test_stream_unregistered_backend_raises(self, fake_registry) -> None:
        registry, _ = fake_registry(G)

        with pytest.raises(NotRegisteredError) as exc_info:
            _ = [f async for f in Gateway(registry).stream(Role.CODER, "loop", backend=C)]

        assert exc_info.value.registered == ("gemini",)

    async def test_stream_failure_not_retried(self, fake_registry, make_error) -> None:
        """A mid-stream failure propagates; no fallback backend is tried."""
        registry, fakes = fake_registry(G, D)
        fakes[G].fragments = ["partial"]
        fakes[G].stream_error = make_error(G, "connection reset", None)
        received: list[str] = []

        with pytest.raises(BackendError, match="connection reset"):
            async for fragment in Gateway(registry).stream(Role.CODER, "write a loop"):
                received.append(fragment)

        assert received == ["partial"]
        assert fakes[D].calls == []


class TestListings:
    """Test listings and the default mutator."""

    def test_list_backends(self, fake_registry) -> None:
        registry, _ = fake_registry(C, D, default=C)

        rows = Gateway(registry).list_backends()

        assert [r.id for r in rows] == list(LISTING_ORDER)
        availability = {r.id: (r.available, r.is_default) for r in rows}
        assert availability == {
            G: (False, False),
            D: (True, False),
            C: (True, True),
            O: (False, False),
        }
        assert rows[2].name == "Claude (Anthropic)"

    def test_set_default_backend(self, fake_registry) -> None:
        registry, _ = fake_registry(G, O)
        gateway = Gateway(registry)

        gateway.set_default_backend(O)

        assert gateway.default_backend is O
        assert [r.id for r in gateway.list_backends() if r.is_default] == [O]

    def test_set_default_unregistered(self, fake_registry) -> None:
        registry, _ = fake_registry(G)

        with pytest.raises(NotRegisteredError):
            Gateway(registry).set_default_backend(C)

    def test_cost_comparison(self, fake_registry) -> None:
        registry, _ = fake_registry(G, C)

        rows = Gateway(registry).cost_comparison()

        assert [(r.backend, r.input_price, r.output_price) for r in rows] == [
            (G, 0.10, 0.40),
            (C, 3.0, 15.0),
        ]
        assert rows[1].model == "claude-3-5-sonnet-20241022"

    def test_route_preview(self, fake_registry) -> None:
        registry, fakes = fake_registry(G, C)

        decision = Gateway(registry).route("Review this code", Role.REVIEWER)

        assert decision.backend is C
        assert decision.reason is RoutingReason.HIGH_COMPLEXITY
        assert fakes[C].calls == []

    async def test_validate_credentials(self, fake_registry, make_error) -> None:
        registry, _ = fake_registry(G, O, outcomes={O: [make_error(O, "bad key", 401)]})

        results = await Gateway(registry).validate_credentials()

        assert results == {G: True, O: False}
