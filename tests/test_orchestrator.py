#!filepath: tests/test_orchestrator.py
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pytest

from pathx_ai.llm.errors import (
    AggregatedFailureError,
    ErrorKind,
    InvalidPromptError,
    LLMErrorDetails,
    UnknownProviderError,
    WireError,
)
from pathx_ai.llm.orchestrator import FallbackOrchestrator, RunState
from pathx_ai.llm.provider_config import ProviderConfig
from pathx_ai.llm.types import (
    AttemptRole,
    AttemptSuccess,
    GenerationParams,
    ProviderCredentials,
    ProviderIdentity,
)

G = ProviderIdentity.GEMINI
O = ProviderIdentity.OPENROUTER
Q = ProviderIdentity.GROQ


@dataclass
class CallLog:
    order: List[ProviderIdentity] = field(default_factory=list)
    in_flight: int = 0
    max_in_flight: int = 0


@dataclass
class FakeClient:
    provider: ProviderIdentity
    log: CallLog
    outcomes: List[Optional[str]] = field(default_factory=list)
    calls: int = 0

    def call(
        self,
        prompt: str,
        config: ProviderConfig,
        params: Optional[GenerationParams] = None,
    ) -> AttemptSuccess:
        self.log.order.append(self.provider)
        self.log.in_flight += 1
        self.log.max_in_flight = max(self.log.max_in_flight, self.log.in_flight)
        try:
            idx = self.calls
            self.calls += 1
            reason = self.outcomes[idx] if idx < len(self.outcomes) else None
            if reason is not None:
                raise WireError(
                    LLMErrorDetails(
                        kind=ErrorKind.UNKNOWN,
                        provider=self.provider.value,
                        message=f"{self.provider.label}_ERROR: {reason}",
                    )
                )
            model = config.credentials_for(self.provider).model
            return AttemptSuccess(
                provider=self.provider, model=model, text=f"from {self.provider.value}"
            )
        finally:
            self.log.in_flight -= 1


@dataclass
class StaticSource:
    config: ProviderConfig
    loads: int = 0

    def load(self) -> ProviderConfig:
        self.loads += 1
        return self.config


def _config(
    primary: ProviderIdentity = G,
    fallback1: ProviderIdentity = Q,
    fallback2: Optional[ProviderIdentity] = O,
    auto: bool = True,
) -> ProviderConfig:
    return ProviderConfig(
        primary=primary,
        fallback1=fallback1,
        fallback2=fallback2,
        auto_fallback_enabled=auto,
        credentials={p: ProviderCredentials(api_key="k", model=f"{p.value}-m") for p in ProviderIdentity},
    )


def _setup(
    config: ProviderConfig, failing: Dict[ProviderIdentity, List[Optional[str]]] | None = None
):
    log = CallLog()
    failing = failing or {}
    clients = {
        p: FakeClient(provider=p, log=log, outcomes=list(failing.get(p, [])))
        for p in ProviderIdentity
    }
    transitions: List[RunState] = []
    orch = FallbackOrchestrator(
        StaticSource(config),
        clients,
        on_transition=lambda old, new: transitions.append(new),
    )
    return orch, clients, log, transitions


def test_primary_success_skips_fallbacks() -> None:
    orch, clients, log, transitions = _setup(_config())
    out = orch.generate("hello")
    assert out.provider == G
    assert out.text == "from gemini"
    assert out.model == "gemini-m"
    assert [clients[p].calls for p in (G, Q, O)] == [1, 0, 0]
    assert transitions == [RunState.TRYING_PRIMARY, RunState.SUCCEEDED]


def test_first_fallback_success_skips_second() -> None:
    orch, clients, log, transitions = _setup(_config(), {G: ["quota"]})
    out = orch.generate("hello")
    assert out.provider == Q
    assert log.order == [G, Q]
    assert clients[O].calls == 0
    assert transitions == [
        RunState.TRYING_PRIMARY,
        RunState.TRYING_FALLBACK_1,
        RunState.SUCCEEDED,
    ]


def test_all_three_fail_aggregates_every_reason() -> None:
    orch, clients, log, transitions = _setup(
        _config(), {G: ["gem down"], Q: ["bad key"], O: ["privacy policy"]}
    )
    with pytest.raises(AggregatedFailureError) as exc:
        orch.generate("hello")
    msg = str(exc.value)
    assert msg.startswith("All AI providers failed.")
    assert "Primary (gemini): GEMINI_ERROR: gem down" in msg
    assert "1st Fallback (groq): GROQ_ERROR: bad key" in msg
    assert "2nd Fallback (openrouter): OPENROUTER_ERROR: privacy policy" in msg
    assert log.order == [G, Q, O]
    assert [f.role for f in exc.value.failures] == [
        AttemptRole.PRIMARY,
        AttemptRole.FALLBACK_1,
        AttemptRole.FALLBACK_2,
    ]
    assert exc.value.providers_tried == [G, Q, O]
    assert transitions[-1] == RunState.ALL_FAILED


def test_two_providers_fail_without_second_fallback() -> None:
    orch, clients, log, _ = _setup(
        _config(fallback2=None), {G: ["one"], Q: ["two"]}
    )
    with pytest.raises(AggregatedFailureError) as exc:
        orch.generate("hello")
    msg = str(exc.value)
    assert msg.startswith("All configured AI providers failed.")
    assert "Primary (gemini): GEMINI_ERROR: one" in msg
    assert "Fallback (groq): GROQ_ERROR: two" in msg
    assert clients[O].calls == 0


def test_auto_fallback_off_reraises_primary_error_unmodified() -> None:
    orch, clients, log, transitions = _setup(_config(auto=False), {G: ["nope"]})
    with pytest.raises(WireError) as exc:
        orch.generate("hello")
    assert str(exc.value) == "GEMINI_ERROR: nope"
    assert not isinstance(exc.value, AggregatedFailureError)
    assert clients[Q].calls == 0
    assert clients[O].calls == 0
    assert transitions == [RunState.TRYING_PRIMARY, RunState.ALL_FAILED]


def test_skip_fallback_uses_configured_primary_only() -> None:
    orch, clients, log, _ = _setup(_config(primary=O), {O: ["down"]})
    with pytest.raises(WireError):
        orch.generate("hello", skip_fallback=True)
    assert log.order == [O]


@pytest.mark.parametrize("auto", [True, False])
def test_force_provider_calls_only_that_provider(auto: bool) -> None:
    orch, clients, log, _ = _setup(_config(auto=auto), {Q: ["boom"]})
    with pytest.raises(WireError):
        orch.generate("hello", force_provider="groq")
    assert log.order == [Q]

    out = orch.generate("hello", force_provider=O)
    assert out.provider == O
    assert log.order == [Q, O]


def test_unknown_forced_provider_rejected_before_any_call() -> None:
    orch, clients, log, _ = _setup(_config())
    with pytest.raises(UnknownProviderError):
        orch.generate("hello", force_provider="claude")
    assert log.order == []


@pytest.mark.parametrize("prompt", ["", "   \n", None, 42])
def test_invalid_prompt_rejected(prompt) -> None:
    orch, clients, log, _ = _setup(_config())
    with pytest.raises(InvalidPromptError):
        orch.generate(prompt)
    assert log.order == []


@pytest.mark.parametrize(
    "order",
    [
        (G, Q, O),
        (O, G, Q),
        (Q, O, G),
        (G, G, Q),
        (Q, Q, Q),
    ],
)
def test_attempt_order_follows_configuration(order) -> None:
    primary, f1, f2 = order
    failing = {p: ["x", "x", "x"] for p in ProviderIdentity}
    orch, clients, log, _ = _setup(_config(primary, f1, f2), failing)
    with pytest.raises(AggregatedFailureError):
        orch.generate("hello")
    assert log.order == list(order)
    assert log.max_in_flight == 1


def test_duplicate_provider_retried_under_new_role() -> None:
    orch, clients, log, _ = _setup(_config(G, G, None), {G: ["flaky"]})
    out = orch.generate("hello")
    assert out.provider == G
    assert clients[G].calls == 2


def test_groq_then_gemini_scenario() -> None:
    orch, clients, log, _ = _setup(
        _config(primary=Q, fallback1=G, fallback2=None), {Q: ["401 Unauthorized"]}
    )
    out = orch.generate("Say hi")
    assert out.provider == G
    assert out.text == "from gemini"
    assert log.order == [Q, G]
    assert clients[O].calls == 0


def test_each_generate_loads_config() -> None:
    source = StaticSource(_config())
    log = CallLog()
    clients = {p: FakeClient(provider=p, log=log) for p in ProviderIdentity}
    orch = FallbackOrchestrator(source, clients)
    orch.generate("a")
    orch.generate("b")
    assert source.loads == 2


def test_missing_client_rejected_at_construction() -> None:
    log = CallLog()
    clients = {G: FakeClient(provider=G, log=log)}
    with pytest.raises(ValueError):
        FallbackOrchestrator(StaticSource(_config()), clients)


def test_agenerate_returns_same_result() -> None:
    orch, clients, log, _ = _setup(_config(), {G: ["down"]})
    out = asyncio.run(orch.agenerate("hello"))
    assert out.provider == Q
    assert log.order == [G, Q]
