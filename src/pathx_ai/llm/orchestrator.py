#!filepath: src/pathx_ai/llm/orchestrator.py
from __future__ import annotations

import asyncio
import operator
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Mapping, Optional, Protocol, Tuple

from pathx_ai.llm.base_client import ProviderClient
from pathx_ai.llm.dispatch import ensure_exhaustive
from pathx_ai.llm.errors import (
    AggregatedFailureError,
    InvalidPromptError,
    LLMError,
    role_label,
)
from pathx_ai.llm.provider_config import ProviderConfig
from pathx_ai.llm.types import (
    AttemptFailure,
    AttemptRole,
    AttemptSuccess,
    GenerationParams,
    ProviderIdentity,
)
from pathx_ai.utils.logger import get_logger

logger = get_logger(__name__)


class ConfigSource(Protocol):
    def load(self) -> ProviderConfig: ...


class RunState(str, Enum):
    NOT_STARTED = "not_started"
    TRYING_PRIMARY = "trying_primary"
    TRYING_FALLBACK_1 = "trying_fallback_1"
    TRYING_FALLBACK_2 = "trying_fallback_2"
    SUCCEEDED = "succeeded"
    ALL_FAILED = "all_failed"


_ROLE_STATES = {
    AttemptRole.PRIMARY: RunState.TRYING_PRIMARY,
    AttemptRole.FALLBACK_1: RunState.TRYING_FALLBACK_1,
    AttemptRole.FALLBACK_2: RunState.TRYING_FALLBACK_2,
}

TransitionHook = Callable[[RunState, RunState], None]

Step = Tuple[AttemptRole, ProviderIdentity]


@dataclass(slots=True)
class FallbackRun:
    """State of a single generate call.

    Attributes:
        plan: Ordered (role, provider) attempts allowed for this run.
        state: Current state.
        failures: Failed attempts so far, in order.
        history: Every state entered, starting with NOT_STARTED.
    """

    plan: List[Step]
    on_transition: Optional[TransitionHook] = None
    state: RunState = RunState.NOT_STARTED
    failures: List[AttemptFailure] = field(default_factory=list)
    history: List[RunState] = field(default_factory=lambda: [RunState.NOT_STARTED])

    @classmethod
    def for_config(
        cls,
        config: ProviderConfig,
        *,
        forced: Optional[ProviderIdentity] = None,
        skip_fallback: bool = False,
        on_transition: Optional[TransitionHook] = None,
    ) -> "FallbackRun":
        if forced is not None:
            return cls(plan=[(AttemptRole.PRIMARY, forced)], on_transition=on_transition)
        plan: List[Step] = [(AttemptRole.PRIMARY, config.primary)]
        if config.auto_fallback_enabled and not skip_fallback:
            plan.append((AttemptRole.FALLBACK_1, config.fallback1))
            if config.fallback2 is not None:
                plan.append((AttemptRole.FALLBACK_2, config.fallback2))
        return cls(plan=plan, on_transition=on_transition)

    @property
    def single_attempt(self) -> bool:
        return len(self.plan) == 1

    def advance(self, new_state: RunState) -> None:
        old = self.state
        self.state = new_state
        self.history.append(new_state)
        if self.on_transition is not None:
            self.on_transition(old, new_state)

    def enter(self, role: AttemptRole) -> None:
        self.advance(_ROLE_STATES[role])


class FallbackOrchestrator:
    """Tries providers in configured order and stops at the first success.

    Attempts are strictly sequential. Each call loads the configuration
    afresh from its source, so a cache invalidation between calls is seen by
    the next one.
    """

    def __init__(
        self,
        config_source: ConfigSource,
        clients: Mapping[ProviderIdentity, ProviderClient],
        *,
        on_transition: Optional[TransitionHook] = None,
    ) -> None:
        ensure_exhaustive(clients)
        self._config_source = config_source
        self._clients = dict(clients)
        self._on_transition = on_transition

    def generate(
        self,
        prompt: str,
        *,
        force_provider: ProviderIdentity | str | None = None,
        skip_fallback: bool = False,
        params: Optional[GenerationParams] = None,
    ) -> AttemptSuccess:
        """Generate text with automatic provider fallback.

        Args:
            prompt: Non empty prompt text.
            force_provider: Call exactly this provider, never fall back.
            skip_fallback: Call only the configured primary.
            params: Optional sampling overrides.

        Returns:
            AttemptSuccess: First successful result.

        Raises:
            InvalidPromptError: Empty or non string prompt.
            UnknownProviderError: force_provider names no supported provider.
            LLMError: The original error when only one attempt was allowed.
            AggregatedFailureError: Every attempted provider failed.
        """
        if not isinstance(prompt, str) or not prompt.strip():
            raise InvalidPromptError()

        forced = (
            ProviderIdentity.parse(force_provider)
            if force_provider is not None
            else None
        )
        config = self._config_source.load()
        run = FallbackRun.for_config(
            config,
            forced=forced,
            skip_fallback=skip_fallback,
            on_transition=self._on_transition,
        )

        for index, (role, provider) in enumerate(run.plan):
            run.enter(role)
            if index > 0:
                logger.info(
                    f"🔄 Falling back to {provider.label} "
                    f"({role_label(role, attempts=len(run.plan))})"
                )
            try:
                result = self._attempt(role, provider, prompt, config, params)
            except Exception as e:
                run.failures.append(
                    AttemptFailure(provider=provider, role=role, reason=str(e), error=e)
                )
                if run.single_attempt:
                    run.advance(RunState.ALL_FAILED)
                    raise
                continue
            run.advance(RunState.SUCCEEDED)
            return result

        run.advance(RunState.ALL_FAILED)
        err = AggregatedFailureError(run.failures)
        logger.error(f"❌ {err}")
        raise err

    async def agenerate(
        self,
        prompt: str,
        *,
        force_provider: ProviderIdentity | str | None = None,
        skip_fallback: bool = False,
        params: Optional[GenerationParams] = None,
    ) -> AttemptSuccess:
        """Coroutine form of generate, run in a worker thread."""
        return await asyncio.to_thread(
            self.generate,
            prompt,
            force_provider=force_provider,
            skip_fallback=skip_fallback,
            params=params,
        )

    def _attempt(
        self,
        role: AttemptRole,
        provider: ProviderIdentity,
        prompt: str,
        config: ProviderConfig,
        params: Optional[GenerationParams],
    ) -> AttemptSuccess:
        client = self._clients[provider]
        model = config.credentials_for(provider).model
        t0 = time.perf_counter()
        logger.info(
            f"🤖 LLM attempt start, provider={provider.value}, role={role.value}, "
            f"model={model}, prompt_chars={len(prompt)}"
        )
        try:
            result = client.call(prompt, config, params)
        except LLMError as e:
            dt = operator.sub(time.perf_counter(), t0)
            d = e.details
            logger.warning(
                f"⚠️ LLM attempt fail, provider={provider.value}, role={role.value}, "
                f"seconds={dt:.3f}, kind={d.kind.value}, status={d.status_code}, "
                f"msg={str(e)[:220]}"
            )
            raise
        except Exception as e:
            dt = operator.sub(time.perf_counter(), t0)
            logger.warning(
                f"⚠️ LLM attempt crash, provider={provider.value}, role={role.value}, "
                f"seconds={dt:.3f}, err={str(e)[:220]}"
            )
            raise
        dt = operator.sub(time.perf_counter(), t0)
        logger.info(
            f"LLM attempt ok, provider={provider.value}, model={result.model}, "
            f"seconds={dt:.3f}"
        )
        return result
