#!filepath: src/pathx_ai/ai_service.py
from __future__ import annotations

from typing import Mapping, Optional

from pathx_ai.config_store import (
    ProviderConfigCache,
    SettingsStore,
    SqliteSettingsStore,
)
from pathx_ai.llm.base_client import ProviderClient
from pathx_ai.llm.dispatch import build_clients
from pathx_ai.llm.orchestrator import FallbackOrchestrator, TransitionHook
from pathx_ai.llm.probe import ConnectivityProbe, ProbeResult
from pathx_ai.llm.provider_config import ProviderConfig
from pathx_ai.llm.settings import AISettings
from pathx_ai.llm.types import AttemptSuccess, GenerationParams, ProviderIdentity


class AIService:
    """Composition root for the AI layer.

    Owns the configuration cache, the provider clients, the orchestrator and
    the connectivity probe. Feature code holds one of these instead of
    reaching for module globals.
    """

    def __init__(
        self,
        *,
        settings: Optional[AISettings] = None,
        store: Optional[SettingsStore] = None,
        clients: Optional[Mapping[ProviderIdentity, ProviderClient]] = None,
        on_transition: Optional[TransitionHook] = None,
    ) -> None:
        self._settings = settings or AISettings()
        s = self._settings
        self._store = store or SqliteSettingsStore(path=s.settings_db_path)
        self._cache = ProviderConfigCache(
            self._store, defaults=lambda: ProviderConfig.defaults(s)
        )
        self._clients = dict(clients) if clients is not None else build_clients(s)
        self._orchestrator = FallbackOrchestrator(
            self._cache, self._clients, on_transition=on_transition
        )
        self._probe = ConnectivityProbe(
            self._clients, base_config=ProviderConfig.defaults(s)
        )

    @property
    def settings(self) -> AISettings:
        return self._settings

    @property
    def cache(self) -> ProviderConfigCache:
        return self._cache

    @property
    def orchestrator(self) -> FallbackOrchestrator:
        return self._orchestrator

    def load_config(self) -> ProviderConfig:
        return self._cache.load()

    def update_config(self, config: ProviderConfig) -> None:
        self._cache.update(config)

    def clear_config_cache(self) -> None:
        self._cache.invalidate()

    def generate(
        self,
        prompt: str,
        *,
        force_provider: ProviderIdentity | str | None = None,
        skip_fallback: bool = False,
        params: Optional[GenerationParams] = None,
    ) -> AttemptSuccess:
        return self._orchestrator.generate(
            prompt,
            force_provider=force_provider,
            skip_fallback=skip_fallback,
            params=params,
        )

    async def agenerate(
        self,
        prompt: str,
        *,
        force_provider: ProviderIdentity | str | None = None,
        skip_fallback: bool = False,
        params: Optional[GenerationParams] = None,
    ) -> AttemptSuccess:
        return await self._orchestrator.agenerate(
            prompt,
            force_provider=force_provider,
            skip_fallback=skip_fallback,
            params=params,
        )

    def test_provider(
        self, identity: ProviderIdentity | str, api_key: str, model: str
    ) -> ProbeResult:
        return self._probe.test_provider(identity, api_key, model)
