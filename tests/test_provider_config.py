#!filepath: tests/test_provider_config.py
from __future__ import annotations

import pytest

from pathx_ai.config_store import InMemorySettingsStore, ProviderConfigCache
from pathx_ai.llm.errors import UnknownProviderError
from pathx_ai.llm.provider_config import DEFAULT_MODELS, ProviderConfig
from pathx_ai.llm.settings import AISettings
from pathx_ai.llm.types import ProviderCredentials, ProviderIdentity

G = ProviderIdentity.GEMINI
O = ProviderIdentity.OPENROUTER
Q = ProviderIdentity.GROQ


def _cache() -> ProviderConfigCache:
    s = AISettings(gemini_api_key="g", openrouter_api_key="", groq_api_key="")
    return ProviderConfigCache(
        InMemorySettingsStore(), defaults=lambda: ProviderConfig.defaults(s)
    )


@pytest.mark.parametrize(
    "kwargs",
    [
        {"primary": "claude"},
        {"fallback1": "gpt"},
        {"fallback2": "mistral"},
    ],
)
def test_unknown_role_provider_raises_unknown_provider(kwargs) -> None:
    with pytest.raises(UnknownProviderError):
        ProviderConfig(**kwargs)


def test_sparse_credentials_are_completed() -> None:
    cfg = ProviderConfig(credentials={Q: ProviderCredentials("gsk", "llama-3.1-8b-instant")})
    assert set(cfg.credentials) == set(ProviderIdentity)
    assert cfg.credentials[G] == ProviderCredentials("", DEFAULT_MODELS[G])
    assert cfg.credentials[Q].api_key == "gsk"
    assert ProviderConfig() == ProviderConfig(credentials={})


@pytest.mark.parametrize(
    "cfg",
    [
        ProviderConfig(),
        ProviderConfig(
            primary=Q,
            fallback2=None,
            credentials={Q: ProviderCredentials("gsk", "llama-3.1-8b-instant")},
        ),
    ],
    ids=["empty", "groq-only"],
)
def test_sparse_config_survives_update_round_trip(cfg: ProviderConfig) -> None:
    cache = _cache()
    cache.update(cfg)
    cache.invalidate()
    assert cache.load() == cfg


def test_loaded_credentials_cannot_be_mutated() -> None:
    cache = _cache()
    cfg = cache.load()
    with pytest.raises(TypeError):
        cfg.credentials[G] = ProviderCredentials("", "x")  # type: ignore[index]
    assert cache.load().credentials_for(G).api_key == "g"


def test_with_credentials_returns_new_read_only_config() -> None:
    base = ProviderConfig()
    changed = base.with_credentials(O, "or-key", "")
    assert base.credentials_for(O).api_key == ""
    assert changed.credentials_for(O) == ProviderCredentials("or-key", DEFAULT_MODELS[O])
    with pytest.raises(TypeError):
        changed.credentials[O] = ProviderCredentials("", "x")  # type: ignore[index]
