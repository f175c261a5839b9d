#!filepath: tests/test_settings_load.py
from __future__ import annotations

import pytest

from pathx_ai.llm.catalog import available_models
from pathx_ai.llm.provider_config import ProviderConfig
from pathx_ai.llm.settings import AISettings
from pathx_ai.llm.types import ProviderIdentity
from pathx_ai.utils.logger import LoggingSettings


def test_env_keys_feed_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "g-env")
    monkeypatch.setenv("REACT_APP_GROQ_API_KEY", "gsk-env")
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.delenv("REACT_APP_OPENROUTER_API_KEY", raising=False)
    s = AISettings(_env_file=None)
    cfg = ProviderConfig.defaults(s)
    assert cfg.credentials_for(ProviderIdentity.GEMINI).api_key == "g-env"
    assert cfg.credentials_for(ProviderIdentity.GROQ).api_key == "gsk-env"
    assert cfg.credentials_for(ProviderIdentity.OPENROUTER).api_key == ""


def test_timeouts_are_configurable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PATHX_READ_TIMEOUT_SECONDS", "15")
    s = AISettings(_env_file=None)
    assert s.read_timeout_seconds == 15
    assert s.connect_timeout_seconds == 10


@pytest.mark.parametrize("value", ["GROQ", " groq ", ProviderIdentity.GROQ])
def test_provider_identity_parse(value) -> None:
    assert ProviderIdentity.parse(value) is ProviderIdentity.GROQ


def test_catalogue() -> None:
    values = [m.value for m in available_models("groq")]
    assert "llama-3.3-70b-versatile" in values
    assert available_models(ProviderIdentity.GEMINI)[0].label == "Gemini 2.5 Flash"
    assert available_models("unknown") == []


def test_logging_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("PATHX_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("PATHX_LOG_LEVEL", "warning")
    s = LoggingSettings(_env_file=None)
    assert s.log_dir == tmp_path / "logs"
    assert s.level == "warning"
    assert s.file_name == "pathx_ai.log"
    assert set(LoggingSettings.model_fields) == {
        "log_dir",
        "level",
        "file_name",
        "max_bytes",
    }
