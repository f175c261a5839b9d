#!filepath: src/pathx_ai/llm/settings.py
from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AISettings(BaseSettings):
    """Process level settings for the AI layer.

    API keys here are only defaults, used when the admin settings document
    does not exist yet. Legacy REACT_APP_ names are accepted too.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "GEMINI_API_KEY", "REACT_APP_GEMINI_API_KEY", "gemini_api_key"
        ),
    )
    openrouter_api_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "OPENROUTER_API_KEY", "REACT_APP_OPENROUTER_API_KEY", "openrouter_api_key"
        ),
    )
    groq_api_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "GROQ_API_KEY", "REACT_APP_GROQ_API_KEY", "groq_api_key"
        ),
    )

    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        validation_alias=AliasChoices("GEMINI_BASE_URL", "gemini_base_url"),
    )
    openrouter_base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        validation_alias=AliasChoices("OPENROUTER_BASE_URL", "openrouter_base_url"),
    )
    groq_base_url: str = Field(
        default="https://api.groq.com/openai/v1",
        validation_alias=AliasChoices("GROQ_BASE_URL", "groq_base_url"),
    )

    http_referer: str = Field(
        default="http://localhost:3000",
        validation_alias=AliasChoices("OPENROUTER_HTTP_REFERER", "http_referer"),
    )
    app_title: str = Field(
        default="PathX Career Platform",
        validation_alias=AliasChoices("OPENROUTER_APP_TITLE", "app_title"),
    )

    connect_timeout_seconds: int = Field(
        default=10,
        validation_alias=AliasChoices(
            "PATHX_CONNECT_TIMEOUT_SECONDS", "connect_timeout_seconds"
        ),
    )
    read_timeout_seconds: int = Field(
        default=60,
        validation_alias=AliasChoices(
            "PATHX_READ_TIMEOUT_SECONDS", "read_timeout_seconds"
        ),
    )
    total_timeout_seconds: int = Field(
        default=90,
        validation_alias=AliasChoices(
            "PATHX_TOTAL_TIMEOUT_SECONDS", "total_timeout_seconds"
        ),
    )

    settings_db_path: Path = Field(
        default=Path("data/pathx_settings.db"),
        validation_alias=AliasChoices("PATHX_SETTINGS_DB", "settings_db_path"),
    )
