#!filepath: src/pathx_ai/llm/base_client.py
from __future__ import annotations

from typing import Optional, Protocol

from pathx_ai.llm.errors import (
    ErrorKind,
    LLMErrorDetails,
    MissingCredentialError,
    ParseError,
)
from pathx_ai.llm.http_transport import HTTPTransport
from pathx_ai.llm.provider_config import ProviderConfig
from pathx_ai.llm.settings import AISettings
from pathx_ai.llm.types import (
    AttemptSuccess,
    GenerationParams,
    ProviderCredentials,
    ProviderIdentity,
)


class ProviderClient(Protocol):
    """One provider, one wire protocol, one round trip per call."""

    provider: ProviderIdentity

    def call(
        self,
        prompt: str,
        config: ProviderConfig,
        params: Optional[GenerationParams] = None,
    ) -> AttemptSuccess: ...


class BaseProviderClient:
    """Shared plumbing for the concrete provider clients."""

    provider: ProviderIdentity

    def __init__(
        self,
        settings: Optional[AISettings] = None,
        transport: Optional[HTTPTransport] = None,
    ) -> None:
        self._settings = settings or AISettings()
        self._transport = transport or HTTPTransport(
            connect_timeout_seconds=int(self._settings.connect_timeout_seconds),
            read_timeout_seconds=int(self._settings.read_timeout_seconds),
            total_timeout_seconds=int(self._settings.total_timeout_seconds),
        )

    @property
    def settings(self) -> AISettings:
        return self._settings

    @property
    def transport(self) -> HTTPTransport:
        return self._transport

    def _credentials(self, config: ProviderConfig) -> ProviderCredentials:
        creds = config.credentials_for(self.provider)
        if not creds.has_key:
            raise MissingCredentialError(self.provider, creds.model)
        return creds

    def _parse_error(self, model: str, message: str, raw: str = "") -> ParseError:
        return ParseError(
            LLMErrorDetails(
                kind=ErrorKind.PARSE,
                provider=self.provider.value,
                model=model,
                message=f"{self.provider.label}_ERROR: {message}",
                raw=raw[:2000] or None,
            )
        )
