#!filepath: src/pathx_ai/llm/errors.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Sequence

from pathx_ai.llm.types import AttemptFailure, AttemptRole, ProviderIdentity


def _dash() -> str:
    return chr(45)


class ErrorKind(str, Enum):
    UNKNOWN = "unknown"
    MISSING_CREDENTIAL = "missing_credential"
    NETWORK = "network"
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    INVALID_REQUEST = "invalid_request"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    PARSE = "parse"
    CONFIGURATION = "configuration"
    ALL_PROVIDERS_FAILED = "all_providers_failed"


@dataclass(frozen=True, slots=True)
class LLMErrorDetails:
    kind: ErrorKind
    provider: Optional[str] = None
    model: Optional[str] = None
    status_code: Optional[int] = None
    retry_after_seconds: Optional[int] = None
    message: str = ""
    raw: Optional[str] = None

    @property
    def reason(self) -> str:
        return str(self.kind.value)


class LLMError(Exception):
    def __init__(self, payload: str | LLMErrorDetails) -> None:
        if isinstance(payload, LLMErrorDetails):
            msg = str(payload.message or payload.reason or "llm_error")
            super().__init__(msg)
            self._details = payload
        else:
            super().__init__(str(payload or "llm_error"))
            self._details = LLMErrorDetails(
                kind=ErrorKind.UNKNOWN, message=str(payload or "")
            )

    @property
    def details(self) -> LLMErrorDetails:
        return self._details

    @property
    def kind(self) -> ErrorKind:
        return self._details.kind

    @property
    def provider(self) -> Optional[str]:
        return self._details.provider

    @property
    def model(self) -> Optional[str]:
        return self._details.model

    @property
    def http_status(self) -> Optional[int]:
        return self._details.status_code


def provider_prefix(provider: ProviderIdentity | str) -> str:
    value = provider.value if isinstance(provider, ProviderIdentity) else str(provider)
    return f"{value.upper()}_ERROR: "


class MissingCredentialError(LLMError):
    """A provider was selected but has no usable API key."""

    def __init__(self, provider: ProviderIdentity, model: str = "") -> None:
        super().__init__(
            LLMErrorDetails(
                kind=ErrorKind.MISSING_CREDENTIAL,
                provider=provider.value,
                model=model or None,
                message=f"{provider.label}_API_KEY_MISSING",
            )
        )


class WireError(LLMError):
    """The provider answered with a non success status."""


class ParseError(LLMError):
    """The provider answered with success but the body had no usable text."""


class TransportError(LLMError):
    """The request failed before any HTTP response was available."""


class UnknownProviderError(LLMError):
    """A provider identity outside the supported set."""

    def __init__(self, value: str) -> None:
        super().__init__(
            LLMErrorDetails(
                kind=ErrorKind.CONFIGURATION,
                message=f"Unknown provider: {value}",
            )
        )


class InvalidPromptError(LLMError, ValueError):
    """Prompt is not a non empty string."""

    def __init__(self) -> None:
        super().__init__(
            LLMErrorDetails(
                kind=ErrorKind.INVALID_REQUEST,
                message="Invalid prompt: prompt must be a non-empty string",
            )
        )


_ROLE_LABELS = {
    AttemptRole.PRIMARY: "Primary",
    AttemptRole.FALLBACK_1: "1st Fallback",
    AttemptRole.FALLBACK_2: "2nd Fallback",
}


def role_label(role: AttemptRole, *, attempts: int = 3) -> str:
    """Human label for a role.

    With only two attempts the first fallback reads as plain "Fallback".
    """
    if attempts == 2 and role == AttemptRole.FALLBACK_1:
        return "Fallback"
    return _ROLE_LABELS[role]


class AggregatedFailureError(LLMError):
    """Every attempted provider failed."""

    def __init__(self, failures: Sequence[AttemptFailure]) -> None:
        items = list(failures)
        n = len(items)
        head = (
            "All AI providers failed."
            if n >= 3
            else "All configured AI providers failed."
        )
        parts = [
            f"{role_label(f.role, attempts=n)} ({f.provider.value}): {f.reason}"
            for f in items
        ]
        message = head + " " + ". ".join(parts)
        super().__init__(
            LLMErrorDetails(kind=ErrorKind.ALL_PROVIDERS_FAILED, message=message)
        )
        self._failures = items

    @property
    def failures(self) -> list[AttemptFailure]:
        return list(self._failures)

    @property
    def providers_tried(self) -> list[ProviderIdentity]:
        return [f.provider for f in self._failures]


def _build_header(name: str) -> str:
    return name.replace("_", _dash())


def parse_retry_after_seconds(headers: Mapping[str, str]) -> Optional[int]:
    key = _build_header("Retry_After")
    v = (headers.get(key) or headers.get(key.lower()) or "").strip()
    if not v:
        return None
    try:
        return int(float(v))
    except ValueError:
        return None


def kind_from_status(status: int) -> ErrorKind:
    if status == 401 or status == 403:
        return ErrorKind.AUTH
    if status == 404:
        return ErrorKind.NOT_FOUND
    if status == 429:
        return ErrorKind.RATE_LIMIT
    if status == 400 or status == 422:
        return ErrorKind.INVALID_REQUEST
    if 500 <= status < 600:
        return ErrorKind.PROVIDER_UNAVAILABLE
    return ErrorKind.UNKNOWN


__all__ = [
    "ErrorKind",
    "LLMErrorDetails",
    "LLMError",
    "MissingCredentialError",
    "WireError",
    "ParseError",
    "TransportError",
    "UnknownProviderError",
    "InvalidPromptError",
    "AggregatedFailureError",
    "role_label",
    "provider_prefix",
    "parse_retry_after_seconds",
    "kind_from_status",
]
