#!filepath: src/pathx_ai/llm/types.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ProviderIdentity(str, Enum):
    """Supported generative text providers."""

    GEMINI = "gemini"
    OPENROUTER = "openrouter"
    GROQ = "groq"

    @classmethod
    def parse(cls, value: "ProviderIdentity | str") -> "ProviderIdentity":
        """Resolve a provider identity from its wire value.

        Args:
            value: Identity or its string value, case and whitespace insensitive.

        Returns:
            ProviderIdentity: Matching identity.

        Raises:
            UnknownProviderError: If the value names no supported provider.
        """
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower()
        for member in cls:
            if member.value == raw:
                return member
        from pathx_ai.llm.errors import UnknownProviderError

        raise UnknownProviderError(str(value))

    @property
    def label(self) -> str:
        return self.value.upper()


class AttemptRole(str, Enum):
    """Position a provider occupies in the attempt order."""

    PRIMARY = "primary"
    FALLBACK_1 = "fallback_1"
    FALLBACK_2 = "fallback_2"


@dataclass(frozen=True, slots=True)
class ProviderCredentials:
    """API key and model for one provider.

    Attributes:
        api_key: Provider API key, may be empty.
        model: Provider model id.
    """

    api_key: str = ""
    model: str = ""

    @property
    def has_key(self) -> bool:
        return bool(self.api_key.strip())


@dataclass(frozen=True, slots=True)
class GenerationParams:
    """Sampling parameters a caller may override per request.

    Unset fields fall back to each provider's own defaults.
    """

    temperature: Optional[float] = None
    top_k: Optional[int] = None
    top_p: Optional[float] = None
    max_output_tokens: Optional[int] = None


@dataclass(frozen=True, slots=True)
class AttemptSuccess:
    """Normalized result of a successful provider call.

    Attributes:
        provider: Provider that produced the text.
        model: Model id actually used.
        text: Generated text.
    """

    provider: ProviderIdentity
    model: str
    text: str


@dataclass(frozen=True, slots=True)
class AttemptFailure:
    """One failed attempt inside a fallback run.

    Attributes:
        provider: Provider that was attempted.
        role: Role the provider occupied.
        reason: Human readable failure reason.
        error: The exception raised by the client.
    """

    provider: ProviderIdentity
    role: AttemptRole
    reason: str
    error: Optional[BaseException] = None
