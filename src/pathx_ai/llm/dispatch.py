#!filepath: src/pathx_ai/llm/dispatch.py
from __future__ import annotations

from typing import Mapping, Optional

from pathx_ai.llm.base_client import ProviderClient
from pathx_ai.llm.gemini_client import GeminiClient
from pathx_ai.llm.groq_client import GroqClient
from pathx_ai.llm.http_transport import HTTPTransport
from pathx_ai.llm.openrouter_client import OpenRouterClient
from pathx_ai.llm.settings import AISettings
from pathx_ai.llm.types import ProviderIdentity

CLIENT_TYPES = {
    ProviderIdentity.GEMINI: GeminiClient,
    ProviderIdentity.OPENROUTER: OpenRouterClient,
    ProviderIdentity.GROQ: GroqClient,
}


def ensure_exhaustive(clients: Mapping[ProviderIdentity, ProviderClient]) -> None:
    """Fail if any provider identity has no client.

    Raises:
        ValueError: On a missing entry.
    """
    missing = [p.value for p in ProviderIdentity if p not in clients]
    if missing:
        raise ValueError(f"No client registered for: {', '.join(missing)}")


def build_clients(
    settings: Optional[AISettings] = None,
    transport: Optional[HTTPTransport] = None,
) -> dict[ProviderIdentity, ProviderClient]:
    """Instantiate one client per provider identity."""
    s = settings or AISettings()
    clients: dict[ProviderIdentity, ProviderClient] = {
        p: cls(settings=s, transport=transport) for p, cls in CLIENT_TYPES.items()
    }
    ensure_exhaustive(clients)
    return clients
