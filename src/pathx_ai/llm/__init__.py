#!filepath: src/pathx_ai/llm/__init__.py
from pathx_ai.llm.errors import (
    AggregatedFailureError,
    InvalidPromptError,
    LLMError,
    MissingCredentialError,
    ParseError,
    TransportError,
    UnknownProviderError,
    WireError,
)
from pathx_ai.llm.orchestrator import FallbackOrchestrator, FallbackRun, RunState
from pathx_ai.llm.probe import ConnectivityProbe, ProbeResult
from pathx_ai.llm.provider_config import ProviderConfig
from pathx_ai.llm.types import (
    AttemptFailure,
    AttemptRole,
    AttemptSuccess,
    GenerationParams,
    ProviderCredentials,
    ProviderIdentity,
)

__all__ = [
    "AggregatedFailureError",
    "AttemptFailure",
    "AttemptRole",
    "AttemptSuccess",
    "ConnectivityProbe",
    "FallbackOrchestrator",
    "FallbackRun",
    "GenerationParams",
    "InvalidPromptError",
    "LLMError",
    "MissingCredentialError",
    "ParseError",
    "ProbeResult",
    "ProviderConfig",
    "ProviderCredentials",
    "ProviderIdentity",
    "RunState",
    "TransportError",
    "UnknownProviderError",
    "WireError",
]
