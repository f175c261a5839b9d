#!filepath: src/pathx_ai/llm/catalog.py
from __future__ import annotations

from dataclasses import dataclass

from pathx_ai.llm.types import ProviderIdentity


@dataclass(frozen=True, slots=True)
class ModelOption:
    value: str
    label: str


_CATALOG: dict[ProviderIdentity, tuple[ModelOption, ...]] = {
    ProviderIdentity.GEMINI: (ModelOption("gemini-2.5-flash", "Gemini 2.5 Flash"),),
    ProviderIdentity.OPENROUTER: (
        ModelOption("google/gemini-2.0-flash-exp:free", "Gemini 2.0 Flash (Free)"),
        ModelOption("google/gemini-flash-1.5", "Gemini Flash 1.5"),
        ModelOption("google/gemini-pro-1.5", "Gemini Pro 1.5"),
        ModelOption("meta-llama/llama-3.2-3b-instruct:free", "Llama 3.2 3B (Free)"),
        ModelOption("mistralai/mistral-7b-instruct:free", "Mistral 7B (Free)"),
    ),
    ProviderIdentity.GROQ: (
        ModelOption("llama-3.3-70b-versatile", "Llama 3.3 70B Versatile"),
        ModelOption("llama-3.1-70b-versatile", "Llama 3.1 70B Versatile"),
        ModelOption("llama-3.1-8b-instant", "Llama 3.1 8B Instant"),
        ModelOption("mixtral-8x7b-32768", "Mixtral 8x7B"),
        ModelOption("gemma2-9b-it", "Gemma 2 9B"),
    ),
}


def available_models(provider: ProviderIdentity | str) -> list[ModelOption]:
    """Known models for a provider, empty for anything unrecognised."""
    raw = str(getattr(provider, "value", provider) or "").strip().lower()
    for p, options in _CATALOG.items():
        if p.value == raw:
            return list(options)
    return []
