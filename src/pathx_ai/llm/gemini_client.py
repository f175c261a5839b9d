#!filepath: src/pathx_ai/llm/gemini_client.py
from __future__ import annotations

import json
from typing import Any, Dict, Optional

from pathx_ai.llm.base_client import BaseProviderClient
from pathx_ai.llm.provider_config import ProviderConfig
from pathx_ai.llm.types import AttemptSuccess, GenerationParams, ProviderIdentity

DEFAULT_GENERATION = GenerationParams(
    temperature=0.7, top_k=40, top_p=0.95, max_output_tokens=2048
)


class GeminiClient(BaseProviderClient):
    """Google Gemini generateContent client. The API key travels in the query string."""

    provider = ProviderIdentity.GEMINI

    def call(
        self,
        prompt: str,
        config: ProviderConfig,
        params: Optional[GenerationParams] = None,
    ) -> AttemptSuccess:
        creds = self._credentials(config)
        model = creds.model
        p = params or GenerationParams()

        payload: Dict[str, Any] = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": _pick(p.temperature, DEFAULT_GENERATION.temperature),
                "topK": _pick(p.top_k, DEFAULT_GENERATION.top_k),
                "topP": _pick(p.top_p, DEFAULT_GENERATION.top_p),
                "maxOutputTokens": _pick(
                    p.max_output_tokens, DEFAULT_GENERATION.max_output_tokens
                ),
            },
        }

        data = self.transport.post_json(
            url=f"{self.settings.gemini_base_url}/models/{model}:generateContent",
            headers={f"Content{chr(45)}Type": "application/json"},
            payload=payload,
            provider=self.provider.value,
            model=model,
            params={"key": creds.api_key.strip()},
        )

        text = _first_candidate_text(data)
        if text is None:
            raise self._parse_error(
                model,
                "Invalid response format from Gemini",
                raw=json.dumps(data, ensure_ascii=False),
            )
        return AttemptSuccess(provider=self.provider, model=model, text=text)


def _pick(value: Any, default: Any) -> Any:
    return default if value is None else value


def _first_candidate_text(data: Dict[str, Any]) -> Optional[str]:
    try:
        part = data["candidates"][0]["content"]["parts"][0]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(part, dict) or not isinstance(part.get("text"), str):
        return None
    return part["text"]
