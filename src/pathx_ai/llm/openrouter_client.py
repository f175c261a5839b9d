#!filepath: src/pathx_ai/llm/openrouter_client.py
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from pathx_ai.llm.base_client import BaseProviderClient
from pathx_ai.llm.errors import LLMErrorDetails, WireError
from pathx_ai.llm.provider_config import ProviderConfig
from pathx_ai.llm.types import AttemptSuccess, GenerationParams, ProviderIdentity

PRIVACY_SETTINGS_URL = "https://openrouter.ai/settings/privacy"

_PRIVACY_MARKERS = ("data policy", "No endpoints found")


def route_models(model: str) -> List[str]:
    """Preferred model first, then the paid tier of a free model."""
    m = model.strip()
    if m.endswith(":free"):
        paid = m[: -len(":free")]
        if paid:
            return [m, paid]
    return [m]


class OpenRouterClient(BaseProviderClient):
    """OpenRouter chat completions client."""

    provider = ProviderIdentity.OPENROUTER

    def call(
        self,
        prompt: str,
        config: ProviderConfig,
        params: Optional[GenerationParams] = None,
    ) -> AttemptSuccess:
        creds = self._credentials(config)
        model = creds.model

        h = chr(45)
        headers = {
            "Authorization": f"Bearer {creds.api_key.strip()}",
            f"Content{h}Type": "application/json",
            f"HTTP{h}Referer": self.settings.http_referer.strip(),
        }
        if self.settings.app_title.strip():
            headers[f"X{h}Title"] = self.settings.app_title.strip()

        payload: Dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "route": "fallback",
        }
        models = route_models(model)
        if len(models) > 1:
            payload["models"] = models
        if params is not None:
            if params.temperature is not None:
                payload["temperature"] = float(params.temperature)
            if params.top_p is not None:
                payload["top_p"] = float(params.top_p)
            if params.top_k is not None:
                payload["top_k"] = int(params.top_k)
            if params.max_output_tokens is not None:
                payload["max_tokens"] = int(params.max_output_tokens)

        try:
            data = self.transport.post_json(
                url=f"{self.settings.openrouter_base_url}/chat/completions",
                headers=headers,
                payload=payload,
                provider=self.provider.value,
                model=model,
            )
        except WireError as e:
            raise _translate_privacy_error(e) from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise self._parse_error(
                model,
                "Invalid response format from OpenRouter",
                raw=json.dumps(data, ensure_ascii=False),
            ) from None
        if not isinstance(content, str):
            raise self._parse_error(model, "Invalid response format from OpenRouter")

        used = str(data.get("model") or model)
        return AttemptSuccess(provider=self.provider, model=used, text=content)


def _translate_privacy_error(e: WireError) -> WireError:
    d = e.details
    prefix = "OPENROUTER_ERROR: "
    original = str(d.message or "")
    if original.startswith(prefix):
        original = original[len(prefix) :]
    if not any(marker in original for marker in _PRIVACY_MARKERS):
        return e
    message = (
        f"{prefix}OpenRouter privacy settings need configuration. "
        f"Visit {PRIVACY_SETTINGS_URL} and allow \"Free model publication\" "
        f"or use a paid model. Original error: {original}"
    )
    return WireError(
        LLMErrorDetails(
            kind=d.kind,
            provider=d.provider,
            model=d.model,
            status_code=d.status_code,
            retry_after_seconds=d.retry_after_seconds,
            message=message,
            raw=d.raw,
        )
    )
