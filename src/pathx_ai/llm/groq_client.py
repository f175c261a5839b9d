#!filepath: src/pathx_ai/llm/groq_client.py
from __future__ import annotations

import json
from typing import Any, Dict, Optional

from pathx_ai.llm.base_client import BaseProviderClient
from pathx_ai.llm.errors import LLMErrorDetails, WireError
from pathx_ai.llm.provider_config import ProviderConfig
from pathx_ai.llm.types import AttemptSuccess, GenerationParams, ProviderIdentity

GROQ_KEYS_URL = "https://console.groq.com/keys"


class GroqClient(BaseProviderClient):
    """Groq client for the OpenAI style chat completions route."""

    provider = ProviderIdentity.GROQ

    def call(
        self,
        prompt: str,
        config: ProviderConfig,
        params: Optional[GenerationParams] = None,
    ) -> AttemptSuccess:
        creds = self._credentials(config)
        model = creds.model
        # pasted keys often carry stray whitespace
        api_key = creds.api_key.strip()
        p = params or GenerationParams()

        headers = {
            "Authorization": f"Bearer {api_key}",
            f"Content{chr(45)}Type": "application/json",
        }
        payload: Dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0.7 if p.temperature is None else float(p.temperature),
            "max_tokens": (
                1024 if p.max_output_tokens is None else int(p.max_output_tokens)
            ),
        }
        if p.top_p is not None:
            payload["top_p"] = float(p.top_p)

        try:
            data = self.transport.post_json(
                url=f"{self.settings.groq_base_url}/chat/completions",
                headers=headers,
                payload=payload,
                provider=self.provider.value,
                model=model,
            )
        except WireError as e:
            if e.http_status != 401:
                raise
            d = e.details
            raise WireError(
                LLMErrorDetails(
                    kind=d.kind,
                    provider=d.provider,
                    model=d.model,
                    status_code=d.status_code,
                    message=(
                        "GROQ_ERROR: Invalid Groq API key. Please verify your API key "
                        f"at {GROQ_KEYS_URL}. Make sure you copied the entire key "
                        "without any extra spaces."
                    ),
                    raw=d.raw,
                )
            ) from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise self._parse_error(
                model,
                "Invalid response format from Groq",
                raw=json.dumps(data, ensure_ascii=False),
            ) from None
        if not isinstance(content, str):
            raise self._parse_error(model, "Invalid response format from Groq")

        return AttemptSuccess(provider=self.provider, model=model, text=content)
