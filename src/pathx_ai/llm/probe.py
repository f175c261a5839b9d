#!filepath: src/pathx_ai/llm/probe.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from pathx_ai.llm.base_client import ProviderClient
from pathx_ai.llm.provider_config import ProviderConfig
from pathx_ai.llm.types import ProviderIdentity
from pathx_ai.utils.logger import get_logger

logger = get_logger(__name__)

PROBE_PROMPT = 'Respond with "Hello from PathX!" to confirm connection.'


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """Outcome of a connectivity probe.

    Attributes:
        success: Whether the provider answered.
        message: Operator facing summary.
        response: Provider text when the probe succeeded.
    """

    success: bool
    message: str
    response: Optional[str] = None


class ConnectivityProbe:
    """Validate an ad hoc key and model pair against one provider.

    Never touches the cached configuration and never falls back.
    """

    def __init__(
        self,
        clients: Mapping[ProviderIdentity, ProviderClient],
        base_config: Optional[ProviderConfig] = None,
    ) -> None:
        self._clients = dict(clients)
        self._base = base_config or ProviderConfig()

    def test_provider(
        self, identity: ProviderIdentity | str, api_key: str, model: str
    ) -> ProbeResult:
        """Run the canned prompt against one provider.

        Args:
            identity: Provider identity or its string value.
            api_key: Key to test.
            model: Model to test.

        Returns:
            ProbeResult: Never raises, every failure becomes success=False.
        """
        name = str(getattr(identity, "value", identity) or "").upper()
        try:
            provider = ProviderIdentity.parse(identity)
            name = provider.label
            config = self._base.with_credentials(provider, api_key, model)
            result = self._clients[provider].call(PROBE_PROMPT, config)
        except Exception as e:
            logger.warning(f"❌ Probe failed, provider={name.lower()}: {str(e)[:220]}")
            return ProbeResult(
                success=False, message=f"❌ {name} connection failed: {e}"
            )
        logger.info(f"✅ Probe ok, provider={provider.value}, model={result.model}")
        return ProbeResult(
            success=True,
            message=f"✅ {name} connection successful",
            response=result.text,
        )
