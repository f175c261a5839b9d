#!filepath: src/pathx_ai/llm/provider_config.py
from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pathx_ai.llm.settings import AISettings
from pathx_ai.llm.types import ProviderCredentials, ProviderIdentity

DEFAULT_MODELS: dict[ProviderIdentity, str] = {
    ProviderIdentity.GEMINI: "gemini-2.5-flash",
    ProviderIdentity.OPENROUTER: "google/gemini-2.0-flash-exp:free",
    ProviderIdentity.GROQ: "llama-3.3-70b-versatile",
}

_DOC_ROLE_FIELDS = {
    "primary": "primaryProvider",
    "fallback1": "fallbackProvider",
    "fallback2": "secondFallbackProvider",
}


def _key_field(p: ProviderIdentity) -> str:
    return f"{p.value}ApiKey"


def _model_field(p: ProviderIdentity) -> str:
    return f"{p.value}Model"


class ProviderConfig(BaseModel):
    """Provider preference snapshot used by one generation run.

    Attributes:
        primary: Provider tried first.
        fallback1: Provider tried after the primary fails.
        fallback2: Optional provider tried last.
        auto_fallback_enabled: Whether failures fall through to fallbacks.
        credentials: API key and model per provider.
    """

    model_config = ConfigDict(frozen=True)

    primary: ProviderIdentity = ProviderIdentity.GEMINI
    fallback1: ProviderIdentity = ProviderIdentity.GROQ
    fallback2: Optional[ProviderIdentity] = ProviderIdentity.OPENROUTER
    auto_fallback_enabled: bool = True
    credentials: Mapping[ProviderIdentity, ProviderCredentials] = Field(
        default_factory=dict, validate_default=True
    )

    @field_validator("primary", "fallback1", mode="before")
    @classmethod
    def _parse_identity(cls, v: Any) -> ProviderIdentity:
        return ProviderIdentity.parse(v)

    @field_validator("fallback2", mode="before")
    @classmethod
    def _parse_optional_identity(cls, v: Any) -> Optional[ProviderIdentity]:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return ProviderIdentity.parse(v)

    @field_validator("credentials", mode="after")
    @classmethod
    def _complete_credentials(
        cls, v: Mapping[ProviderIdentity, ProviderCredentials]
    ) -> Mapping[ProviderIdentity, ProviderCredentials]:
        # every identity present, read only once built
        full = {
            p: v.get(p) or ProviderCredentials(api_key="", model=DEFAULT_MODELS[p])
            for p in ProviderIdentity
        }
        return MappingProxyType(full)

    def credentials_for(self, provider: ProviderIdentity) -> ProviderCredentials:
        return self.credentials.get(provider) or ProviderCredentials(
            api_key="", model=DEFAULT_MODELS[provider]
        )

    def with_credentials(
        self, provider: ProviderIdentity, api_key: str, model: str
    ) -> "ProviderConfig":
        creds = dict(self.credentials)
        creds[provider] = ProviderCredentials(
            api_key=str(api_key or ""),
            model=str(model or "") or DEFAULT_MODELS[provider],
        )
        return type(self)(
            primary=self.primary,
            fallback1=self.fallback1,
            fallback2=self.fallback2,
            auto_fallback_enabled=self.auto_fallback_enabled,
            credentials=creds,
        )

    @classmethod
    def defaults(cls, settings: Optional[AISettings] = None) -> "ProviderConfig":
        """Built-in configuration used while no admin document exists.

        Credentials come from the environment, never from remote data.
        """
        s = settings or AISettings()
        keys = {
            ProviderIdentity.GEMINI: s.gemini_api_key,
            ProviderIdentity.OPENROUTER: s.openrouter_api_key,
            ProviderIdentity.GROQ: s.groq_api_key,
        }
        return cls(
            primary=ProviderIdentity.GEMINI,
            fallback1=ProviderIdentity.GROQ,
            fallback2=ProviderIdentity.OPENROUTER,
            auto_fallback_enabled=True,
            credentials={
                p: ProviderCredentials(api_key=keys[p], model=DEFAULT_MODELS[p])
                for p in ProviderIdentity
            },
        )

    def to_document(self) -> dict[str, Any]:
        """Serialize to the admin settings document layout."""
        doc: dict[str, Any] = {
            "primaryProvider": self.primary.value,
            "fallbackProvider": self.fallback1.value,
            "secondFallbackProvider": self.fallback2.value if self.fallback2 else "",
            "autoFallback": bool(self.auto_fallback_enabled),
        }
        for p in ProviderIdentity:
            c = self.credentials_for(p)
            doc[_key_field(p)] = c.api_key
            doc[_model_field(p)] = c.model
        return doc

    @classmethod
    def from_document(
        cls, data: Mapping[str, Any], *, base: Optional["ProviderConfig"] = None
    ) -> "ProviderConfig":
        """Overlay a stored document on a base configuration.

        Fields missing from the document keep the base values. Unknown keys
        such as updatedAt are ignored.

        Raises:
            UnknownProviderError: If a role names an unsupported provider.
        """
        b = base or cls.defaults()
        roles: dict[str, Any] = {
            "primary": b.primary,
            "fallback1": b.fallback1,
            "fallback2": b.fallback2,
        }
        for attr, key in _DOC_ROLE_FIELDS.items():
            if key in data:
                roles[attr] = data[key]
        roles["primary"] = ProviderIdentity.parse(roles["primary"])
        roles["fallback1"] = ProviderIdentity.parse(roles["fallback1"])
        f2 = roles["fallback2"]
        roles["fallback2"] = (
            None
            if f2 is None or (isinstance(f2, str) and not f2.strip())
            else ProviderIdentity.parse(f2)
        )

        auto = b.auto_fallback_enabled
        if "autoFallback" in data:
            auto = bool(data["autoFallback"])

        creds: dict[ProviderIdentity, ProviderCredentials] = {}
        for p in ProviderIdentity:
            current = b.credentials_for(p)
            creds[p] = ProviderCredentials(
                api_key=str(data.get(_key_field(p), current.api_key) or ""),
                model=str(data.get(_model_field(p)) or current.model),
            )

        return cls(**roles, auto_fallback_enabled=auto, credentials=creds)
