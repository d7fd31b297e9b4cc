"""Provider Registry — static description of the two inference backends."""

from __future__ import annotations

import time
from dataclasses import dataclass

from smart_proxy.core.config import Settings
from smart_proxy.gateway.types import Provider


@dataclass(frozen=True)
class ProviderSpec:
    """Endpoint, auth and model names for one provider."""

    provider: Provider
    default_url: str
    requires_auth: bool
    standard_model: str
    large_model: str | None = None
    reasoning_model: str | None = None

    @property
    def models(self) -> list[str]:
        """Distinct model ids served by this provider, standard first."""
        names = [self.standard_model, self.large_model, self.reasoning_model]
        result: list[str] = []
        for name in names:
            if name and name not in result:
                result.append(name)
        return result


LOCAL_SPEC = ProviderSpec(
    provider=Provider.LOCAL,
    default_url="http://localhost:11434/api/chat",
    requires_auth=False,
    standard_model="llama3.1:70b",
    large_model="llama3.1:405b",
)

REMOTE_SPEC = ProviderSpec(
    provider=Provider.REMOTE,
    default_url="https://api.x.ai/v1/chat/completions",
    requires_auth=True,
    standard_model="grok-4-fast-reasoning",
    reasoning_model="grok-4-fast-reasoning",
)

PROVIDER_SPECS: dict[Provider, ProviderSpec] = {
    Provider.LOCAL: LOCAL_SPEC,
    Provider.REMOTE: REMOTE_SPEC,
}

# Shortcuts used by the routing rules
LOCAL_STANDARD_MODEL = LOCAL_SPEC.standard_model
LOCAL_LARGE_MODEL = LOCAL_SPEC.large_model
REMOTE_REASONING_MODEL = REMOTE_SPEC.reasoning_model


def get_spec(provider: Provider) -> ProviderSpec:
    return PROVIDER_SPECS[provider]


def endpoint_for(provider: Provider, config: Settings) -> str:
    """Configured endpoint for a provider, falling back to the built-in default."""
    if provider == Provider.REMOTE:
        return config.grok_url or REMOTE_SPEC.default_url
    return config.ollama_url or LOCAL_SPEC.default_url


def is_available(provider: Provider, remote_credential_present: bool) -> bool:
    spec = get_spec(provider)
    return not spec.requires_auth or remote_credential_present


def list_models(remote_credential_present: bool) -> list[dict]:
    """OpenAI-style model catalogue entries for every available provider."""
    created = int(time.time())
    data: list[dict] = []
    for spec in PROVIDER_SPECS.values():
        if not is_available(spec.provider, remote_credential_present):
            continue
        for model_id in spec.models:
            data.append(
                {
                    "id": model_id,
                    "object": "model",
                    "created": created,
                    "owned_by": spec.provider.value,
                }
            )
    return data
