"""Provider Adapters — HTTP transport for each inference backend.

Each adapter POSTs an already-prepared chat payload to its backend and
returns the status and body untouched. Translation of the body is the
normalizer's job.

Provider-specific behaviors:
  - Ollama: native /api/chat endpoint, no auth
  - Grok: OpenAI-compatible chat completions, Bearer token
"""

from __future__ import annotations

import json
import logging
import time
from abc import ABC
from typing import Any

import httpx

from smart_proxy.core.exceptions import UpstreamUnreachable
from smart_proxy.gateway.registry import LOCAL_SPEC, REMOTE_SPEC
from smart_proxy.gateway.types import Provider, RawBackendResponse

logger = logging.getLogger(__name__)


class BaseProviderAdapter(ABC):
    """Base class for all provider adapters."""

    provider: Provider

    def __init__(self, url: str, api_key: str = ""):
        self.url = url
        self.api_key = api_key

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    async def send(self, payload: dict[str, Any], timeout: float = 300.0) -> RawBackendResponse:
        """POST the payload and return the raw reply.

        Raises UpstreamUnreachable when no HTTP response was received.
        """
        start = time.monotonic()
        content = json.dumps(payload, ensure_ascii=False).encode("utf-8")

        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                resp = await client.post(self.url, content=content, headers=self._headers())
        except httpx.TimeoutException as e:
            raise UpstreamUnreachable(
                f"{self.provider.value} timeout after {timeout}s",
                provider=self.provider.value,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamUnreachable(
                f"{self.provider.value} request failed: {e}",
                provider=self.provider.value,
            ) from e

        elapsed_ms = int((time.monotonic() - start) * 1000)
        body = resp.content or b""
        logger.info(
            "%s response status: %d | body size: %d | %d ms",
            self.provider.value,
            resp.status_code,
            len(body),
            elapsed_ms,
            extra={"provider": self.provider.value, "status_code": resp.status_code, "body_size": len(body)},
        )
        return RawBackendResponse(status_code=resp.status_code, body=body)


# ---------------------------------------------------------------------------
# Ollama Adapter (local)
# ---------------------------------------------------------------------------


class OllamaAdapter(BaseProviderAdapter):
    """Self-hosted Ollama chat endpoint."""

    provider = Provider.LOCAL

    def __init__(self, url: str = LOCAL_SPEC.default_url, api_key: str = ""):
        super().__init__(url=url, api_key=api_key)


# ---------------------------------------------------------------------------
# Grok Adapter (xAI, remote)
# ---------------------------------------------------------------------------


class GrokAdapter(BaseProviderAdapter):
    """xAI chat completions (OpenAI-compatible)."""

    provider = Provider.REMOTE

    def __init__(self, url: str = REMOTE_SPEC.default_url, api_key: str = ""):
        super().__init__(url=url, api_key=api_key)

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        headers["Authorization"] = f"Bearer {self.api_key}"
        return headers


# ---------------------------------------------------------------------------
# Adapter registry
# ---------------------------------------------------------------------------

ADAPTER_REGISTRY: dict[Provider, type[BaseProviderAdapter]] = {
    Provider.LOCAL: OllamaAdapter,
    Provider.REMOTE: GrokAdapter,
}


def get_adapter(provider: Provider, url: str, api_key: str = "") -> BaseProviderAdapter:
    """Factory: get the appropriate adapter for a provider."""
    cls = ADAPTER_REGISTRY.get(provider)
    if cls is None:
        raise ValueError(f"No adapter registered for provider: {provider}")
    return cls(url=url, api_key=api_key)
