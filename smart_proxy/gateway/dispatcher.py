"""Proxy Gateway — glues routing, transport and normalization together.

Per chat request:
  1. Routing engine picks provider + model
  2. Outbound payload gets its ``model`` and ``stream`` fields set
  3. Provider adapter performs the HTTP call
  4. Normalizer converts the reply to an OpenAI chat completion

Usage:
    gateway = ProxyGateway(settings)
    result = await gateway.handle(body, user_agent=request.headers.get("user-agent", ""))
"""

from __future__ import annotations

import json
import logging
from typing import Any

from smart_proxy.core.config import Settings
from smart_proxy.core.exceptions import UpstreamError, UpstreamUnreachable
from smart_proxy.core.metrics import ROUTING_DECISIONS, UPSTREAM_RESPONSES
from smart_proxy.gateway.normalizer import normalize_response
from smart_proxy.gateway.registry import endpoint_for
from smart_proxy.gateway.routing import decide
from smart_proxy.gateway.types import Provider, ProxyResult, RoutingDecision
from smart_proxy.gateway.vendor_adapters import BaseProviderAdapter, get_adapter

logger = logging.getLogger(__name__)


def error_body(message: str, error_type: str, **fields: Any) -> bytes:
    """OpenAI-style error payload."""
    error = {"message": message, "type": error_type, **fields}
    return json.dumps({"error": error}, ensure_ascii=False).encode("utf-8")


def prepare_payload(
    body: dict[str, Any],
    decision: RoutingDecision,
    user_agent: str = "",
    streaming_user_agent: str = "",
) -> dict[str, Any]:
    """Copy of the request body ready to be sent upstream.

    The remote model is always forced; a local model is only filled in when
    the caller did not name one. Responses are non-streaming unless the
    client's User-Agent is exactly the streaming signature.
    """
    payload = dict(body)

    if decision.is_remote:
        payload["model"] = decision.model
    elif not payload.get("model") or not isinstance(payload["model"], str):
        payload["model"] = decision.model

    payload["stream"] = bool(streaming_user_agent) and user_agent == streaming_user_agent
    return payload


class ProxyGateway:
    """Main gateway orchestrator.

    Holds the process-wide settings and one lazily created adapter per
    provider. Keeps no per-request state.
    """

    def __init__(
        self,
        config: Settings,
        adapters: dict[Provider, BaseProviderAdapter] | None = None,
    ):
        """
        Args:
            config: Immutable settings (credentials, backend URLs, timeouts)
            adapters: Pre-built adapters, mainly for tests
        """
        self.config = config
        self._adapters: dict[Provider, BaseProviderAdapter] = dict(adapters or {})

    @property
    def remote_credential_present(self) -> bool:
        return self.config.remote_credential_present

    def _get_adapter(self, provider: Provider) -> BaseProviderAdapter:
        """Get or create adapter for a provider."""
        if provider not in self._adapters:
            api_key = self.config.grok_api_key if provider == Provider.REMOTE else ""
            self._adapters[provider] = get_adapter(provider, endpoint_for(provider, self.config), api_key)
        return self._adapters[provider]

    def route(self, body: dict[str, Any]) -> RoutingDecision:
        decision = decide(body, self.remote_credential_present)
        ROUTING_DECISIONS.labels(provider=decision.provider.value, rule=decision.rule).inc()
        return decision

    async def handle(self, body: dict[str, Any], user_agent: str = "") -> ProxyResult:
        """Route, forward and normalize a single chat completion request.

        Always returns a result; transport failures become a 502.
        """
        decision = self.route(body)
        payload = prepare_payload(body, decision, user_agent, self.config.streaming_user_agent)
        provider = decision.provider
        model = payload["model"]
        messages = payload.get("messages")

        logger.info("Streaming: %s", payload["stream"])
        logger.info("User-Agent: %s", user_agent)
        logger.info(
            "Routing to %s (model: %s, messages: %d)",
            provider.value,
            model,
            len(messages) if isinstance(messages, list) else 0,
            extra={"provider": provider.value, "model": model, "rule": decision.rule},
        )

        adapter = self._get_adapter(provider)
        try:
            raw = await adapter.send(payload, timeout=self.config.request_timeout_seconds)
        except UpstreamUnreachable as e:
            logger.error(
                "%s: %s",
                type(e).__name__,
                e,
                extra={"provider": provider.value, "model": model},
            )
            UPSTREAM_RESPONSES.labels(provider=provider.value, status="unreachable").inc()
            return ProxyResult(
                status_code=502,
                body=error_body(str(e), "upstream_unreachable", provider=provider.value),
                decision=decision,
            )

        UPSTREAM_RESPONSES.labels(provider=provider.value, status=str(raw.status_code)).inc()
        if raw.status_code != 200:
            err = UpstreamError(
                f"{provider.value} returned HTTP {raw.status_code}",
                provider=provider.value,
                status_code=raw.status_code,
            )
            logger.error(
                "%s: %s | body: %s",
                type(err).__name__,
                err,
                raw.body[:2000].decode("utf-8", errors="replace"),
                extra={"provider": provider.value, "status_code": raw.status_code},
            )

        status_code, response_body = normalize_response(provider, raw.status_code, raw.body, model)
        return ProxyResult(status_code=status_code, body=response_body, decision=decision)
