"""Core types and DTOs for the proxy gateway."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Provider(str, Enum):
    """Inference backends the proxy can route to."""

    LOCAL = "ollama"  # self-hosted, always assumed available
    REMOTE = "grok"  # hosted, needs an API key


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RoutingDecision:
    """Which provider and model serve a request.

    ``rule`` and ``keyword`` record why the decision was made; the
    dispatcher only acts on ``provider`` and ``model``.
    """

    provider: Provider
    model: str
    rule: str = "default"
    keyword: str | None = None

    @property
    def is_remote(self) -> bool:
        return self.provider == Provider.REMOTE


# ---------------------------------------------------------------------------
# Backend exchange
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawBackendResponse:
    """Status and undecoded body exactly as returned by a backend."""

    status_code: int
    body: bytes


@dataclass(frozen=True)
class ProxyResult:
    """What the HTTP layer sends back to the caller."""

    status_code: int
    body: bytes
    decision: RoutingDecision | None = None
