"""Routing Policy Engine — picks the provider and model for a chat request.

Rules are evaluated in order and the first one that matches wins:

  1. model_override   — requested model name mentions grok    → remote
  2. remote_keyword   — #grok / #heygrok / #architect in text  → remote
  3. local_keyword    — #local / #ollama / #70b / #405b        → local
  4. privacy          — private finance terms in text          → local
  5. domain           — prompt/agent/debug style terms         → remote
  6. default                                                   → local

Rules that pick the remote provider only fire when its API key is
configured; otherwise evaluation continues with the next rule. Only the
last message's content is inspected, after lowercasing and dropping every
character outside ``[a-z0-9#]``.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from smart_proxy.gateway.registry import (
    LOCAL_LARGE_MODEL,
    LOCAL_STANDARD_MODEL,
    REMOTE_REASONING_MODEL,
)
from smart_proxy.gateway.types import Provider, RoutingDecision

logger = logging.getLogger(__name__)

_STRIP_PATTERN = re.compile(r"[^a-z0-9#]")

REMOTE_OVERRIDE_KEYWORDS = ("#hey grok", "#heygrok", "#grok", "#architect")
LOCAL_OVERRIDE_KEYWORDS = ("#local", "#ollama", "#70b", "#405b")

PRIVACY_KEYWORDS = (
    "plaid",
    "portfolio",
    "internship",
    "paycheck",
    "roth",
    "trust",
    "estate tax",
    "family net worth",
    "philanthropy",
    "gusto",
    "deductible",
)

DOMAIN_KEYWORDS = ("prompt", "agent", "debug", "rollback", "workflow", "architecture")

LARGE_MODEL_MARKER = "405b"


# ---------------------------------------------------------------------------
# Input extraction
# ---------------------------------------------------------------------------


def normalize_content(text: str) -> str:
    """Lowercase and keep only letters, digits and ``#``."""
    return _STRIP_PATTERN.sub("", text.lower())


def _content_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    # OpenAI content parts: [{"type": "text", "text": "..."}, ...]
    if isinstance(content, Sequence):
        parts = [
            part.get("text", "")
            for part in content
            if isinstance(part, Mapping) and isinstance(part.get("text"), str)
        ]
        return " ".join(parts)
    return ""


def last_message_content(request: Mapping[str, Any]) -> str:
    """Text of the last message, or "" when there is none."""
    messages = request.get("messages") or []
    if isinstance(messages, (str, bytes)) or not isinstance(messages, Sequence) or not messages:
        return ""
    last = messages[-1]
    if not isinstance(last, Mapping):
        return ""
    return _content_text(last.get("content"))


@dataclass(frozen=True)
class RoutingContext:
    """Everything the rules look at, computed once per request."""

    content: str
    requested_model: str
    remote_credential_present: bool

    @classmethod
    def from_request(cls, request: Mapping[str, Any], remote_credential_present: bool) -> RoutingContext:
        model = request.get("model")
        return cls(
            content=normalize_content(last_message_content(request)),
            requested_model=model if isinstance(model, str) else "",
            remote_credential_present=remote_credential_present,
        )


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RoutingRule(ABC):
    """One entry in the priority list."""

    name: str
    provider: Provider
    model: str

    @property
    def requires_credential(self) -> bool:
        return self.provider == Provider.REMOTE

    @abstractmethod
    def match(self, ctx: RoutingContext) -> str | None:
        """Return the matched keyword, or None when the rule does not apply."""

    def select_model(self, ctx: RoutingContext) -> str:
        return self.model

    def decide(self, ctx: RoutingContext, keyword: str) -> RoutingDecision:
        return RoutingDecision(
            provider=self.provider,
            model=self.select_model(ctx),
            rule=self.name,
            keyword=keyword,
        )


@dataclass(frozen=True)
class ModelNameRule(RoutingRule):
    """Matches on the requested model name instead of the message text."""

    needle: str = "grok"

    def match(self, ctx: RoutingContext) -> str | None:
        if self.needle in ctx.requested_model.lower():
            return ctx.requested_model
        return None


@dataclass(frozen=True)
class KeywordRule(RoutingRule):
    """Substring match of any keyword against the normalized content."""

    keywords: tuple[str, ...] = ()
    strip_hash: bool = False

    @property
    def terms(self) -> tuple[str, ...]:
        if not self.strip_hash:
            return self.keywords
        return tuple(k.lstrip("#").lower() for k in self.keywords)

    def match(self, ctx: RoutingContext) -> str | None:
        for term in self.terms:
            if term and term in ctx.content:
                return term
        return None


@dataclass(frozen=True)
class LocalSizeRule(KeywordRule):
    """Local override; asks for the large model when 405b is mentioned."""

    large_model: str = LOCAL_LARGE_MODEL

    def select_model(self, ctx: RoutingContext) -> str:
        if LARGE_MODEL_MARKER in ctx.content:
            return self.large_model
        return self.model


ROUTING_RULES: tuple[RoutingRule, ...] = (
    ModelNameRule(name="model_override", provider=Provider.REMOTE, model=REMOTE_REASONING_MODEL),
    KeywordRule(
        name="remote_keyword",
        provider=Provider.REMOTE,
        model=REMOTE_REASONING_MODEL,
        keywords=REMOTE_OVERRIDE_KEYWORDS,
        strip_hash=True,
    ),
    LocalSizeRule(
        name="local_keyword",
        provider=Provider.LOCAL,
        model=LOCAL_STANDARD_MODEL,
        keywords=LOCAL_OVERRIDE_KEYWORDS,
        strip_hash=True,
    ),
    # Must stay after the explicit overrides and before the domain rule
    KeywordRule(name="privacy", provider=Provider.LOCAL, model=LOCAL_STANDARD_MODEL, keywords=PRIVACY_KEYWORDS),
    KeywordRule(name="domain", provider=Provider.REMOTE, model=REMOTE_REASONING_MODEL, keywords=DOMAIN_KEYWORDS),
)

DEFAULT_DECISION = RoutingDecision(provider=Provider.LOCAL, model=LOCAL_STANDARD_MODEL, rule="default")


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


def _log_decision(decision: RoutingDecision) -> None:
    logger.info(
        "routing_decision rule=%s provider=%s model=%s keyword=%s",
        decision.rule,
        decision.provider.value,
        decision.model,
        decision.keyword,
        extra={
            "rule": decision.rule,
            "provider": decision.provider.value,
            "model": decision.model,
            "keyword": decision.keyword,
        },
    )


def decide(
    request: Mapping[str, Any],
    remote_credential_present: bool,
    rules: Sequence[RoutingRule] = ROUTING_RULES,
) -> RoutingDecision:
    """Route a chat request. Always returns a decision."""
    ctx = RoutingContext.from_request(request, remote_credential_present)

    for rule in rules:
        keyword = rule.match(ctx)
        if keyword is None:
            continue

        if rule.requires_credential and not ctx.remote_credential_present:
            logger.info(
                "routing_fallthrough rule=%s keyword=%s reason=remote_credential_missing",
                rule.name,
                keyword,
                extra={"rule": rule.name, "keyword": keyword, "reason": "remote_credential_missing"},
            )
            continue

        decision = rule.decide(ctx, keyword)
        _log_decision(decision)
        return decision

    _log_decision(DEFAULT_DECISION)
    return DEFAULT_DECISION
