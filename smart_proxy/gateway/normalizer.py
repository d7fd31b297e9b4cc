"""Response Normalizer — turns backend replies into OpenAI chat completions.

  - Remote (Grok) replies are already OpenAI-compatible: passed through.
  - Local (Ollama) error replies are passed through untouched.
  - Local 200 replies are parsed and rebuilt as a ``chat.completion``.
  - A local 200 reply that cannot be parsed is passed through as-is and
    logged; the caller still gets the backend's bytes.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass

from pydantic import ValidationError

from smart_proxy.core.exceptions import MalformedUpstreamResponse
from smart_proxy.gateway.types import Provider
from smart_proxy.schemas.chat import (
    AssistantMessage,
    ChatChoice,
    ChatCompletionResponse,
    OllamaChatResponse,
    Usage,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing a local provider body: either ``value`` or ``error``."""

    value: OllamaChatResponse | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.value is not None


def parse_local_response(body: bytes) -> ParseResult:
    """Validate an Ollama ``/api/chat`` body without raising."""
    try:
        return ParseResult(value=OllamaChatResponse.model_validate_json(body))
    except ValidationError as e:
        return ParseResult(error=f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}")


def new_completion_id() -> str:
    return f"chatcmpl-{uuid.uuid4().hex}"


def build_completion(parsed: OllamaChatResponse, requested_model: str) -> ChatCompletionResponse:
    """Map Ollama's native fields onto the OpenAI schema."""
    content = ""
    if parsed.message is not None and parsed.message.content is not None:
        content = parsed.message.content

    prompt_tokens = parsed.prompt_eval_count or 0
    completion_tokens = parsed.eval_count or 0

    return ChatCompletionResponse(
        id=new_completion_id(),
        created=int(time.time()),
        model=requested_model,
        choices=[
            ChatChoice(
                index=0,
                message=AssistantMessage(content=content),
                finish_reason="stop" if parsed.done else None,
            )
        ],
        usage=Usage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        ),
    )


def normalize_response(
    provider: Provider,
    raw_status: int,
    raw_body: bytes,
    requested_model: str,
) -> tuple[int, bytes]:
    """Return the status and body to send back to the caller.

    Never raises; anything that is not a well-formed local 200 reply is
    returned unchanged.
    """
    if provider == Provider.REMOTE:
        return raw_status, raw_body

    if raw_status != 200:
        return raw_status, raw_body

    result = parse_local_response(raw_body)
    if not result.ok:
        exc = MalformedUpstreamResponse(
            f"Failed to parse Ollama response: {result.error}",
            provider=provider.value,
        )
        logger.error(
            "%s: %s (body size: %d)",
            type(exc).__name__,
            exc,
            len(raw_body),
            extra={"provider": provider.value, "status_code": raw_status, "body_size": len(raw_body)},
        )
        return raw_status, raw_body

    completion = build_completion(result.value, requested_model)
    body = completion.model_dump_json().encode("utf-8")
    logger.info(
        "Converted Ollama to OpenAI format | body size: %d",
        len(body),
        extra={"provider": provider.value, "model": requested_model, "body_size": len(body)},
    )
    return raw_status, body
