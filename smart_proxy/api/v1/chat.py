"""Chat completions API — the OpenAI-compatible proxy endpoint."""

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from smart_proxy.core.dependencies import get_gateway
from smart_proxy.gateway.dispatcher import ProxyGateway, error_body

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.post("/chat/completions", operation_id="chatCompletion")
async def chat_completion(request: Request, gateway: ProxyGateway = Depends(get_gateway)) -> Response:
    """Route the request to Ollama or Grok and answer in OpenAI format.

    The body is forwarded as-is apart from ``model`` and ``stream``, so
    any OpenAI request field the backend understands passes through.
    """
    raw = await request.body()
    try:
        body = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Rejected chat request with invalid JSON: %s", e)
        return Response(
            content=error_body(f"Invalid JSON body: {e}", "invalid_request_error"),
            status_code=400,
            media_type="application/json",
        )

    if not isinstance(body, dict):
        return Response(
            content=error_body("Request body must be a JSON object", "invalid_request_error"),
            status_code=400,
            media_type="application/json",
        )

    result = await gateway.handle(body, user_agent=request.headers.get("user-agent", ""))
    return Response(content=result.body, status_code=result.status_code, media_type="application/json")
