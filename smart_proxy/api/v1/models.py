"""Model listing and capability description endpoints."""

from fastapi import APIRouter, Depends

from smart_proxy.core.dependencies import get_gateway
from smart_proxy.gateway.dispatcher import ProxyGateway
from smart_proxy.gateway.registry import list_models
from smart_proxy.schemas.chat import ModelList

router = APIRouter(tags=["models"])


@router.get("/models", response_model=ModelList, operation_id="listModels")
async def get_models(gateway: ProxyGateway = Depends(get_gateway)):
    """Local models are always listed; Grok only when its key is set."""
    return {"object": "list", "data": list_models(gateway.remote_credential_present)}


# Mounted at the bare /v1 prefix by api.v1.router
async def describe(gateway: ProxyGateway = Depends(get_gateway)):
    """Front page: what this proxy is and how it routes."""
    return {
        "name": "SmartProxy",
        "description": "OpenAI-compatible endpoint routing between local Ollama and Grok",
        "provider": "Grok ready" if gateway.remote_credential_present else "Local Ollama",
        "routing": {
            "privacy_sensitive": "local Ollama",
            "#hey grok": "Grok",
            "default": "Ollama 70B",
        },
        "links": {
            "models": "/v1/models",
            "openapi": "/v1/openapi.json",
        },
    }
