import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from smart_proxy.api.v1.router import api_v1_router
from smart_proxy.core.config import settings, validate_settings_for_production
from smart_proxy.core.dependencies import get_gateway
from smart_proxy.core.logging import setup_logging
from smart_proxy.core.metrics import PrometheusMiddleware, metrics_response
from smart_proxy.core.sentry import init_sentry
from smart_proxy.gateway.dispatcher import ProxyGateway

# Configure logging before anything else
setup_logging()
init_sentry()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    validate_settings_for_production()
    logger.info("SmartProxy running on http://%s:%d", settings.app_host, settings.app_port)
    logger.info("Privacy keywords → local Ollama | #Hey Grok! → Grok | default → Ollama 70B")
    if not settings.remote_credential_present:
        logger.info("GROK_API_KEY not set — all traffic stays on local Ollama")

    yield

    logger.info("SmartProxy shut down")


app = FastAPI(
    title="SmartProxy",
    description="OpenAI-compatible proxy routing between local Ollama and Grok",
    version="1.0.0",
    lifespan=lifespan,
    openapi_url="/v1/openapi.json",
    docs_url="/docs",
    redoc_url=None,
)


# Log unhandled exceptions so they appear in the proxy log
@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled %s on %s %s:\n%s", type(exc).__name__, request.method, request.url.path, "".join(tb))
    return JSONResponse(
        status_code=500,
        content={"error": {"message": f"{type(exc).__name__}: {exc}", "type": "internal_error"}},
    )


# Metrics middleware
app.add_middleware(PrometheusMiddleware)

# CORS — parse allowed_origins from settings (comma-separated)
_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# API routes
app.include_router(api_v1_router)


# Bare OPTIONS (no CORS preflight headers) still gets an empty 200
@app.options("/{path:path}", include_in_schema=False)
async def options_ok(path: str):
    return Response(status_code=200)


@app.get("/health")
async def health(gateway: ProxyGateway = Depends(get_gateway)):
    return {
        "status": "ok",
        "remote_provider": "configured" if gateway.remote_credential_present else "missing_key",
    }


@app.get("/metrics", include_in_schema=False)
async def metrics():
    return metrics_response()
