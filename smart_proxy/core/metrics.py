"""Prometheus metrics for the proxy."""

import time

from prometheus_client import Counter, Histogram, Info, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# --- Metrics ---

APP_INFO = Info("smart_proxy", "SmartProxy application info")
APP_INFO.info({"version": "1.0.0", "name": "smart_proxy"})

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30, 60, 120, 300],
)

ROUTING_DECISIONS = Counter(
    "proxy_routing_decisions_total",
    "Routing decisions by chosen provider and the rule that fired",
    ["provider", "rule"],
)

UPSTREAM_RESPONSES = Counter(
    "proxy_upstream_responses_total",
    "Responses received from inference backends",
    ["provider", "status"],
)


# --- Middleware ---

UNMATCHED_PATH = "unmatched"


def _route_path(request: Request) -> str:
    """Label requests by route template so arbitrary URLs share one series."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_PATH


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Collect HTTP request metrics for Prometheus."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start

        # The router fills scope["route"] during call_next
        path = _route_path(request)

        REQUEST_COUNT.labels(method=method, path=path, status=response.status_code).inc()
        REQUEST_DURATION.labels(method=method, path=path).observe(duration)

        return response


def metrics_response() -> Response:
    """Generate Prometheus /metrics response."""
    return Response(
        content=generate_latest(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
