import os
from collections.abc import AsyncGenerator

# Keep test runs from writing log/proxy.log or picking up a real key
os.environ["LOG_FILE"] = ""
os.environ["GROK_API_KEY"] = ""
os.environ["SENTRY_DSN"] = ""

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from smart_proxy.core.config import Settings  # noqa: E402
from smart_proxy.core.dependencies import get_gateway  # noqa: E402
from smart_proxy.gateway.dispatcher import ProxyGateway  # noqa: E402
from smart_proxy.main import app  # noqa: E402


@pytest.fixture
def remote_settings() -> Settings:
    return Settings(grok_api_key="test-grok-key", log_file="")


@pytest.fixture
def local_only_settings() -> Settings:
    return Settings(grok_api_key="", log_file="")


async def _client_for(config: Settings) -> AsyncGenerator[AsyncClient, None]:
    gateway = ProxyGateway(config)
    app.dependency_overrides[get_gateway] = lambda: gateway
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
    finally:
        app.dependency_overrides.pop(get_gateway, None)


@pytest.fixture
async def client(remote_settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """API client with the Grok key configured."""
    async for c in _client_for(remote_settings):
        yield c


@pytest.fixture
async def local_only_client(local_only_settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """API client without a Grok key."""
    async for c in _client_for(local_only_settings):
        yield c
