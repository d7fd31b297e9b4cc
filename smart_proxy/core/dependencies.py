from functools import lru_cache

from smart_proxy.core.config import settings
from smart_proxy.gateway.dispatcher import ProxyGateway


@lru_cache
def get_gateway() -> ProxyGateway:
    """Process-wide gateway built from the startup settings."""
    return ProxyGateway(settings)
