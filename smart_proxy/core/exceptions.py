"""Error taxonomy for the proxy.

None of these reach the caller as a raised exception: the dispatcher and
normalizer catch them and turn them into pass-through or JSON error
responses. They exist so failures are logged (and sent to Sentry) with a
stable type name.
"""

from __future__ import annotations


class ProxyError(Exception):
    """Base class for proxy-side failures."""

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message)
        self.provider = provider


class MalformedUpstreamResponse(ProxyError):
    """Local provider answered 200 with a body that does not match its schema."""


class UpstreamError(ProxyError):
    """Backend answered with a non-200 status."""

    def __init__(self, message: str, provider: str = "", status_code: int = 0):
        super().__init__(message, provider)
        self.status_code = status_code


class UpstreamUnreachable(ProxyError):
    """Backend could not be reached (connect error, timeout, protocol error)."""
