"""Sentry reporting for upstream failures.

Malformed local bodies and failed upstream calls are logged at ERROR by the
gateway; the logging integration turns those records into Sentry events.
Chat payloads never leave the process: request bodies are dropped from every
event before it is sent.
"""

import logging

from smart_proxy.core.config import Settings, settings

logger = logging.getLogger(__name__)

RELEASE = "smart-proxy@1.0.0"


def scrub_event(event: dict, hint: dict | None = None) -> dict:
    """Remove prompt text and auth headers from an outgoing event."""
    request = event.get("request")
    if isinstance(request, dict):
        request.pop("data", None)
        headers = request.get("headers")
        if isinstance(headers, dict):
            for name in list(headers):
                if name.lower() == "authorization":
                    headers[name] = "[Filtered]"
    return event


def init_sentry(config: Settings = settings) -> bool:
    """Start the SDK when a DSN is configured. Returns whether it did."""
    if not config.sentry_dsn:
        logger.debug("SENTRY_DSN empty, upstream errors stay in the log only")
        return False

    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration

    sentry_sdk.init(
        dsn=config.sentry_dsn,
        environment=config.app_env,
        release=RELEASE,
        traces_sample_rate=0.1 if config.app_env == "production" else 1.0,
        send_default_pii=False,
        max_request_body_size="never",
        before_send=scrub_event,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
    )
    logger.info("Sentry reporting enabled (env=%s, release=%s)", config.app_env, RELEASE)
    return True
