"""Run the proxy with uvicorn: ``python -m smart_proxy``."""

import uvicorn

from smart_proxy.core.config import settings


def main() -> None:
    uvicorn.run(
        "smart_proxy.main:app",
        host=settings.app_host,
        port=settings.app_port,
        log_config=None,  # keep the handlers installed by setup_logging()
    )


if __name__ == "__main__":
    main()
