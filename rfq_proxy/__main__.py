from __future__ import annotations

import uvicorn

from rfq_proxy.config import settings


def main() -> None:
    # uvicorn stops accepting connections on SIGINT/SIGTERM, waits up to the
    # grace window for in-flight requests, then cancels what is left.
    uvicorn.run(
        "rfq_proxy.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL,
        timeout_graceful_shutdown=settings.SHUTDOWN_GRACE_SECONDS,
        proxy_headers=True,
    )


if __name__ == "__main__":
    main()
