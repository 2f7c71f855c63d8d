"""Serve the HTTP API with uvicorn: ``python -m content_orchestrator.api``."""

import uvicorn

from content_orchestrator.config.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "content_orchestrator.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
