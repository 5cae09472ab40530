"""Run the Complia API with uvicorn."""

import os

import uvicorn
from loguru import logger

from complia.core.config import get_settings
from complia.core.logging import setup_logging

APP_FACTORY = "complia.api.main:create_app"


def main() -> None:
    """Start uvicorn; reload is enabled in debug mode."""
    settings = get_settings()
    setup_logging(settings)

    port = int(os.environ.get("PORT", settings.api_port))
    log_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "handlers": {
            "default": {"class": "complia.core.logging.InterceptHandler"},
        },
        "loggers": {
            name: {"handlers": ["default"], "level": "INFO", "propagate": False}
            for name in ("uvicorn", "uvicorn.error", "uvicorn.access")
        },
    }

    logger.info(
        "Starting Uvicorn on http://{}:{} ({})",
        settings.api_host,
        port,
        "development mode with auto-reload" if settings.debug else settings.environment,
    )
    uvicorn.run(
        APP_FACTORY,
        factory=True,
        host=settings.api_host,
        port=port,
        reload=settings.debug,
        log_config=log_config,
    )


if __name__ == "__main__":
    main()
