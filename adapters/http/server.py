"""
Process entry point for the HTTP service.

Run with: vitalsim-server  (or uvicorn adapters.http.server:build_app --factory)
"""

import uvicorn
from fastapi import FastAPI

from adapters.http.app import create_app
from vitalsim.config import get_config, validate_config
from vitalsim.observability import configure_logging


def build_app() -> FastAPI:
    """App factory: configuration and logging are read from the environment."""
    config = get_config()
    configure_logging(config.logging)
    return create_app(config)


def main() -> None:
    validate_config()
    config = get_config()
    uvicorn.run(
        "adapters.http.server:build_app",
        factory=True,
        host=config.api.host,
        port=config.api.port,
        reload=config.api.reload,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
