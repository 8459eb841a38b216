"""
================================================================================
FILE: fruitstand/server.py
================================================================================

PURPOSE:
    Process entry point. Loads settings, configures logging and serves the
    app over HTTPS with uvicorn.

WORKFLOW:
    1. Load .env and Settings
    2. Configure logging (text or JSON)
    3. Build the app (container is initialized by the app's lifespan)
    4. uvicorn.run(...) with the TLS certificate/key pair

KEY FACTS:
    - Database unreachable at startup → lifespan fails → process exits
    - Missing certificate/key or port in use → uvicorn exits
    - No restart or retry logic here

USAGE:
    fruitstand                 (console script)
    python -m fruitstand
"""

import logging

import uvicorn
from dotenv import load_dotenv

from fruitstand.api.main import create_app
from fruitstand.config.settings import Settings
from fruitstand.utils import configure_logging

logger = logging.getLogger(__name__)


def main() -> None:
    load_dotenv()
    settings = Settings()
    configure_logging(settings.log_level, settings.log_format)

    app = create_app(settings=settings)

    logger.info(f"server started on https://{settings.server_host}:{settings.server_port}")
    uvicorn.run(
        app,
        host=settings.server_host,
        port=settings.server_port,
        ssl_certfile=settings.ssl_certfile,
        ssl_keyfile=settings.ssl_keyfile,
        log_config=None,
        lifespan="on",
    )


if __name__ == "__main__":
    main()
