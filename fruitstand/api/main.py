"""
================================================================================
FILE: fruitstand/api/main.py
================================================================================

PURPOSE:
    FastAPI application factory and initialization. Creates and configures the
    FastAPI app instance, registers all routes, sets up the startup/shutdown
    lifespan and the shared storage handle.

WORKFLOW:
    1. Load configuration (Settings) unless one is passed in
    2. Build the ServiceContainer unless one is passed in
    3. Store both on app.state (handlers get them through Depends)
    4. Register exception handlers (text/plain error bodies)
    5. Register request-id middleware (plain ASGI, keeps disconnects visible)
    6. Register routes from api/routes.py
    7. Lifespan: initialize container on startup, shut it down on exit

STARTUP SEQUENCE:
    1. ServiceContainer.initialize() creates the AsyncEngine
    2. SELECT 1 verifies the database is reachable
    3. Failure raises ServiceInitializationError → server fails to start

KEY FACTS:
    - The engine is created once and shared by every request
    - No module-level singletons: state lives on app.state
    - Error bodies are the exception's message as text/plain
    - Every response carries X-Request-ID

TESTING ENVIRONMENT:
    - app = create_app(settings=Settings(...))
    - app.dependency_overrides[get_repository] = lambda: fake_repository
    - TestClient(app) without "with" skips the lifespan (no database needed)
"""


from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from fruitstand import __version__
from fruitstand.api import routes
from fruitstand.config.constants import API_DESCRIPTION, API_TITLE, REQUEST_ID_HEADER
from fruitstand.config.settings import Settings
from fruitstand.container.service_container import ServiceContainer
from fruitstand.core.exceptions import FruitServiceException
from fruitstand.utils import generate_request_id

logger = logging.getLogger(__name__)


class RequestIdMiddleware:
    """
    Stamp every HTTP request with a request id and its arrival time.

    Plain ASGI middleware: the downstream app gets the server's own receive
    channel, so Request.is_disconnected() sees the client going away while
    a handler is still waiting on storage.

    Sets:
        request.state.request_id: UUID, echoed back as X-Request-ID
        request.state.started_at: time.monotonic() at arrival
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = generate_request_id()
        state = scope.setdefault("state", {})
        state["request_id"] = request_id
        state["started_at"] = time.monotonic()

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers[REQUEST_ID_HEADER] = request_id
            await send(message)

        await self.app(scope, receive, send_with_request_id)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Initialize the storage handle at startup, release it at shutdown.

    Any startup exception propagates so the server refuses to start.
    """
    container: ServiceContainer = app.state.container

    logger.info("=" * 80)
    logger.info("APPLICATION STARTUP")
    logger.info("=" * 80)

    if not container.initialized:
        await container.initialize()
    logger.info("✓ ServiceContainer initialized")

    logger.info("=" * 80)
    logger.info("APPLICATION STARTUP COMPLETE")
    logger.info("=" * 80)

    try:
        yield
    finally:
        logger.info("=" * 80)
        logger.info("APPLICATION SHUTDOWN")
        logger.info("=" * 80)
        try:
            await container.shutdown()
        except Exception as e:
            logger.error(f"SHUTDOWN ERROR: {str(e)}", exc_info=True)


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; loaded from the environment when omitted
        container: Storage handle owner; built from settings when omitted

    Returns:
        FastAPI: Configured application instance ready for startup.
    """
    settings = settings or Settings()
    container = container or ServiceContainer(settings)

    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.container = container

    logger.info(
        "Settings loaded: "
        f"database={settings.to_dict()['database_url']} | "
        f"request_timeout={settings.request_timeout}s | "
        f"environment={settings.environment}"
    )

    # =========================================================================
    # EXCEPTION HANDLERS
    # =========================================================================
    @app.exception_handler(FruitServiceException)
    async def fruit_exception_handler(request: Request, exc: FruitServiceException):
        """Render service exceptions as text/plain with their status code."""
        request_id = getattr(request.state, "request_id", "unknown")
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            f"{exc.error_code} [request_id={request_id}]: {exc.message}",
            extra={"request_id": request_id, "error_code": exc.error_code},
        )
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        request_id = getattr(request.state, "request_id", "unknown")
        logger.error(
            f"Unexpected error [request_id={request_id}]: {str(exc)}",
            extra={"request_id": request_id},
            exc_info=True,
        )
        return PlainTextResponse("Internal Server Error", status_code=500)

    # =========================================================================
    # MIDDLEWARE
    # =========================================================================
    app.add_middleware(RequestIdMiddleware)

    # =========================================================================
    # ROUTES
    # =========================================================================
    app.include_router(routes.router)
    app.include_router(routes.home_router)

    return app
