"""
================================================================================
FILE: fruitstand/api/dependencies.py
================================================================================

PURPOSE:
FastAPI dependency injection functions. Provides reusable dependencies
that are injected into route handlers via Depends(). Enables:
- Configuration access
- Container / repository access (the shared storage handle)
- Request context (request_id)
- Per-request cancellation scope (deadline + client disconnect)

WORKFLOW:
1. create_app() stores Settings and ServiceContainer on app.state
2. Route handlers declare: repository = Depends(get_repository)
3. FastAPI resolves the chain per request
4. Tests replace any link with app.dependency_overrides

DEPENDENCY CHAIN:
get_settings()
├─ Used by: sleep endpoint, get_request_scope
get_container()
├─ Reads app.state.container (set at startup, never a module global)
get_repository()
├─ Depends on: get_container
├─ Used by: all fruit endpoints
get_request_context()
├─ Extract request info (request_id)
get_request_scope()
├─ Depends on: get_settings, get_request_context
├─ Used by: all storage-touching endpoints

KEY FACTS:
- All dependencies are ASYNC (non-blocking)
- FastAPI caches dependencies per request (no repeated calls)
- A container that failed or has not finished startup → 503

TESTING ENVIRONMENT:
- Override dependencies with: app.dependency_overrides[get_repository] = lambda: fake
- Use TestClient without the context manager so startup does not connect
"""
#================================================================================
#IMPORTS
#================================================================================

import logging
from typing import Any, Dict

from fastapi import Depends, HTTPException, Request, status

from fruitstand.config.settings import Settings
from fruitstand.container.service_container import ServiceContainer
from fruitstand.core.fruit_repository import FruitRepository
from fruitstand.core.request_scope import RequestScope
from fruitstand.utils import generate_request_id

logger = logging.getLogger(__name__)

#================================================================================
#DEPENDENCY FUNCTIONS
#================================================================================

async def get_settings(request: Request) -> Settings:
    """
    Get application settings (configuration).

    Returns:
        Settings: Configuration object stored by create_app()
    """
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        logger.error("Settings not available on app.state")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Service initialization failed",
        )
    return settings


async def get_container(request: Request) -> ServiceContainer:
    """
    Get the ServiceContainer holding the shared storage handle.

    Raises:
        HTTPException(503): container missing or startup not finished
    """
    container = getattr(request.app.state, "container", None)
    if container is None or not container.initialized:
        logger.error("Container not available: startup incomplete")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service container not initialized",
        )
    return container


async def get_repository(
    container: ServiceContainer = Depends(get_container),
) -> FruitRepository:
    """Get the FruitRepository (data-access layer)."""
    return container.get_repository()


async def get_request_context(request: Request) -> Dict[str, Any]:
    """
    Extract and provide request context.

    Returns:
        Dict with: request_id, started_at (monotonic seconds, may be None)
    """
    return {
        "request_id": getattr(request.state, "request_id", None) or generate_request_id(),
        "started_at": getattr(request.state, "started_at", None),
    }


async def get_request_scope(
    request: Request,
    settings: Settings = Depends(get_settings),
    request_context: Dict[str, Any] = Depends(get_request_context),
) -> RequestScope:
    """
    Build the bounded cancellation scope for this request.

    The deadline counts from request arrival (set by the request-id
    middleware), and the scope watches the client connection through
    Request.is_disconnected.
    """
    return RequestScope(
        timeout=settings.request_timeout,
        is_disconnected=request.is_disconnected,
        poll_interval=settings.disconnect_poll_interval,
        request_id=request_context["request_id"],
        started_at=request_context["started_at"],
    )
