# fruitstand/api/routes.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse
from starlette.requests import ClientDisconnect
from starlette.types import Receive, Scope, Send

from fruitstand.api.dependencies import (
    get_repository,
    get_request_scope,
    get_settings,
)
from fruitstand.api.models import FruitListResponse, FruitResponse
from fruitstand.config.constants import (
    API_PREFIX,
    MSG_NON_NUMERIC_DURATION,
    MSG_NON_NUMERIC_ID,
    MSG_NOT_IMPLEMENTED,
    MSG_OK,
)
from fruitstand.config.settings import Settings
from fruitstand.core.exceptions import ClientInputError, StorageError
from fruitstand.core.fruit_repository import FruitRepository
from fruitstand.core.request_scope import RequestScope
from fruitstand.utils import parse_int

logger = logging.getLogger(__name__)
router = APIRouter(prefix=API_PREFIX, tags=["fruits"])
home_router = APIRouter(tags=["home"])

# ============================================================================
# FRUITS
# ============================================================================

@router.get(
    "/fruits",
    response_model=FruitListResponse,
    summary="List all fruits",
)
async def list_fruits(
    repository: FruitRepository = Depends(get_repository),
    scope: RequestScope = Depends(get_request_scope),
) -> FruitListResponse:
    """
    All fruits in storage order.

    curl --insecure https://localhost:8443/api/v1/fruits
    """
    fruits = await repository.list_all(scope)
    logger.info(
        f"Listed {len(fruits)} fruits [{scope.request_id}]",
        extra={"request_id": scope.request_id},
    )
    return FruitListResponse(fruits=fruits)


@router.post(
    "/fruits",
    response_class=PlainTextResponse,
    summary="Create a fruit",
    description="The raw request body is the fruit name.",
)
async def create_fruit(
    request: Request,
    repository: FruitRepository = Depends(get_repository),
    scope: RequestScope = Depends(get_request_scope),
) -> str:
    """
    curl --insecure -d "durian" -X POST https://localhost:8443/api/v1/fruits
    """
    try:
        body = await request.body()
        name = body.decode("utf-8")
    except (ClientDisconnect, UnicodeDecodeError) as e:
        logger.warning(
            f"Unreadable body [{scope.request_id}]: {e!r}",
            extra={"request_id": scope.request_id},
        )
        raise ClientInputError("") from e

    await repository.create(name, scope)
    return MSG_OK


@router.get(
    "/fruits/{fruit_id}",
    response_model=FruitResponse,
    summary="Get a fruit by id",
)
async def get_fruit(
    fruit_id: str,
    repository: FruitRepository = Depends(get_repository),
    scope: RequestScope = Depends(get_request_scope),
) -> FruitResponse:
    """
    A missing id is reported as a storage error (500), not 404.

    curl --insecure https://localhost:8443/api/v1/fruits/1
    """
    parsed_id = parse_int(fruit_id)
    if parsed_id is None:
        raise ClientInputError(MSG_NON_NUMERIC_ID)

    return await repository.get(parsed_id, scope)

# ============================================================================
# DIAGNOSTICS
# ============================================================================

@router.get(
    "/sleep",
    response_class=PlainTextResponse,
    summary="Run pg_sleep inside the request deadline",
)
async def sleep(
    d: Optional[str] = Query(None, description="Seconds to sleep"),
    settings: Settings = Depends(get_settings),
    repository: FruitRepository = Depends(get_repository),
    scope: RequestScope = Depends(get_request_scope),
) -> str:
    """
    Simulate a long running query. If the client closes the connection or
    the deadline passes first, the statement is canceled in the database
    and the cancellation message is returned with a 500.

    curl --insecure -v https://localhost:8443/api/v1/sleep?d=4
    """
    duration = settings.sleep_default_seconds
    if d:
        parsed = parse_int(d)
        if parsed is None:
            raise ClientInputError(MSG_NON_NUMERIC_DURATION)
        duration = parsed

    extra = {"request_id": scope.request_id}
    logger.info(f"call to sleep for {duration} seconds", extra=extra)
    try:
        await repository.sleep(duration, scope)
    except StorageError as e:
        logger.error(f"query failed: {e.message}", extra=extra)
        raise
    finally:
        logger.info("finished call to sleep", extra=extra)

    return MSG_OK

# ============================================================================
# HOME
# ============================================================================

class HomeEndpoint:
    """
    Raw ASGI endpoint for /. A class endpoint registers without a method
    list, so every method (including WebDAV verbs) reaches it.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = PlainTextResponse(MSG_NOT_IMPLEMENTED, status_code=500)
        await response(scope, receive, send)


home_router.add_route("/", HomeEndpoint(), include_in_schema=False)
