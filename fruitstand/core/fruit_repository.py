# LINE 2: Storage (PostgreSQL)
"""
================================================================================
FILE: fruitstand/core/fruit_repository.py
================================================================================

PURPOSE:
    Data-access layer for the fruit table. Issues parameterized SQL through
    SQLAlchemy's asyncio engine and maps rows to Fruit records. Every public
    call takes the request's RequestScope and runs inside it.

WORKFLOW:
    create(name, scope)    → INSERT INTO fruit (name) VALUES (:name)
    list_all(scope)        → select p.id, p.name from fruit as p;
    get(fruit_id, scope)   → select p.name from fruit as p where p.id = :id;
    sleep(seconds, scope)  → select pg_sleep(:seconds);
    ping()                 → SELECT 1 (startup reachability check)

IMPORTS:
    - sqlalchemy.ext.asyncio: AsyncEngine (asyncpg driver in production)
    - pydantic: row decoding through the Fruit model

LISTING ERROR ORDER:
    1. Statement could not be started, or the scope ended before it
       started streaming → StorageError with empty message
       (cause is logged, not returned)
    2. Rows are decoded one by one; first bad row stops the loop
    3. Result set is closed on every path (break, error, cancellation)
    4. Close failed           → ResultReleaseError (wins over everything)
    5. Decode failed          → RowDecodeError
    6. Iteration failed       → StorageError (connection dropped mid-stream)
    A partially built list is never returned.

KEY FACTS:
    - The engine is shared process-wide and safe for concurrent use
    - No retries, every statement attempted once per request
    - Driver error text is passed through verbatim
    - Missing row on lookup is reported as a storage error, like any other
      lookup failure
"""

# ================================================================================
# IMPORTS
# ================================================================================

import asyncio
import logging
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncResult

from fruitstand.config.constants import (
    MSG_NO_ROWS,
    SQL_GET_FRUIT_NAME,
    SQL_INSERT_FRUIT,
    SQL_LIST_FRUITS,
    SQL_PING,
    SQL_SLEEP,
)
from .exceptions import (
    NoRowsError,
    QueryCanceledError,
    ResultReleaseError,
    RowDecodeError,
    StorageError,
)
from .models import Fruit
from .request_scope import RequestScope

logger = logging.getLogger(__name__)

# Errors a driver call can surface: SQLAlchemy-wrapped DBAPI errors, plus
# raw socket errors asyncpg raises while connecting.
DRIVER_ERRORS = (SQLAlchemyError, OSError)

# ================================================================================
# FRUIT REPOSITORY
# ================================================================================

class FruitRepository:
    """
    Parameterized SQL over the fruit table.

    Args:
        engine: Shared AsyncEngine, created once at startup
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    # ========================================================================
    # PUBLIC API
    # ========================================================================

    async def ping(self) -> None:
        """Verify the database is reachable. Raises StorageError otherwise."""
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text(SQL_PING))
        except DRIVER_ERRORS as e:
            raise StorageError(driver_message(e)) from e

    async def create(self, name: str, scope: RequestScope) -> None:
        """Insert a fruit; the id is assigned by the database."""
        await scope.run(self._insert(name))
        logger.info(
            f"Fruit created [{scope.request_id}]",
            extra={"request_id": scope.request_id},
        )

    async def list_all(self, scope: RequestScope) -> List[Fruit]:
        """
        All fruits in storage order (no ordering guarantee).

        A scope that ends before the statement returned its first rows is
        a failed query start: empty message, cause only in the log.
        """
        streaming = asyncio.Event()
        try:
            return await scope.run(self._list(streaming))
        except QueryCanceledError as e:
            if streaming.is_set():
                raise
            logger.error(
                f"Fruit listing query failed: {e.message} [{scope.request_id}]",
                extra={"request_id": scope.request_id},
            )
            raise StorageError("", context={"cause": e.message}) from e

    async def get(self, fruit_id: int, scope: RequestScope) -> Fruit:
        """Point lookup by id. A missing row raises NoRowsError."""
        return await scope.run(self._get(fruit_id))

    async def sleep(self, seconds: float, scope: RequestScope) -> None:
        """Block inside the database for the given number of seconds."""
        await scope.run(self._sleep(seconds))

    # ========================================================================
    # STATEMENTS
    # ========================================================================

    async def _insert(self, name: str) -> None:
        try:
            async with self._engine.begin() as conn:
                await conn.execute(text(SQL_INSERT_FRUIT), {"name": name})
        except DRIVER_ERRORS as e:
            raise StorageError(driver_message(e)) from e

    async def _list(self, streaming: asyncio.Event) -> List[Fruit]:
        try:
            async with self._engine.connect() as conn:
                result = await conn.stream(text(SQL_LIST_FRUITS))
                streaming.set()
                return await self._collect(result)
        except DRIVER_ERRORS as e:
            message = driver_message(e)
            logger.error(f"Fruit listing query failed: {message}")
            raise StorageError("", context={"cause": message}) from e

    async def _collect(self, result: AsyncResult) -> List[Fruit]:
        """Decode streamed rows, then release the result set."""
        fruits: List[Fruit] = []
        decode_error: Optional[ValidationError] = None
        iteration_error: Optional[Exception] = None

        try:
            async for row in result:
                try:
                    fruits.append(Fruit.model_validate({"id": row[0], "name": row[1]}))
                except ValidationError as e:
                    decode_error = e
                    break
        except DRIVER_ERRORS as e:
            iteration_error = e
        finally:
            release_error = await release(result)

        if release_error is not None:
            raise ResultReleaseError(driver_message(release_error)) from release_error

        if decode_error is not None:
            raise RowDecodeError(decode_message(decode_error)) from decode_error

        if iteration_error is not None:
            raise StorageError(driver_message(iteration_error)) from iteration_error

        return fruits

    async def _get(self, fruit_id: int) -> Fruit:
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(text(SQL_GET_FRUIT_NAME), {"id": fruit_id})
                row = result.first()
        except DRIVER_ERRORS as e:
            raise StorageError(driver_message(e)) from e

        if row is None:
            raise NoRowsError(MSG_NO_ROWS, context={"id": fruit_id})

        try:
            return Fruit.model_validate({"id": fruit_id, "name": row[0]})
        except ValidationError as e:
            raise RowDecodeError(decode_message(e)) from e

    async def _sleep(self, seconds: float) -> None:
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(text(SQL_SLEEP), {"seconds": float(seconds)})
                result.close()
        except DRIVER_ERRORS as e:
            raise StorageError(driver_message(e)) from e

# ================================================================================
# HELPERS
# ================================================================================

async def release(result: AsyncResult) -> Optional[Exception]:
    """Close a streamed result; return the failure instead of raising it."""
    try:
        await result.close()
    except DRIVER_ERRORS as e:
        logger.error(f"Releasing result set failed: {driver_message(e)}")
        return e
    return None


def driver_message(exc: BaseException) -> str:
    """Underlying driver text, without SQLAlchemy's statement/link suffix."""
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


def decode_message(exc: ValidationError) -> str:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    )
    return f"cannot decode fruit row: {details}"
