# LINE 1: Request lifecycle (deadline + client disconnect)
"""
================================================================================
FILE: fruitstand/core/request_scope.py
================================================================================

PURPOSE:
    Bounded cancellation scope for a single HTTP request. Every storage call
    is run through RequestScope.run(), so the deadline and the client
    connection's lifetime are visible at each call site instead of being
    ambient state.

WORKFLOW:
    1. Route dependency creates a scope when the request arrives
       (deadline = now + REQUEST_TIMEOUT)
    2. Handler passes the scope into every repository call
    3. Repository wraps its coroutine in scope.run(...)
    4. run() races the storage task against:
       - the deadline
       - a watcher polling request.is_disconnected()
    5. Storage finished first → its result (or exception) is returned
    6. Otherwise → storage task is cancelled and awaited until it unwound,
       then QueryCanceledError is raised

CANCELLATION:
    - Cancelling the storage task makes asyncpg send a PostgreSQL cancel
      request, so pg_sleep and long scans stop server-side
    - Result sets are closed by the repository's finally blocks while the
      task unwinds, before run() raises
    - An already expired scope raises without starting the storage call

KEY FACTS:
    - One scope per request, never shared
    - Deadline is measured from scope creation (request start), not per call
    - No retries
"""

# ================================================================================
# IMPORTS
# ================================================================================

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, TypeVar

from .exceptions import QueryCanceledError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DisconnectCheck = Callable[[], Awaitable[bool]]

DEFAULT_POLL_INTERVAL = 0.1

# ================================================================================
# REQUEST SCOPE
# ================================================================================

class RequestScope:
    """
    Deadline plus client-disconnect cancellation for one request.

    Args:
        timeout: Seconds the request may spend in storage calls, from now
        is_disconnected: Async check returning True once the client is gone
            (Starlette's Request.is_disconnected). None disables the watcher.
        poll_interval: Seconds between disconnect checks
        request_id: Correlation ID for log records
        started_at: time.monotonic() of request arrival; defaults to now
    """

    def __init__(
        self,
        timeout: float,
        is_disconnected: Optional[DisconnectCheck] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        request_id: Optional[str] = None,
        started_at: Optional[float] = None,
    ) -> None:
        if started_at is None:
            started_at = time.monotonic()
        self.timeout = timeout
        self.deadline = started_at + timeout
        self.poll_interval = poll_interval
        self.request_id = request_id
        self._is_disconnected = is_disconnected

    def remaining(self) -> float:
        """Seconds left before the deadline (never negative)."""
        return max(0.0, self.deadline - time.monotonic())

    def expired(self) -> bool:
        return self.remaining() <= 0.0

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        Run a storage coroutine inside this scope.

        Returns:
            Whatever the coroutine returns

        Raises:
            QueryCanceledError: deadline elapsed or client disconnected first
            Exception: whatever the coroutine raised, unchanged
        """
        if self.expired():
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise self._deadline_error()

        work = asyncio.ensure_future(awaitable)
        waiters = {work}
        watcher = None
        if self._is_disconnected is not None:
            watcher = asyncio.ensure_future(self._wait_for_disconnect())
            waiters.add(watcher)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=self.remaining(),
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            work.cancel()
            if watcher is not None:
                watcher.cancel()
            raise

        if work in done:
            if watcher is not None:
                watcher.cancel()
            return work.result()

        disconnected = watcher is not None and watcher in done
        if watcher is not None:
            watcher.cancel()

        await self._abort(work)

        if disconnected:
            logger.warning(
                f"Client disconnected, storage call canceled [{self.request_id}]",
                extra={"request_id": self.request_id},
            )
            raise QueryCanceledError(
                "canceling statement: client disconnected",
                context={"request_id": self.request_id},
            )

        logger.warning(
            f"Deadline of {self.timeout:g}s exceeded, storage call canceled "
            f"[{self.request_id}]",
            extra={"request_id": self.request_id},
        )
        raise self._deadline_error()

    # ========================================================================
    # INTERNALS
    # ========================================================================

    async def _wait_for_disconnect(self) -> bool:
        while True:
            if await self._is_disconnected():
                return True
            await asyncio.sleep(self.poll_interval)

    async def _abort(self, work: asyncio.Future) -> None:
        """Cancel the storage task and wait until it has unwound."""
        work.cancel()
        await asyncio.wait({work})
        if not work.cancelled() and work.exception() is not None:
            # Task raised on its own while being canceled; cancellation wins.
            logger.debug(
                f"Storage call failed during cancel [{self.request_id}]: "
                f"{work.exception()}",
                extra={"request_id": self.request_id},
            )

    def _deadline_error(self) -> QueryCanceledError:
        return QueryCanceledError(
            f"canceling statement: deadline of {self.timeout:g}s exceeded",
            context={"request_id": self.request_id},
        )
