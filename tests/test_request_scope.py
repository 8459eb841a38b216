"""RequestScope: deadline, client disconnect and cleanup of canceled storage calls."""

import asyncio
import time

import pytest

from fruitstand.core.exceptions import QueryCanceledError, StorageError
from fruitstand.core.request_scope import RequestScope


class FakeDisconnect:
    """Disconnect check that reports a disconnect after `after` calls."""

    def __init__(self, after=None):
        self.after = after
        self.calls = 0

    async def __call__(self) -> bool:
        self.calls += 1
        return self.after is not None and self.calls >= self.after


class SlowQuery:
    """Coroutine factory that records whether it started, finished, released."""

    def __init__(self, seconds, result="done"):
        self.seconds = seconds
        self.result = result
        self.started = False
        self.finished = False
        self.released = False

    async def __call__(self):
        self.started = True
        try:
            await asyncio.sleep(self.seconds)
            self.finished = True
            return self.result
        finally:
            self.released = True


@pytest.mark.asyncio
async def test_returns_result_when_query_finishes_first():
    scope = RequestScope(timeout=1.0, is_disconnected=FakeDisconnect(), poll_interval=0.01)
    query = SlowQuery(0.01, result=[1, 2])

    assert await scope.run(query()) == [1, 2]
    assert query.finished


@pytest.mark.asyncio
async def test_query_exception_propagates_unchanged():
    scope = RequestScope(timeout=1.0)

    async def failing():
        raise StorageError("relation \"fruit\" does not exist")

    with pytest.raises(StorageError) as exc_info:
        await scope.run(failing())
    assert exc_info.value.message == 'relation "fruit" does not exist'
    assert not isinstance(exc_info.value, QueryCanceledError)


@pytest.mark.asyncio
async def test_deadline_cancels_query_and_waits_for_release():
    scope = RequestScope(timeout=0.05, is_disconnected=FakeDisconnect(), poll_interval=0.01)
    query = SlowQuery(5.0)

    started = time.monotonic()
    with pytest.raises(QueryCanceledError) as exc_info:
        await scope.run(query())

    assert time.monotonic() - started < 1.0
    assert "deadline of 0.05s exceeded" in exc_info.value.message
    assert exc_info.value.status_code == 500
    assert query.started
    assert not query.finished
    assert query.released


@pytest.mark.asyncio
async def test_client_disconnect_cancels_before_deadline():
    check = FakeDisconnect(after=3)
    scope = RequestScope(timeout=5.0, is_disconnected=check, poll_interval=0.01)
    query = SlowQuery(5.0)

    started = time.monotonic()
    with pytest.raises(QueryCanceledError) as exc_info:
        await scope.run(query())

    assert time.monotonic() - started < 1.0
    assert exc_info.value.message == "canceling statement: client disconnected"
    assert check.calls == 3
    assert query.released


@pytest.mark.asyncio
async def test_expired_scope_does_not_start_query():
    scope = RequestScope(timeout=1.0, started_at=time.monotonic() - 2.0)
    query = SlowQuery(0.0)

    assert scope.expired()
    with pytest.raises(QueryCanceledError):
        await scope.run(query())
    assert not query.started


@pytest.mark.asyncio
async def test_deadline_is_shared_across_calls_in_one_request():
    scope = RequestScope(timeout=0.15)

    await scope.run(SlowQuery(0.1)())
    with pytest.raises(QueryCanceledError):
        await scope.run(SlowQuery(0.1)())


@pytest.mark.asyncio
async def test_cancelling_the_handler_cancels_the_query():
    scope = RequestScope(timeout=5.0, is_disconnected=FakeDisconnect(), poll_interval=0.01)
    query = SlowQuery(5.0)

    handler = asyncio.ensure_future(scope.run(query()))
    await asyncio.sleep(0.05)
    handler.cancel()
    with pytest.raises(asyncio.CancelledError):
        await handler
    await asyncio.sleep(0.01)

    assert query.started
    assert not query.finished
    assert query.released


def test_remaining_never_negative():
    scope = RequestScope(timeout=0.5, started_at=time.monotonic() - 10)
    assert scope.remaining() == 0.0

    fresh = RequestScope(timeout=0.5)
    assert 0.0 < fresh.remaining() <= 0.5
