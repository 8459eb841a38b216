"""Shared fixtures: settings, an in-memory repository and app/client wiring."""

import asyncio
import sqlite3
from typing import List, Optional

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from fruitstand.api.dependencies import get_repository
from fruitstand.api.main import create_app
from fruitstand.config.constants import MSG_NO_ROWS
from fruitstand.config.settings import Settings
from fruitstand.core.exceptions import NoRowsError
from fruitstand.core.fruit_repository import FruitRepository
from fruitstand.core.models import Fruit
from fruitstand.core.request_scope import RequestScope

# One "time unit" in route tests. The request bound is 5 units, so
# ?d=3 finishes and ?d=10 is canceled.
TIME_UNIT = 0.05
REQUEST_BOUND_UNITS = 5

CREATE_TABLE_SQLITE = "CREATE TABLE fruit (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT)"


class FakeFruitRepository:
    """In-memory stand-in for FruitRepository that still runs inside the scope."""

    def __init__(self, time_unit: float = TIME_UNIT) -> None:
        self.fruits: List[Fruit] = []
        self.time_unit = time_unit
        self.calls: list = []
        self.fail_with: Optional[Exception] = None
        self._next_id = 1

    async def create(self, name: str, scope: RequestScope) -> None:
        self.calls.append(("create", name))
        await scope.run(self._create(name))

    async def list_all(self, scope: RequestScope) -> List[Fruit]:
        self.calls.append(("list",))
        return await scope.run(self._list())

    async def get(self, fruit_id: int, scope: RequestScope) -> Fruit:
        self.calls.append(("get", fruit_id))
        return await scope.run(self._get(fruit_id))

    async def sleep(self, seconds: float, scope: RequestScope) -> None:
        self.calls.append(("sleep", seconds))
        await scope.run(self._sleep(seconds))

    async def _create(self, name: str) -> None:
        self._raise_if_failing()
        self.fruits.append(Fruit(id=self._next_id, name=name))
        self._next_id += 1

    async def _list(self) -> List[Fruit]:
        self._raise_if_failing()
        return list(self.fruits)

    async def _get(self, fruit_id: int) -> Fruit:
        self._raise_if_failing()
        for fruit in self.fruits:
            if fruit.id == fruit_id:
                return fruit
        raise NoRowsError(MSG_NO_ROWS)

    async def _sleep(self, seconds: float) -> None:
        self._raise_if_failing()
        await asyncio.sleep(seconds * self.time_unit)

    def _raise_if_failing(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with


class StalledListingRepository(FruitRepository):
    """Real listing error handling over a query that never finishes."""

    def __init__(self, rows_arrived: bool) -> None:
        super().__init__(engine=None)
        self.rows_arrived = rows_arrived

    async def _list(self, streaming: asyncio.Event) -> List[Fruit]:
        if self.rows_arrived:
            streaming.set()
        await asyncio.sleep(60)
        return []


@pytest.fixture
def settings() -> Settings:
    return Settings(
        request_timeout=REQUEST_BOUND_UNITS * TIME_UNIT,
        disconnect_poll_interval=0.01,
        sleep_default_seconds=5,
    )


@pytest.fixture
def time_unit() -> float:
    return TIME_UNIT


@pytest.fixture
def fake_repository() -> FakeFruitRepository:
    return FakeFruitRepository()


@pytest.fixture
def stalled_listing():
    return StalledListingRepository


@pytest.fixture
def app(settings, fake_repository):
    application = create_app(settings=settings)
    application.dependency_overrides[get_repository] = lambda: fake_repository
    return application


@pytest.fixture
def client(app) -> TestClient:
    # No context manager: the lifespan (database connect) is skipped.
    return TestClient(app)


@pytest.fixture
def sqlite_path(tmp_path):
    """File-backed SQLite database with the fruit table, created synchronously."""
    path = tmp_path / "fruit.db"
    with sqlite3.connect(path) as conn:
        conn.execute(CREATE_TABLE_SQLITE)
    return path


@pytest_asyncio.fixture
async def engine(sqlite_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{sqlite_path}")
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def insert_raw(engine):
    """Insert rows bypassing the repository (e.g. NULL names)."""

    async def _insert(name):
        async with engine.begin() as conn:
            await conn.execute(text("INSERT INTO fruit (name) VALUES (:name)"), {"name": name})

    return _insert
