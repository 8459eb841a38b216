"""ServiceContainer startup/shutdown and the full stack over a real engine."""

import pytest
from fastapi.testclient import TestClient

from fruitstand.api.main import create_app
from fruitstand.config.settings import Settings
from fruitstand.container.service_container import ServiceContainer
from fruitstand.core.exceptions import ServiceInitializationError
from fruitstand.core.fruit_repository import FruitRepository


def test_accessors_fail_before_initialize(settings):
    container = ServiceContainer(settings)
    assert not container.initialized
    with pytest.raises(RuntimeError):
        container.get_repository()
    with pytest.raises(RuntimeError):
        container.get_engine()


@pytest.mark.asyncio
async def test_initialize_with_injected_engine(settings, engine):
    container = ServiceContainer(settings, engine=engine)
    await container.initialize()

    assert container.initialized
    assert container.get_engine() is engine
    assert isinstance(container.get_repository(), FruitRepository)

    await container.shutdown()
    assert not container.initialized
    # Injected engine stays usable for its owner.
    async with engine.connect():
        pass


@pytest.mark.asyncio
async def test_unreachable_database_fails_startup(tmp_path):
    missing = tmp_path / "no" / "such" / "dir" / "fruit.db"
    settings = Settings(DATABASE_URL=f"sqlite+aiosqlite:///{missing}")
    container = ServiceContainer(settings)

    with pytest.raises(ServiceInitializationError) as exc_info:
        await container.initialize()
    assert exc_info.value.message.startswith("Failed to connect to database")
    assert not container.initialized

    await container.shutdown()


def test_full_stack_round_trip(sqlite_path):
    settings = Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{sqlite_path}",
        request_timeout=2.0,
    )
    with TestClient(create_app(settings=settings)) as client:
        assert client.get("/api/v1/fruits").json() == {"fruits": []}

        resp = client.post("/api/v1/fruits", content=b"durian")
        assert resp.status_code == 200
        assert resp.text == "ok"

        fruits = client.get("/api/v1/fruits").json()["fruits"]
        assert [f["name"] for f in fruits] == ["durian"]

        resp = client.get(f"/api/v1/fruits/{fruits[0]['id']}")
        assert resp.json() == {"id": fruits[0]["id"], "name": "durian"}

        resp = client.get("/api/v1/fruits/424242")
        assert resp.status_code == 500
        assert resp.text == "no rows in result set"

