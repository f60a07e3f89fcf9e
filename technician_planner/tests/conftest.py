"""Shared fixtures: in-memory app, session, and HTTP clients."""

from datetime import datetime, timezone

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from technician_planner.client import TaskClient
from technician_planner.config import ClientSettings, Settings
from technician_planner.database import create_db_and_tables, get_session
from technician_planner.main import create_app


def utc(hour: int, minute: int = 0, day: int = 1) -> datetime:
    return datetime(2024, 1, day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(name="settings")
def settings_fixture():
    return Settings(database_url="sqlite://", allowed_origins=("http://localhost:4200",))


@pytest.fixture(name="app")
def app_fixture(settings: Settings):
    """App backed by a fresh in-memory database."""
    app = create_app(settings)
    create_db_and_tables(app.state.engine)
    yield app
    app.state.engine.dispose()


@pytest.fixture(name="session")
def session_fixture(app):
    with Session(app.state.engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(app, session: Session):
    """Create a test client with overridden database session."""
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="task_client")
async def task_client_fixture(app):
    """TaskClient talking to the in-process app over ASGI."""
    transport = httpx.ASGITransport(app=app)
    client = TaskClient(ClientSettings(base_url="http://testserver/api"), transport=transport)
    yield client
    await client.aclose()
