"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel.pool import StaticPool

from datepoll.core.database import build_engine
from datepoll.core.dependencies import get_event_service, get_sweeper
from datepoll.main import app
from datepoll.poll.service import EventService
from datepoll.poll.sweeper import ExpirySweeper
from datepoll.storage import (
    MemoryEventStore,
    MemoryResponseStore,
    SqlEventStore,
    SqlResponseStore,
    Storage,
)

NOW = datetime(2024, 1, 5, 12, 0, tzinfo=UTC)


class FrozenClock:
    """A clock tests can move by hand."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(name="clock")
def clock_fixture() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    yield engine
    engine.dispose()


@pytest.fixture(name="sql_storage")
def sql_storage_fixture(engine) -> Storage:
    storage = Storage(events=SqlEventStore(engine), responses=SqlResponseStore(engine))
    storage.open()
    return storage


@pytest.fixture(name="memory_storage")
def memory_storage_fixture() -> Storage:
    storage = Storage(events=MemoryEventStore(), responses=MemoryResponseStore())
    storage.open()
    yield storage
    storage.close()


@pytest.fixture(name="storage", params=["memory", "sql"])
def storage_fixture(request) -> Storage:
    """Run a test once against each storage backend."""
    return request.getfixturevalue(f"{request.param}_storage")


@pytest.fixture(name="service")
def service_fixture(storage: Storage, clock: FrozenClock) -> EventService:
    return EventService(storage.events, storage.responses, clock=clock)


@pytest.fixture(name="sweeper")
def sweeper_fixture(storage: Storage, clock: FrozenClock) -> ExpirySweeper:
    return ExpirySweeper(storage.events, storage.responses, clock=clock)


@pytest.fixture(name="client")
def client_fixture(service: EventService, sweeper: ExpirySweeper):
    """Create a test client wired to the test service and sweeper."""
    app.dependency_overrides[get_event_service] = lambda: service
    app.dependency_overrides[get_sweeper] = lambda: sweeper
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="sample_event")
def sample_event_fixture(service: EventService):
    """An open poll with two candidate dates."""
    return service.create_event(
        title="Team Dinner",
        description="Somewhere central",
        organizer="Alice",
        dates=[
            datetime(2024, 1, 10, 19, 0, tzinfo=UTC),
            datetime(2024, 1, 11, 19, 0, tzinfo=UTC),
        ],
        deadline=datetime(2024, 1, 8, 0, 0, tzinfo=UTC),
    )
