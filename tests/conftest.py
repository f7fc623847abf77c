"""Pytest configuration and shared fixtures."""

import asyncio
from typing import Any, Dict, List

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from rota.domain.entities import Employee, EmployeeCategory, Location, Shift
from rota.domain.models import Base
from rota.engine.rules import AssignmentEngine, EngineContext
from rota.exceptions import PersistenceError
from rota.store.entity_store import COLLECTIONS, EntityStore


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


class FakeBackend:
    """In-memory persistence collaborator that can be told to reject writes."""

    def __init__(self, data: Dict[str, List[Any]] | None = None):
        self.data = {name: list((data or {}).get(name, [])) for name in COLLECTIONS}
        self.fail_writes = False
        self.fail_reads = False
        self.calls: List[tuple] = []

    def _write(self, *call) -> None:
        self.calls.append(call)
        if self.fail_writes:
            raise PersistenceError("backend rejected the write")

    async def select_all(self, collection):
        if self.fail_reads:
            raise PersistenceError("backend unreachable")
        return list(self.data[collection])

    async def insert(self, collection, entities):
        self._write("insert", collection, [e.id for e in entities])
        self.data[collection].extend(entities)

    async def update(self, collection, entity_id, values):
        self._write("update", collection, entity_id, dict(values))

    async def delete(self, collection, entity_id):
        self._write("delete", collection, entity_id)
        self.data[collection] = [e for e in self.data[collection] if e.id != entity_id]

    async def delete_dates(self, dates):
        dates = list(dates)
        self._write("delete_dates", dates)
        self.data["assignments"] = [a for a in self.data["assignments"] if a.date not in dates]


@pytest.fixture
def db_session():
    """Create in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def locations():
    return [
        Location(id="l1", name="HO"),
        Location(id="l2", name="Fortis"),
    ]


@pytest.fixture
def employees():
    return [
        Employee(id="e1", name="Alice Johnson", role="Manager",
                 category=EmployeeCategory.AUDIOLOGIST, default_location_id="l2", preferred_hours=40),
        Employee(id="e2", name="Bob Smith", role="Assistant",
                 category=EmployeeCategory.SUPPORT_STAFF, preferred_hours=30),
    ]


@pytest.fixture
def shifts():
    return [
        Shift(id="s1", name="Morning", start_time="06:00", end_time="14:00", hours=8),
        Shift(id="s2", name="Day", start_time="09:00", end_time="17:00", hours=8),
        Shift(id="s3", name="Half", start_time="13:00", end_time="17:00", hours=4),
    ]


@pytest.fixture
def store(locations, employees, shifts):
    """Local-only store preloaded with the fixture reference data."""
    s = EntityStore()
    s.load(locations, employees, shifts, [])
    return s


@pytest.fixture
def engine(store):
    return AssignmentEngine(store, EngineContext(privileged=True))


@pytest.fixture
def backend(locations, employees, shifts):
    return FakeBackend({"locations": locations, "employees": employees, "shifts": shifts})


@pytest.fixture
def synced_store(backend):
    """Store bootstrapped from a FakeBackend (remote confirm enabled)."""
    s = EntityStore(backend)
    asyncio.run(s.bootstrap())
    return s