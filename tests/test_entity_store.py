"""Tests for the entity store and its optimistic synchronisation protocol."""

import asyncio

import pytest

from rota.domain.entities import Location, RotaAssignment, Unresolved
from rota.store.backend import SqlAlchemyBackend
from rota.store.entity_store import EntityStore, Mutation, MutationState

from conftest import FakeBackend


def _assignment(id, date="2024-01-01"):
    return RotaAssignment(id=id, date=date, employee_id="e1", shift_id="s1", location_id="l1")


def test_bootstrap_without_backend_uses_demo_data():
    store = EntityStore()
    asyncio.run(store.bootstrap())

    assert store.local_only
    assert [l.name for l in store.locations] == ["HO", "Fortis", "CMRI", "Manipal Saltlake"]
    assert len(store.employees) == 3
    assert len(store.shifts) == 3
    assert store.assignments == []


def test_bootstrap_falls_back_when_backend_unreachable(backend):
    backend.fail_reads = True
    store = EntityStore(backend)
    asyncio.run(store.bootstrap())

    assert store.local_only
    assert len(store.locations) == 4

    # Local-only mutations never reach the backend
    asyncio.run(store.insert("assignments", [_assignment("a1")]))
    assert backend.calls == []
    assert store.history[-1].state is MutationState.CONFIRMED


def test_bootstrap_reads_all_collections(synced_store, locations, employees, shifts):
    assert not synced_store.local_only
    assert synced_store.locations == locations
    assert synced_store.employees == employees
    assert synced_store.shifts == shifts


def test_confirmed_insert(synced_store, backend):
    mutation = asyncio.run(synced_store.insert("assignments", [_assignment("a1")]))

    assert mutation.state is MutationState.CONFIRMED
    assert [a.id for a in synced_store.assignments] == ["a1"]
    assert backend.calls == [("insert", "assignments", ["a1"])]


@pytest.mark.parametrize("operation", ["insert", "delete", "replace", "clear"])
def test_failed_confirm_restores_snapshot(synced_store, backend, operation):
    synced_store.load(
        synced_store.locations,
        synced_store.employees,
        synced_store.shifts,
        [_assignment("a1"), _assignment("a2", "2024-01-02")],
    )
    before = synced_store.snapshot("assignments")
    backend.fail_writes = True

    if operation == "insert":
        coro = synced_store.insert("assignments", [_assignment("a3")])
    elif operation == "delete":
        coro = synced_store.delete("assignments", "a1")
    elif operation == "replace":
        moved = RotaAssignment(id="a1", date="2024-01-01", employee_id="e1", shift_id="s1", location_id="l2")
        coro = synced_store.replace("assignments", moved, fields=["location_id"])
    else:
        coro = synced_store.delete_assignment_dates({"2024-01-01", "2024-01-02"})
    mutation = asyncio.run(coro)

    assert mutation.state is MutationState.ROLLED_BACK
    assert synced_store.snapshot("assignments") == before
    assert mutation.snapshot == before
    assert len(synced_store.notices) == 1


def test_rollback_only_touches_affected_collection(synced_store, backend):
    locations_before = synced_store.snapshot("locations")
    backend.fail_writes = True
    asyncio.run(synced_store.insert("locations", [Location(id="l9", name="New")]))
    assert synced_store.snapshot("locations") == locations_before
    assert synced_store.snapshot("employees") != {}


def test_replace_sends_only_requested_fields(synced_store, backend):
    synced_store.load(synced_store.locations, synced_store.employees, synced_store.shifts, [_assignment("a1")])
    moved = RotaAssignment(id="a1", date="2024-01-01", employee_id="e1", shift_id="s1", location_id="l2")
    asyncio.run(synced_store.replace("assignments", moved, fields=["location_id"]))

    assert backend.calls == [("update", "assignments", "a1", {"location_id": "l2"})]
    assert synced_store.get("assignments", "a1").location_id == "l2"


def test_lookup_returns_unresolved_for_dangling_ids(store):
    assert store.lookup_employee("e1").name == "Alice Johnson"
    missing = store.lookup_shift("nope")
    assert isinstance(missing, Unresolved)
    assert missing.kind == "shift"
    assert store.lookup_location(None).name == "Unknown"


def test_mutation_state_machine_rejects_second_transition():
    mutation = Mutation(collection="assignments", action="insert", snapshot={})
    mutation.confirm()
    with pytest.raises(RuntimeError):
        mutation.roll_back("late failure")


def test_seed_writes_demo_data_through_backend():
    backend = FakeBackend()
    store = EntityStore(backend)
    asyncio.run(store.bootstrap())
    assert not store.local_only
    assert store.locations == []

    mutations = asyncio.run(store.seed())
    assert all(m.confirmed for m in mutations)
    assert len(backend.data["locations"]) == 4
    assert len(store.employees) == 3


def test_rollback_against_real_database():
    backend = SqlAlchemyBackend("sqlite:///:memory:")
    store = EntityStore(backend)
    asyncio.run(store.bootstrap())

    # Row exists remotely but not in the local snapshot
    asyncio.run(backend.insert("locations", [Location(id="l1", name="HO")]))

    mutation = asyncio.run(store.insert("locations", [Location(id="l1", name="Clash")]))
    assert mutation.state is MutationState.ROLLED_BACK
    assert store.locations == []
    assert store.notices


def test_unopenable_database_falls_back_to_demo_data(tmp_path):
    missing_dir = tmp_path / "does-not-exist"
    store = EntityStore(SqlAlchemyBackend(f"sqlite:///{missing_dir / 'rota.db'}"))
    asyncio.run(store.bootstrap())

    assert store.local_only
    assert len(store.locations) == 4
    assert not missing_dir.exists()
