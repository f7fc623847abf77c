"""Tests for the assignment rule engine."""

import asyncio
import datetime as dt

from rota.domain.entities import Employee, Location, RotaAssignment, Shift
from rota.engine.rules import AssignmentEngine, EngineContext, shared_secret_authorizer
from rota.services.calendar import week_days
from rota.store.entity_store import EntityStore, MutationState


def _run(coro):
    return asyncio.run(coro)


def _keys(store):
    return [a.key for a in store.assignments]


# -- default location ---------------------------------------------------------

def test_explicit_location_always_wins(engine):
    assert engine.resolve_default_location("l1", "e1") == "l1"
    assert engine.resolve_default_location("nowhere", "e1") == "nowhere"


def test_employee_default_location_used(engine):
    assert engine.resolve_default_location(None, "e1") == "l2"


def test_first_location_when_employee_has_no_default(engine):
    assert engine.resolve_default_location(None, "e2") == "l1"
    assert engine.resolve_default_location("", "unknown-employee") == "l1"


def test_empty_location_when_none_exist(employees, shifts):
    store = EntityStore()
    store.load([], employees, shifts, [])
    engine = AssignmentEngine(store, EngineContext(privileged=True))
    assert engine.resolve_default_location(None, "e2") == ""


# -- assign -------------------------------------------------------------------

def test_assign_creates_assignment_with_resolved_location(engine, store):
    created = _run(engine.assign("2024-01-01", "e1", "s1"))

    assert created is not None
    assert created.location_id == "l2"
    assert created.date == "2024-01-01"
    assert store.assignments == [created]


def test_assign_twice_keeps_one(engine, store):
    _run(engine.assign("2024-01-01", "e1", "s1"))
    second = _run(engine.assign("2024-01-01", "e1", "s1"))

    assert second is None
    assert _keys(store) == [("2024-01-01", "e1", "s1")]


def test_same_day_different_shift_allowed(engine, store):
    _run(engine.assign("2024-01-01", "e1", "s1"))
    _run(engine.assign("2024-01-01", "e1", "s3"))
    assert len(store.assignments) == 2


def test_assign_normalizes_date(engine, store):
    created = _run(engine.assign(dt.datetime(2024, 1, 1, 15, 30), "e1", "s1"))
    assert created.date == "2024-01-01"
    assert _run(engine.assign(dt.date(2024, 1, 1), "e1", "s1")) is None


def test_location_resolved_once_at_creation(engine, store, employees):
    created = _run(engine.assign("2024-01-01", "e1", "s1"))
    alice = employees[0]
    moved = Employee(id=alice.id, name=alice.name, role=alice.role,
                     category=alice.category, default_location_id="l1")
    _run(engine.update_employee(moved))

    assert store.get("employees", "e1").default_location_id == "l1"
    assert store.get("assignments", created.id).location_id == "l2"


def test_assign_on_unavailable_day_is_not_enforced(store):
    store.load(store.locations,
               [Employee(id="e3", name="Charlie", role="Junior", available_days=("Mon",))],
               store.shifts, [])
    engine = AssignmentEngine(store, EngineContext(privileged=True))

    assert not engine.is_available("e3", "2024-01-02")  # Tuesday
    assert _run(engine.assign("2024-01-02", "e3", "s1")) is not None


def test_concurrent_assigns_after_local_apply_keep_one(synced_store):
    engine = AssignmentEngine(synced_store, EngineContext(privileged=True))

    async def both():
        return await asyncio.gather(
            engine.assign("2024-01-01", "e1", "s1"),
            engine.assign("2024-01-01", "e1", "s1"),
        )

    first, second = _run(both())
    assert first is not None
    assert second is None
    assert len(synced_store.assignments) == 1


def test_assign_rolled_back_on_remote_failure(synced_store, backend):
    engine = AssignmentEngine(synced_store, EngineContext(privileged=True))
    before = synced_store.snapshot("assignments")
    backend.fail_writes = True

    assert _run(engine.assign("2024-01-01", "e1", "s1")) is None
    assert synced_store.snapshot("assignments") == before
    assert synced_store.history[-1].state is MutationState.ROLLED_BACK


# -- privilege gate -----------------------------------------------------------

def test_unprivileged_operations_are_no_ops(store):
    store.load(store.locations, store.employees, store.shifts, [
        RotaAssignment(id="a1", date="2024-01-01", employee_id="e1", shift_id="s1", location_id="l1"),
    ])
    engine = AssignmentEngine(store, EngineContext(privileged=False))
    before = {name: store.snapshot(name) for name in ("locations", "employees", "shifts", "assignments")}

    assert _run(engine.assign("2024-01-02", "e1", "s1")) is None
    assert _run(engine.remove("a1")) is None
    assert _run(engine.relocate("a1", "l2")) is None
    assert _run(engine.clear_range(["2024-01-01"])) == 0
    assert _run(engine.merge_generated([
        RotaAssignment(id="g1", date="2024-01-03", employee_id="e1", shift_id="s1", location_id="l1"),
    ])) is None
    assert _run(engine.add_location(Location(id="l9", name="New"))) is None
    assert _run(engine.remove_employee("e1")) is None

    after = {name: store.snapshot(name) for name in before}
    assert after == before
    assert store.history == []


# -- remove / relocate --------------------------------------------------------

def test_remove_existing_and_missing(engine, store):
    created = _run(engine.assign("2024-01-01", "e1", "s1"))
    assert _run(engine.remove("does-not-exist")) is None
    assert len(store.assignments) == 1

    mutation = _run(engine.remove(created.id))
    assert mutation.confirmed
    assert store.assignments == []


def test_relocate_changes_only_location(engine, store):
    created = _run(engine.assign("2024-01-01", "e1", "s1"))
    moved = _run(engine.relocate(created.id, "l1"))

    assert moved.location_id == "l1"
    assert (moved.id, moved.date, moved.employee_id, moved.shift_id) == (
        created.id, created.date, created.employee_id, created.shift_id
    )


def test_relocate_to_unknown_location_is_tolerated(engine, store):
    created = _run(engine.assign("2024-01-01", "e1", "s1"))
    moved = _run(engine.relocate(created.id, "ghost"))
    assert moved.location_id == "ghost"
    assert store.lookup_location("ghost").name == "Unknown"


def test_relocate_missing_assignment(engine):
    assert _run(engine.relocate("nope", "l1")) is None


# -- clear range --------------------------------------------------------------

def test_clear_week_removes_exactly_that_week(engine, store):
    week = [d.iso for d in week_days("2024-01-01")]
    for iso in week:
        _run(engine.assign(iso, "e1", "s1"))
    _run(engine.assign("2023-12-31", "e1", "s1"))
    _run(engine.assign("2024-01-08", "e1", "s1"))

    removed = _run(engine.clear_range(week))

    assert removed == 7
    assert sorted(a.date for a in store.assignments) == ["2023-12-31", "2024-01-08"]


def test_clear_week_requires_configured_phrase(store):
    engine = AssignmentEngine(
        store, EngineContext(privileged=True, authorize_clear=shared_secret_authorizer("clear it"))
    )
    _run(engine.assign("2024-01-02", "e1", "s1"))

    assert _run(engine.clear_week("2024-01-01")) == 0
    assert _run(engine.clear_week("2024-01-01", "wrong")) == 0
    assert len(store.assignments) == 1

    assert _run(engine.clear_week("2024-01-01", "clear it")) == 1
    assert store.assignments == []


def test_clear_range_rolled_back(synced_store, backend):
    engine = AssignmentEngine(synced_store, EngineContext(privileged=True))
    _run(engine.assign("2024-01-01", "e1", "s1"))
    before = synced_store.snapshot("assignments")
    backend.fail_writes = True

    assert _run(engine.clear_range(["2024-01-01"])) == 0
    assert synced_store.snapshot("assignments") == before


# -- merge generated ----------------------------------------------------------

def test_merge_skips_existing_but_not_in_batch_duplicates(engine, store):
    _run(engine.assign("2024-01-01", "e1", "s1"))
    batch = [
        RotaAssignment(id="g1", date="2024-01-01", employee_id="e1", shift_id="s1", location_id="l1"),
        RotaAssignment(id="g2", date="2024-01-02", employee_id="e2", shift_id="s2", location_id="l1"),
        RotaAssignment(id="g3", date="2024-01-02", employee_id="e2", shift_id="s2", location_id="l2"),
    ]

    mutation = _run(engine.merge_generated(batch))

    assert mutation.confirmed
    ids = [a.id for a in store.assignments]
    assert "g1" not in ids
    assert "g2" in ids and "g3" in ids


def test_merge_with_nothing_new(engine):
    _run(engine.assign("2024-01-01", "e1", "s1"))
    dup = RotaAssignment(id="g1", date="2024-01-01", employee_id="e1", shift_id="s1", location_id="l1")
    assert _run(engine.merge_generated([dup])) is None


# -- administration -----------------------------------------------------------

def test_removing_referenced_entities_does_not_cascade(engine, store):
    created = _run(engine.assign("2024-01-01", "e1", "s1"))
    _run(engine.remove_employee("e1"))
    _run(engine.remove_shift("s1"))
    _run(engine.remove_location("l2"))

    assert store.assignments == [created]
    assert store.lookup_employee("e1").name == "Unknown"
    assert store.lookup_shift("s1").name == "Unknown"
    assert store.lookup_location(created.location_id).name == "Unknown"


def test_add_and_update_reference_data(engine, store):
    assert _run(engine.add_location(Location(id="l3", name="CMRI"))).confirmed
    assert _run(engine.add_location(Location(id="l3", name="Again"))) is None
    _run(engine.update_location(Location(id="l3", name="CMRI Kolkata")))
    assert store.get("locations", "l3").name == "CMRI Kolkata"

    _run(engine.add_shift(Shift(id="s9", name="Night", start_time="22:00", end_time="06:00", hours=8)))
    _run(engine.update_shift(Shift(id="s9", name="Night", start_time="22:00", end_time="06:00", hours=7.5)))
    assert store.get("shifts", "s9").hours == 7.5

    _run(engine.add_employee(Employee(id="e9", name="Dana", role="Admin", category="Admin")))
    assert store.lookup_employee("e9").category.value == "Admin"
    assert _run(engine.update_employee(Employee(id="nobody", name="X", role="Y"))) is None
