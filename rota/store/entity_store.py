"""In-memory entity store with optimistic synchronisation.

Each mutation is applied locally first, then mirrored to the persistence
backend. If the backend rejects it, the affected collection is restored to
the snapshot taken just before the local apply.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from rota.domain.entities import Employee, Location, RotaAssignment, Shift, Unresolved
from rota.domain.models import entity_to_row
from rota.domain.seed import initial_employees, initial_locations, initial_shifts
from rota.exceptions import PersistenceError

from .backend import PersistenceBackend

COLLECTIONS = ("locations", "employees", "shifts", "assignments")


class MutationState(str, Enum):
    APPLIED = "applied"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


@dataclass
class Mutation:
    """One optimistic operation: APPLIED -> CONFIRMED | ROLLED_BACK."""

    collection: str
    action: str
    snapshot: Dict[str, Any]
    state: MutationState = MutationState.APPLIED
    error: Optional[str] = None

    def confirm(self) -> None:
        if self.state is not MutationState.APPLIED:
            raise RuntimeError(f"Cannot confirm a {self.state.value} mutation")
        self.state = MutationState.CONFIRMED

    def roll_back(self, error: str) -> None:
        if self.state is not MutationState.APPLIED:
            raise RuntimeError(f"Cannot roll back a {self.state.value} mutation")
        self.state = MutationState.ROLLED_BACK
        self.error = error

    @property
    def confirmed(self) -> bool:
        return self.state is MutationState.CONFIRMED


class EntityStore:
    """Single owner of the locations, employees, shifts and assignments collections.

    Collections are dicts keyed by identity, in insertion order. Passing no
    backend runs the store in local-only mode where every mutation is
    confirmed immediately.
    """

    def __init__(self, backend: Optional[PersistenceBackend] = None):
        self.backend = backend
        self.local_only = backend is None
        self._collections: Dict[str, Dict[str, Any]] = {name: {} for name in COLLECTIONS}
        self.history: List[Mutation] = []
        self.notices: List[str] = []

    # -- reads -------------------------------------------------------------

    @property
    def locations(self) -> List[Location]:
        return list(self._collections["locations"].values())

    @property
    def employees(self) -> List[Employee]:
        return list(self._collections["employees"].values())

    @property
    def shifts(self) -> List[Shift]:
        return list(self._collections["shifts"].values())

    @property
    def assignments(self) -> List[RotaAssignment]:
        return list(self._collections["assignments"].values())

    def snapshot(self, collection: str) -> Dict[str, Any]:
        return dict(self._collections[collection])

    def get(self, collection: str, entity_id: str) -> Optional[Any]:
        return self._collections[collection].get(entity_id)

    def _lookup(self, collection: str, kind: str, entity_id: Optional[str]):
        found = self._collections[collection].get(entity_id or "")
        return found if found is not None else Unresolved(kind, entity_id or "")

    def lookup_location(self, location_id: Optional[str]) -> "Location | Unresolved":
        return self._lookup("locations", "location", location_id)

    def lookup_employee(self, employee_id: Optional[str]) -> "Employee | Unresolved":
        return self._lookup("employees", "employee", employee_id)

    def lookup_shift(self, shift_id: Optional[str]) -> "Shift | Unresolved":
        return self._lookup("shifts", "shift", shift_id)

    # -- loading -----------------------------------------------------------

    def load(
        self,
        locations: Iterable[Location] = (),
        employees: Iterable[Employee] = (),
        shifts: Iterable[Shift] = (),
        assignments: Iterable[RotaAssignment] = (),
    ) -> None:
        """Replace every collection wholesale."""
        for name, items in zip(COLLECTIONS, (locations, employees, shifts, assignments)):
            self._collections[name] = {item.id: item for item in items}

    def load_demo_data(self) -> None:
        self.load(initial_locations(), initial_employees(), initial_shifts(), [])

    async def bootstrap(self) -> None:
        """Full read of all collections, falling back to demo data when unreachable."""
        if self.backend is None:
            print("[INFO] No persistence configured; running in local-only mode with demo data")
            self.local_only = True
            self.load_demo_data()
            return

        try:
            loaded = {name: await self.backend.select_all(name) for name in COLLECTIONS}
        except PersistenceError as e:
            print(f"[WARN] Persistence unreachable ({e}); running in local-only mode with demo data")
            self.local_only = True
            self.load_demo_data()
            return

        self.local_only = False
        self.load(**loaded)
        print(
            f"[INFO] Loaded {len(self.locations)} locations, {len(self.employees)} employees, "
            f"{len(self.shifts)} shifts, {len(self.assignments)} assignments"
        )

    async def seed(self) -> List[Mutation]:
        """Write the built-in locations, employees and shifts through the store."""
        mutations = [
            await self.insert("locations", initial_locations()),
            await self.insert("employees", initial_employees()),
            await self.insert("shifts", initial_shifts()),
        ]
        return mutations

    # -- optimistic protocol -----------------------------------------------

    async def apply(
        self,
        collection: str,
        action: str,
        mutate: Callable[[Dict[str, Any]], None],
        remote: Callable[[PersistenceBackend], Awaitable[None]],
    ) -> Mutation:
        """Apply mutate locally, then confirm remotely or restore the snapshot."""
        snapshot = self.snapshot(collection)
        mutation = Mutation(collection=collection, action=action, snapshot=snapshot)
        self.history.append(mutation)

        working = dict(snapshot)
        mutate(working)
        self._collections[collection] = working

        if self.local_only:
            mutation.confirm()
            return mutation

        try:
            await remote(self.backend)
        except PersistenceError as e:
            self._collections[collection] = dict(mutation.snapshot)
            mutation.roll_back(str(e))
            notice = f"Could not save {action} on {collection}: {e}"
            self.notices.append(notice)
            print(f"[WARN] {notice}; local changes rolled back")
        else:
            mutation.confirm()
        return mutation

    async def insert(self, collection: str, entities: List[Any]) -> Mutation:
        entities = list(entities)

        def mutate(items: Dict[str, Any]) -> None:
            for entity in entities:
                items[entity.id] = entity

        return await self.apply(
            collection, "insert", mutate, lambda backend: backend.insert(collection, entities)
        )

    async def replace(self, collection: str, entity: Any, fields: Optional[List[str]] = None) -> Mutation:
        """Overwrite an entity by identity; remote update sends fields (default: all columns)."""
        values = entity_to_row(entity)
        if fields is not None:
            values = {k: v for k, v in values.items() if k in fields}

        def mutate(items: Dict[str, Any]) -> None:
            if entity.id in items:
                items[entity.id] = entity

        return await self.apply(
            collection, "update", mutate, lambda backend: backend.update(collection, entity.id, values)
        )

    async def delete(self, collection: str, entity_id: str) -> Mutation:
        def mutate(items: Dict[str, Any]) -> None:
            items.pop(entity_id, None)

        return await self.apply(
            collection, "delete", mutate, lambda backend: backend.delete(collection, entity_id)
        )

    async def delete_assignment_dates(self, dates: Iterable[str]) -> Mutation:
        dates = set(dates)

        def mutate(items: Dict[str, Any]) -> None:
            for key in [k for k, a in items.items() if a.date in dates]:
                del items[key]

        return await self.apply(
            "assignments", "clear", mutate, lambda backend: backend.delete_dates(sorted(dates))
        )
