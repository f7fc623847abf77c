"""Assignment rules: default location, duplicate rejection and the mutation operations.

Rejections (missing privilege, duplicate assignment, unauthorised clear) are
silent no-ops: the operation returns None or 0 and the store is untouched.
"""

from __future__ import annotations

import functools
import hmac
import uuid
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Optional

from rota.domain.entities import DAYS_OF_WEEK, Employee, Location, RotaAssignment, Shift
from rota.services.calendar import to_day, week_days
from rota.store.entity_store import EntityStore, Mutation

ClearAuthorizer = Callable[[Optional[str]], bool]


def allow_privileged(confirmation: Optional[str]) -> bool:
    """Default clear authorisation: privilege alone is enough."""
    return True


def shared_secret_authorizer(secret: str) -> ClearAuthorizer:
    """Require the caller to re-enter a configured phrase before a bulk clear.

    This is a confirmation step for an administrator, not an access control.
    """

    def authorize(confirmation: Optional[str]) -> bool:
        if confirmation is None:
            return False
        return hmac.compare_digest(confirmation.encode("utf-8"), secret.encode("utf-8"))

    return authorize


@dataclass
class EngineContext:
    privileged: bool = False
    authorize_clear: ClearAuthorizer = allow_privileged


def new_assignment_id() -> str:
    return uuid.uuid4().hex[:12]


def _requires_privilege(default=None):
    def decorator(method):
        @functools.wraps(method)
        async def wrapper(self, *args, **kwargs):
            if not self.context.privileged:
                return default
            return await method(self, *args, **kwargs)

        return wrapper

    return decorator


class AssignmentEngine:
    """Validates and defaults assignment operations before they reach the store."""

    def __init__(self, store: EntityStore, context: Optional[EngineContext] = None):
        self.store = store
        self.context = context or EngineContext()

    # -- rules -------------------------------------------------------------

    def resolve_default_location(self, explicit_location_id: Optional[str], employee_id: str) -> str:
        """Explicit location, else the employee's default, else the first location, else ""."""
        if explicit_location_id:
            return explicit_location_id
        employee = self.store.get("employees", employee_id)
        if employee is not None and employee.default_location_id:
            return employee.default_location_id
        locations = self.store.locations
        return locations[0].id if locations else ""

    def exists(self, date: str, employee_id: str, shift_id: str) -> bool:
        key = (date, employee_id, shift_id)
        return any(a.key == key for a in self.store.assignments)

    def is_available(self, employee_id: str, date) -> bool:
        """Advisory: whether the date falls on one of the employee's available days."""
        employee = self.store.get("employees", employee_id)
        if employee is None:
            return False
        return employee.works_on(DAYS_OF_WEEK[to_day(date).weekday()])

    # -- assignments -------------------------------------------------------

    @_requires_privilege()
    async def assign(
        self,
        date,
        employee_id: str,
        shift_id: str,
        location_id: Optional[str] = None,
    ) -> Optional[RotaAssignment]:
        """Book an employee on a shift; no-op if the (date, employee, shift) triple exists.

        The duplicate check only sees the local snapshot at call time.
        """
        day = to_day(date).isoformat()
        if self.exists(day, employee_id, shift_id):
            return None

        assignment = RotaAssignment(
            id=new_assignment_id(),
            date=day,
            employee_id=employee_id,
            shift_id=shift_id,
            location_id=self.resolve_default_location(location_id, employee_id),
        )
        mutation = await self.store.insert("assignments", [assignment])
        return assignment if mutation.confirmed else None

    @_requires_privilege()
    async def remove(self, assignment_id: str) -> Optional[Mutation]:
        if self.store.get("assignments", assignment_id) is None:
            return None
        return await self.store.delete("assignments", assignment_id)

    @_requires_privilege()
    async def relocate(self, assignment_id: str, new_location_id: str) -> Optional[RotaAssignment]:
        """Change only the location of an assignment; the location is not validated."""
        current = self.store.get("assignments", assignment_id)
        if current is None:
            return None
        moved = replace(current, location_id=new_location_id)
        mutation = await self.store.replace("assignments", moved, fields=["location_id"])
        return moved if mutation.confirmed else None

    @_requires_privilege(default=0)
    async def clear_range(self, dates: Iterable[str], confirmation: Optional[str] = None) -> int:
        """Remove every assignment whose date is in dates. Returns how many were removed."""
        if not self.context.authorize_clear(confirmation):
            return 0
        dates = {to_day(d).isoformat() for d in dates}
        doomed = [a for a in self.store.assignments if a.date in dates]
        if not doomed:
            return 0
        mutation = await self.store.delete_assignment_dates(dates)
        return len(doomed) if mutation.confirmed else 0

    async def clear_week(self, start, confirmation: Optional[str] = None) -> int:
        return await self.clear_range([d.iso for d in week_days(start)], confirmation)

    @_requires_privilege()
    async def merge_generated(self, candidates: Iterable[RotaAssignment]) -> Optional[Mutation]:
        """Append a generated batch as one mutation.

        Candidates are checked against the assignments that existed before the
        batch only, not against each other.
        """
        existing = {a.key for a in self.store.assignments}
        accepted = [c for c in candidates if c.key not in existing]
        if not accepted:
            return None
        return await self.store.insert("assignments", accepted)

    # -- administration ----------------------------------------------------

    async def _add(self, collection: str, entity) -> Optional[Mutation]:
        if self.store.get(collection, entity.id) is not None:
            return None
        return await self.store.insert(collection, [entity])

    async def _update(self, collection: str, entity) -> Optional[Mutation]:
        if self.store.get(collection, entity.id) is None:
            return None
        return await self.store.replace(collection, entity)

    async def _remove(self, collection: str, entity_id: str) -> Optional[Mutation]:
        if self.store.get(collection, entity_id) is None:
            return None
        return await self.store.delete(collection, entity_id)

    @_requires_privilege()
    async def add_employee(self, employee: Employee) -> Optional[Mutation]:
        return await self._add("employees", employee)

    @_requires_privilege()
    async def update_employee(self, employee: Employee) -> Optional[Mutation]:
        """Existing assignments keep the location they were created with."""
        return await self._update("employees", employee)

    @_requires_privilege()
    async def remove_employee(self, employee_id: str) -> Optional[Mutation]:
        return await self._remove("employees", employee_id)

    @_requires_privilege()
    async def add_shift(self, shift: Shift) -> Optional[Mutation]:
        return await self._add("shifts", shift)

    @_requires_privilege()
    async def update_shift(self, shift: Shift) -> Optional[Mutation]:
        return await self._update("shifts", shift)

    @_requires_privilege()
    async def remove_shift(self, shift_id: str) -> Optional[Mutation]:
        return await self._remove("shifts", shift_id)

    @_requires_privilege()
    async def add_location(self, location: Location) -> Optional[Mutation]:
        return await self._add("locations", location)

    @_requires_privilege()
    async def update_location(self, location: Location) -> Optional[Mutation]:
        return await self._update("locations", location)

    @_requires_privilege()
    async def remove_location(self, location_id: str) -> Optional[Mutation]:
        return await self._remove("locations", location_id)