"""Bulk generation adapter: merges externally proposed assignments into the store."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Protocol

from rota.domain.entities import Employee, Location, RotaAssignment, Shift, to_payload
from rota.exceptions import GenerationError
from rota.services.calendar import to_day, week_days

from .rules import AssignmentEngine


@dataclass(frozen=True)
class Proposal:
    """An assignment proposed by a generator, already location-resolved."""

    date: str
    employee_id: str
    shift_id: str
    location_id: str


@dataclass
class GenerationRequest:
    employees: List[Employee]
    shifts: List[Shift]
    locations: List[Location]
    constraints: str
    week_start: str  # YYYY-MM-DD

    @property
    def dates(self) -> List[str]:
        return [d.iso for d in week_days(self.week_start)]

    def to_payload(self) -> Dict[str, Any]:
        """camelCase request body for remote generators."""
        return {
            "employees": [to_payload(e) for e in self.employees],
            "shifts": [to_payload(s) for s in self.shifts],
            "locations": [to_payload(loc) for loc in self.locations],
            "freeTextConstraints": self.constraints,
            "weekStartDate": self.week_start,
            "weekDates": self.dates,
        }


class Generator(Protocol):
    async def generate(self, request: GenerationRequest) -> List[Proposal]:
        ...


def new_generated_id() -> str:
    return f"auto-{uuid.uuid4().hex[:12]}"


class BulkGenerationAdapter:
    """Runs a generator for one week and merges its proposals through the engine."""

    def __init__(self, engine: AssignmentEngine, generator: Generator):
        self.engine = engine
        self.generator = generator

    def build_request(self, constraints: str, week_start) -> GenerationRequest:
        store = self.engine.store
        return GenerationRequest(
            employees=store.employees,
            shifts=store.shifts,
            locations=store.locations,
            constraints=constraints or "",
            week_start=to_day(week_start).isoformat(),
        )

    async def generate_week(self, constraints: str, week_start) -> List[RotaAssignment]:
        """Generate and merge a week of assignments.

        Returns the assignments that were added. Nothing is added when the
        caller is not privileged or every proposal duplicates an existing
        assignment.

        Raises:
            GenerationError: If the generator fails or the batch is rolled back
        """
        if not self.engine.context.privileged:
            return []

        request = self.build_request(constraints, week_start)
        try:
            proposals = await self.generator.generate(request)
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"Generation failed: {e}") from e

        try:
            candidates = [
                RotaAssignment(
                    id=new_generated_id(),
                    date=to_day(p.date).isoformat(),
                    employee_id=p.employee_id,
                    shift_id=p.shift_id,
                    location_id=p.location_id,
                )
                for p in proposals
            ]
        except (AttributeError, TypeError, ValueError) as e:
            raise GenerationError(f"Invalid proposal: {e}") from e
        mutation = await self.engine.merge_generated(candidates)
        if mutation is None:
            return []
        if not mutation.confirmed:
            raise GenerationError(f"Generated rota could not be saved: {mutation.error}")
        ids = {c.id for c in candidates}
        return [a for a in self.engine.store.assignments if a.id in ids]
