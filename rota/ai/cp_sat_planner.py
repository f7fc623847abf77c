"""CP-SAT planner that proposes a week of assignments."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from ortools.sat.python import cp_model

from rota.config import PlannerConfig
from rota.domain.entities import Employee, Location, Shift
from rota.engine.bulk import GenerationRequest, Proposal
from rota.exceptions import GenerationError
from rota.services.calendar import week_days

Key = Tuple[str, str, str]  # (date, employee_id, shift_id)


class CPSatPlanner:
    """
    CP-SAT based generator for one week of assignments.

    Uses Google OR-Tools CP-SAT solver to maximise:
    - Coverage: every (date, shift) slot staffed by at least one employee
    - Hours: employees filled up towards their preferred weekly hours

    Hard constraints:
    - At most one shift per employee per day
    - Only on the employee's available days
    - Weekly hours never above the employee's preferred hours

    The free-text constraints of the request are not interpreted.
    """

    def __init__(self, cfg: Optional[PlannerConfig] = None):
        self.cfg = cfg or PlannerConfig()

    async def generate(self, request: GenerationRequest) -> List[Proposal]:
        return await asyncio.to_thread(self.solve, request)

    def solve(self, request: GenerationRequest) -> List[Proposal]:
        """
        Build and solve the model for the request's week.

        Raises:
            GenerationError: If there is nothing to schedule or the solver fails
        """
        print(f"[INFO] CP-SAT Planner: Building rota for week of {request.week_start}")
        if request.constraints:
            print(f"[INFO] Constraint notes (not interpreted): {request.constraints}")

        if not request.employees:
            raise GenerationError("No employees available")
        if not request.shifts:
            raise GenerationError("No shifts defined")

        model = cp_model.CpModel()
        days = week_days(request.week_start)
        assign_vars = self._create_variables(model, request.employees, request.shifts, days)

        self._add_one_shift_per_day_constraints(model, assign_vars)
        self._add_hours_constraints(model, assign_vars, request.employees, request.shifts)
        self._build_objective(model, assign_vars, request.shifts)

        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = float(self.cfg.time_limit_seconds)
        solver.parameters.num_search_workers = int(self.cfg.num_workers)

        print("[INFO] Solving CP-SAT model...")
        status = solver.Solve(model)

        if status == cp_model.OPTIMAL or status == cp_model.FEASIBLE:
            print(f"[OK] Solution found (status: {self._status_name(status)})")
            proposals = self._extract_solution(solver, assign_vars, request.employees, request.locations)
            print(f"[OK] Proposed {len(proposals)} assignments")
            return proposals
        raise GenerationError(
            f"CP-SAT solver failed to find solution (status: {self._status_name(status)})"
        )

    def _create_variables(
        self,
        model: cp_model.CpModel,
        employees: List[Employee],
        shifts: List[Shift],
        days,
    ) -> Dict[Key, cp_model.IntVar]:
        """One BoolVar per (date, employee, shift), only on the employee's available days."""
        assign_vars: Dict[Key, cp_model.IntVar] = {}
        for day in days:
            for emp in employees:
                if not emp.works_on(day.weekday):
                    continue
                for shift in shifts:
                    assign_vars[(day.iso, emp.id, shift.id)] = model.NewBoolVar(
                        f"assign_{day.iso}_e{emp.id}_s{shift.id}"
                    )
        return assign_vars

    def _add_one_shift_per_day_constraints(
        self,
        model: cp_model.CpModel,
        assign_vars: Dict[Key, cp_model.IntVar],
    ) -> None:
        by_emp_day = defaultdict(list)
        for (day, emp_id, _), var in assign_vars.items():
            by_emp_day[(emp_id, day)].append(var)
        for day_vars in by_emp_day.values():
            if len(day_vars) > 1:
                model.Add(sum(day_vars) <= 1)

    def _add_hours_constraints(
        self,
        model: cp_model.CpModel,
        assign_vars: Dict[Key, cp_model.IntVar],
        employees: List[Employee],
        shifts: List[Shift],
    ) -> None:
        """Weekly hours (in tenths) at or below preferred hours."""
        shift_hours = {s.id: self._tenths(s.hours) for s in shifts}
        for emp in employees:
            terms = [
                var * shift_hours[shift_id]
                for (_, emp_id, shift_id), var in assign_vars.items()
                if emp_id == emp.id
            ]
            if terms:
                model.Add(sum(terms) <= self._tenths(emp.preferred_hours))

    def _build_objective(
        self,
        model: cp_model.CpModel,
        assign_vars: Dict[Key, cp_model.IntVar],
        shifts: List[Shift],
    ) -> None:
        shift_hours = {s.id: self._tenths(s.hours) for s in shifts}
        by_slot = defaultdict(list)
        for (day, _, shift_id), var in assign_vars.items():
            by_slot[(day, shift_id)].append(var)

        objective_terms = []
        for (day, shift_id), slot_vars in by_slot.items():
            covered = model.NewBoolVar(f"covered_{day}_s{shift_id}")
            model.Add(covered <= sum(slot_vars))
            objective_terms.append(covered * int(self.cfg.coverage_weight))

        for (_, _, shift_id), var in assign_vars.items():
            objective_terms.append(var * shift_hours[shift_id] * int(self.cfg.hours_weight))

        model.Maximize(sum(objective_terms))

    def _extract_solution(
        self,
        solver: cp_model.CpSolver,
        assign_vars: Dict[Key, cp_model.IntVar],
        employees: List[Employee],
        locations: List[Location],
    ) -> List[Proposal]:
        employees_dict = {emp.id: emp for emp in employees}
        fallback = locations[0].id if locations else ""

        proposals = []
        for key in sorted(assign_vars):
            if solver.Value(assign_vars[key]) != 1:
                continue
            day, emp_id, shift_id = key
            emp = employees_dict[emp_id]
            proposals.append(
                Proposal(
                    date=day,
                    employee_id=emp_id,
                    shift_id=shift_id,
                    location_id=emp.default_location_id or fallback,
                )
            )
        return proposals

    @staticmethod
    def _tenths(hours: float) -> int:
        return max(0, int(round(float(hours) * 10)))

    def _status_name(self, status: int) -> str:
        """Convert solver status to string."""
        status_map = {
            cp_model.OPTIMAL: "OPTIMAL",
            cp_model.FEASIBLE: "FEASIBLE",
            cp_model.INFEASIBLE: "INFEASIBLE",
            cp_model.MODEL_INVALID: "MODEL_INVALID",
            cp_model.UNKNOWN: "UNKNOWN",
        }
        return status_map.get(status, f"UNKNOWN({status})")
