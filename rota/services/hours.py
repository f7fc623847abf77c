"""Per-employee worked hours against target hours."""

from __future__ import annotations

from enum import Enum

import pandas as pd

from rota.store.entity_store import EntityStore


class HoursStatus(str, Enum):
    UNDER = "under"
    AT = "at"
    OVER = "over"


def classify_hours(hours: float, target: float) -> HoursStatus:
    if abs(hours - target) < 1e-6:
        return HoursStatus.AT
    return HoursStatus.OVER if hours > target else HoursStatus.UNDER


def hours_summary(store: EntityStore) -> pd.DataFrame:
    """
    All-time hours per employee.

    Sums shift.hours over every assignment referencing the employee; no date
    filtering is applied. Assignments whose shift no longer exists count 0.

    Returns:
        DataFrame with columns employee_id, name, hours, target, status
        (one row per employee, in store order)
    """
    shift_hours = {s.id: float(s.hours) for s in store.shifts}
    assigned = pd.DataFrame(
        [
            {"employee_id": a.employee_id, "hours": shift_hours.get(a.shift_id, 0.0)}
            for a in store.assignments
        ],
        columns=["employee_id", "hours"],
    )
    totals = assigned.groupby("employee_id")["hours"].sum()

    rows = []
    for emp in store.employees:
        hours = float(totals.get(emp.id, 0.0))
        target = float(emp.preferred_hours)
        rows.append(
            {
                "employee_id": emp.id,
                "name": emp.name,
                "hours": hours,
                "target": target,
                "status": classify_hours(hours, target).value,
            }
        )
    return pd.DataFrame(rows, columns=["employee_id", "name", "hours", "target", "status"])


def summarize_hours(summary: pd.DataFrame) -> str:
    if summary.empty:
        return "No employees."
    lines = ["Hours per employee (all time):"]
    lines.append(summary[["name", "hours", "target", "status"]].to_string(index=False))
    return "\n".join(lines)
