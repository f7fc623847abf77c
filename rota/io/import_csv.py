"""CSV import utilities to load reference data into the database."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
from sqlalchemy.orm import Session

from rota.domain.entities import DAYS_OF_WEEK, Employee, Location, Shift
from rota.domain.models import entity_to_row
from rota.domain.repositories import EmployeeRepository, LocationRepository, ShiftRepository


def _read(csv_path: str | Path) -> pd.DataFrame:
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    # Normalize column names (camelCase headers are accepted too)
    df.columns = (
        df.columns.str.strip()
        .str.replace(r"(?<=[a-z0-9])(?=[A-Z])", "_", regex=True)
        .str.lower()
    )
    return df


def _days(value: str):
    parts = [p.strip()[:3].title() for p in value.replace(";", ",").split(",") if p.strip()]
    return tuple(d for d in DAYS_OF_WEEK if d in parts) or DAYS_OF_WEEK


def import_locations_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import locations from CSV (columns: id, name, color).

    Returns:
        Number of locations imported
    """
    df = _read(csv_path)
    locations = [
        Location(id=str(row["id"]), name=str(row["name"]), color=str(row.get("color", "")))
        for _, row in df.iterrows()
    ]
    LocationRepository.insert(session, [entity_to_row(x) for x in locations])
    print(f"[INFO] Imported {len(locations)} locations from {csv_path}")
    return len(locations)


def import_employees_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import employees from CSV.

    Columns: id, name, role, category, default_location_id, preferred_hours,
    available_days (comma or semicolon separated, e.g. "Mon;Wed;Fri").

    Returns:
        Number of employees imported
    """
    df = _read(csv_path)
    employees = []
    for _, row in df.iterrows():
        hours = str(row.get("preferred_hours", "")).strip()
        emp = Employee(
            id=str(row["id"]),
            name=str(row["name"]),
            role=str(row.get("role", "")),
            category=str(row["category"]),
            default_location_id=str(row.get("default_location_id", "")).strip() or None,
            preferred_hours=float(hours) if hours else 40.0,
            available_days=_days(str(row.get("available_days", ""))),
        )
        employees.append(emp)

    EmployeeRepository.insert(session, [entity_to_row(x) for x in employees])
    print(f"[INFO] Imported {len(employees)} employees from {csv_path}")
    return len(employees)


def import_shifts_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import shifts from CSV (columns: id, name, start_time, end_time, hours, color).

    Returns:
        Number of shifts imported
    """
    df = _read(csv_path)
    shifts = [
        Shift(
            id=str(row["id"]),
            name=str(row["name"]),
            start_time=str(row["start_time"]),
            end_time=str(row["end_time"]),
            hours=float(row["hours"]),
            color=str(row.get("color", "")),
        )
        for _, row in df.iterrows()
    ]
    ShiftRepository.insert(session, [entity_to_row(x) for x in shifts])
    print(f"[INFO] Imported {len(shifts)} shifts from {csv_path}")
    return len(shifts)
