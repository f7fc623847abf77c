"""CSV export of range reports."""

from __future__ import annotations

import csv
from pathlib import Path

import pandas as pd

from rota.services.calendar import to_day

EXPORT_HEADERS = {
    "date": "Date",
    "day": "Day",
    "location": "Location",
    "employee": "Employee Name",
    "category": "Category",
    "role": "Role",
    "shift": "Shift",
    "start_time": "Start Time",
    "end_time": "End Time",
    "hours": "Hours",
}


def _format_hours(value) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else str(value)


def report_to_csv(report: pd.DataFrame) -> str:
    """
    Serialize a report to CSV text.

    Every field is double-quoted and embedded quotes are doubled.
    """
    table = report.reindex(columns=list(EXPORT_HEADERS)).copy()
    table["hours"] = [_format_hours(h) for h in table["hours"].fillna(0)]
    table = table.fillna("").astype(str).rename(columns=EXPORT_HEADERS)
    return table.to_csv(index=False, quoting=csv.QUOTE_ALL, doublequote=True, lineterminator="\n")


def export_filename(start, end) -> str:
    return f"rota_export_{to_day(start).isoformat()}_to_{to_day(end).isoformat()}.csv"


def export_report_csv(report: pd.DataFrame, directory: str | Path, start, end) -> Path:
    """
    Write a report as UTF-8 CSV into directory.

    Returns:
        Path of the written file
    """
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / export_filename(start, end)
    path.write_text(report_to_csv(report), encoding="utf-8")
    print(f"[INFO] Exported {len(report)} rows to {path}")
    return path
