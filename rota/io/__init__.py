"""I/O utilities for CSV import/export."""

from .export_csv import export_report_csv, report_to_csv
from .import_csv import import_employees_csv, import_locations_csv, import_shifts_csv

__all__ = [
    "import_locations_csv",
    "import_employees_csv",
    "import_shifts_csv",
    "export_report_csv",
    "report_to_csv",
]
