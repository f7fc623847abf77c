"""Domain models and data access layer."""

from .entities import (
    DAYS_OF_WEEK,
    Employee,
    EmployeeCategory,
    Location,
    RotaAssignment,
    Shift,
    Unresolved,
    from_payload,
    to_payload,
)
from .models import AssignmentRecord, Base, EmployeeRecord, LocationRecord, ShiftRecord
from .repositories import AssignmentRepository, EmployeeRepository, LocationRepository, ShiftRepository

__all__ = [
    "DAYS_OF_WEEK",
    "Employee",
    "EmployeeCategory",
    "Location",
    "RotaAssignment",
    "Shift",
    "Unresolved",
    "from_payload",
    "to_payload",
    "Base",
    "LocationRecord",
    "EmployeeRecord",
    "ShiftRecord",
    "AssignmentRecord",
    "LocationRepository",
    "EmployeeRepository",
    "ShiftRepository",
    "AssignmentRepository",
]
