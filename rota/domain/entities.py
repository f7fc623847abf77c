"""In-memory entities for locations, employees, shifts and assignments."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type, TypeVar


DAYS_OF_WEEK: Tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

UNKNOWN = "Unknown"


class EmployeeCategory(str, Enum):
    """Fixed set of staff categories."""

    AUDIOLOGIST = "Audiologist"
    ADMIN = "Admin"
    SUPPORT_STAFF = "Support Staff"
    TELE_CALLER = "Tele Caller/Receptionist"

    @classmethod
    def parse(cls, value: "str | EmployeeCategory") -> "EmployeeCategory":
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ValueError(f"Unknown employee category: {value!r}")


@dataclass(frozen=True)
class Location:
    id: str
    name: str
    color: str = ""


@dataclass(frozen=True)
class Employee:
    id: str
    name: str
    role: str
    category: EmployeeCategory = EmployeeCategory.AUDIOLOGIST
    default_location_id: Optional[str] = None
    preferred_hours: float = 40.0
    available_days: Tuple[str, ...] = DAYS_OF_WEEK

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", EmployeeCategory.parse(self.category))
        object.__setattr__(self, "available_days", tuple(self.available_days or DAYS_OF_WEEK))

    def works_on(self, day_label: str) -> bool:
        return day_label in self.available_days


@dataclass(frozen=True)
class Shift:
    """A named time slot.

    ``hours`` is authoritative for aggregation and is not derived from the
    start/end wall-clock strings.
    """

    id: str
    name: str
    start_time: str
    end_time: str
    hours: float
    color: str = ""


@dataclass(frozen=True)
class RotaAssignment:
    """One employee booked on one shift, on one date, at one location."""

    id: str
    date: str  # YYYY-MM-DD
    employee_id: str
    shift_id: str
    location_id: str = ""

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.date, self.employee_id, self.shift_id)


@dataclass(frozen=True)
class Unresolved:
    """Lookup result for a weak reference whose target no longer exists."""

    kind: str
    id: str

    @property
    def name(self) -> str:
        return UNKNOWN

    def __bool__(self) -> bool:
        return False


# Wire (camelCase) <-> attribute/storage (snake_case) names.
FIELD_MAP: Dict[str, str] = {
    "defaultLocationId": "default_location_id",
    "preferredHours": "preferred_hours",
    "availableDays": "available_days",
    "startTime": "start_time",
    "endTime": "end_time",
    "employeeId": "employee_id",
    "shiftId": "shift_id",
    "locationId": "location_id",
}
_REVERSE_FIELD_MAP = {v: k for k, v in FIELD_MAP.items()}

E = TypeVar("E", Location, Employee, Shift, RotaAssignment)


def to_payload(entity: Any) -> Dict[str, Any]:
    """Render an entity in its camelCase wire form."""
    out: Dict[str, Any] = {}
    for f in fields(entity):
        value = getattr(entity, f.name)
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, tuple):
            value = list(value)
        out[_REVERSE_FIELD_MAP.get(f.name, f.name)] = value
    return out


def from_payload(cls: Type[E], payload: Dict[str, Any]) -> E:
    """Build an entity from a camelCase (or already snake_case) mapping."""
    names = {f.name for f in fields(cls)}
    kwargs = {}
    for key, value in payload.items():
        name = FIELD_MAP.get(key, key)
        if name in names and value is not None:
            kwargs[name] = value
    return cls(**kwargs)
