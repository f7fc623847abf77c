"""SQLAlchemy models for the rota storage collections.

References between tables are plain string columns rather than foreign keys:
deleting an employee, shift or location never cascades to assignments.
"""

from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import Column, Float, String
from sqlalchemy.orm import DeclarativeBase

from .entities import DAYS_OF_WEEK, Employee, Location, RotaAssignment, Shift


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class LocationRecord(Base):
    """A physical site staff can be assigned to."""

    __tablename__ = "locations"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    color = Column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<LocationRecord(id={self.id}, name='{self.name}')>"


class EmployeeRecord(Base):
    """Employee row; available_days is stored as a comma-separated list."""

    __tablename__ = "employees"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    role = Column(String(100), nullable=False, default="")
    category = Column(String(50), nullable=False)
    default_location_id = Column(String(64), nullable=True)
    preferred_hours = Column(Float, nullable=False, default=40.0)
    available_days = Column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<EmployeeRecord(id={self.id}, name='{self.name}', category='{self.category}')>"


class ShiftRecord(Base):
    """Shift template with an authoritative hours value."""

    __tablename__ = "shifts"

    id = Column(String(64), primary_key=True)
    name = Column(String(100), nullable=False)
    color = Column(String(100), nullable=True)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)  # HH:MM
    hours = Column(Float, nullable=False)

    def __repr__(self) -> str:
        return f"<ShiftRecord(id={self.id}, name='{self.name}', {self.start_time}-{self.end_time})>"


class AssignmentRecord(Base):
    """Assignment of an employee to a shift on a date at a location."""

    __tablename__ = "assignments"

    id = Column(String(64), primary_key=True)
    date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    employee_id = Column(String(64), nullable=False)
    shift_id = Column(String(64), nullable=False)
    location_id = Column(String(64), nullable=False, default="")

    def __repr__(self) -> str:
        return f"<AssignmentRecord(id={self.id}, date={self.date}, emp={self.employee_id}, shift={self.shift_id})>"


def _split_days(value: str | None):
    if not value:
        return DAYS_OF_WEEK
    return tuple(day.strip() for day in value.split(",") if day.strip())


def entity_to_row(entity: Any) -> Dict[str, Any]:
    """Column values for an entity (snake_case storage form)."""
    if isinstance(entity, Location):
        return {"id": entity.id, "name": entity.name, "color": entity.color}
    if isinstance(entity, Employee):
        return {
            "id": entity.id,
            "name": entity.name,
            "role": entity.role,
            "category": entity.category.value,
            "default_location_id": entity.default_location_id,
            "preferred_hours": float(entity.preferred_hours),
            "available_days": ",".join(entity.available_days),
        }
    if isinstance(entity, Shift):
        return {
            "id": entity.id,
            "name": entity.name,
            "color": entity.color,
            "start_time": entity.start_time,
            "end_time": entity.end_time,
            "hours": float(entity.hours),
        }
    if isinstance(entity, RotaAssignment):
        return {
            "id": entity.id,
            "date": entity.date,
            "employee_id": entity.employee_id,
            "shift_id": entity.shift_id,
            "location_id": entity.location_id,
        }
    raise TypeError(f"Unsupported entity type: {type(entity).__name__}")


def row_to_entity(record: Any) -> Any:
    """Inverse of entity_to_row for a loaded ORM record."""
    if isinstance(record, LocationRecord):
        return Location(id=record.id, name=record.name, color=record.color or "")
    if isinstance(record, EmployeeRecord):
        return Employee(
            id=record.id,
            name=record.name,
            role=record.role or "",
            category=record.category,
            default_location_id=record.default_location_id or None,
            preferred_hours=record.preferred_hours if record.preferred_hours is not None else 40.0,
            available_days=_split_days(record.available_days),
        )
    if isinstance(record, ShiftRecord):
        return Shift(
            id=record.id,
            name=record.name,
            start_time=record.start_time,
            end_time=record.end_time,
            hours=record.hours,
            color=record.color or "",
        )
    if isinstance(record, AssignmentRecord):
        return RotaAssignment(
            id=record.id,
            date=record.date,
            employee_id=record.employee_id,
            shift_id=record.shift_id,
            location_id=record.location_id or "",
        )
    raise TypeError(f"Unsupported record type: {type(record).__name__}")


RECORD_TYPES = {
    "locations": LocationRecord,
    "employees": EmployeeRecord,
    "shifts": ShiftRecord,
    "assignments": AssignmentRecord,
}
