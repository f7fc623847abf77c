"""Repository classes for data access."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from .models import AssignmentRecord, EmployeeRecord, LocationRecord, ShiftRecord


class _CollectionRepository:
    """Select-all / insert / update-by-id / delete-by-id for one table."""

    record = None  # Override in subclasses

    @classmethod
    def get_all(cls, session: Session) -> List[Any]:
        """Get all rows."""
        return list(session.scalars(select(cls.record)).all())

    @classmethod
    def get_by_id(cls, session: Session, record_id: str) -> Optional[Any]:
        """Get a single row by ID."""
        return session.get(cls.record, record_id)

    @classmethod
    def insert(cls, session: Session, rows: Iterable[Dict[str, Any]]) -> int:
        """Insert one or many rows given as column dicts."""
        records = [cls.record(**row) for row in rows]
        session.add_all(records)
        session.commit()
        return len(records)

    @classmethod
    def update(cls, session: Session, record_id: str, values: Dict[str, Any]) -> int:
        """Update columns of the row with the given ID. Returns rows touched."""
        values = {k: v for k, v in values.items() if k != "id"}
        result = session.execute(
            update(cls.record).where(cls.record.id == record_id).values(**values)
        )
        session.commit()
        return result.rowcount

    @classmethod
    def delete(cls, session: Session, record_id: str) -> int:
        """Delete the row with the given ID. Returns rows deleted."""
        result = session.execute(delete(cls.record).where(cls.record.id == record_id))
        session.commit()
        return result.rowcount


class LocationRepository(_CollectionRepository):
    """Repository for location data access."""

    record = LocationRecord


class EmployeeRepository(_CollectionRepository):
    """Repository for employee data access."""

    record = EmployeeRecord

    @staticmethod
    def get_by_category(session: Session, category: str) -> List[EmployeeRecord]:
        """Get all employees in a category."""
        return list(
            session.scalars(select(EmployeeRecord).where(EmployeeRecord.category == category)).all()
        )


class ShiftRepository(_CollectionRepository):
    """Repository for shift data access."""

    record = ShiftRecord


class AssignmentRepository(_CollectionRepository):
    """Repository for assignment data access."""

    record = AssignmentRecord

    @staticmethod
    def get_by_dates(session: Session, dates: Iterable[str]) -> List[AssignmentRecord]:
        """Get all assignments whose date is in the given set."""
        dates = list(dates)
        if not dates:
            return []
        return list(
            session.scalars(
                select(AssignmentRecord)
                .where(AssignmentRecord.date.in_(dates))
                .order_by(AssignmentRecord.date)
            ).all()
        )

    @staticmethod
    def get_by_employee(session: Session, employee_id: str) -> List[AssignmentRecord]:
        """Get all assignments for a specific employee."""
        return list(
            session.scalars(
                select(AssignmentRecord).where(AssignmentRecord.employee_id == employee_id)
            ).all()
        )

    @staticmethod
    def delete_by_dates(session: Session, dates: Iterable[str]) -> int:
        """Delete all assignments whose date is in the set. Returns number of deleted rows."""
        dates = list(dates)
        if not dates:
            return 0
        result = session.execute(
            delete(AssignmentRecord).where(AssignmentRecord.date.in_(dates))
        )
        session.commit()
        return result.rowcount


REPOSITORIES = {
    "locations": LocationRepository,
    "employees": EmployeeRepository,
    "shifts": ShiftRepository,
    "assignments": AssignmentRepository,
}
