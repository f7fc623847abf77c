"""Built-in dataset used for local-only mode and for seeding an empty database."""

from __future__ import annotations

from typing import List

from .entities import DAYS_OF_WEEK, Employee, EmployeeCategory, Location, Shift


def initial_locations() -> List[Location]:
    return [
        Location(id="l1", name="HO", color="slate"),
        Location(id="l2", name="Fortis", color="red"),
        Location(id="l3", name="CMRI", color="blue"),
        Location(id="l4", name="Manipal Saltlake", color="orange"),
    ]


def initial_employees() -> List[Employee]:
    return [
        Employee(
            id="1",
            name="Alice Johnson",
            role="Manager",
            category=EmployeeCategory.AUDIOLOGIST,
            default_location_id="l1",
            preferred_hours=40,
            available_days=DAYS_OF_WEEK,
        ),
        Employee(
            id="2",
            name="Bob Smith",
            role="Assistant",
            category=EmployeeCategory.SUPPORT_STAFF,
            default_location_id="l1",
            preferred_hours=30,
            available_days=DAYS_OF_WEEK,
        ),
        Employee(
            id="3",
            name="Charlie Brown",
            role="Junior Audio",
            category=EmployeeCategory.AUDIOLOGIST,
            default_location_id="l2",
            preferred_hours=20,
            available_days=("Mon", "Wed", "Fri"),
        ),
    ]


def initial_shifts() -> List[Shift]:
    return [
        Shift(id="s1", name="Morning", start_time="06:00", end_time="14:00", hours=8, color="blue"),
        Shift(id="s2", name="Day", start_time="09:00", end_time="17:00", hours=8, color="green"),
        Shift(id="s3", name="Evening", start_time="14:00", end_time="22:00", hours=8, color="purple"),
    ]