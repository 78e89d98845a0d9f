# Rev 0.2.0
"""Sample board used on first run (local) and for seeding an empty remote."""
from __future__ import annotations
from datetime import date
from typing import List, Optional

from ..utils.dates import add_days
from .entities import Dataset, Department, Employee, Project, Task


def seed_employees() -> List[Employee]:
    return [
        Employee("e1", "Alice Johnson", "d1"),
        Employee("e2", "Bob Williams", "d1"),
        Employee("e3", "Charlie Brown", "d2"),
        Employee("e4", "Diana Miller", "d2"),
        Employee("e5", "Ethan Davis", "d3"),
    ]


def seed_departments() -> List[Department]:
    return [
        Department("d1", "Engineering"),
        Department("d2", "Marketing"),
        Department("d3", "Product"),
    ]


def seed_projects(today: Optional[date] = None) -> List[Project]:
    today = today or date.today()
    return [
        Project(
            id="p1",
            name="Quarterly Website Redesign",
            tasks=[
                Task("t1", "API design & development", add_days(today, 1), add_days(today, 10),
                     "bg-blue-500", "e1", 80, "Backend API endpoints.", "p1"),
                Task("t2", "Frontend UI/UX implementation", add_days(today, 2), add_days(today, 12),
                     "bg-sky-500", "e2", 50, "Component development.", "p1"),
                Task("t3", "Collect user feedback", add_days(today, 13), add_days(today, 20),
                     "bg-purple-500", "e5", 25, "Run usability tests.", "p1"),
            ],
        )
    ]


def seed_dataset(today: Optional[date] = None) -> Dataset:
    data = Dataset(
        projects=seed_projects(today),
        departments=seed_departments(),
        employees=seed_employees(),
    )
    data.rebuild_departments()
    return data
