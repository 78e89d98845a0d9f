# Rev 0.2.0
"""Board entities: projects own tasks, employees belong to departments."""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from ..errors import ValidationError


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass
class Employee:
    id: str
    name: str
    department_id: str


@dataclass
class Department:
    id: str
    name: str
    employees: List[Employee] = field(default_factory=list)   # derived, never authoritative


@dataclass
class Task:
    id: str
    name: str
    start_date: date
    end_date: date
    color: str                 # fixed at creation
    employee_id: str           # may point at a deleted employee
    progress: int = 0
    description: Optional[str] = None
    project_id: Optional[str] = None


@dataclass
class Project:
    id: str
    name: str
    tasks: List[Task] = field(default_factory=list)


@dataclass
class Dataset:
    projects: List[Project] = field(default_factory=list)
    departments: List[Department] = field(default_factory=list)
    employees: List[Employee] = field(default_factory=list)

    def rebuild_departments(self) -> None:
        """Recompute each department's member list from employee.department_id."""
        for d in self.departments:
            d.employees = [e for e in self.employees if e.department_id == d.id]

    def find_project(self, project_id: str) -> Optional[Project]:
        return next((p for p in self.projects if p.id == project_id), None)


@dataclass
class TaskDraft:
    """Input for a new task; id, color and progress are assigned on add."""
    name: str
    start_date: date
    end_date: date
    employee_id: str
    description: Optional[str] = None


@dataclass
class TaskPatch:
    """
    Partial task update.
    name/employee_id apply only when truthy, dates/progress when not None,
    description whenever it was supplied at all (empty string is a value).
    """
    name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    employee_id: Optional[str] = None
    progress: Optional[int] = None
    description: Any = UNSET

    def changes(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.name:
            out["name"] = self.name
        if self.start_date is not None:
            out["start_date"] = self.start_date
        if self.end_date is not None:
            out["end_date"] = self.end_date
        if self.employee_id:
            out["employee_id"] = self.employee_id
        if self.progress is not None:
            out["progress"] = validate_progress(self.progress)
        if self.description is not UNSET:
            out["description"] = self.description
        return out


def validate_progress(progress: Any) -> int:
    if isinstance(progress, bool) or not isinstance(progress, int):
        raise ValidationError(f"progress must be an integer, got {progress!r}")
    if not 0 <= progress <= 100:
        raise ValidationError(f"progress out of range 0..100: {progress}")
    return progress


def validate_task_window(start: date, end: date) -> None:
    if end < start:
        raise ValidationError(f"end date {end} is before start date {start}")
