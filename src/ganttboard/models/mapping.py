# Rev 0.2.0
"""
Row <-> entity mapping.

Remote rows are snake_case dicts as returned by PostgREST; every mapper checks
the row shape and raises MalformedRowError instead of letting a half-filled
entity through. The local JSON record uses the camelCase layout:

  { projects:    [{id, name, tasks: [{id, name, startDate, endDate, color,
                                      employeeId, progress, description?}]}],
    departments: [{id, name, employees: [{id, name, departmentId}]}],
    employees:   [{id, name, departmentId}] }
"""
from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from ..errors import MalformedRowError
from ..utils.dates import format_date, format_datetime, parse_date
from .entities import Dataset, Department, Employee, Project, Task


# ---------- remote row checks ----------

def _require_mapping(table: str, row: Any) -> Mapping[str, Any]:
    if not isinstance(row, Mapping):
        raise MalformedRowError(table, row, f"expected an object, got {type(row).__name__}")
    return row


def _id(table: str, row: Mapping[str, Any], key: str = "id") -> str:
    if key not in row:
        raise MalformedRowError(table, row, f"missing '{key}'")
    value = row[key]
    if not isinstance(value, str) or not value:
        raise MalformedRowError(table, row, f"'{key}' must be a non-empty string")
    return value


def _text(table: str, row: Mapping[str, Any], key: str) -> str:
    # nullable text column: NULL reads as ""
    if key not in row:
        raise MalformedRowError(table, row, f"missing '{key}'")
    value = row[key]
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedRowError(table, row, f"'{key}' must be text, got {type(value).__name__}")
    return value


def _date(table: str, row: Mapping[str, Any], key: str):
    if key not in row:
        raise MalformedRowError(table, row, f"missing '{key}'")
    try:
        return parse_date(row[key])
    except (TypeError, ValueError) as e:
        raise MalformedRowError(table, row, f"'{key}' is not a date: {e}") from e


def _progress(table: str, row: Mapping[str, Any]) -> int:
    if "progress" not in row:
        raise MalformedRowError(table, row, "missing 'progress'")
    value = row["progress"]
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedRowError(table, row, f"'progress' must be an integer, got {value!r}")
    return value


# ---------- remote: rows -> entities ----------

def task_from_row(row: Any) -> Task:
    row = _require_mapping("tasks", row)
    description = row.get("description")
    if description is not None and not isinstance(description, str):
        raise MalformedRowError("tasks", row, "'description' must be text")
    return Task(
        id=_id("tasks", row),
        name=_text("tasks", row, "name"),
        start_date=_date("tasks", row, "start_date"),
        end_date=_date("tasks", row, "end_date"),
        color=_text("tasks", row, "color"),
        employee_id=_text("tasks", row, "employee_id"),
        progress=_progress("tasks", row),
        description=description,
        project_id=_id("tasks", row, "project_id"),
    )


def project_from_row(row: Any, tasks: Iterable[Task] = ()) -> Project:
    row = _require_mapping("projects", row)
    pid = _id("projects", row)
    return Project(
        id=pid,
        name=_text("projects", row, "name"),
        tasks=[t for t in tasks if t.project_id == pid],
    )


def employee_from_row(row: Any) -> Employee:
    row = _require_mapping("employees", row)
    return Employee(
        id=_id("employees", row),
        name=_text("employees", row, "name"),
        department_id=_id("employees", row, "department_id"),
    )


def department_from_row(row: Any, employees: Iterable[Employee] = ()) -> Department:
    row = _require_mapping("departments", row)
    did = _id("departments", row)
    return Department(
        id=did,
        name=_text("departments", row, "name"),
        employees=[e for e in employees if e.department_id == did],
    )


# ---------- remote: entities -> rows ----------

def task_to_row(task: Task, project_id: str) -> Dict[str, Any]:
    return {
        "id": task.id,
        "project_id": project_id,
        "name": task.name,
        "start_date": format_date(task.start_date),
        "end_date": format_date(task.end_date),
        "color": task.color,
        "employee_id": task.employee_id,
        "progress": task.progress,
        "description": task.description,
    }


_TASK_COLUMNS = {
    "name": "name",
    "start_date": "start_date",
    "end_date": "end_date",
    "employee_id": "employee_id",
    "progress": "progress",
    "description": "description",
}


def task_changes_to_row(changes: Mapping[str, Any]) -> Dict[str, Any]:
    """TaskPatch.changes() -> column dict; dates become bare YYYY-MM-DD."""
    out: Dict[str, Any] = {}
    for field_name, value in changes.items():
        column = _TASK_COLUMNS[field_name]
        if field_name in ("start_date", "end_date"):
            value = format_date(value)
        out[column] = value
    return out


def employee_to_row(employee: Employee) -> Dict[str, Any]:
    return {"id": employee.id, "name": employee.name, "department_id": employee.department_id}


def department_to_row(department: Department) -> Dict[str, Any]:
    return {"id": department.id, "name": department.name}


# ---------- local JSON record ----------

def _employee_to_json(e: Employee) -> Dict[str, Any]:
    return {"id": e.id, "name": e.name, "departmentId": e.department_id}


def _task_to_json(t: Task) -> Dict[str, Any]:
    out = {
        "id": t.id,
        "name": t.name,
        "startDate": format_datetime(t.start_date),
        "endDate": format_datetime(t.end_date),
        "color": t.color,
        "employeeId": t.employee_id,
        "progress": t.progress,
    }
    if t.description is not None:
        out["description"] = t.description
    return out


def dataset_to_json(data: Dataset) -> Dict[str, Any]:
    return {
        "projects": [
            {"id": p.id, "name": p.name, "tasks": [_task_to_json(t) for t in p.tasks]}
            for p in data.projects
        ],
        "departments": [
            {
                "id": d.id,
                "name": d.name,
                "employees": [_employee_to_json(e) for e in data.employees if e.department_id == d.id],
            }
            for d in data.departments
        ],
        "employees": [_employee_to_json(e) for e in data.employees],
    }


def _employee_from_json(obj: Mapping[str, Any]) -> Employee:
    return Employee(id=str(obj["id"]), name=str(obj["name"]), department_id=str(obj["departmentId"]))


def _progress_from_json(value: Any) -> int:
    # json also yields floats (1e400 -> inf, NaN); only whole numbers in range pass
    if value is None:
        return 0
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 100:
        raise ValueError(f"progress must be an integer 0..100, got {value!r}")
    return value


def _task_from_json(obj: Mapping[str, Any], project_id: str) -> Task:
    return Task(
        id=str(obj["id"]),
        name=str(obj["name"]),
        start_date=parse_date(obj["startDate"]),
        end_date=parse_date(obj["endDate"]),
        color=str(obj.get("color") or ""),
        employee_id=str(obj.get("employeeId") or ""),
        progress=_progress_from_json(obj.get("progress")),
        description=obj.get("description"),
        project_id=project_id,
    )


def dataset_from_json(obj: Any, defaults: Callable[[], Dataset]) -> Optional[Dataset]:
    """
    Returns None when the record fails the structure check (no projects list).
    Malformed entries raise KeyError/TypeError/ValueError; the caller treats
    both outcomes as "no record".
    """
    if not isinstance(obj, Mapping) or not isinstance(obj.get("projects"), list):
        return None

    projects: List[Project] = []
    for p in obj["projects"]:
        pid = str(p["id"])
        raw_tasks = p.get("tasks") or []
        projects.append(Project(id=pid, name=str(p["name"]),
                                tasks=[_task_from_json(t, pid) for t in raw_tasks]))

    fallback: Optional[Dataset] = None
    if not isinstance(obj.get("departments"), list) or not isinstance(obj.get("employees"), list):
        fallback = defaults()

    if isinstance(obj.get("employees"), list):
        employees = [_employee_from_json(e) for e in obj["employees"]]
    else:
        employees = fallback.employees
    if isinstance(obj.get("departments"), list):
        departments = [Department(id=str(d["id"]), name=str(d["name"])) for d in obj["departments"]]
    else:
        departments = fallback.departments

    data = Dataset(projects=projects, departments=departments, employees=employees)
    data.rebuild_departments()
    return data
