# Rev 0.2.0
# ganttboard – local backend (single JSON record in the key/value store)
from __future__ import annotations
import json
import random
from dataclasses import replace
from typing import Callable, List, Optional, Sequence

from ..errors import NotFoundError
from ..models.entities import (
    Dataset, Department, Employee, Project, Task, TaskDraft, TaskPatch,
    validate_task_window,
)
from ..models.ids import IdGenerator
from ..models.mapping import dataset_from_json, dataset_to_json
from ..models.palette import pick_task_color
from ..models.seed import seed_dataset
from ..utils.logging_setup import get_logger
from .db import LocalDatabase

DATA_KEY = "gantt-app-data"


class LocalStore:
    """
    Synchronous read/write of the whole Dataset under DATA_KEY.
    read() never fails: a missing, unparsable or structurally invalid record
    is replaced by the seed dataset, which is persisted before returning.
    """

    def __init__(self, db: LocalDatabase, seed: Callable[[], Dataset] = seed_dataset):
        self._db = db
        self._seed = seed
        self._log = get_logger("LocalStore")

    def read(self) -> Dataset:
        raw = self._db.get_item(DATA_KEY)
        if raw is None:
            return self._reseed("no record")
        try:
            data = dataset_from_json(json.loads(raw), self._seed)
        except (ValueError, TypeError, KeyError, AttributeError, OverflowError, RecursionError) as e:
            self._log.error("Failed to read local data: %s", e)
            return self._reseed("unreadable record")
        if data is None:
            return self._reseed("record without projects")
        return data

    def write(self, data: Dataset) -> None:
        self._db.set_item(DATA_KEY, json.dumps(dataset_to_json(data), ensure_ascii=False))

    def _reseed(self, why: str) -> Dataset:
        self._log.info("Seeding local board (%s)", why)
        data = self._seed()
        self.write(data)
        return data


def _reordered(current: List, ids: Sequence[str]) -> List:
    by_id = {item.id: item for item in current}
    out, seen = [], set()
    for i in ids:
        if i in by_id and i not in seen:
            out.append(by_id[i])
            seen.add(i)
    out.extend(item for item in current if item.id not in seen)
    return out


class LocalRepository:
    """BoardRepository over LocalStore: read → mutate → write for every change."""

    def __init__(self, store: LocalStore, ids: Optional[IdGenerator] = None,
                 rng: Optional[random.Random] = None):
        self._store = store
        self._ids = ids or IdGenerator()
        self._rng = rng

    # ---------- reads ----------

    async def list_projects(self) -> List[Project]:
        return self._store.read().projects

    async def list_departments(self) -> List[Department]:
        return self._store.read().departments

    async def list_employees(self) -> List[Employee]:
        return self._store.read().employees

    # ---------- projects ----------

    async def add_project(self, name: str) -> Project:
        data = self._store.read()
        project = Project(id=self._ids.project_id(), name=name, tasks=[])
        data.projects.append(project)
        self._store.write(data)
        return project

    async def update_project(self, project_id: str, name: str) -> Project:
        data = self._store.read()
        project = data.find_project(project_id)
        if project is None:
            raise NotFoundError("project", project_id)
        project.name = name
        self._store.write(data)
        return project

    async def delete_project(self, project_id: str) -> str:
        data = self._store.read()
        if data.find_project(project_id) is None:
            raise NotFoundError("project", project_id)
        # tasks live inside the project record and go with it
        data.projects = [p for p in data.projects if p.id != project_id]
        self._store.write(data)
        return project_id

    async def update_projects(self, projects: Sequence[Project]) -> List[Project]:
        data = self._store.read()
        data.projects = _reordered(data.projects, [p.id for p in projects])
        self._store.write(data)
        return data.projects

    # ---------- tasks ----------

    async def add_task(self, project_id: str, draft: TaskDraft) -> Task:
        validate_task_window(draft.start_date, draft.end_date)
        data = self._store.read()
        project = data.find_project(project_id)
        if project is None:
            raise NotFoundError("project", project_id)
        task = Task(
            id=self._ids.task_id(),
            name=draft.name,
            start_date=draft.start_date,
            end_date=draft.end_date,
            color=pick_task_color(self._rng),
            employee_id=draft.employee_id,
            progress=0,
            description=draft.description,
            project_id=project_id,
        )
        project.tasks.append(task)
        self._store.write(data)
        return task

    async def update_task(self, project_id: str, task_id: str, patch: TaskPatch) -> Task:
        changes = patch.changes()
        data = self._store.read()
        project = data.find_project(project_id)
        task = next((t for t in project.tasks if t.id == task_id), None) if project else None
        if task is None:
            raise NotFoundError("task", task_id)
        updated = replace(task, **changes)
        validate_task_window(updated.start_date, updated.end_date)
        project.tasks = [updated if t.id == task_id else t for t in project.tasks]
        self._store.write(data)
        return updated

    async def delete_task(self, project_id: str, task_id: str) -> str:
        data = self._store.read()
        project = data.find_project(project_id)
        if project is None or not any(t.id == task_id for t in project.tasks):
            raise NotFoundError("task", task_id)
        project.tasks = [t for t in project.tasks if t.id != task_id]
        self._store.write(data)
        return task_id

    async def reorder_tasks(self, project_id: str, tasks: Sequence[Task]) -> List[Task]:
        data = self._store.read()
        project = data.find_project(project_id)
        if project is None:
            raise NotFoundError("project", project_id)
        project.tasks = _reordered(project.tasks, [t.id for t in tasks])
        self._store.write(data)
        return project.tasks

    # ---------- organization ----------

    async def add_department(self, name: str) -> Department:
        data = self._store.read()
        department = Department(id=self._ids.department_id(), name=name, employees=[])
        data.departments.append(department)
        self._store.write(data)
        return department

    async def update_department(self, department_id: str, name: str) -> Department:
        data = self._store.read()
        department = next((d for d in data.departments if d.id == department_id), None)
        if department is None:
            raise NotFoundError("department", department_id)
        department.name = name
        self._store.write(data)
        return department

    async def delete_department(self, department_id: str) -> str:
        data = self._store.read()
        if not any(d.id == department_id for d in data.departments):
            raise NotFoundError("department", department_id)
        data.departments = [d for d in data.departments if d.id != department_id]
        data.employees = [e for e in data.employees if e.department_id != department_id]
        self._store.write(data)
        return department_id

    async def add_employee(self, name: str, department_id: str) -> Employee:
        data = self._store.read()
        employee = Employee(id=self._ids.employee_id(), name=name, department_id=department_id)
        data.employees.append(employee)
        data.rebuild_departments()
        self._store.write(data)
        return employee

    async def delete_employee(self, employee_id: str) -> str:
        data = self._store.read()
        if not any(e.id == employee_id for e in data.employees):
            raise NotFoundError("employee", employee_id)
        data.employees = [e for e in data.employees if e.id != employee_id]
        data.rebuild_departments()
        self._store.write(data)
        return employee_id
