# Rev 0.2.0
# ganttboard – remote backend (Supabase / PostgREST)
from __future__ import annotations
import asyncio
import random
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from postgrest.exceptions import APIError
from supabase import AsyncClient

from ..errors import NotFoundError
from ..models.entities import (
    Department, Employee, Project, Task, TaskDraft, TaskPatch, validate_task_window,
)
from ..models.ids import IdGenerator
from ..models.mapping import (
    department_from_row, department_to_row, employee_from_row, employee_to_row,
    project_from_row, task_changes_to_row, task_from_row, task_to_row,
)
from ..models.palette import pick_task_color
from ..utils.logging_setup import get_logger
from .schema_guard import absorb_missing_column, raise_if_missing_table, with_column_fallback

POSITION = "position"


class SupabaseRepository:
    """
    BoardRepository over a supabase AsyncClient.

    Schema (minimum):
      projects(id, name, created_at, position?)
      tasks(id, project_id → projects.id, name, start_date, end_date, color,
            employee_id, progress, description, position?)
      departments(id, name)
      employees(id, name, department_id)

    Nested shapes are assembled client-side from one query per table.
    """

    def __init__(self, client: AsyncClient, ids: Optional[IdGenerator] = None,
                 rng: Optional[random.Random] = None):
        self._client = client
        self._ids = ids or IdGenerator()
        self._rng = rng
        self._log = get_logger("SupabaseRepository")

    # -------------------------
    # Plumbing
    # -------------------------
    async def _run(self, table: str, query) -> List[Dict[str, Any]]:
        try:
            resp = await query.execute()
        except APIError as e:
            raise_if_missing_table(e, table)
            raise
        return list(resp.data or [])

    def _t(self, table: str):
        return self._client.table(table)

    async def _fetch_projects(self) -> List[Dict[str, Any]]:
        return await with_column_fallback(
            lambda: self._run("projects", self._t("projects").select("*").order(POSITION).order("created_at")),
            lambda: self._run("projects", self._t("projects").select("*").order("created_at")),
            POSITION, self._log, errors=(APIError,),
        )

    async def _fetch_tasks(self) -> List[Dict[str, Any]]:
        return await with_column_fallback(
            lambda: self._run("tasks", self._t("tasks").select("*").order(POSITION).order("id")),
            lambda: self._run("tasks", self._t("tasks").select("*").order("id")),
            POSITION, self._log, errors=(APIError,),
        )

    async def _write_positions(self, table: str, ids: Sequence[str],
                               scope: Optional[Tuple[str, str]] = None) -> Optional[Set[str]]:
        """
        position = index for each listed row that still exists; no other
        column is sent and nothing is inserted. Returns the ids that were
        updated, or None when the position column is absent.
        """
        found: Set[str] = set()

        async def write() -> None:
            for i, row_id in enumerate(ids):
                query = self._t(table).update({POSITION: i}).eq("id", row_id)
                if scope is not None:
                    query = query.eq(*scope)
                if await self._run(table, query):
                    found.add(row_id)

        if ids and not await absorb_missing_column(write, POSITION, self._log, errors=(APIError,)):
            return None
        return found

    # -------------------------
    # Reads
    # -------------------------
    async def list_projects(self) -> List[Project]:
        project_rows, task_rows = await asyncio.gather(self._fetch_projects(), self._fetch_tasks())
        tasks = [task_from_row(r) for r in task_rows]
        return [project_from_row(r, tasks) for r in project_rows]

    async def list_departments(self) -> List[Department]:
        dept_rows, emp_rows = await asyncio.gather(
            self._run("departments", self._t("departments").select("*").order("name")),
            self._run("employees", self._t("employees").select("*")),
        )
        employees = [employee_from_row(r) for r in emp_rows]
        return [department_from_row(r, employees) for r in dept_rows]

    async def list_employees(self) -> List[Employee]:
        rows = await self._run("employees", self._t("employees").select("*").order("name"))
        return [employee_from_row(r) for r in rows]

    # -------------------------
    # Projects
    # -------------------------
    async def add_project(self, name: str) -> Project:
        project = Project(id=self._ids.project_id(), name=name, tasks=[])
        await self._run("projects", self._t("projects").insert({"id": project.id, "name": name}))
        self._log.debug("project added %s", project.id)
        return project

    async def update_project(self, project_id: str, name: str) -> Project:
        rows = await self._run("projects", self._t("projects").update({"name": name}).eq("id", project_id))
        if not rows:
            raise NotFoundError("project", project_id)
        return project_from_row(rows[0])

    async def delete_project(self, project_id: str) -> str:
        # tasks first, so no orphan survives even without an FK cascade
        await self._run("tasks", self._t("tasks").delete().eq("project_id", project_id))
        rows = await self._run("projects", self._t("projects").delete().eq("id", project_id))
        if not rows:
            raise NotFoundError("project", project_id)
        return project_id

    async def update_projects(self, projects: Sequence[Project]) -> List[Project]:
        found = await self._write_positions("projects", [p.id for p in projects])
        if found is None:
            return list(projects)
        return [p for p in projects if p.id in found]

    # -------------------------
    # Tasks
    # -------------------------
    async def add_task(self, project_id: str, draft: TaskDraft) -> Task:
        validate_task_window(draft.start_date, draft.end_date)
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
        await self._run("tasks", self._t("tasks").insert(task_to_row(task, project_id)))
        self._log.debug("task added %s to %s", task.id, project_id)
        return task

    async def _get_task_row(self, project_id: str, task_id: str) -> Dict[str, Any]:
        rows = await self._run(
            "tasks",
            self._t("tasks").select("*").eq("id", task_id).eq("project_id", project_id).limit(1),
        )
        if not rows:
            raise NotFoundError("task", task_id)
        return rows[0]

    async def update_task(self, project_id: str, task_id: str, patch: TaskPatch) -> Task:
        changes = patch.changes()
        if not changes:
            return task_from_row(await self._get_task_row(project_id, task_id))

        start, end = changes.get("start_date"), changes.get("end_date")
        if start is not None and end is not None:
            validate_task_window(start, end)
        elif start is not None or end is not None:
            current = task_from_row(await self._get_task_row(project_id, task_id))
            validate_task_window(start or current.start_date, end or current.end_date)

        rows = await self._run(
            "tasks",
            self._t("tasks").update(task_changes_to_row(changes)).eq("id", task_id).eq("project_id", project_id),
        )
        if not rows:
            raise NotFoundError("task", task_id)
        return task_from_row(rows[0])

    async def delete_task(self, project_id: str, task_id: str) -> str:
        rows = await self._run(
            "tasks", self._t("tasks").delete().eq("id", task_id).eq("project_id", project_id)
        )
        if not rows:
            raise NotFoundError("task", task_id)
        return task_id

    async def reorder_tasks(self, project_id: str, tasks: Sequence[Task]) -> List[Task]:
        found = await self._write_positions("tasks", [t.id for t in tasks], ("project_id", project_id))
        if found is None:
            return list(tasks)
        return [t for t in tasks if t.id in found]

    # -------------------------
    # Organization
    # -------------------------
    async def add_department(self, name: str) -> Department:
        department = Department(id=self._ids.department_id(), name=name, employees=[])
        await self._run("departments", self._t("departments").insert(department_to_row(department)))
        return department

    async def update_department(self, department_id: str, name: str) -> Department:
        rows = await self._run(
            "departments", self._t("departments").update({"name": name}).eq("id", department_id)
        )
        if not rows:
            raise NotFoundError("department", department_id)
        return department_from_row(rows[0])

    async def delete_department(self, department_id: str) -> str:
        await self._run("employees", self._t("employees").delete().eq("department_id", department_id))
        rows = await self._run("departments", self._t("departments").delete().eq("id", department_id))
        if not rows:
            raise NotFoundError("department", department_id)
        return department_id

    async def add_employee(self, name: str, department_id: str) -> Employee:
        employee = Employee(id=self._ids.employee_id(), name=name, department_id=department_id)
        await self._run("employees", self._t("employees").insert(employee_to_row(employee)))
        return employee

    async def delete_employee(self, employee_id: str) -> str:
        rows = await self._run("employees", self._t("employees").delete().eq("id", employee_id))
        if not rows:
            raise NotFoundError("employee", employee_id)
        return employee_id
