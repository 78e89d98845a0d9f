# Rev 0.2.0: in-memory board state kept in step with the live backend
from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any, Awaitable, Dict, List, Optional, Set

from PySide6.QtCore import QObject, Signal

from ..errors import TablesNotProvisionedError
from ..models.entities import Department, Employee, Project, Task, TaskDraft, TaskPatch
from ..services.change_notifier import ChangeNotifier, Unsubscribe
from ..services.connection import ConnectionContext
from ..services.data_service import DataService
from ..services.provisioning import PROVISIONING_SQL, check_connection_and_seed
from ..services.settings_service import SettingsService
from ..utils.config import load_ui_settings, save_ui_settings
from ..utils.logging_setup import get_logger

UI_SETTINGS_KEY = "ui_settings"
ALL = "all"


class BoardViewModel(QObject):
    """
    Holds projects/departments/employees for the board and re-reads them after
    every write and every push notification. A refresh replaces state
    wholesale: whichever read completes last wins, nothing is merged.

    Emits:
      changed()                    state replaced or optimistically edited
      failed(str)                  an operation failed; state was re-read
      provisioning_required(str)   remote tables missing; payload is the SQL
      mode_changed(bool)           remote mode on/off
      settings_changed(dict)       display preferences replaced
    """

    changed = Signal()
    failed = Signal(str)
    provisioning_required = Signal(str)
    mode_changed = Signal(bool)
    settings_changed = Signal(dict)

    def __init__(self, data: DataService, notifier: ChangeNotifier, connection: ConnectionContext,
                 settings: SettingsService, db):
        super().__init__()
        self._data = data
        self._notifier = notifier
        self._connection = connection
        self._settings = settings
        self._db = db
        self._log = get_logger("BoardViewModel")

        self.projects: List[Project] = []
        self.departments: List[Department] = []
        self.employees: List[Employee] = []
        self.ui_settings: Dict[str, Any] = load_ui_settings(db)

        self._unsubscribe: Optional[Unsubscribe] = None
        self._pending: Set[asyncio.Task] = set()

    # ---- lookups
    @property
    def is_remote(self) -> bool:
        return self._connection.is_remote

    def employee_map(self) -> Dict[str, Employee]:
        return {e.id: e for e in self.employees}

    def department_map(self) -> Dict[str, Department]:
        return {d.id: d for d in self.departments}

    def filtered_projects(self, department_id: str = ALL, employee_id: str = ALL) -> List[Project]:
        if department_id == ALL and employee_id == ALL:
            return self.projects
        employees = self.employee_map()

        def keep(t: Task) -> bool:
            emp = employees.get(t.employee_id)
            if emp is None:
                return False
            if department_id != ALL and emp.department_id != department_id:
                return False
            if employee_id != ALL and emp.id != employee_id:
                return False
            return True

        out = []
        for p in self.projects:
            tasks = [t for t in p.tasks if keep(t)]
            if tasks:
                out.append(replace(p, tasks=tasks))
        return out

    # ---- queries
    async def refresh(self) -> bool:
        try:
            projects, departments, employees = await asyncio.gather(
                self._data.list_projects(),
                self._data.list_departments(),
                self._data.list_employees(),
            )
        except Exception as e:
            self._log.error("Board refresh failed: %s", e)
            self.failed.emit(str(e))
            return False
        self.projects, self.departments, self.employees = projects, departments, employees
        self.changed.emit()
        return True

    async def load(self) -> bool:
        ok = await self.refresh()
        if self.is_remote:
            try:
                remote = await self._settings.get(UI_SETTINGS_KEY)
            except Exception as e:
                self._log.error("Remote settings read failed: %s", e)
                self.failed.emit(f"load settings: {e}")
                remote = None
            if isinstance(remote, dict):
                self._apply_settings(remote)
        return ok

    # ---- commands
    async def _mutate(self, op: Awaitable[Any], what: str) -> Any:
        try:
            result = await op
        except Exception as e:
            self._log.error("%s failed: %s", what, e)
            self.failed.emit(f"{what}: {e}")
            await self.refresh()
            return None
        await self.refresh()
        return result

    async def add_project(self, name: str) -> Optional[Project]:
        return await self._mutate(self._data.add_project(name), "add project")

    async def rename_project(self, project_id: str, name: str) -> Optional[Project]:
        return await self._mutate(self._data.update_project(project_id, name), "rename project")

    async def delete_project(self, project_id: str) -> Optional[str]:
        return await self._mutate(self._data.delete_project(project_id), "delete project")

    async def add_task(self, project_id: str, draft: TaskDraft) -> Optional[Task]:
        return await self._mutate(self._data.add_task(project_id, draft), "add task")

    async def update_task(self, project_id: str, task_id: str, patch: TaskPatch) -> Optional[Task]:
        return await self._mutate(self._data.update_task(project_id, task_id, patch), "update task")

    async def delete_task(self, project_id: str, task_id: str) -> Optional[str]:
        return await self._mutate(self._data.delete_task(project_id, task_id), "delete task")

    async def set_task_progress(self, project_id: str, task_id: str, progress: int) -> bool:
        """Optimistic: show the new value now, re-read if the write fails."""
        self.projects = [
            p if p.id != project_id else replace(
                p, tasks=[replace(t, progress=progress) if t.id == task_id else t for t in p.tasks]
            )
            for p in self.projects
        ]
        self.changed.emit()
        try:
            await self._data.update_task(project_id, task_id, TaskPatch(progress=progress))
        except Exception as e:
            self._log.error("Progress update failed for %s: %s", task_id, e)
            self.failed.emit(f"update progress: {e}")
            await self.refresh()
            return False
        return True

    async def move_project(self, dragged_id: str, target_id: str) -> bool:
        if dragged_id == target_id:
            return False
        ids = [p.id for p in self.projects]
        if dragged_id not in ids or target_id not in ids:
            return False
        reordered = list(self.projects)
        moved = reordered.pop(ids.index(dragged_id))
        reordered.insert(ids.index(target_id), moved)
        self.projects = reordered
        self.changed.emit()
        try:
            await self._data.update_projects(reordered)
        except Exception as e:
            self._log.error("Project reorder failed: %s", e)
            self.failed.emit(f"reorder projects: {e}")
            await self.refresh()
            return False
        return True

    # ---- display preferences
    def _apply_settings(self, settings: Dict[str, Any]) -> None:
        self.ui_settings = {**self.ui_settings, **settings}
        save_ui_settings(self._db, self.ui_settings)
        self.settings_changed.emit(dict(self.ui_settings))

    async def _mirror_settings(self) -> bool:
        """Push ui_settings to the shared store; failures are reported, never raised."""
        try:
            return await self._settings.save(UI_SETTINGS_KEY, self.ui_settings)
        except Exception as e:
            self._log.error("Remote settings save failed: %s", e)
            self.failed.emit(f"save settings: {e}")
            return False

    async def update_ui_settings(self, settings: Dict[str, Any]) -> None:
        self._apply_settings(settings)
        if self.is_remote:
            await self._mirror_settings()

    # ---- live updates
    def _schedule_refresh(self) -> None:
        task = asyncio.get_running_loop().create_task(self.refresh())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def start_live_updates(self) -> None:
        await self.stop_live_updates()
        self._unsubscribe = await self._notifier.subscribe(self._schedule_refresh)

    async def stop_live_updates(self) -> None:
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            await unsubscribe()

    # ---- connection
    async def connect_remote(self, url: str, key: str) -> bool:
        """Switch backend (empty url/key means local), then re-read everything."""
        await self.stop_live_updates()
        connected = await self._connection.init_remote(url, key)
        self.mode_changed.emit(connected)
        if connected:
            try:
                await check_connection_and_seed(self._connection)
            except TablesNotProvisionedError as e:
                self._log.error("Remote tables missing (%s)", e.table)
                self.provisioning_required.emit(PROVISIONING_SQL)
            except Exception as e:
                self._log.error("Database connection check failed: %s", e)
                self.failed.emit(f"connect: {e}")
            else:
                await self._mirror_settings()
            await self.start_live_updates()
        await self.refresh()
        return connected
