# Rev 0.2.0
"""
DataService: the one operation set the UI talks to.

Each call snapshots ConnectionContext.session once and routes to the remote
repository (session present) or the local one. Callers never branch on the
backend; errors come back exactly as the chosen backend raised them.
"""
from __future__ import annotations
from typing import Callable, List, Optional, Sequence, Tuple

from ..models.entities import Dataset, Department, Employee, Project, Task, TaskDraft, TaskPatch
from ..models.ids import IdGenerator
from ..repositories.board_repository import BoardRepository
from ..repositories.local_store import LocalRepository
from ..repositories.remote_store import SupabaseRepository
from .connection import ConnectionContext, RemoteSession


class DataService:
    def __init__(self, connection: ConnectionContext, local: LocalRepository,
                 remote_factory: Callable[..., BoardRepository] = SupabaseRepository,
                 ids: Optional[IdGenerator] = None):
        self._connection = connection
        self._local = local
        self._remote_factory = remote_factory
        self._ids = ids or IdGenerator()
        self._remote: Optional[Tuple[RemoteSession, BoardRepository]] = None

    @property
    def is_remote(self) -> bool:
        return self._connection.is_remote

    def backend(self) -> BoardRepository:
        session = self._connection.session
        if session is None:
            return self._local
        cached = self._remote
        if cached is None or cached[0] is not session:
            cached = (session, self._remote_factory(session.client, ids=self._ids))
            self._remote = cached
        return cached[1]

    # reads
    async def list_projects(self) -> List[Project]:
        return await self.backend().list_projects()

    async def list_departments(self) -> List[Department]:
        return await self.backend().list_departments()

    async def list_employees(self) -> List[Employee]:
        return await self.backend().list_employees()

    async def read_dataset(self) -> Dataset:
        repo = self.backend()
        return Dataset(
            projects=await repo.list_projects(),
            departments=await repo.list_departments(),
            employees=await repo.list_employees(),
        )

    # projects
    async def add_project(self, name: str) -> Project:
        return await self.backend().add_project(name)

    async def update_project(self, project_id: str, name: str) -> Project:
        return await self.backend().update_project(project_id, name)

    async def delete_project(self, project_id: str) -> str:
        return await self.backend().delete_project(project_id)

    async def update_projects(self, projects: Sequence[Project]) -> List[Project]:
        return await self.backend().update_projects(projects)

    # tasks
    async def add_task(self, project_id: str, draft: TaskDraft) -> Task:
        return await self.backend().add_task(project_id, draft)

    async def update_task(self, project_id: str, task_id: str, patch: TaskPatch) -> Task:
        return await self.backend().update_task(project_id, task_id, patch)

    async def delete_task(self, project_id: str, task_id: str) -> str:
        return await self.backend().delete_task(project_id, task_id)

    async def reorder_tasks(self, project_id: str, tasks: Sequence[Task]) -> List[Task]:
        return await self.backend().reorder_tasks(project_id, tasks)

    # organization
    async def add_department(self, name: str) -> Department:
        return await self.backend().add_department(name)

    async def update_department(self, department_id: str, name: str) -> Department:
        return await self.backend().update_department(department_id, name)

    async def delete_department(self, department_id: str) -> str:
        return await self.backend().delete_department(department_id)

    async def add_employee(self, name: str, department_id: str) -> Employee:
        return await self.backend().add_employee(name, department_id)

    async def delete_employee(self, employee_id: str) -> str:
        return await self.backend().delete_employee(employee_id)
