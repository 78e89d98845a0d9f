# Rev 0.2.0
from __future__ import annotations
from typing import List, Protocol, Sequence

from ..models.entities import Department, Employee, Project, Task, TaskDraft, TaskPatch


class BoardRepository(Protocol):
    """
    Async CRUD contract shared by the local and remote backends.
    Update/delete of an absent target raises NotFoundError.
    """

    # reads
    async def list_projects(self) -> List[Project]: ...
    async def list_departments(self) -> List[Department]: ...
    async def list_employees(self) -> List[Employee]: ...

    # projects
    async def add_project(self, name: str) -> Project: ...
    async def update_project(self, project_id: str, name: str) -> Project: ...
    async def delete_project(self, project_id: str) -> str: ...
    async def update_projects(self, projects: Sequence[Project]) -> List[Project]: ...

    # tasks
    async def add_task(self, project_id: str, draft: TaskDraft) -> Task: ...
    async def update_task(self, project_id: str, task_id: str, patch: TaskPatch) -> Task: ...
    async def delete_task(self, project_id: str, task_id: str) -> str: ...
    async def reorder_tasks(self, project_id: str, tasks: Sequence[Task]) -> List[Task]: ...

    # organization
    async def add_department(self, name: str) -> Department: ...
    async def update_department(self, department_id: str, name: str) -> Department: ...
    async def delete_department(self, department_id: str) -> str: ...
    async def add_employee(self, name: str, department_id: str) -> Employee: ...
    async def delete_employee(self, employee_id: str) -> str: ...
