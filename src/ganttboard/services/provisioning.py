# Rev 0.2.0
"""
Remote provisioning: the SQL an operator runs once in the Supabase SQL
editor, plus the startup probe that seeds an empty database.
"""
from __future__ import annotations
from typing import Any, Dict, List

from postgrest.exceptions import APIError

from ..errors import TablesNotProvisionedError
from ..models.mapping import department_to_row, employee_to_row, task_to_row
from ..models.seed import seed_dataset
from ..repositories.schema_guard import is_missing_table
from ..utils.logging_setup import get_logger
from .connection import ConnectionContext

PROVISIONING_SQL = """\
create table if not exists projects (
  id text primary key,
  name text,
  created_at timestamptz default now(),
  position int
);
create table if not exists tasks (
  id text primary key,
  project_id text references projects(id) on delete cascade,
  name text,
  start_date text,
  end_date text,
  color text,
  employee_id text,
  progress int,
  description text,
  position int
);
create table if not exists departments (
  id text primary key,
  name text
);
create table if not exists employees (
  id text primary key,
  name text,
  department_id text
);
create table if not exists system_settings (
  key text primary key,
  value jsonb
);
alter publication supabase_realtime add table projects, tasks, departments, employees;
"""

log = get_logger("provisioning")


async def _probe(client, table: str) -> List[Dict[str, Any]]:
    try:
        resp = await client.table(table).select("id").limit(1).execute()
    except APIError as e:
        if is_missing_table(e):
            raise TablesNotProvisionedError(table) from e
        raise
    return list(resp.data or [])


async def _seed_insert(client, table: str, rows: List[Dict[str, Any]]) -> None:
    try:
        await client.table(table).insert(rows).execute()
    except APIError as e:
        if is_missing_table(e):
            raise TablesNotProvisionedError(table) from e
        log.error("Seed insert into %s failed: %s", table, e)


async def seed_remote(client) -> None:
    data = seed_dataset()
    await _seed_insert(client, "departments", [department_to_row(d) for d in data.departments])
    await _seed_insert(client, "employees", [employee_to_row(e) for e in data.employees])
    for p in data.projects:
        await _seed_insert(client, "projects", [{"id": p.id, "name": p.name}])
        await _seed_insert(client, "tasks", [task_to_row(t, p.id) for t in p.tasks])


async def check_connection_and_seed(connection: ConnectionContext) -> bool:
    """
    Returns True when an empty database was seeded. Raises
    TablesNotProvisionedError if projects/departments are missing; other
    backend errors propagate unchanged. No-op in local mode.
    """
    session = connection.session
    if session is None:
        return False
    client = session.client
    projects = await _probe(client, "projects")
    await _probe(client, "departments")
    if projects:
        return False
    log.info("Database empty, seeding initial data")
    await seed_remote(client)
    return True
