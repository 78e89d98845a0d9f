# Rev 0.2.0

from __future__ import annotations
import asyncio
from datetime import date

import pytest
from postgrest.exceptions import APIError

from ganttboard.errors import MalformedRowError, NotFoundError, TablesNotProvisionedError, ValidationError
from ganttboard.models.entities import TaskDraft, TaskPatch
from ganttboard.repositories.remote_store import SupabaseRepository
from ganttboard.services.provisioning import seed_remote


def run(coro):
    return asyncio.run(coro)


@pytest.fixture()
def repo(fake_client) -> SupabaseRepository:
    return SupabaseRepository(fake_client)


@pytest.fixture()
def seeded(fake_client, repo) -> SupabaseRepository:
    run(seed_remote(fake_client))
    return repo


# --- ordering ----------------------------------------------------------------

def test_projects_follow_position(fake_client, repo):
    fake_client.tables["projects"] = [
        {"id": "a", "name": "A", "created_at": "2024-01-01", "position": 2},
        {"id": "b", "name": "B", "created_at": "2024-01-02", "position": 0},
        {"id": "c", "name": "C", "created_at": "2024-01-03", "position": 1},
    ]
    assert [p.id for p in run(repo.list_projects())] == ["b", "c", "a"]


def test_projects_without_position_column_sort_by_creation(fake_client, repo):
    fake_client.missing_columns["projects"] = {"position"}
    fake_client.missing_columns["tasks"] = {"position"}
    for name in ("First", "Second", "Third"):
        run(repo.add_project(name))

    projects = run(repo.list_projects())
    assert [p.name for p in projects] == ["First", "Second", "Third"]
    orders = [c[3] for c in fake_client.calls if c[0] == "projects" and c[1] == "select"]
    assert ["position", "created_at"] in orders and ["created_at"] in orders


def test_reorder_without_position_column_is_skipped(fake_client, repo):
    fake_client.missing_columns["projects"] = {"position"}
    a = run(repo.add_project("A"))
    b = run(repo.add_project("B"))
    assert run(repo.update_projects([b, a])) == [b, a]
    assert [p.id for p in run(repo.list_projects())] == [a.id, b.id]


def test_update_projects_persists_positions(fake_client, repo):
    a = run(repo.add_project("A"))
    b = run(repo.add_project("B"))
    run(repo.update_projects([b, a]))
    run(repo.update_projects([a, b]))
    assert [p.id for p in run(repo.list_projects())] == [a.id, b.id]


def test_reorder_tasks_persists_positions(seeded):
    tasks = run(seeded.list_projects())[0].tasks
    run(seeded.reorder_tasks("p1", list(reversed(tasks))))
    assert [t.id for t in run(seeded.list_projects())[0].tasks] == ["t3", "t2", "t1"]


def test_reorder_failure_other_than_missing_column_propagates(fake_client, seeded):
    fake_client.failures[("tasks", "update")] = APIError({"code": "42501", "message": "permission denied for table tasks"})
    tasks = run(seeded.list_projects())[0].tasks
    with pytest.raises(APIError):
        run(seeded.reorder_tasks("p1", tasks))


def test_reorder_with_stale_tasks_keeps_other_edits(fake_client, seeded):
    stale = run(seeded.list_projects())[0].tasks
    other = SupabaseRepository(fake_client)
    run(other.update_task("p1", "t1", TaskPatch(progress=99, name="Renamed")))
    run(other.delete_task("p1", "t2"))

    kept = run(seeded.reorder_tasks("p1", list(reversed(stale))))

    assert [t.id for t in kept] == ["t3", "t1"]
    tasks = run(seeded.list_projects())[0].tasks
    assert [(t.id, t.progress) for t in tasks] == [("t3", 25), ("t1", 99)]
    assert tasks[1].name == "Renamed"
    assert ("tasks", "upsert") not in {(c[0], c[1]) for c in fake_client.calls}


def test_reorder_only_sends_position(fake_client, seeded):
    tasks = run(seeded.list_projects())[0].tasks
    sent = []
    original = fake_client.table

    def spy(name):
        query = original(name)
        update = query.update

        def recording_update(values):
            sent.append(dict(values))
            return update(values)

        query.update = recording_update
        return query

    fake_client.table = spy
    run(seeded.reorder_tasks("p1", tasks))
    run(seeded.update_projects(run(seeded.list_projects())))
    assert sent and all(set(v) == {"position"} for v in sent)


def test_reorder_with_stale_projects_does_not_resurrect(fake_client, repo):
    a = run(repo.add_project("A"))
    b = run(repo.add_project("B"))
    stale = run(repo.list_projects())
    run(SupabaseRepository(fake_client).update_project(a.id, "A renamed"))
    run(SupabaseRepository(fake_client).delete_project(b.id))

    assert run(repo.update_projects(list(reversed(stale)))) == [p for p in stale if p.id == a.id]
    projects = run(repo.list_projects())
    assert [(p.id, p.name) for p in projects] == [(a.id, "A renamed")]


def test_reorder_of_another_projects_task_is_ignored(fake_client, seeded):
    other = run(seeded.add_project("Other"))
    tasks = run(seeded.list_projects())[0].tasks
    assert run(seeded.reorder_tasks(other.id, tasks)) == []
    assert {r["project_id"] for r in fake_client.tables["tasks"]} == {"p1"}


# --- reads -------------------------------------------------------------------

def test_nested_shapes_assembled(seeded):
    projects = run(seeded.list_projects())
    assert [t.id for t in projects[0].tasks] == ["t1", "t2", "t3"]
    departments = {d.id: d for d in run(seeded.list_departments())}
    assert [e.id for e in departments["d1"].employees] == ["e1", "e2"]
    assert [e.name for e in run(seeded.list_employees())][0] == "Alice Johnson"


def test_missing_table_is_reported(fake_client, repo):
    fake_client.missing_tables.add("tasks")
    with pytest.raises(TablesNotProvisionedError) as info:
        run(repo.list_projects())
    assert info.value.table == "tasks"


def test_malformed_row_is_reported(fake_client, repo):
    fake_client.tables["employees"] = [{"id": "e1", "name": "Alice"}]
    with pytest.raises(MalformedRowError):
        run(repo.list_employees())


def test_permission_error_reaches_caller_unchanged(fake_client, repo):
    err = APIError({"code": "42501", "message": "permission denied for table projects"})
    fake_client.failures[("projects", "select")] = err
    with pytest.raises(APIError) as info:
        run(repo.list_projects())
    assert info.value is err


# --- writes ------------------------------------------------------------------

def test_add_task_then_read_back(fake_client, seeded):
    project = run(seeded.add_project("Launch"))
    draft = TaskDraft(name="Design", start_date=date(2024, 1, 1), end_date=date(2024, 1, 5), employee_id="e1")
    task = run(seeded.add_task(project.id, draft))

    row = next(r for r in fake_client.tables["tasks"] if r["id"] == task.id)
    assert row["start_date"] == "2024-01-01" and row["progress"] == 0
    stored = next(p for p in run(seeded.list_projects()) if p.id == project.id)
    assert stored.tasks == [task]


def test_partial_update_sends_only_progress(fake_client, seeded):
    before = run(seeded.list_projects())[0].tasks[0]
    updated = run(seeded.update_task("p1", before.id, TaskPatch(progress=42)))

    assert updated.progress == 42
    for attr in ("name", "start_date", "end_date", "employee_id", "description"):
        assert getattr(updated, attr) == getattr(before, attr)
    assert ("tasks", "update", [("id", before.id), ("project_id", "p1")], []) in fake_client.calls


def test_single_date_change_checked_against_stored_window(seeded):
    with pytest.raises(ValidationError):
        run(seeded.update_task("p1", "t1", TaskPatch(end_date=date(2000, 1, 1))))


def test_update_missing_task_not_found(seeded):
    with pytest.raises(NotFoundError):
        run(seeded.update_task("p1", "nope", TaskPatch(progress=1)))
    with pytest.raises(NotFoundError):
        run(seeded.update_task("p2", "t1", TaskPatch(progress=1)))


def test_delete_project_removes_its_tasks(fake_client, seeded):
    assert run(seeded.delete_project("p1")) == "p1"
    assert fake_client.tables["projects"] == []
    assert [r for r in fake_client.tables["tasks"] if r["project_id"] == "p1"] == []


def test_delete_department_removes_its_employees(fake_client, seeded):
    run(seeded.delete_department("d1"))
    assert {r["department_id"] for r in fake_client.tables["employees"]} == {"d2", "d3"}


@pytest.mark.parametrize("call", [
    lambda r: r.update_project("nope", "x"),
    lambda r: r.delete_project("nope"),
    lambda r: r.delete_task("p1", "nope"),
    lambda r: r.update_department("nope", "x"),
    lambda r: r.delete_department("nope"),
    lambda r: r.delete_employee("nope"),
])
def test_absent_targets_raise_not_found(seeded, call):
    with pytest.raises(NotFoundError):
        run(call(seeded))


def test_add_employee_and_department(seeded):
    dept = run(seeded.add_department("Support"))
    emp = run(seeded.add_employee("Fay", dept.id))
    departments = {d.id: d for d in run(seeded.list_departments())}
    assert departments[dept.id].employees == [emp]
