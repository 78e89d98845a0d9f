# Rev 0.2.0

from __future__ import annotations
import asyncio
from datetime import date

import pytest

from ganttboard.errors import NotFoundError, ValidationError
from ganttboard.models.entities import TaskDraft, TaskPatch
from ganttboard.models.palette import TASK_COLORS


def run(coro):
    return asyncio.run(coro)


# --- projects ----------------------------------------------------------------

def test_add_project_then_task_scenario(local_repo):
    project = run(local_repo.add_project("Launch"))
    draft = TaskDraft(name="Design", start_date=date(2024, 1, 1), end_date=date(2024, 1, 5), employee_id="e1")
    run(local_repo.add_task(project.id, draft))

    stored = next(p for p in run(local_repo.list_projects()) if p.id == project.id)
    assert len(stored.tasks) == 1
    task = stored.tasks[0]
    assert task.progress == 0
    assert task.color in TASK_COLORS
    assert task.end_date >= task.start_date
    assert task.project_id == project.id


def test_update_projects_last_order_wins(local_repo):
    a = run(local_repo.add_project("A"))
    b = run(local_repo.add_project("B"))
    projects = run(local_repo.list_projects())
    by_id = {p.id: p for p in projects}

    run(local_repo.update_projects([by_id[b.id], by_id["p1"], by_id[a.id]]))
    run(local_repo.update_projects([by_id[a.id], by_id[b.id], by_id["p1"]]))

    assert [p.id for p in run(local_repo.list_projects())] == [a.id, b.id, "p1"]


def test_update_projects_partial_list_keeps_the_rest(local_repo):
    a = run(local_repo.add_project("A"))
    projects = run(local_repo.list_projects())
    run(local_repo.update_projects([projects[-1]]))
    assert [p.id for p in run(local_repo.list_projects())] == [a.id, "p1"]


def test_delete_project_removes_its_tasks(local_repo):
    assert run(local_repo.delete_project("p1")) == "p1"
    projects = run(local_repo.list_projects())
    assert all(p.id != "p1" for p in projects)
    assert not any(t.project_id == "p1" for p in projects for t in p.tasks)


def test_rename_project(local_repo):
    renamed = run(local_repo.update_project("p1", "Website v2"))
    assert renamed.name == "Website v2"
    assert run(local_repo.list_projects())[0].name == "Website v2"


@pytest.mark.parametrize("call", [
    lambda r: r.update_project("nope", "x"),
    lambda r: r.delete_project("nope"),
    lambda r: r.update_task("p1", "nope", TaskPatch(progress=1)),
    lambda r: r.delete_task("p1", "nope"),
    lambda r: r.delete_task("nope", "t1"),
    lambda r: r.update_department("nope", "x"),
    lambda r: r.delete_department("nope"),
    lambda r: r.delete_employee("nope"),
])
def test_absent_targets_raise_not_found(local_repo, call):
    with pytest.raises(NotFoundError):
        run(call(local_repo))


# --- tasks -------------------------------------------------------------------

def test_partial_update_touches_only_progress(local_repo):
    before = run(local_repo.list_projects())[0].tasks[0]
    updated = run(local_repo.update_task("p1", before.id, TaskPatch(progress=42)))
    after = run(local_repo.list_projects())[0].tasks[0]

    assert updated.progress == after.progress == 42
    for attr in ("name", "start_date", "end_date", "employee_id", "description", "color"):
        assert getattr(after, attr) == getattr(before, attr)


def test_description_can_be_cleared(local_repo):
    updated = run(local_repo.update_task("p1", "t1", TaskPatch(description="")))
    assert updated.description == ""


def test_update_rejects_end_before_start(local_repo):
    task = run(local_repo.list_projects())[0].tasks[0]
    with pytest.raises(ValidationError):
        run(local_repo.update_task("p1", task.id, TaskPatch(end_date=date(2000, 1, 1))))
    assert run(local_repo.list_projects())[0].tasks[0] == task


def test_add_task_rejects_inverted_window(local_repo):
    draft = TaskDraft(name="Bad", start_date=date(2024, 1, 5), end_date=date(2024, 1, 1), employee_id="e1")
    with pytest.raises(ValidationError):
        run(local_repo.add_task("p1", draft))


@pytest.mark.parametrize("progress", [-1, 101, True, 4.5])
def test_progress_out_of_range(local_repo, progress):
    with pytest.raises(ValidationError):
        run(local_repo.update_task("p1", "t1", TaskPatch(progress=progress)))


def test_delete_task(local_repo):
    assert run(local_repo.delete_task("p1", "t2")) == "t2"
    assert [t.id for t in run(local_repo.list_projects())[0].tasks] == ["t1", "t3"]


def test_reorder_tasks(local_repo):
    tasks = run(local_repo.list_projects())[0].tasks
    run(local_repo.reorder_tasks("p1", list(reversed(tasks))))
    assert [t.id for t in run(local_repo.list_projects())[0].tasks] == ["t3", "t2", "t1"]


# --- organization ------------------------------------------------------------

def test_delete_department_removes_its_employees(local_repo):
    run(local_repo.delete_department("d1"))
    assert all(e.department_id != "d1" for e in run(local_repo.list_employees()))
    assert all(d.id != "d1" for d in run(local_repo.list_departments()))


def test_deleted_employee_stays_referenced_by_tasks(local_repo):
    run(local_repo.delete_employee("e1"))
    assert "e1" in {t.employee_id for t in run(local_repo.list_projects())[0].tasks}


def test_add_employee_joins_department(local_repo):
    dept = run(local_repo.add_department("Support"))
    emp = run(local_repo.add_employee("Fay", dept.id))
    departments = {d.id: d for d in run(local_repo.list_departments())}
    assert [e.id for e in departments[dept.id].employees] == [emp.id]


def test_update_department_name(local_repo):
    assert run(local_repo.update_department("d2", "Growth")).name == "Growth"
    assert {d.id: d.name for d in run(local_repo.list_departments())}["d2"] == "Growth"
