"""Tests for pomo/tasks.py — task list CRUD."""

from datetime import datetime, timezone

import pytest

from pomo.models import Task
from pomo.store import MemoryStore, TASKS_KEY
from pomo.tasks import (
    add_task,
    completed_count,
    delete_task,
    find_task,
    load_tasks,
    save_tasks,
    toggle_task,
)

NOW = datetime(2026, 2, 11, 9, 30, tzinfo=timezone.utc)


def test_add_task():
    tasks = []
    task = add_task(tasks, "  Write report ", priority="high", now=NOW)
    assert task.text == "Write report"
    assert task.priority == "high"
    assert task.completed is False
    assert task.id == str(int(NOW.timestamp() * 1000))
    assert task.created_at.startswith("2026-02-11T09:30:00")
    assert tasks == [task]


def test_add_task_ids_unique_within_same_millisecond():
    tasks = []
    a = add_task(tasks, "a", now=NOW)
    b = add_task(tasks, "b", now=NOW)
    assert a.id != b.id


def test_add_task_blank():
    with pytest.raises(ValueError, match="empty"):
        add_task([], "   ")


def test_add_task_invalid_priority():
    with pytest.raises(ValueError, match="priority"):
        add_task([], "x", priority="urgent")


def test_toggle_task():
    tasks = [Task(id="a", text="A")]
    assert toggle_task(tasks, "a").completed is True
    assert toggle_task(tasks, "a").completed is False


def test_toggle_missing_task():
    with pytest.raises(KeyError):
        toggle_task([], "nope")


def test_delete_task():
    tasks = [Task(id="a"), Task(id="b"), Task(id="c")]
    assert delete_task(tasks, "b") is True
    assert [t.id for t in tasks] == ["a", "c"]
    assert delete_task(tasks, "b") is False


def test_find_and_count():
    tasks = [Task(id="a", completed=True), Task(id="b")]
    assert find_task(tasks, "b") is tasks[1]
    assert find_task(tasks, "z") is None
    assert completed_count(tasks) == 1


def test_save_and_load_preserve_order():
    store = MemoryStore()
    tasks = []
    for text in ("one", "two", "three"):
        add_task(tasks, text, now=NOW)
    save_tasks(store, tasks)
    loaded = load_tasks(store)
    assert [t.text for t in loaded] == ["one", "two", "three"]
    assert loaded == tasks


def test_load_tasks_malformed():
    assert load_tasks(MemoryStore()) == []
    assert load_tasks(MemoryStore({TASKS_KEY: {"not": "a list"}})) == []
    assert len(load_tasks(MemoryStore({TASKS_KEY: [{"id": "1"}, "junk"]}))) == 1
