"""Task list CRUD for PomoFocus.

A plain ordered list; it has no interaction with the timer or stats.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from pomo.models import Task
from pomo.store import TASKS_KEY, DocumentStore

logger = logging.getLogger(__name__)

VALID_PRIORITIES = ("high", "medium", "low")


def load_tasks(store: DocumentStore) -> list[Task]:
    doc = store.get(TASKS_KEY)
    if doc is None:
        return []
    if not isinstance(doc, list):
        logger.warning("Tasks document is not a list; starting empty")
        return []
    return [Task.from_dict(t) for t in doc if isinstance(t, dict)]


def save_tasks(store: DocumentStore, tasks: list[Task]) -> None:
    store.put(TASKS_KEY, [t.to_dict() for t in tasks])


def find_task(tasks: list[Task], task_id: str) -> Task | None:
    for t in tasks:
        if t.id == task_id:
            return t
    return None


def _new_id(tasks: list[Task], now: datetime) -> str:
    candidate = int(now.timestamp() * 1000)
    taken = {t.id for t in tasks}
    while str(candidate) in taken:
        candidate += 1
    return str(candidate)


def add_task(
    tasks: list[Task],
    text: str,
    priority: str = "medium",
    now: datetime | None = None,
) -> Task:
    """Append a new task. Raises ValueError on blank text or unknown priority."""
    if not text.strip():
        raise ValueError("Task text must not be empty")
    if priority not in VALID_PRIORITIES:
        raise ValueError(f"Invalid priority: {priority}")
    if now is None:
        now = datetime.now(timezone.utc)
    task = Task(
        id=_new_id(tasks, now),
        text=text.strip(),
        priority=priority,
        created_at=now.isoformat(timespec="milliseconds"),
    )
    tasks.append(task)
    return task


def toggle_task(tasks: list[Task], task_id: str) -> Task:
    task = find_task(tasks, task_id)
    if task is None:
        raise KeyError(f"Task not found: {task_id}")
    task.completed = not task.completed
    return task


def delete_task(tasks: list[Task], task_id: str) -> bool:
    for i, t in enumerate(tasks):
        if t.id == task_id:
            tasks.pop(i)
            return True
    return False


def completed_count(tasks: list[Task]) -> int:
    return sum(1 for t in tasks if t.completed)
