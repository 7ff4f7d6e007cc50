"""PomoFocus web service: JSON API over the timer, stats and task list."""

from __future__ import annotations

import logging
import os
import secrets
import threading
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, AsyncIterator

from fastapi import Body, Depends, FastAPI, HTTPException, status
from fastapi.responses import PlainTextResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from pomo import (
    HookNotifier,
    JsonFileStore,
    PomodoroTimer,
    SettingsError,
    ThreadScheduler,
    VALID_PRIORITIES,
    add_task,
    completed_count,
    delete_task,
    ensure_workspace,
    export_csv,
    export_filename,
    load_tasks,
    save_tasks,
    toggle_task,
    weekly_rollup,
    workspace_root,
)

logger = logging.getLogger(__name__)

logging.basicConfig(
    level=os.environ.get("POMO_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

_timer: PomodoroTimer | None = None
_timer_lock = threading.Lock()
# task edits are read-modify-write on one document
_tasks_lock = threading.Lock()


def get_timer() -> PomodoroTimer:
    """The process-wide timer, created on first use."""
    global _timer
    with _timer_lock:
        if _timer is None:
            root = ensure_workspace(workspace_root())
            _timer = PomodoroTimer(
                JsonFileStore.for_workspace(root),
                scheduler=ThreadScheduler(),
                notifier=HookNotifier(root),
                root=root,
            )
            logger.info("Timer ready (workspace %s)", root)
        return _timer


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    if _timer is not None:
        _timer.shutdown()


app = FastAPI(title="PomoFocus", version="0.1.0", lifespan=lifespan)


# ── Auth ──────────────────────────────────────────────────────

security = HTTPBasic(auto_error=False)


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("POMO_USER", "")
    expected_password = os.environ.get("POMO_PASS", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


# ── Timer ─────────────────────────────────────────────────────

@app.get("/api/timer")
def api_timer(timer: PomodoroTimer = Depends(get_timer), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Current interval, countdown and cycle position."""
    return timer.snapshot()


@app.post("/api/timer/{command}")
def api_timer_command(
    command: str,
    timer: PomodoroTimer = Depends(get_timer),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """start / pause / toggle / reset / skip."""
    actions = {
        "start": timer.start,
        "pause": timer.pause,
        "toggle": timer.toggle,
        "reset": timer.reset,
        "skip": timer.skip,
    }
    if command not in actions:
        raise HTTPException(status_code=404, detail=f"Unknown timer command: {command}")
    result = actions[command]()
    body: dict[str, Any] = {"ok": True, "timer": timer.snapshot()}
    if command == "skip":
        body["completed"] = result.to_dict()
    return body


# ── Settings ──────────────────────────────────────────────────

@app.get("/api/settings")
def api_get_settings(timer: PomodoroTimer = Depends(get_timer), username: str = Depends(get_current_user)) -> dict[str, Any]:
    return timer.settings.to_dict()


@app.put("/api/settings")
def api_update_settings(
    payload: dict[str, Any] = Body(...),
    timer: PomodoroTimer = Depends(get_timer),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Merge a partial settings document over the current settings."""
    try:
        settings = timer.update_settings(payload)
    except SettingsError as e:
        raise HTTPException(status_code=422, detail={"errors": e.errors})
    return {"ok": True, "settings": settings.to_dict()}


@app.post("/api/settings/preset/{name}")
def api_apply_preset(
    name: str,
    timer: PomodoroTimer = Depends(get_timer),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    try:
        settings = timer.apply_preset(name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown preset: {name}")
    return {"ok": True, "settings": settings.to_dict()}


# ── Stats ─────────────────────────────────────────────────────

def _parse_date(value: str | None, default: date) -> date:
    if not value:
        return default
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date: {value}")


@app.get("/api/stats")
def api_stats(timer: PomodoroTimer = Depends(get_timer), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Full aggregate, including every recorded day."""
    return timer.stats.to_dict()


@app.get("/api/stats/weekly")
def api_stats_weekly(
    as_of: str | None = None,
    timer: PomodoroTimer = Depends(get_timer),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Trailing 7-day rollup ending at *as_of* (default today)."""
    day = _parse_date(as_of, timer.today())
    return {"asOf": day.isoformat(), **weekly_rollup(timer.stats, day).to_dict()}


@app.get("/api/stats/export.csv")
def api_stats_export(timer: PomodoroTimer = Depends(get_timer), username: str = Depends(get_current_user)) -> PlainTextResponse:
    filename = export_filename(timer.today())
    return PlainTextResponse(
        export_csv(timer.stats),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ── Tasks ─────────────────────────────────────────────────────

@app.get("/api/tasks")
def api_list_tasks(timer: PomodoroTimer = Depends(get_timer), username: str = Depends(get_current_user)) -> dict[str, Any]:
    tasks = load_tasks(timer.store)
    return {
        "tasks": [t.to_dict() for t in tasks],
        "completed": completed_count(tasks),
        "total": len(tasks),
    }


@app.post("/api/tasks")
def api_create_task(
    payload: dict[str, Any] = Body(...),
    timer: PomodoroTimer = Depends(get_timer),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Append a task: {"text": ..., "priority": "high|medium|low"}."""
    priority = str(payload.get("priority", "medium"))
    if priority not in VALID_PRIORITIES:
        raise HTTPException(status_code=400, detail=f"Invalid priority: {priority}")
    with _tasks_lock:
        tasks = load_tasks(timer.store)
        try:
            task = add_task(tasks, str(payload.get("text", "")), priority=priority)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        save_tasks(timer.store, tasks)
    return {"ok": True, "task": task.to_dict()}


@app.post("/api/tasks/{task_id}/toggle")
def api_toggle_task(
    task_id: str,
    timer: PomodoroTimer = Depends(get_timer),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    with _tasks_lock:
        tasks = load_tasks(timer.store)
        try:
            task = toggle_task(tasks, task_id)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
        save_tasks(timer.store, tasks)
    return {"ok": True, "task": task.to_dict()}


@app.delete("/api/tasks/{task_id}")
def api_delete_task(
    task_id: str,
    timer: PomodoroTimer = Depends(get_timer),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    with _tasks_lock:
        tasks = load_tasks(timer.store)
        if not delete_task(tasks, task_id):
            raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
        save_tasks(timer.store, tasks)
    return {"ok": True, "task_id": task_id}
