"""Shared test fixtures for PomoFocus tests."""

from __future__ import annotations

import os
from datetime import date
from pathlib import Path
from typing import Callable

import pytest
import yaml

from pomo.models import Settings
from pomo.store import MemoryStore, SETTINGS_KEY
from pomo.timer import PomodoroTimer

TODAY = date(2026, 2, 11)


class ManualScheduler:
    """Scheduler the test fires by hand instead of a real clock."""

    def __init__(self) -> None:
        self.callback: Callable[[], None] | None = None
        self.starts = 0
        self.cancels = 0

    @property
    def active(self) -> bool:
        return self.callback is not None

    def start(self, callback: Callable[[], None]) -> None:
        self.callback = callback
        self.starts += 1

    def cancel(self) -> None:
        self.callback = None
        self.cancels += 1

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            if self.callback is None:
                return
            self.callback()


class RecordingNotifier:
    def __init__(self, permission: str = "granted", fail: bool = False) -> None:
        self.permission = permission
        self.fail = fail
        self.sounds = 0
        self.notifications: list[tuple[str, str]] = []
        self.permission_requests = 0

    def play_sound(self) -> None:
        if self.fail:
            raise RuntimeError("no audio device")
        self.sounds += 1

    def show_notification(self, title: str, body: str) -> None:
        if self.fail:
            raise RuntimeError("notification daemon gone")
        self.notifications.append((title, body))

    def request_permission(self) -> str:
        self.permission_requests += 1
        return self.permission


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with a profile."""
    root = tmp_path / "workspace"
    (root / "store").mkdir(parents=True)

    profile = {"timezone": "UTC", "daily_goal": 10}
    (root / "profile.yaml").write_text(
        yaml.dump(profile, default_flow_style=False), encoding="utf-8"
    )

    os.environ["POMO_ROOT"] = str(root)
    yield root
    if "POMO_ROOT" in os.environ:
        del os.environ["POMO_ROOT"]


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_timer(workspace, scheduler, notifier):
    """Build a PomodoroTimer over an in-memory store pinned to TODAY."""

    def _make(settings: Settings | None = None, store: MemoryStore | None = None) -> PomodoroTimer:
        if store is None:
            store = MemoryStore()
        if settings is not None:
            store.put(SETTINGS_KEY, settings.to_dict())
        return PomodoroTimer(
            store,
            scheduler=scheduler,
            notifier=notifier,
            clock=lambda: TODAY,
            root=workspace,
        )

    return _make
