"""Side-effect ports: sound and desktop notifications.

The timer only calls these; failures are the caller's to log and
never affect sequencing or stats.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from pomo.hooks import has_hooks, run_hooks
from pomo.models import Mode

logger = logging.getLogger(__name__)

GRANTED = "granted"
DENIED = "denied"
DEFAULT = "default"


class NotificationError(RuntimeError):
    """A sound or notification could not be delivered."""


class Notifier(Protocol):
    permission: str

    def play_sound(self) -> None: ...

    def show_notification(self, title: str, body: str) -> None: ...

    def request_permission(self) -> str: ...


def completion_message(mode: Mode) -> tuple[str, str]:
    """(title, body) announcing the end of an interval of *mode*."""
    if mode is Mode.WORK:
        return "Work session completed!", "Time for a break!"
    return "Break time over!", "Ready to focus again?"


class NullNotifier:
    """Drops everything. Used when no delivery channel is available."""

    permission = DENIED

    def play_sound(self) -> None:
        pass

    def show_notification(self, title: str, body: str) -> None:
        pass

    def request_permission(self) -> str:
        return self.permission


class HookNotifier:
    """Delivers sounds and notifications through on_sound / on_notification hooks.

    Permission is granted once an on_notification hook is configured.
    """

    def __init__(self, root: Path | None = None) -> None:
        self.root = root
        self.permission = DEFAULT

    def _run(self, hook_point: str, context: dict) -> None:
        for result in run_hooks(hook_point, context, self.root):
            if not result.ok:
                raise NotificationError(f"{hook_point}: {result.error}")

    def play_sound(self) -> None:
        self._run("on_sound", {})

    def show_notification(self, title: str, body: str) -> None:
        if self.permission != GRANTED:
            logger.debug("Notification suppressed (permission %s)", self.permission)
            return
        self._run("on_notification", {"title": title, "body": body})

    def request_permission(self) -> str:
        self.permission = GRANTED if has_hooks("on_notification", self.root) else DENIED
        return self.permission
