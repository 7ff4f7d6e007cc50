"""Lifecycle hooks for PomoFocus.

Hooks are shell commands run at key points of the timer, configured in
hooks.yaml at the workspace root::

    on_interval_complete:
      - "notify-send pomo done"
    on_sound:
      - command: "paplay ~/ding.oga"
        timeout: 5

Each command receives a JSON object on stdin: the hook point under
``"hook"`` plus whatever context the caller supplies.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pomo.fileio import read_yaml
from pomo.workspace import hooks_config_path, workspace_root

logger = logging.getLogger(__name__)

VALID_HOOK_POINTS = frozenset({
    "on_start",
    "on_pause",
    "on_reset",
    "on_skip",
    "on_interval_complete",
    "on_sound",
    "on_notification",
})

DEFAULT_TIMEOUT = 30
OUTPUT_CAP = 4096


@dataclass(frozen=True)
class HookCommand:
    command: str
    timeout: float = DEFAULT_TIMEOUT


@dataclass
class HookResult:
    command: str
    hook_point: str
    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def load_hooks_config(root: Path | None = None) -> dict[str, Any]:
    return read_yaml(hooks_config_path(root or workspace_root()))


def hook_commands(hook_point: str, root: Path | None = None) -> list[HookCommand]:
    """Commands registered for *hook_point*; malformed entries are skipped."""
    entries = load_hooks_config(root).get(hook_point)
    if not isinstance(entries, list):
        return []
    commands = []
    for entry in entries:
        if isinstance(entry, str):
            entry = {"command": entry}
        if not isinstance(entry, dict) or not entry.get("command"):
            continue
        commands.append(HookCommand(str(entry["command"]), entry.get("timeout", DEFAULT_TIMEOUT)))
    return commands


def has_hooks(hook_point: str, root: Path | None = None) -> bool:
    return bool(hook_commands(hook_point, root))


def _run_one(cmd: HookCommand, hook_point: str, payload: str, root: Path) -> HookResult:
    result = HookResult(command=cmd.command, hook_point=hook_point)
    try:
        proc = subprocess.run(
            cmd.command,
            shell=True,
            input=payload,
            capture_output=True,
            text=True,
            timeout=cmd.timeout,
            cwd=str(root),
        )
    except subprocess.TimeoutExpired:
        result.exit_code = -1
        result.error = f"Hook timed out after {cmd.timeout}s"
    except OSError as e:
        result.exit_code = -1
        result.error = str(e)
    else:
        result.exit_code = proc.returncode
        result.stdout = proc.stdout[:OUTPUT_CAP]
        result.stderr = proc.stderr[:OUTPUT_CAP]
        if proc.returncode != 0:
            result.error = f"exited {proc.returncode}"
    if not result.ok:
        logger.warning("Hook %s failed (%s): %s", hook_point, result.error, cmd.command)
    return result


def run_hooks(
    hook_point: str,
    context: dict[str, Any],
    root: Path | None = None,
) -> list[HookResult]:
    """Run every command registered for *hook_point*, in order.

    A failing command does not stop the ones after it.
    """
    if hook_point not in VALID_HOOK_POINTS:
        logger.debug("Ignoring unknown hook point %s", hook_point)
        return []
    root = root or workspace_root()
    payload = json.dumps({"hook": hook_point, **context}, ensure_ascii=False)
    return [_run_one(cmd, hook_point, payload, root) for cmd in hook_commands(hook_point, root)]
