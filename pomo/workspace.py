"""Workspace root, timezone, path helpers for PomoFocus."""

from __future__ import annotations

import logging
import os
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pomo.fileio import read_yaml, write_yaml_atomic

logger = logging.getLogger(__name__)

DEFAULT_DAILY_GOAL = 10


def workspace_root() -> Path:
    """Get the workspace root directory (contains profile.yaml and store/)."""
    return Path(
        os.environ.get("POMO_ROOT", str(Path.home() / ".pomofocus"))
    ).expanduser().resolve()


def load_profile(root: Path | None = None) -> dict:
    if root is None:
        root = workspace_root()
    return read_yaml(profile_path(root))


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Get user's timezone from profile.yaml, defaulting to UTC."""
    profile = load_profile(root)
    name = profile.get("timezone")
    if name:
        try:
            return ZoneInfo(str(name))
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown timezone %r in profile; falling back to UTC", name)
    return ZoneInfo("UTC")


def get_daily_goal(root: Path | None = None) -> int:
    profile = load_profile(root)
    try:
        goal = int(profile.get("daily_goal", DEFAULT_DAILY_GOAL))
    except (TypeError, ValueError):
        return DEFAULT_DAILY_GOAL
    return goal if goal > 0 else DEFAULT_DAILY_GOAL


def now_local(root: Path | None = None) -> datetime:
    """Get current datetime in user's timezone."""
    return datetime.now(get_user_timezone(root))


def today(root: Path | None = None) -> date:
    """Today's calendar date in the user's timezone."""
    return now_local(root).date()


def today_str(root: Path | None = None) -> str:
    """Get today's date string (YYYY-MM-DD) in user's timezone."""
    return today(root).isoformat()


# ── Path helpers ──────────────────────────────────────────────

def profile_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "profile.yaml"


def hooks_config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "hooks.yaml"


def store_dir(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "store"


def exports_dir(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "exports"


def log_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "pomofocus.log"


def ensure_workspace(root: Path | None = None) -> Path:
    """Create the workspace with a default profile.yaml if it does not exist."""
    if root is None:
        root = workspace_root()
    store_dir(root).mkdir(parents=True, exist_ok=True)
    if not profile_path(root).exists():
        write_yaml_atomic(
            profile_path(root),
            {"timezone": "UTC", "daily_goal": DEFAULT_DAILY_GOAL},
        )
        logger.info("Created workspace at %s", root)
    return root
