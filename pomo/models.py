"""Typed dataclasses for the PomoFocus data model.

All persisted models use from_dict/to_dict for JSON serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults. Keys written by
earlier versions of the browser app (``work``, ``totalWorkTime``, ...)
are accepted as aliases on load.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _first(d: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in d and d[key] is not None:
            return d[key]
    return default


# ── Modes ─────────────────────────────────────────────────────


class Mode(str, Enum):
    WORK = "work"
    SHORT_BREAK = "shortBreak"
    LONG_BREAK = "longBreak"

    @property
    def is_break(self) -> bool:
        return self is not Mode.WORK


# ── Settings ──────────────────────────────────────────────────


@dataclass(frozen=True)
class Settings:
    """Interval durations (seconds) and behavior flags."""

    work_duration: int = 25 * 60
    short_break_duration: int = 5 * 60
    long_break_duration: int = 15 * 60
    sessions_before_long_break: int = 4
    auto_advance: bool = False
    notifications_enabled: bool = True
    sound_enabled: bool = True

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        """Build without range checks; see pomo.settings for validation."""
        if not d or not isinstance(d, dict):
            return cls()
        base = cls()
        return cls(
            work_duration=_int(_first(d, "workDuration", "work"), base.work_duration),
            short_break_duration=_int(
                _first(d, "shortBreakDuration", "shortBreak"), base.short_break_duration
            ),
            long_break_duration=_int(
                _first(d, "longBreakDuration", "longBreak"), base.long_break_duration
            ),
            sessions_before_long_break=_int(
                d.get("sessionsBeforeLongBreak"), base.sessions_before_long_break
            ),
            auto_advance=bool(_first(d, "autoAdvance", "autoStartNextSession", default=False)),
            notifications_enabled=bool(
                _first(d, "notificationsEnabled", "enableNotifications", default=True)
            ),
            sound_enabled=bool(_first(d, "soundEnabled", "enableSounds", default=True)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "workDuration": self.work_duration,
            "shortBreakDuration": self.short_break_duration,
            "longBreakDuration": self.long_break_duration,
            "sessionsBeforeLongBreak": self.sessions_before_long_break,
            "autoAdvance": self.auto_advance,
            "notificationsEnabled": self.notifications_enabled,
            "soundEnabled": self.sound_enabled,
        }


# ── Session ───────────────────────────────────────────────────


@dataclass
class SessionState:
    mode: Mode = Mode.WORK
    remaining_seconds: int = 0
    interval_seconds: int = 0  # duration the current countdown was resolved with
    running: bool = False
    completed_in_cycle: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "remainingSeconds": self.remaining_seconds,
            "intervalSeconds": self.interval_seconds,
            "running": self.running,
            "completedInCycle": self.completed_in_cycle,
        }


@dataclass(frozen=True)
class CompletionEvent:
    mode: Mode
    duration: int

    def to_dict(self) -> dict[str, Any]:
        return {"mode": self.mode.value, "duration": self.duration}


# ── Stats ─────────────────────────────────────────────────────


@dataclass
class DailyStat:
    work_sessions: int = 0
    short_breaks: int = 0
    long_breaks: int = 0
    total_work_seconds: int = 0

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> DailyStat:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            work_sessions=max(0, _int(d.get("workSessions"))),
            short_breaks=max(0, _int(d.get("shortBreaks"))),
            long_breaks=max(0, _int(d.get("longBreaks"))),
            total_work_seconds=max(0, _int(_first(d, "totalWorkSeconds", "totalWorkTime"))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "workSessions": self.work_sessions,
            "shortBreaks": self.short_breaks,
            "longBreaks": self.long_breaks,
            "totalWorkSeconds": self.total_work_seconds,
        }


@dataclass
class StatsAggregate:
    total_work_seconds: int = 0
    completed_work_sessions: int = 0
    completed_short_breaks: int = 0
    completed_long_breaks: int = 0
    daily_stats: dict[str, DailyStat] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> StatsAggregate:
        if not d or not isinstance(d, dict):
            return cls()
        daily = {}
        raw_daily = d.get("dailyStats")
        if isinstance(raw_daily, dict):
            for day, stat in raw_daily.items():
                if isinstance(stat, dict):
                    daily[str(day)] = DailyStat.from_dict(stat)
        return cls(
            total_work_seconds=max(0, _int(_first(d, "totalWorkSeconds", "totalWorkTime"))),
            completed_work_sessions=max(
                0, _int(_first(d, "completedWorkSessions", "completedSessions"))
            ),
            completed_short_breaks=max(
                0, _int(_first(d, "completedShortBreaks", "completedBreaks"))
            ),
            completed_long_breaks=max(0, _int(d.get("completedLongBreaks"))),
            daily_stats=daily,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalWorkSeconds": self.total_work_seconds,
            "completedWorkSessions": self.completed_work_sessions,
            "completedShortBreaks": self.completed_short_breaks,
            "completedLongBreaks": self.completed_long_breaks,
            "dailyStats": {day: s.to_dict() for day, s in self.daily_stats.items()},
        }


@dataclass(frozen=True)
class WeeklyRollup:
    total_work_seconds: int = 0
    work_sessions: int = 0
    short_breaks: int = 0
    long_breaks: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalWorkSeconds": self.total_work_seconds,
            "workSessions": self.work_sessions,
            "shortBreaks": self.short_breaks,
            "longBreaks": self.long_breaks,
        }


# ── Tasks ─────────────────────────────────────────────────────


@dataclass
class Task:
    id: str = ""
    text: str = ""
    completed: bool = False
    priority: str = "medium"  # high, medium, low
    created_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Task:
        return cls(
            id=str(d.get("id", "")),
            text=str(d.get("text", "")),
            completed=bool(d.get("completed", False)),
            priority=str(d.get("priority", "medium")),
            created_at=str(_first(d, "createdAt", "created_at", default="")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "priority": self.priority,
            "createdAt": self.created_at,
        }
