"""Stats aggregation engine for PomoFocus.

Records completion events into a per-day ledger and derives rollups
from it. record() and weekly_rollup() are pure: they never mutate their
inputs, so the caller decides when to persist.
"""

from __future__ import annotations

import copy
import csv
import io
import logging
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path

from pomo.fileio import write_text_atomic
from pomo.models import CompletionEvent, DailyStat, Mode, StatsAggregate, WeeklyRollup
from pomo.store import STATS_KEY, DocumentStore

logger = logging.getLogger(__name__)

WEEK_DAYS = 7
CSV_HEADER = ["Date", "Work Sessions", "Short Breaks", "Long Breaks", "Total Work Time (minutes)"]


def _day_key(day: date | str) -> str:
    if isinstance(day, datetime):
        day = day.date()
    return day if isinstance(day, str) else day.isoformat()


# ── Recording ─────────────────────────────────────────────────


def record(stats: StatsAggregate, event: CompletionEvent, on_date: date | str) -> StatsAggregate:
    """Return a new aggregate with *event* counted against *on_date*."""
    updated = copy.deepcopy(stats)
    day = updated.daily_stats.setdefault(_day_key(on_date), DailyStat())

    if event.mode is Mode.WORK:
        updated.completed_work_sessions += 1
        updated.total_work_seconds += event.duration
        day.work_sessions += 1
        day.total_work_seconds += event.duration
    elif event.mode is Mode.SHORT_BREAK:
        updated.completed_short_breaks += 1
        day.short_breaks += 1
    else:
        updated.completed_long_breaks += 1
        day.long_breaks += 1
    return updated


# ── Rollups ───────────────────────────────────────────────────


def day_stats(stats: StatsAggregate, day: date | str) -> DailyStat:
    """Stats for one day; all zeros when nothing was recorded."""
    found = stats.daily_stats.get(_day_key(day))
    return copy.copy(found) if found else DailyStat()


def weekly_rollup(stats: StatsAggregate, as_of: date) -> WeeklyRollup:
    """Sum the 7 calendar days ending at *as_of*, inclusive.

    Keys that are not ISO dates, and dates after *as_of*, are ignored.
    """
    if isinstance(as_of, datetime):
        as_of = as_of.date()
    start = as_of - timedelta(days=WEEK_DAYS - 1)
    total_work = sessions = short = long_ = 0
    for key, day in stats.daily_stats.items():
        try:
            d = date.fromisoformat(key)
        except ValueError:
            continue
        if start <= d <= as_of:
            total_work += day.total_work_seconds
            sessions += day.work_sessions
            short += day.short_breaks
            long_ += day.long_breaks
    return WeeklyRollup(
        total_work_seconds=total_work,
        work_sessions=sessions,
        short_breaks=short,
        long_breaks=long_,
    )


def daily_goal_reached(stats: StatsAggregate, day: date | str, goal: int = 10) -> bool:
    return day_stats(stats, day).work_sessions >= goal


def format_duration(seconds: int) -> str:
    """Format a total as '2h 5m' or '45m'."""
    hours, rest = divmod(max(0, int(seconds)), 3600)
    minutes = rest // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


# ── CSV export ────────────────────────────────────────────────


def _round_minutes(seconds: int) -> int:
    return int((Decimal(seconds) / 60).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def export_csv(stats: StatsAggregate) -> str:
    """One row per recorded day, in ledger order."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for key, day in stats.daily_stats.items():
        writer.writerow([
            key,
            day.work_sessions,
            day.short_breaks,
            day.long_breaks,
            _round_minutes(day.total_work_seconds),
        ])
    return buf.getvalue()


def export_filename(day: date | str) -> str:
    return f"pomodoro-stats-{_day_key(day)}.csv"


def write_csv_export(stats: StatsAggregate, path: Path) -> Path:
    write_text_atomic(path, export_csv(stats))
    logger.info("Exported %d days of stats to %s", len(stats.daily_stats), path)
    return path


# ── Storage ───────────────────────────────────────────────────


def load_stats(store: DocumentStore) -> StatsAggregate:
    """Load the persisted aggregate; an unusable document yields an empty one."""
    doc = store.get(STATS_KEY)
    if doc is not None and not isinstance(doc, dict):
        logger.warning("Stats document is not a mapping; starting empty")
        return StatsAggregate()
    return StatsAggregate.from_dict(doc or {})


def save_stats(store: DocumentStore, stats: StatsAggregate) -> None:
    store.put(STATS_KEY, stats.to_dict())
