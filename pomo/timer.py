"""Pomodoro timer controller.

Wires the session machine to the stats engine, the persistence port,
a tick scheduler and the side-effect ports. Every state change happens
under one lock, so a tick can never interleave with a completion,
reset, skip or settings update. Side effects (sound, notification,
hooks, listeners) run after the lock is released and never roll back
a transition.
"""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable

from pomo.hooks import run_hooks
from pomo.models import CompletionEvent, SessionState, Settings, StatsAggregate
from pomo.notify import DENIED, GRANTED, Notifier, NullNotifier, completion_message
from pomo.scheduler import Scheduler
from pomo.session import SessionMachine, format_clock, mode_label
from pomo.settings import apply_preset, load_settings, preset_name, save_settings, validate_settings
from pomo.stats import daily_goal_reached, day_stats, load_stats, record, save_stats, weekly_rollup
from pomo.store import DocumentStore
from pomo.workspace import get_daily_goal, get_user_timezone, workspace_root

logger = logging.getLogger(__name__)

Effect = Callable[[], None]
Listener = Callable[[dict[str, Any]], None]


class PomodoroTimer:
    """Single-writer owner of the session and the stats aggregate."""

    def __init__(
        self,
        store: DocumentStore,
        scheduler: Scheduler | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], date] | None = None,
        root: Path | None = None,
    ) -> None:
        self.store = store
        self.scheduler = scheduler
        self.notifier = notifier or NullNotifier()
        self.root = root if root is not None else workspace_root()
        # profile is read once; restart to pick up edits
        self.daily_goal = get_daily_goal(self.root)
        if clock is None:
            tz = get_user_timezone(self.root)
            clock = lambda: datetime.now(tz).date()
        self._clock = clock
        self._lock = threading.RLock()
        self._generation = 0
        self._listeners: list[Listener] = []

        self.settings: Settings = load_settings(store)
        self.stats: StatsAggregate = load_stats(store)
        self.machine = SessionMachine(self.settings)

    # ── Queries ───────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        return self.machine.state

    def today(self) -> date:
        return self._clock()

    def snapshot(self) -> dict[str, Any]:
        """Everything a view needs to render the timer, as plain data."""
        with self._lock:
            state = self.machine.state
            completed, needed = self.machine.cycle_position()
            day = self._clock()
            today_stat = day_stats(self.stats, day)
            return {
                **state.to_dict(),
                "label": mode_label(state.mode),
                "clock": format_clock(state.remaining_seconds),
                "progress": round(self.machine.progress(), 2),
                "cycle": {"completed": completed, "needed": needed},
                "settings": self.settings.to_dict(),
                "preset": preset_name(self.settings),
                "today": {"date": day.isoformat(), **today_stat.to_dict()},
                "week": weekly_rollup(self.stats, day).to_dict(),
                "dailyGoalReached": daily_goal_reached(self.stats, day, self.daily_goal),
            }

    def subscribe(self, listener: Listener) -> None:
        """Call *listener* with a fresh snapshot after every change."""
        self._listeners.append(listener)

    # ── Commands ──────────────────────────────────────────────

    def start(self) -> SessionState:
        with self._lock:
            was_running = self.machine.state.running
            self.machine.start()
            changed = self.machine.state.running != was_running
            if changed:
                self._sync_scheduler()
        if changed:
            self._fire([self._hook_effect("on_start")])
        return self.state

    def pause(self) -> SessionState:
        with self._lock:
            was_running = self.machine.state.running
            self.machine.pause()
            self._sync_scheduler()
        if was_running:
            self._fire([self._hook_effect("on_pause")])
        return self.state

    def toggle(self) -> SessionState:
        with self._lock:
            running = self.machine.state.running
        if running:
            return self.pause()
        return self.start()

    def reset(self) -> SessionState:
        with self._lock:
            self.machine.reset()
            self._sync_scheduler()
        self._fire([self._hook_effect("on_reset")])
        return self.state

    def skip(self) -> CompletionEvent:
        with self._lock:
            # cancel before the transition so no tick lands mid-skip
            self.machine.pause()
            self._sync_scheduler()
            event = self.machine.skip()
            effects = self._on_completed(event)
            self._sync_scheduler()
        self._fire([self._hook_effect("on_skip", event=event.to_dict()), *effects])
        return event

    def tick(self) -> CompletionEvent | None:
        """Deliver one tick; completes the interval if it hits zero."""
        with self._lock:
            event, effects = self._tick_locked()
        self._fire(effects)
        return event

    def update_settings(self, candidate: dict[str, Any]) -> Settings:
        """Validate, persist and adopt a (partial) settings document.

        Raises SettingsError without changing anything if invalid.
        """
        with self._lock:
            settings = validate_settings(candidate, self.settings)
            self._adopt(settings)
        self._fire([])
        return settings

    def apply_preset(self, name: str) -> Settings:
        with self._lock:
            settings = apply_preset(name, self.settings)
            self._adopt(settings)
        self._fire([])
        return settings

    def shutdown(self) -> None:
        with self._lock:
            self._generation += 1
            if self.scheduler is not None:
                self.scheduler.cancel()

    # ── Internals ─────────────────────────────────────────────

    def _adopt(self, settings: Settings) -> None:
        save_settings(self.store, settings)
        self.settings = settings
        self.machine.on_settings_changed(settings)
        logger.info("Settings updated: %s", settings.to_dict())

    def _sync_scheduler(self) -> None:
        """Re-arm or cancel the ticker to match the running flag.

        Must hold the lock. Bumping the generation invalidates any tick
        the previous arm already has in flight.
        """
        self._generation += 1
        if self.scheduler is None:
            return
        if self.machine.state.running:
            generation = self._generation
            self.scheduler.start(lambda: self._on_scheduled_tick(generation))
        else:
            self.scheduler.cancel()

    def _on_scheduled_tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            _, effects = self._tick_locked()
        self._fire(effects)

    def _tick_locked(self) -> tuple[CompletionEvent | None, list[Effect]]:
        before = self.machine.state.remaining_seconds
        state = self.machine.tick()
        if not (before > 0 and state.remaining_seconds == 0):
            return None, []
        event = self.machine.complete()
        effects = self._on_completed(event)
        self._sync_scheduler()
        return event, effects

    def _on_completed(self, event: CompletionEvent) -> list[Effect]:
        day = self._clock()
        self.stats = record(self.stats, event, day)
        try:
            save_stats(self.store, self.stats)
        except OSError:
            logger.exception("Could not persist stats; keeping them in memory")
        logger.info(
            "Completed %s (%ss) on %s; next %s",
            event.mode.value, event.duration, day.isoformat(), self.machine.state.mode.value,
        )
        return [
            self._announce_effect(event, self.settings),
            self._hook_effect(
                "on_interval_complete",
                event=event.to_dict(),
                date=day.isoformat(),
                next=self.machine.state.to_dict(),
            ),
        ]

    def _announce_effect(self, event: CompletionEvent, settings: Settings) -> Effect:
        def announce() -> None:
            if settings.sound_enabled:
                self._guard("sound", self.notifier.play_sound)
            if settings.notifications_enabled:
                if self.notifier.permission == GRANTED:
                    title, body = completion_message(event.mode)
                    self._guard("notification", lambda: self.notifier.show_notification(title, body))
                elif self.notifier.permission != DENIED:
                    self._guard("permission request", self.notifier.request_permission)
        return announce

    def _hook_effect(self, hook_point: str, **context: Any) -> Effect:
        return lambda: self._guard(hook_point, lambda: run_hooks(hook_point, context, self.root))

    def _guard(self, what: str, fn: Callable[[], Any]) -> None:
        try:
            fn()
        except Exception as e:
            logger.warning("%s failed: %s", what, e)

    def _fire(self, effects: list[Effect]) -> None:
        for effect in effects:
            effect()
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            self._guard("listener", lambda listener=listener: listener(snap))
