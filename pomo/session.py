"""Session state machine for PomoFocus.

Sequences WORK / SHORT_BREAK / LONG_BREAK intervals. The machine is
clock-agnostic: the caller feeds it ticks, observes remaining_seconds
reaching zero, and calls complete() before ticking again.
"""

from __future__ import annotations

from pomo.models import CompletionEvent, Mode, SessionState, Settings
from pomo.settings import duration_for

MODE_LABELS = {
    Mode.WORK: "Focus Time",
    Mode.SHORT_BREAK: "Short Break",
    Mode.LONG_BREAK: "Long Break",
}


def mode_label(mode: Mode) -> str:
    return MODE_LABELS[mode]


def format_clock(seconds: int) -> str:
    """Format a countdown as MM:SS."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def next_mode(mode: Mode, completed_in_cycle: int, settings: Settings) -> tuple[Mode, int]:
    """Mode and cycle counter that follow completing an interval of *mode*."""
    if mode is Mode.WORK:
        completed = completed_in_cycle + 1
        if completed >= settings.sessions_before_long_break:
            return Mode.LONG_BREAK, 0
        return Mode.SHORT_BREAK, completed
    return Mode.WORK, completed_in_cycle


class SessionMachine:
    """Owns the SessionState; the only writer to it."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        duration = duration_for(Mode.WORK, self.settings)
        self.state = SessionState(
            mode=Mode.WORK,
            remaining_seconds=duration,
            interval_seconds=duration,
        )

    def _resolve(self, mode: Mode) -> None:
        duration = duration_for(mode, self.settings)
        self.state.mode = mode
        self.state.remaining_seconds = duration
        self.state.interval_seconds = duration

    def tick(self) -> SessionState:
        """Count down one second. No-op unless running with time left."""
        if self.state.running and self.state.remaining_seconds > 0:
            self.state.remaining_seconds -= 1
        return self.state

    def complete(self) -> CompletionEvent:
        """Finish the current interval and advance to the next one.

        Raises ValueError if the countdown has not reached zero.
        """
        if self.state.remaining_seconds != 0:
            raise ValueError(
                f"Cannot complete {self.state.mode.value}: "
                f"{self.state.remaining_seconds}s remaining"
            )
        event = CompletionEvent(mode=self.state.mode, duration=self.state.interval_seconds)
        mode, completed = next_mode(
            self.state.mode, self.state.completed_in_cycle, self.settings
        )
        self.state.completed_in_cycle = completed
        self._resolve(mode)
        self.state.running = self.settings.auto_advance
        return event

    def skip(self) -> CompletionEvent:
        """Force-complete the current interval whether or not it is running."""
        self.state.running = False
        self.state.remaining_seconds = 0
        return self.complete()

    def reset(self) -> SessionState:
        """Stop and rewind the current interval. Never counts as a completion."""
        self.state.running = False
        self._resolve(self.state.mode)
        return self.state

    def start(self) -> SessionState:
        if self.state.remaining_seconds > 0:
            self.state.running = True
        return self.state

    def pause(self) -> SessionState:
        self.state.running = False
        return self.state

    def toggle(self) -> SessionState:
        if self.state.running:
            return self.pause()
        return self.start()

    def on_settings_changed(self, settings: Settings) -> SessionState:
        """Adopt new settings.

        An idle machine re-resolves its displayed duration; a running
        countdown is left alone and the new durations apply from the next
        interval on. completed_in_cycle is kept as-is and judged against the
        new threshold at the next WORK completion.
        """
        self.settings = settings
        if not self.state.running:
            self._resolve(self.state.mode)
        return self.state

    def progress(self) -> float:
        """Percentage (0-100) of the current interval already elapsed."""
        total = self.state.interval_seconds
        if total <= 0:
            return 0.0
        return 100.0 - (self.state.remaining_seconds / total) * 100.0

    def cycle_position(self) -> tuple[int, int]:
        """(completed, needed) WORK intervals towards the next long break."""
        needed = self.settings.sessions_before_long_break
        return min(self.state.completed_in_cycle, needed), needed
