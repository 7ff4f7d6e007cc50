#!/usr/bin/env python3
"""PomoFocus TUI — interactive terminal focus timer powered by Textual."""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, Callable

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.timer import Timer
from textual.widgets import (
    Checkbox,
    DataTable,
    Footer,
    Header,
    Input,
    Label,
    ProgressBar,
    Select,
    Static,
)

from pomo import (
    PRESETS,
    JsonFileStore,
    PomodoroTimer,
    SettingsError,
    add_task,
    completed_count,
    delete_task,
    ensure_workspace,
    exports_dir,
    export_filename,
    format_duration,
    load_tasks,
    log_path,
    save_tasks,
    toggle_task,
    workspace_root,
    write_csv_export,
)
from pomo.notify import GRANTED

logger = logging.getLogger("pomofocus")

PRESET_ORDER = list(PRESETS)
MODE_CLASSES = {"work": "mode-work", "shortBreak": "mode-short", "longBreak": "mode-long"}
PRIORITY_MARKS = {"high": "[red]●[/]", "medium": "[yellow]●[/]", "low": "[green]●[/]"}
# single-key shortcuts that would otherwise swallow typed characters
SHORTCUT_ACTIONS = {
    "toggle_timer", "skip", "show_stats", "next_preset", "focus_task_input",
    "toggle_task", "delete_task", "export_stats", "show_settings", "quit_app",
}
# form field -> (label, seconds per entered unit)
SETTING_FIELDS = {
    "workDuration": ("Work (minutes)", 60),
    "shortBreakDuration": ("Short break (minutes)", 60),
    "longBreakDuration": ("Long break (minutes)", 60),
    "sessionsBeforeLongBreak": ("Sessions before long break", 1),
}
SETTING_FLAGS = {
    "autoAdvance": "Auto-start next interval",
    "notificationsEnabled": "Notifications",
    "soundEnabled": "Sounds",
}


# ── Ports backed by Textual ────────────────────────────────────


class IntervalScheduler:
    """Scheduler over App.set_interval; ticks run on the app's event loop."""

    def __init__(self, app: App, interval: float = 1.0) -> None:
        self._app = app
        self._interval = interval
        self._timer: Timer | None = None

    @property
    def active(self) -> bool:
        return self._timer is not None

    def start(self, callback: Callable[[], None]) -> None:
        self.cancel()
        self._timer = self._app.set_interval(self._interval, callback)

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None


class AppNotifier:
    """Terminal bell for sounds, toasts for notifications."""

    permission = GRANTED

    def __init__(self, app: App) -> None:
        self._app = app

    def play_sound(self) -> None:
        self._app.bell()

    def show_notification(self, title: str, body: str) -> None:
        self._app.notify(body, title=title, severity="information", timeout=8)

    def request_permission(self) -> str:
        return self.permission


# ── Stylesheet ─────────────────────────────────────────────────

CSS = """
Screen {
    background: $surface;
}

#main-layout {
    height: 1fr;
}

#timer-pane {
    width: 2fr;
    min-width: 36;
    border-right: tall $primary-background-darken-2;
    padding: 1 2;
    align: center top;
}

#side-pane {
    width: 1fr;
    min-width: 30;
    padding: 0 1;
}

#mode-label {
    width: 100%;
    content-align: center middle;
    text-style: bold;
    margin: 1 0;
}

#clock {
    width: 100%;
    height: 3;
    content-align: center middle;
    text-style: bold;
    border: round $primary-background-darken-2;
}

#progress {
    width: 100%;
    margin: 1 0;
}

#cycle {
    width: 100%;
    content-align: center middle;
}

#milestone {
    width: 100%;
    content-align: center middle;
    color: $warning;
    text-style: bold;
    margin: 1 0;
}

.mode-work #mode-label { color: $error; }
.mode-short #mode-label { color: $success; }
.mode-long #mode-label { color: $accent; }

.section-title {
    text-style: bold;
    color: $text;
    margin: 1 0 0 0;
    padding: 0 1;
}

#task-entry {
    height: auto;
}

#task-input {
    width: 1fr;
}

#task-priority {
    width: 16;
}

#tasks-table {
    height: 1fr;
}

#settings-info {
    height: auto;
    padding: 0 1;
    color: $text-muted;
}

#stats-screen {
    padding: 1 2;
}

#stats-info {
    height: auto;
    padding: 1 2;
    margin: 0 0 1 0;
    border: tall $primary-background-darken-2;
}

#daily-table {
    height: 1fr;
}

#settings-screen {
    padding: 1 2;
}

.setting-row {
    height: auto;
}

.setting-name {
    width: 30;
    padding: 1 1;
}

.setting-input {
    width: 12;
}

#settings-hint {
    color: $text-muted;
    margin: 1 0;
}
"""


# ── Screens ────────────────────────────────────────────────────


class StatsScreen(Vertical):
    """Stats view: totals, today, trailing week + per-day table."""

    def __init__(self, timer: PomodoroTimer, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._timer = timer

    def compose(self) -> ComposeResult:
        yield Label("Statistics", classes="section-title")
        yield Static(id="stats-info")
        yield DataTable(id="daily-table")

    def on_mount(self) -> None:
        snap = self._timer.snapshot()
        stats = self._timer.stats
        today = snap["today"]
        week = snap["week"]

        info = [
            f"Today ({today['date']}): {today['workSessions']} sessions, "
            f"{format_duration(today['totalWorkSeconds'])} focused, "
            f"{today['shortBreaks']} short / {today['longBreaks']} long breaks",
            f"Last 7 days: {week['workSessions']} sessions, "
            f"{format_duration(week['totalWorkSeconds'])} focused, "
            f"{week['shortBreaks']} short / {week['longBreaks']} long breaks",
            f"All time: {stats.completed_work_sessions} sessions, "
            f"{format_duration(stats.total_work_seconds)} focused, "
            f"{stats.completed_short_breaks} short / {stats.completed_long_breaks} long breaks",
        ]
        self.query_one("#stats-info", Static).update("\n".join(info))

        table: DataTable = self.query_one("#daily-table", DataTable)
        table.add_columns("Date", "Work", "Short", "Long", "Focused")
        for day in sorted(stats.daily_stats, reverse=True)[:30]:
            s = stats.daily_stats[day]
            table.add_row(
                day,
                str(s.work_sessions),
                str(s.short_breaks),
                str(s.long_breaks),
                format_duration(s.total_work_seconds),
            )


def form_to_settings(fields: dict[str, str], flags: dict[str, bool]) -> dict[str, Any]:
    """Turn the settings form into a settings document (minutes become seconds).

    Entries that are not whole numbers pass through as text so the
    resolver reports them against their field.
    """
    doc: dict[str, Any] = {}
    for key, raw in fields.items():
        try:
            doc[key] = int(raw.strip()) * SETTING_FIELDS[key][1]
        except ValueError:
            doc[key] = raw
    doc.update(flags)
    return doc


class SettingsScreen(Vertical):
    """Editable durations and flags; ctrl+s applies them."""

    def __init__(self, timer: PomodoroTimer, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._timer = timer

    def compose(self) -> ComposeResult:
        current = self._timer.settings.to_dict()
        yield Label("Settings", classes="section-title")
        for key, (label, unit) in SETTING_FIELDS.items():
            yield Horizontal(
                Label(label, classes="setting-name"),
                Input(
                    value=str(current[key] // unit),
                    type="integer",
                    id=f"set-{key}",
                    classes="setting-input",
                ),
                classes="setting-row",
            )
        for key, label in SETTING_FLAGS.items():
            yield Checkbox(label, value=current[key], id=f"set-{key}")
        yield Static("ctrl+s save · esc back", id="settings-hint")

    def values(self) -> dict[str, Any]:
        fields = {key: self.query_one(f"#set-{key}", Input).value for key in SETTING_FIELDS}
        flags = {key: self.query_one(f"#set-{key}", Checkbox).value for key in SETTING_FLAGS}
        return form_to_settings(fields, flags)


# ── Main app ───────────────────────────────────────────────────


class PomoFocusApp(App):
    """PomoFocus — interactive terminal focus timer."""

    TITLE = "PomoFocus"
    CSS = CSS
    AUTO_FOCUS = None

    BINDINGS = [
        Binding("space", "toggle_timer", "Start/Pause"),
        Binding("escape", "escape", "Reset"),
        Binding("n", "skip", "Skip"),
        Binding("s", "show_stats", "Stats"),
        Binding("p", "next_preset", "Preset"),
        Binding("o", "show_settings", "Settings"),
        Binding("ctrl+s", "save_settings", "Save", show=False),
        Binding("a", "focus_task_input", "Add Task"),
        Binding("x", "toggle_task", "Done"),
        Binding("delete", "delete_task", "Delete"),
        Binding("e", "export_stats", "Export"),
        Binding("q", "quit_app", "Quit"),
    ]

    current_view: reactive[str] = reactive("timer")

    def __init__(self) -> None:
        super().__init__()
        self._root = ensure_workspace(workspace_root())
        self._store = JsonFileStore.for_workspace(self._root)
        self._timer = PomodoroTimer(
            self._store,
            scheduler=IntervalScheduler(self),
            notifier=AppNotifier(self),
            root=self._root,
        )
        self._tasks = load_tasks(self._store)

    def _typing(self) -> bool:
        return isinstance(self.focused, Input)

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        """Timer triggers are disabled while the task input has focus."""
        if action in SHORTCUT_ACTIONS and self._typing():
            return None
        return True

    def compose(self) -> ComposeResult:
        yield Header()
        yield Horizontal(
            Vertical(
                Label(id="mode-label"),
                Static(id="clock"),
                ProgressBar(total=100, show_eta=False, id="progress"),
                Static(id="cycle"),
                Static(id="milestone"),
                id="timer-pane",
            ),
            Vertical(
                Label("Tasks", id="tasks-title", classes="section-title"),
                Horizontal(
                    Input(placeholder="Add a new task…", id="task-input"),
                    Select(
                        [("High", "high"), ("Medium", "medium"), ("Low", "low")],
                        value="medium",
                        allow_blank=False,
                        id="task-priority",
                    ),
                    id="task-entry",
                ),
                DataTable(id="tasks-table", cursor_type="row"),
                Label("Settings", classes="section-title"),
                Static(id="settings-info"),
                id="side-pane",
            ),
            id="main-layout",
        )
        yield Footer()

    def on_mount(self) -> None:
        table: DataTable = self.query_one("#tasks-table", DataTable)
        table.add_columns(" ", "Task", "Pri")
        self._rebuild_tasks()
        self._timer.subscribe(self._render_timer)
        self._render_timer(self._timer.snapshot())

    # ── Rendering ──────────────────────────────────────────────

    def _render_timer(self, snap: dict[str, Any]) -> None:
        pane = self.query_one("#timer-pane", Vertical)
        for cls in MODE_CLASSES.values():
            pane.remove_class(cls)
        pane.add_class(MODE_CLASSES[snap["mode"]])

        state = "▶" if snap["running"] else "⏸"
        self.query_one("#mode-label", Label).update(f"{snap['label']}  {state}")
        self.query_one("#clock", Static).update(snap["clock"])
        self.query_one("#progress", ProgressBar).update(progress=snap["progress"])

        cycle = snap["cycle"]
        dots = "●" * cycle["completed"] + "○" * (cycle["needed"] - cycle["completed"])
        self.query_one("#cycle", Static).update(dots)

        milestone = self.query_one("#milestone", Static)
        if snap["dailyGoalReached"]:
            milestone.update(f"🔥 Awesome! {snap['today']['workSessions']} sessions today!")
        else:
            milestone.update("")

        s = snap["settings"]
        preset = snap["preset"] or "custom"
        self.query_one("#settings-info", Static).update(
            f"Preset: {preset}\n"
            f"Work {s['workDuration'] // 60} min · Short {s['shortBreakDuration'] // 60} min · "
            f"Long {s['longBreakDuration'] // 60} min\n"
            f"Long break every {s['sessionsBeforeLongBreak']} sessions\n"
            f"Auto-start {'On' if s['autoAdvance'] else 'Off'} · "
            f"Notifications {'On' if s['notificationsEnabled'] else 'Off'} · "
            f"Sounds {'On' if s['soundEnabled'] else 'Off'}"
        )

        today = snap["today"]
        self.sub_title = (
            f"🍅 {today['workSessions']} today · "
            f"{format_duration(snap['week']['totalWorkSeconds'])} this week"
        )

    def _rebuild_tasks(self) -> None:
        table: DataTable = self.query_one("#tasks-table", DataTable)
        table.clear()
        for t in self._tasks:
            mark = "[x]" if t.completed else "[ ]"
            text = f"[strike dim]{t.text}[/]" if t.completed else t.text
            table.add_row(mark, text, PRIORITY_MARKS.get(t.priority, t.priority), key=t.id)
        label = self.query_one("#tasks-title", Label)
        label.update(f"Tasks  {completed_count(self._tasks)}/{len(self._tasks)} completed")

    def _save_tasks(self) -> None:
        try:
            save_tasks(self._store, self._tasks)
        except OSError as e:
            logger.exception("Saving tasks failed")
            self.notify(f"Could not save tasks: {e}", title="Error", severity="error")
        self._rebuild_tasks()

    def _selected_task_id(self) -> str | None:
        table: DataTable = self.query_one("#tasks-table", DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return row_key.value

    # ── Timer actions ──────────────────────────────────────────

    def action_toggle_timer(self) -> None:
        self._timer.toggle()

    def action_escape(self) -> None:
        """Leave the task input if typing, otherwise reset the interval."""
        if self._typing():
            self.set_focus(None)
            self.refresh_bindings()
            return
        if self.current_view != "timer":
            self._switch_to("timer")
            return
        self._timer.reset()

    def action_skip(self) -> None:
        self._timer.skip()

    def action_next_preset(self) -> None:
        current = self._timer.snapshot()["preset"]
        idx = PRESET_ORDER.index(current) + 1 if current in PRESET_ORDER else 0
        name = PRESET_ORDER[idx % len(PRESET_ORDER)]
        try:
            self._timer.apply_preset(name)
        except SettingsError as e:
            self.notify(str(e), title="Settings", severity="warning")
            return
        self.notify(f"Preset: {name}", title="Settings")

    def action_save_settings(self) -> None:
        if self.current_view != "settings":
            return
        form = self.query_one(SettingsScreen)
        try:
            self._timer.update_settings(form.values())
        except SettingsError as e:
            detail = "\n".join(f"{SETTING_FIELDS.get(k, (k,))[0]}: {v}" for k, v in e.errors.items())
            self.notify(detail, title="Invalid settings", severity="warning")
            return
        self.notify("Settings saved", title="Settings")
        self._switch_to("timer")

    def action_export_stats(self) -> None:
        path = exports_dir(self._root) / export_filename(self._timer.today())
        try:
            write_csv_export(self._timer.stats, path)
        except OSError as e:
            logger.exception("CSV export failed")
            self.notify(f"Export failed: {e}", title="Error", severity="error")
            return
        self.notify(str(path), title="Stats exported")

    # ── Task actions ───────────────────────────────────────────

    def action_focus_task_input(self) -> None:
        if self.current_view != "timer":
            self._switch_to("timer")
        self.query_one("#task-input", Input).focus()
        self.refresh_bindings()

    @on(Input.Submitted, "#task-input")
    def _on_task_submitted(self, event: Input.Submitted) -> None:
        priority = self.query_one("#task-priority", Select).value
        try:
            add_task(self._tasks, event.value, priority=str(priority))
        except ValueError:
            return
        event.input.value = ""
        self.query_one("#task-priority", Select).value = "medium"
        self._save_tasks()

    def action_toggle_task(self) -> None:
        task_id = self._selected_task_id()
        if task_id is None:
            return
        toggle_task(self._tasks, task_id)
        self._save_tasks()

    def action_delete_task(self) -> None:
        task_id = self._selected_task_id()
        if task_id is None:
            return
        delete_task(self._tasks, task_id)
        self._save_tasks()

    # ── Views ──────────────────────────────────────────────────

    def action_show_stats(self) -> None:
        if self.current_view == "stats":
            self._switch_to("timer")
            return
        self._switch_to("stats")

    def action_show_settings(self) -> None:
        self._switch_to("timer" if self.current_view == "settings" else "settings")

    def _switch_to(self, view: str) -> None:
        main = self.query_one("#main-layout", Horizontal)

        for old in self.query(".overlay-screen"):
            old.remove()

        show_timer = view == "timer"
        self.query_one("#timer-pane").display = show_timer
        self.query_one("#side-pane").display = show_timer
        if view == "stats":
            main.mount(StatsScreen(self._timer, classes="overlay-screen", id="stats-screen"))
        elif view == "settings":
            main.mount(SettingsScreen(self._timer, classes="overlay-screen", id="settings-screen"))
        self.current_view = view

    def action_quit_app(self) -> None:
        self._timer.shutdown()
        self.exit()


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    root = workspace_root()
    try:
        ensure_workspace(root)
    except OSError as e:
        print(f"Cannot create workspace {root}: {e}")
        print("Set POMO_ROOT to a writable directory.")
        sys.exit(1)

    logging.basicConfig(
        filename=str(log_path(root)),
        level=os.environ.get("POMO_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    app = PomoFocusApp()
    app.run()


if __name__ == "__main__":
    main()
