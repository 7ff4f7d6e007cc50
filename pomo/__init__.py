"""PomoFocus core library: focus-interval state machine and stats engine.

Public API re-exports for convenient imports:
    from pomo import PomodoroTimer, JsonFileStore, weekly_rollup, ...
"""

# Workspace & paths
from pomo.workspace import (
    workspace_root,
    ensure_workspace,
    get_user_timezone,
    get_daily_goal,
    today,
    today_str,
    now_local,
    profile_path,
    hooks_config_path,
    store_dir,
    exports_dir,
    log_path,
)

# Persistence
from pomo.store import (
    DocumentStore,
    JsonFileStore,
    MemoryStore,
    SETTINGS_KEY,
    STATS_KEY,
    TASKS_KEY,
)

# Settings
from pomo.settings import (
    PRESETS,
    SettingsError,
    collect_errors,
    validate_settings,
    apply_preset,
    preset_name,
    duration_for,
    load_settings,
    save_settings,
)

# Session
from pomo.session import (
    SessionMachine,
    format_clock,
    mode_label,
    next_mode,
)

# Stats
from pomo.stats import (
    record,
    day_stats,
    weekly_rollup,
    daily_goal_reached,
    format_duration,
    export_csv,
    export_filename,
    write_csv_export,
    load_stats,
    save_stats,
)

# Tasks
from pomo.tasks import (
    VALID_PRIORITIES,
    load_tasks,
    save_tasks,
    find_task,
    add_task,
    toggle_task,
    delete_task,
    completed_count,
)

# Side effects & scheduling
from pomo.hooks import HookResult, has_hooks, load_hooks_config, run_hooks
from pomo.notify import (
    Notifier,
    NullNotifier,
    HookNotifier,
    NotificationError,
    completion_message,
)
from pomo.scheduler import Scheduler, ThreadScheduler
from pomo.timer import PomodoroTimer

# Models
from pomo.models import (
    Mode,
    Settings,
    SessionState,
    CompletionEvent,
    DailyStat,
    StatsAggregate,
    WeeklyRollup,
    Task,
)
