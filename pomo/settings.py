"""Settings resolver: validation, preset merging and duration lookup."""

from __future__ import annotations

import logging
from typing import Any

from pomo.models import Mode, Settings
from pomo.store import SETTINGS_KEY, DocumentStore

logger = logging.getLogger(__name__)


# field name -> (min, max), inclusive
DURATION_RANGES = {
    "workDuration": (60, 3600),
    "shortBreakDuration": (60, 1800),
    "longBreakDuration": (300, 3600),
    "sessionsBeforeLongBreak": (1, 10),
}
FLAG_FIELDS = ("autoAdvance", "notificationsEnabled", "soundEnabled")
# keys written by the browser app
LEGACY_KEYS = {
    "work": "workDuration",
    "shortBreak": "shortBreakDuration",
    "longBreak": "longBreakDuration",
    "autoStartNextSession": "autoAdvance",
    "enableNotifications": "notificationsEnabled",
    "enableSounds": "soundEnabled",
}

PRESETS: dict[str, dict[str, int]] = {
    "default": {
        "workDuration": 25 * 60,
        "shortBreakDuration": 5 * 60,
        "longBreakDuration": 15 * 60,
        "sessionsBeforeLongBreak": 4,
    },
    "deepWork": {
        "workDuration": 50 * 60,
        "shortBreakDuration": 10 * 60,
        "longBreakDuration": 30 * 60,
        "sessionsBeforeLongBreak": 2,
    },
    "sprint": {
        "workDuration": 20 * 60,
        "shortBreakDuration": 5 * 60,
        "longBreakDuration": 15 * 60,
        "sessionsBeforeLongBreak": 4,
    },
}


class SettingsError(ValueError):
    """Raised when a settings candidate fails validation.

    ``errors`` maps each offending field to a human-readable message.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        detail = "; ".join(f"{k}: {v}" for k, v in sorted(self.errors.items()))
        super().__init__(f"Invalid settings: {detail}")


def collect_errors(candidate: dict[str, Any]) -> dict[str, str]:
    """Validate a (possibly partial) settings document.

    Returns a field -> message mapping, empty if every present field is valid.
    """
    errors: dict[str, str] = {}
    for key in candidate:
        if key not in DURATION_RANGES and key not in FLAG_FIELDS:
            errors[key] = "unknown setting"

    for key, (lo, hi) in DURATION_RANGES.items():
        if key not in candidate:
            continue
        value = candidate[key]
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int):
            errors[key] = "must be an integer"
        elif not lo <= value <= hi:
            errors[key] = f"must be between {lo} and {hi}"

    for key in FLAG_FIELDS:
        if key in candidate and not isinstance(candidate[key], bool):
            errors[key] = "must be true or false"

    return errors


def validate_settings(candidate: dict[str, Any], current: Settings | None = None) -> Settings:
    """Merge *candidate* over *current* (or the defaults) and validate.

    Raises SettingsError without applying anything if a field is invalid.
    """
    errors = collect_errors(candidate)
    if errors:
        raise SettingsError(errors)
    merged = (current or Settings()).to_dict()
    merged.update(candidate)
    return Settings.from_dict(merged)


def apply_preset(name: str, current: Settings | None = None) -> Settings:
    """Overlay a named preset's durations on *current*, keeping its flags."""
    if name not in PRESETS:
        raise KeyError(f"Unknown preset: {name}")
    return validate_settings(PRESETS[name], current)


def preset_name(settings: Settings) -> str | None:
    """Name of the preset whose durations match *settings*, if any."""
    doc = settings.to_dict()
    for name, preset in PRESETS.items():
        if all(doc[k] == v for k, v in preset.items()):
            return name
    return None


def duration_for(mode: Mode, settings: Settings) -> int:
    if mode is Mode.WORK:
        return settings.work_duration
    if mode is Mode.SHORT_BREAK:
        return settings.short_break_duration
    return settings.long_break_duration


# ── Storage ───────────────────────────────────────────────────


def _stored_fields(doc: dict[str, Any]) -> dict[str, Any]:
    """Known fields of a stored document, legacy keys renamed, current keys winning."""
    known: dict[str, Any] = {}
    for legacy, key in LEGACY_KEYS.items():
        if doc.get(legacy) is not None:
            known[key] = doc[legacy]
    for key in (*DURATION_RANGES, *FLAG_FIELDS):
        if doc.get(key) is not None:
            known[key] = doc[key]
    return known


def load_settings(store: DocumentStore) -> Settings:
    """Load persisted settings, falling back to defaults if missing or invalid."""
    doc = store.get(SETTINGS_KEY)
    if not isinstance(doc, dict):
        if doc is not None:
            logger.warning("Settings document is not a mapping; using defaults")
        return Settings()
    known = _stored_fields(doc)
    errors = collect_errors(known)
    if errors:
        logger.warning("Stored settings rejected (%s); using defaults", ", ".join(sorted(errors)))
        return Settings()
    return validate_settings(known)


def save_settings(store: DocumentStore, settings: Settings) -> None:
    store.put(SETTINGS_KEY, settings.to_dict())
