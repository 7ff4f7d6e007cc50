"""Tests for pomo/settings.py — validation, presets, duration lookup."""

import pytest

from pomo.models import Mode, Settings
from pomo.settings import (
    PRESETS,
    SettingsError,
    apply_preset,
    collect_errors,
    duration_for,
    load_settings,
    preset_name,
    save_settings,
    validate_settings,
)
from pomo.store import MemoryStore, SETTINGS_KEY


def test_defaults():
    s = Settings()
    assert s.work_duration == 1500
    assert s.short_break_duration == 300
    assert s.long_break_duration == 900
    assert s.sessions_before_long_break == 4
    assert s.auto_advance is False
    assert s.notifications_enabled is True
    assert s.sound_enabled is True


@pytest.mark.parametrize(
    "mode, expected",
    [(Mode.WORK, 1200), (Mode.SHORT_BREAK, 240), (Mode.LONG_BREAK, 600)],
)
def test_duration_for(mode, expected):
    s = Settings(work_duration=1200, short_break_duration=240, long_break_duration=600)
    assert duration_for(mode, s) == expected


def test_collect_errors_valid_partial():
    assert collect_errors({"workDuration": 60, "autoAdvance": True}) == {}


def test_collect_errors_bounds_are_inclusive():
    assert collect_errors({
        "workDuration": 3600,
        "shortBreakDuration": 1800,
        "longBreakDuration": 300,
        "sessionsBeforeLongBreak": 10,
    }) == {}


def test_collect_errors_field_scoped():
    errors = collect_errors({
        "workDuration": 59,
        "shortBreakDuration": 1801,
        "longBreakDuration": 299,
        "sessionsBeforeLongBreak": 0,
    })
    assert set(errors) == {
        "workDuration",
        "shortBreakDuration",
        "longBreakDuration",
        "sessionsBeforeLongBreak",
    }
    assert "60" in errors["workDuration"]


def test_collect_errors_types():
    errors = collect_errors({"workDuration": "1500", "sessionsBeforeLongBreak": True, "soundEnabled": 1})
    assert errors["workDuration"] == "must be an integer"
    assert errors["sessionsBeforeLongBreak"] == "must be an integer"
    assert "soundEnabled" in errors


def test_collect_errors_unknown_field():
    assert collect_errors({"colour": "red"}) == {"colour": "unknown setting"}


def test_validate_merges_over_current():
    current = Settings(work_duration=3000, sound_enabled=False)
    merged = validate_settings({"shortBreakDuration": 600}, current)
    assert merged.work_duration == 3000
    assert merged.short_break_duration == 600
    assert merged.sound_enabled is False


def test_validate_rejects_without_partial_apply():
    current = Settings()
    with pytest.raises(SettingsError) as exc:
        validate_settings({"workDuration": 1200, "longBreakDuration": 10}, current)
    assert set(exc.value.errors) == {"longBreakDuration"}
    # nothing applied
    assert current.work_duration == 1500


def test_settings_error_is_value_error():
    with pytest.raises(ValueError):
        validate_settings({"sessionsBeforeLongBreak": 11})


def test_apply_preset_keeps_flags():
    current = Settings(auto_advance=True, sound_enabled=False)
    deep = apply_preset("deepWork", current)
    assert deep.work_duration == 3000
    assert deep.short_break_duration == 600
    assert deep.long_break_duration == 1800
    assert deep.sessions_before_long_break == 2
    assert deep.auto_advance is True
    assert deep.sound_enabled is False


def test_apply_preset_unknown():
    with pytest.raises(KeyError):
        apply_preset("marathon")


def test_presets_are_valid():
    for preset in PRESETS.values():
        assert collect_errors(preset) == {}


def test_preset_name():
    assert preset_name(Settings()) == "default"
    assert preset_name(apply_preset("sprint")) == "sprint"
    assert preset_name(Settings(work_duration=1000)) is None


def test_load_settings_missing():
    assert load_settings(MemoryStore()) == Settings()


def test_load_settings_roundtrip():
    store = MemoryStore()
    s = Settings(work_duration=1800, auto_advance=True)
    save_settings(store, s)
    assert load_settings(store) == s


def test_load_settings_legacy_keys():
    store = MemoryStore({SETTINGS_KEY: {
        "work": 1200,
        "shortBreak": 300,
        "longBreak": 900,
        "sessionsBeforeLongBreak": 3,
        "autoStartNextSession": True,
        "enableNotifications": False,
        "enableSounds": False,
    }})
    s = load_settings(store)
    assert s.work_duration == 1200
    assert s.sessions_before_long_break == 3
    assert s.auto_advance is True
    assert s.notifications_enabled is False
    assert s.sound_enabled is False


def test_load_settings_out_of_range_falls_back():
    store = MemoryStore({SETTINGS_KEY: {"workDuration": 5}})
    assert load_settings(store) == Settings()


def test_load_settings_not_a_mapping():
    store = MemoryStore({SETTINGS_KEY: [1, 2, 3]})
    assert load_settings(store) == Settings()


def test_load_settings_string_flag_falls_back():
    store = MemoryStore({SETTINGS_KEY: {"autoAdvance": "false", "soundEnabled": "no"}})
    s = load_settings(store)
    assert s == Settings()
    assert s.auto_advance is False


def test_load_settings_legacy_string_flag_falls_back():
    store = MemoryStore({SETTINGS_KEY: {"work": 1200, "autoStartNextSession": "yes"}})
    assert load_settings(store) == Settings()


def test_load_settings_current_key_wins_over_legacy():
    store = MemoryStore({SETTINGS_KEY: {"work": 1200, "workDuration": 1800}})
    assert load_settings(store).work_duration == 1800


def test_load_settings_ignores_unknown_keys():
    store = MemoryStore({SETTINGS_KEY: {"workDuration": 1800, "theme": "dark", "autoAdvance": None}})
    s = load_settings(store)
    assert s.work_duration == 1800
    assert s.auto_advance is False
