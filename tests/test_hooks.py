"""Tests for pomo/hooks.py — lifecycle hook system."""

import json

import yaml

from pomo.hooks import has_hooks, load_hooks_config, run_hooks


def _configure(workspace, config):
    (workspace / "hooks.yaml").write_text(yaml.dump(config), encoding="utf-8")


def test_run_hooks_no_config(workspace):
    """No hooks.yaml -> no hooks run."""
    results = run_hooks("on_interval_complete", {"date": "2026-02-11"}, workspace)
    assert results == []
    assert load_hooks_config(workspace) == {}


def test_run_hooks_with_echo(workspace):
    """Hook that echoes its context back via stdin."""
    _configure(workspace, {"on_interval_complete": ["cat"]})

    results = run_hooks("on_interval_complete", {"date": "2026-02-11"}, workspace)
    assert len(results) == 1
    assert results[0].exit_code == 0
    output = json.loads(results[0].stdout)
    assert output["date"] == "2026-02-11"
    assert output["hook"] == "on_interval_complete"


def test_run_hooks_invalid_hook_point(workspace):
    _configure(workspace, {"post_finalize": ["cat"]})
    assert run_hooks("post_finalize", {}, workspace) == []


def test_run_hooks_nonzero_exit(workspace):
    _configure(workspace, {"on_sound": [{"command": "exit 3"}]})
    results = run_hooks("on_sound", {}, workspace)
    assert results[0].exit_code == 3


def test_run_hooks_skips_blank_entries(workspace):
    _configure(workspace, {"on_start": ["", {"command": ""}, 42, "true"]})
    results = run_hooks("on_start", {}, workspace)
    assert [r.command for r in results] == ["true"]


def test_run_hooks_timeout(workspace):
    """Hook timeout protection."""
    _configure(workspace, {"on_skip": [{"command": "sleep 10", "timeout": 1}]})

    results = run_hooks("on_skip", {}, workspace)
    assert len(results) == 1
    assert results[0].exit_code == -1
    assert "timed out" in results[0].error.lower()


def test_has_hooks(workspace):
    assert not has_hooks("on_notification", workspace)
    _configure(workspace, {"on_notification": ["true"], "on_sound": []})
    assert has_hooks("on_notification", workspace)
    assert not has_hooks("on_sound", workspace)
