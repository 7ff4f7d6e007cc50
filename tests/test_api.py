"""Tests for ui/app.py — the JSON API."""

import pytest
from fastapi.testclient import TestClient

from ui.app import app, get_timer


@pytest.fixture
def client(make_timer, monkeypatch):
    monkeypatch.delenv("POMO_USER", raising=False)
    monkeypatch.delenv("POMO_PASS", raising=False)
    timer = make_timer()
    app.dependency_overrides[get_timer] = lambda: timer
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": "true"}


def test_timer_commands(client):
    assert client.get("/api/timer").json()["clock"] == "25:00"
    r = client.post("/api/timer/start")
    assert r.json()["timer"]["running"] is True
    r = client.post("/api/timer/skip")
    body = r.json()
    assert body["completed"] == {"mode": "work", "duration": 1500}
    assert body["timer"]["mode"] == "shortBreak"
    assert client.post("/api/timer/explode").status_code == 404


def test_settings_update_and_validation(client):
    r = client.put("/api/settings", json={"workDuration": 1800})
    assert r.status_code == 200
    assert r.json()["settings"]["workDuration"] == 1800

    r = client.put("/api/settings", json={"workDuration": 5})
    assert r.status_code == 422
    assert "workDuration" in r.json()["detail"]["errors"]
    assert client.get("/api/settings").json()["workDuration"] == 1800


def test_preset(client):
    assert client.post("/api/settings/preset/sprint").status_code == 200
    assert client.post("/api/settings/preset/nope").status_code == 404


def test_stats_endpoints(client):
    client.post("/api/timer/skip")
    assert client.get("/api/stats").json()["completedWorkSessions"] == 1
    weekly = client.get("/api/stats/weekly", params={"as_of": "2026-02-11"}).json()
    assert weekly["workSessions"] == 1
    assert client.get("/api/stats/weekly", params={"as_of": "bad"}).status_code == 400

    r = client.get("/api/stats/export.csv")
    assert r.text.splitlines()[1] == "2026-02-11,1,0,0,25"
    assert "pomodoro-stats-2026-02-11.csv" in r.headers["content-disposition"]


def test_tasks_crud(client):
    r = client.post("/api/tasks", json={"text": "Write report", "priority": "high"})
    task_id = r.json()["task"]["id"]
    assert client.post("/api/tasks", json={"text": "  "}).status_code == 400
    assert client.post("/api/tasks", json={"text": "x", "priority": "urgent"}).status_code == 400

    assert client.post(f"/api/tasks/{task_id}/toggle").json()["task"]["completed"] is True
    listing = client.get("/api/tasks").json()
    assert listing["completed"] == 1
    assert listing["total"] == 1

    assert client.delete(f"/api/tasks/{task_id}").status_code == 200
    assert client.delete(f"/api/tasks/{task_id}").status_code == 404
    assert client.post("/api/tasks/missing/toggle").status_code == 404


def test_basic_auth(client, monkeypatch):
    monkeypatch.setenv("POMO_USER", "me")
    monkeypatch.setenv("POMO_PASS", "secret")
    assert client.get("/api/timer").status_code == 401
    assert client.get("/api/timer", auth=("me", "wrong")).status_code == 401
    assert client.get("/api/timer", auth=("me", "secret")).status_code == 200
