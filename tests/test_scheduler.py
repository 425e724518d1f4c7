"""Tests for the reminder scheduler entry points."""

import json
import logging
from datetime import datetime, timezone

from workers import scheduler

NOW = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)


def test_run_hourly_reports_counts(monkeypatch, caplog):
    monkeypatch.setattr(
        scheduler, "send_scheduled_workout_reminders",
        lambda now: {"processed": 2, "sent": 2, "failed": 0},
    )

    with caplog.at_level(logging.INFO, logger="workers.scheduler"):
        result = scheduler.run_hourly(NOW)

    assert result == {"success": True, "processed": 2, "sent": 2, "failed": 0}
    events = [json.loads(r.getMessage())["event"] for r in caplog.records]
    assert events == ["hourly_reminders_started", "hourly_reminders_completed"]


def test_run_hourly_catches_failures(monkeypatch, caplog):
    def boom(now):
        raise RuntimeError("firestore unavailable")

    monkeypatch.setattr(scheduler, "send_scheduled_workout_reminders", boom)

    with caplog.at_level(logging.INFO, logger="workers.scheduler"):
        result = scheduler.run_hourly(NOW)

    assert result == {"success": False, "error": "firestore unavailable"}
    last = json.loads(caplog.records[-1].getMessage())
    assert last["event"] == "hourly_reminders_failed"
    assert last["error_type"] == "RuntimeError"


def test_run_scheduler_dispatches_by_mode(monkeypatch):
    calls = []
    monkeypatch.setattr(scheduler, "run_daily", lambda: calls.append("daily") or {})
    monkeypatch.setattr(scheduler, "run_hourly", lambda: calls.append("hourly") or {})

    scheduler.run_scheduler("daily")
    scheduler.run_scheduler("hourly")

    assert calls == ["daily", "hourly"]
