"""
Scheduler - Sends workout reminders.

Run as a Cloud Scheduler job:
- hourly: python -m workers.scheduler hourly
- daily:  python -m workers.scheduler daily
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fitai.notifications.reminders import (
    send_daily_workout_reminders,
    send_scheduled_workout_reminders,
)

logger = logging.getLogger(__name__)


def log_event(event: str, **extra: Any) -> None:
    """Log a structured event."""
    record = {
        "event": event,
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }
    record.update(extra)
    logger.info(json.dumps(record, default=str))


def run_hourly(now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    log_event("hourly_reminders_started", hour_utc=now.hour)
    try:
        result = send_scheduled_workout_reminders(now=now)
    except Exception as e:
        log_event("hourly_reminders_failed", error=str(e), error_type=type(e).__name__)
        return {"success": False, "error": str(e)}
    log_event("hourly_reminders_completed", **result)
    return {"success": True, **result}


def run_daily(now: Optional[datetime] = None) -> Dict[str, Any]:
    log_event("daily_reminders_started")
    result = send_daily_workout_reminders(now=now)
    log_event("daily_reminders_completed", **result)
    return result


def run_scheduler(mode: str = "hourly") -> Dict[str, Any]:
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
    )
    if mode == "daily":
        return run_daily()
    return run_hourly()


if __name__ == "__main__":
    run_scheduler(sys.argv[1] if len(sys.argv) > 1 else "hourly")
