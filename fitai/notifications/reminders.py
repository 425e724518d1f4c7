"""
Workout reminders.

- send_scheduled_workout_reminders: hourly; users whose reminderHourUTC matches
  and who train today (active routine day or reminderDays)
- send_daily_workout_reminders: users with notifications who have not
  started a workout today
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from firebase_admin import messaging
from google.cloud import firestore

from fitai.config import ROUTINES_COLLECTION, USERS_COLLECTION, WORKOUTS_COLLECTION
from fitai.firestore_client import get_db
from fitai.notifications.models import UserRecord
from fitai.notifications.sender import PushSender

logger = logging.getLogger(__name__)

# Monday-first, matching datetime.weekday()
WEEKDAY_NAMES = ["Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado", "Domingo"]

DEFAULT_ROUTINE_LABEL = "Entrenamiento"


def weekday_name(now: datetime) -> str:
    return WEEKDAY_NAMES[now.weekday()]


def _get_active_routine(db: firestore.Client, user_id: str) -> Optional[Dict[str, Any]]:
    docs = (
        db.collection(ROUTINES_COLLECTION)
        .where("userId", "==", user_id)
        .where("isActive", "==", True)
        .limit(1)
        .get()
    )
    for doc in docs:
        return doc.to_dict()
    return None


def resolve_training_day(
    routine: Optional[Dict[str, Any]],
    reminder_days: list,
    today: str,
) -> Optional[str]:
    """
    Decide whether the user trains today.

    Returns the label to announce, or None when today is a rest day.
    """
    current_day = today.lower()
    if routine:
        for day in routine.get("days") or []:
            split_name = (day.get("split_name") or "").lower()
            name = (day.get("name") or "").lower()
            if current_day in split_name or current_day in name:
                return day.get("split_name") or routine.get("name") or DEFAULT_ROUTINE_LABEL
    if today in (reminder_days or []):
        return DEFAULT_ROUTINE_LABEL
    return None


def build_reminder_message(token: str, routine_label: str) -> messaging.Message:
    return messaging.Message(
        token=token,
        notification=messaging.Notification(
            title="¡Hora de Entrenar! 💪",
            body=f"Hoy toca: {routine_label}. ¡Vamos por ello!",
        ),
        data={
            "type": "workout_reminder",
            "url": "/dashboard",
        },
    )


def send_scheduled_workout_reminders(
    now: Optional[datetime] = None,
    db: Optional[firestore.Client] = None,
    sender: Optional[PushSender] = None,
) -> Dict[str, int]:
    """Send hourly workout reminders. Returns counts."""
    now = now or datetime.now(timezone.utc)
    db = db or get_db()
    sender = sender or PushSender()
    current_hour = now.hour
    today = weekday_name(now)

    logger.info("Running scheduled reminders for hour UTC: %d, day: %s", current_hour, today)

    users = (
        db.collection(USERS_COLLECTION)
        .where("notificationPreferences.workoutReminder", "==", True)
        .get()
    )

    processed = 0
    sent = 0
    failed = 0
    for doc in users:
        user = UserRecord.from_dict(doc.id, doc.to_dict() or {})
        prefs = user.notification_preferences
        if prefs.reminder_hour_utc != current_hour:
            continue

        routine = _get_active_routine(db, user.id)
        label = resolve_training_day(routine, prefs.reminder_days, today)
        if label is None or not user.last_fcm_token:
            continue

        processed += 1
        try:
            sender.send_raw(build_reminder_message(user.last_fcm_token, label))
            sent += 1
            logger.info("Reminder sent to user %s", user.id)
        except Exception as e:
            failed += 1
            logger.error("Failed to send reminder to %s: %s", user.id, e)

    logger.info("Processed %d reminders (%d sent, %d failed)", processed, sent, failed)
    return {"processed": processed, "sent": sent, "failed": failed}


def send_daily_workout_reminders(
    now: Optional[datetime] = None,
    db: Optional[firestore.Client] = None,
    sender: Optional[PushSender] = None,
) -> Dict[str, Any]:
    """Remind users with notifications who have not trained today."""
    now = now or datetime.now(timezone.utc)
    db = db or get_db()
    sender = sender or PushSender()
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)

    logger.info("Sending daily workout reminders")
    try:
        users = (
            db.collection(USERS_COLLECTION)
            .where("hasNotifications", "==", True)
            .get()
        )

        sent_count = 0
        for user_doc in users:
            workouts_today = (
                db.collection(WORKOUTS_COLLECTION)
                .where("userId", "==", user_doc.id)
                .where("startTime", ">=", start_of_day)
                .limit(1)
                .get()
            )
            if workouts_today:
                continue
            sender.send_notification_to_user(user_doc.id, "workout_reminder")
            sent_count += 1

        logger.info("Sent %d workout reminders", sent_count)
        return {"success": True, "sent": sent_count}
    except Exception as e:
        logger.error("Error sending daily reminders: %s", e)
        return {"success": False, "error": str(e)}


__all__ = [
    "WEEKDAY_NAMES",
    "weekday_name",
    "resolve_training_day",
    "send_scheduled_workout_reminders",
    "send_daily_workout_reminders",
]
