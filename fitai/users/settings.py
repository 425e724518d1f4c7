"""User settings and notification preferences."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from google.cloud import firestore

from fitai.config import USERS_COLLECTION
from fitai.firestore_client import get_db
from fitai.notifications.models import NotificationPreferences
from fitai.notifications.reminders import WEEKDAY_NAMES

logger = logging.getLogger(__name__)

VALID_UNITS = ("metric", "imperial")


class SettingsError(Exception):
    """Raised when settings cannot be saved."""
    pass


class SettingsValidationError(SettingsError):
    """Raised when submitted settings are invalid."""
    pass


def validate_notification_preferences(prefs: NotificationPreferences) -> None:
    hour = prefs.reminder_hour_utc
    if hour is not None and (not isinstance(hour, int) or isinstance(hour, bool) or not 0 <= hour <= 23):
        raise SettingsValidationError(f"reminderHourUTC must be 0-23, got {hour!r}")
    unknown = [d for d in prefs.reminder_days if d not in WEEKDAY_NAMES]
    if unknown:
        raise SettingsValidationError(f"Unknown reminder days: {unknown}")


def update_settings(
    user_id: str,
    units: str,
    language: str,
    avatar_url: str = "",
    db: Optional[firestore.Client] = None,
) -> Dict[str, Any]:
    """Save profile settings on users/{uid}."""
    if units not in VALID_UNITS:
        raise SettingsValidationError(f"units must be one of {VALID_UNITS}, got {units!r}")
    if not language:
        raise SettingsValidationError("language is required")

    updates = {
        "units": units,
        "language": language,
        "avatarUrl": avatar_url or "",
        "updatedAt": datetime.utcnow(),
    }
    db = db or get_db()
    try:
        db.collection(USERS_COLLECTION).document(user_id).update(updates)
    except Exception as e:
        logger.error("Error saving settings for %s: %s", user_id, e)
        raise SettingsError("No se pudieron guardar los cambios") from e
    return updates


def update_notification_preferences(
    user_id: str,
    workout_reminder: bool,
    reminder_hour_utc: Optional[int] = None,
    reminder_days: Optional[List[str]] = None,
    db: Optional[firestore.Client] = None,
) -> NotificationPreferences:
    """Replace notificationPreferences on users/{uid}."""
    prefs = NotificationPreferences(
        workout_reminder=bool(workout_reminder),
        reminder_hour_utc=reminder_hour_utc,
        reminder_days=list(dict.fromkeys(reminder_days or [])),
    )
    validate_notification_preferences(prefs)
    prefs.reminder_days.sort(key=WEEKDAY_NAMES.index)

    db = db or get_db()
    try:
        db.collection(USERS_COLLECTION).document(user_id).set(
            {"notificationPreferences": prefs.to_dict(), "updatedAt": datetime.utcnow()},
            merge=True,
        )
    except Exception as e:
        logger.error("Error saving notification preferences for %s: %s", user_id, e)
        raise SettingsError("No se pudieron guardar las preferencias") from e

    logger.info("Updated notification preferences for user %s", user_id)
    return prefs


__all__ = [
    "SettingsError",
    "SettingsValidationError",
    "update_settings",
    "update_notification_preferences",
    "validate_notification_preferences",
]
