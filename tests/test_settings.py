"""Tests for user settings and notification preferences."""

import pytest

from fitai.users.settings import (
    SettingsError,
    SettingsValidationError,
    update_notification_preferences,
    update_settings,
)


class TestUpdateSettings:

    def test_saves_profile_fields(self, db):
        db.seed("users/u1", {"email": "ana@example.com"})

        update_settings("u1", "imperial", "es", avatar_url="https://cdn/a.png", db=db)

        user = db.data("users/u1")
        assert user["units"] == "imperial"
        assert user["language"] == "es"
        assert user["avatarUrl"] == "https://cdn/a.png"
        assert user["email"] == "ana@example.com"
        assert "updatedAt" in user

    def test_rejects_unknown_units(self, db):
        db.seed("users/u1", {})
        with pytest.raises(SettingsValidationError):
            update_settings("u1", "stones", "es", db=db)
        assert db.writes == []

    def test_missing_user_raises_settings_error(self, db):
        with pytest.raises(SettingsError, match="No se pudieron guardar los cambios"):
            update_settings("ghost", "metric", "es", db=db)


class TestNotificationPreferences:

    def test_saves_sorted_unique_days(self, db):
        prefs = update_notification_preferences(
            "u1", True, 18, ["Viernes", "Lunes", "Viernes"], db=db,
        )

        assert prefs.reminder_days == ["Lunes", "Viernes"]
        assert db.data("users/u1")["notificationPreferences"] == {
            "workoutReminder": True,
            "reminderHourUTC": 18,
            "reminderDays": ["Lunes", "Viernes"],
        }

    def test_replaces_previous_preferences(self, db):
        db.seed("users/u1", {
            "email": "ana@example.com",
            "notificationPreferences": {"workoutReminder": True, "reminderHourUTC": 7, "reminderDays": ["Lunes"]},
        })

        update_notification_preferences("u1", False, db=db)

        user = db.data("users/u1")
        assert user["email"] == "ana@example.com"
        assert user["notificationPreferences"]["workoutReminder"] is False

    @pytest.mark.parametrize("hour", [-1, 24, "9", True])
    def test_rejects_bad_hour(self, db, hour):
        with pytest.raises(SettingsValidationError):
            update_notification_preferences("u1", True, hour, [], db=db)
        assert db.writes == []

    def test_rejects_unknown_day(self, db):
        with pytest.raises(SettingsValidationError):
            update_notification_preferences("u1", True, 9, ["Monday"], db=db)

    def test_write_failure(self, db):
        db.fail_writes = True
        with pytest.raises(SettingsError):
            update_notification_preferences("u1", True, 9, [], db=db)
