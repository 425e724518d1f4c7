"""Notification models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class PermissionState(str, Enum):
    """Browser notification permission, mirrored from the client."""
    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class NotificationStatus:
    supported: bool
    permission: PermissionState

    def to_dict(self) -> Dict[str, Any]:
        return {"supported": self.supported, "permission": self.permission.value}


@dataclass
class PushToken:
    """FCM token document under users/{uid}/fcmTokens/{token}."""
    token: str
    user_id: str
    platform: str = "web"
    user_agent: str = ""
    created_at: Optional[datetime] = None
    last_active: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to Firestore-compatible dict."""
        return {
            "token": self.token,
            "platform": self.platform,
            "userAgent": self.user_agent,
            "createdAt": self.created_at,
            "lastActive": self.last_active,
        }

    @classmethod
    def from_dict(cls, user_id: str, data: Dict[str, Any]) -> "PushToken":
        """Create from Firestore dict."""
        return cls(
            token=data.get("token", ""),
            user_id=user_id,
            platform=data.get("platform", "web"),
            user_agent=data.get("userAgent", ""),
            created_at=data.get("createdAt"),
            last_active=data.get("lastActive"),
        )


@dataclass
class NotificationPreferences:
    workout_reminder: bool = False
    reminder_hour_utc: Optional[int] = None
    reminder_days: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workoutReminder": self.workout_reminder,
            "reminderHourUTC": self.reminder_hour_utc,
            "reminderDays": list(self.reminder_days),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "NotificationPreferences":
        data = data or {}
        return cls(
            workout_reminder=bool(data.get("workoutReminder", False)),
            reminder_hour_utc=data.get("reminderHourUTC"),
            reminder_days=list(data.get("reminderDays") or []),
        )


@dataclass
class UserRecord:
    """Subset of users/{uid} the backend reads."""
    id: str
    email: str = ""
    display_name: str = ""
    is_premium: bool = False
    subscription_status: Optional[str] = None
    has_notifications: bool = False
    last_fcm_token: Optional[str] = None
    notification_preferences: NotificationPreferences = field(default_factory=NotificationPreferences)
    coach_id: Optional[str] = None

    @classmethod
    def from_dict(cls, user_id: str, data: Dict[str, Any]) -> "UserRecord":
        return cls(
            id=user_id,
            email=data.get("email", ""),
            display_name=data.get("displayName") or data.get("name") or "",
            is_premium=bool(data.get("isPremium", False)),
            subscription_status=data.get("subscriptionStatus"),
            has_notifications=bool(data.get("hasNotifications", False)),
            last_fcm_token=data.get("lastFcmToken"),
            notification_preferences=NotificationPreferences.from_dict(
                data.get("notificationPreferences")
            ),
            coach_id=data.get("coachId"),
        )


__all__ = [
    "PermissionState",
    "NotificationStatus",
    "PushToken",
    "NotificationPreferences",
    "UserRecord",
]
