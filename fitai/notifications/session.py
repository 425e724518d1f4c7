"""Per-user push notification state on top of the lifecycle manager."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fitai.notifications.lifecycle import NotificationLifecycleManager
from fitai.notifications.models import PermissionState

logger = logging.getLogger(__name__)


class PushNotificationSession:
    """Tracks permission, token and the last foreground message for one user."""

    def __init__(self, manager: NotificationLifecycleManager, user_id: Optional[str]):
        self.manager = manager
        self.user_id = user_id
        self.is_supported = True
        self.permission = PermissionState.DEFAULT
        self.token: Optional[str] = None
        self.loading = False
        self.last_notification: Optional[Dict[str, Any]] = None
        self._unsubscribe = None

    @property
    def is_enabled(self) -> bool:
        return self.permission == PermissionState.GRANTED and self.token is not None

    @property
    def is_denied(self) -> bool:
        return self.permission == PermissionState.DENIED

    def start(self) -> None:
        """Read initial status; re-register the token if already granted."""
        status = self.manager.check_status()
        self.is_supported = status.supported
        self.permission = status.permission

        # Re-fetch so the token is persisted again on every session
        if status.supported and status.permission == PermissionState.GRANTED and self.user_id:
            self.request_permission()
        self._sync_listener()

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def request_permission(self) -> Optional[str]:
        if not self.user_id:
            logger.info("[PushNotifications] No user logged in")
            return None

        self.loading = True
        try:
            token = self.manager.request_permission(self.user_id)
            if token:
                self.token = token
                self.permission = PermissionState.GRANTED
            else:
                self.permission = self.manager.check_status().permission
            return token
        finally:
            self.loading = False
            self._sync_listener()

    def clear_last_notification(self) -> None:
        self.last_notification = None

    def _sync_listener(self) -> None:
        listening = self._unsubscribe is not None
        should_listen = bool(self.user_id) and self.permission == PermissionState.GRANTED
        if should_listen and not listening:
            self._unsubscribe = self.manager.on_foreground_message(self._on_message)
        elif listening and not should_listen:
            self.stop()

    def _on_message(self, payload: Dict[str, Any]) -> None:
        self.last_notification = payload
        notification = payload.get("notification")
        if notification:
            self.manager.show_local_notification(
                notification.get("title", ""),
                {
                    "body": notification.get("body"),
                    "data": payload.get("data"),
                },
            )


__all__ = ["PushNotificationSession"]
