"""
Notification Lifecycle Manager.

Tracks notification permission, requests a push token from the messaging
provider, persists it against the user, and dispatches foreground/local
notifications.

Every failure is caught here and turned into None/False plus one log line.
Callers never see an exception from this module.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from fitai.config import (
    NOTIFICATION_BADGE,
    NOTIFICATION_ICON,
    NOTIFICATION_VIBRATE,
    SERVICE_WORKER_URL,
    VAPID_KEY,
)
from fitai.notifications.capabilities import (
    MessageHandler,
    MessagingProvider,
    PermissionApi,
    ServiceWorkerContainer,
    TokenStore,
    Unsubscribe,
)
from fitai.notifications.errors import NotificationError, NotificationFailure
from fitai.notifications.models import NotificationStatus, PermissionState

logger = logging.getLogger(__name__)


def _noop() -> None:
    return None


class NotificationLifecycleManager:
    """Bridge between permission API, messaging provider and token store."""

    def __init__(
        self,
        permissions: Optional[PermissionApi],
        service_workers: Optional[ServiceWorkerContainer],
        messaging: Optional[MessagingProvider],
        token_store: TokenStore,
        vapid_key: str = VAPID_KEY,
        service_worker_url: str = SERVICE_WORKER_URL,
        platform: str = "web",
        user_agent: str = "",
    ):
        self.permissions = permissions
        self.service_workers = service_workers
        self.messaging = messaging
        self.token_store = token_store
        self.vapid_key = vapid_key
        self.service_worker_url = service_worker_url
        self.platform = platform
        self.user_agent = user_agent
        self.last_failure: Optional[NotificationFailure] = None

    # ------------------------------------------------------------------
    # Support checks
    # ------------------------------------------------------------------

    def _permissions_supported(self) -> bool:
        try:
            return self.permissions is not None and self.permissions.is_supported()
        except Exception as e:
            logger.error("[Notifications] Permission API check failed: %s", e)
            return False

    def _messaging_supported(self) -> bool:
        if not self._permissions_supported():
            logger.info("[Notifications] Not supported in this environment")
            return False
        try:
            sw_supported = (
                self.service_workers is not None and self.service_workers.is_supported()
            )
        except Exception as e:
            logger.error("[Notifications] Service worker check failed: %s", e)
            return False
        if not sw_supported:
            logger.info("[Notifications] Service workers not supported")
            return False
        if self.messaging is None:
            logger.info("[Notifications] No messaging provider configured")
            return False
        return True

    def _fail(self, kind: NotificationFailure) -> None:
        self.last_failure = kind

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def check_status(self) -> NotificationStatus:
        """Return {supported, permission}. No side effects."""
        if not self._permissions_supported():
            return NotificationStatus(supported=False, permission=PermissionState.UNSUPPORTED)
        try:
            permission = self.permissions.current()
        except Exception as e:
            logger.error("[Notifications] Could not read permission: %s", e)
            return NotificationStatus(supported=False, permission=PermissionState.UNSUPPORTED)
        return NotificationStatus(supported=True, permission=permission)

    def request_permission(self, user_id: Optional[str]) -> Optional[str]:
        """
        Prompt for permission and register a push token for the user.

        Args:
            user_id: Owner of the token record

        Returns:
            The issued token, or None if unsupported, denied or failed
        """
        self.last_failure = None
        if not self._messaging_supported():
            self._fail(NotificationFailure.UNSUPPORTED_ENVIRONMENT)
            return None

        try:
            permission = self.permissions.request()
            if permission != PermissionState.GRANTED:
                logger.info("[Notifications] Permission %s", permission.value)
                self._fail(NotificationFailure.PERMISSION_DENIED)
                return None

            registration = self.service_workers.register(self.service_worker_url)
            logger.info("[Notifications] Service worker registered: %s", self.service_worker_url)

            token = self.messaging.get_token(self.vapid_key, registration)
        except Exception as e:
            logger.error("[Notifications] Error getting token: %s", e)
            self._fail(NotificationFailure.PROVIDER_ERROR)
            return None

        if not token:
            logger.info("[Notifications] No token available")
            self._fail(NotificationFailure.PROVIDER_ERROR)
            return None

        logger.info("[Notifications] FCM token issued: %s…", token[:12])
        self._persist(user_id, token)
        return token

    def _persist(self, user_id: Optional[str], token: str) -> None:
        if not user_id:
            return
        try:
            self.token_store.save_token(
                user_id,
                token,
                platform=self.platform,
                user_agent=self.user_agent,
            )
            logger.info("[Notifications] Token saved for user %s", user_id)
        except NotificationError as e:
            logger.error("[Notifications] Error saving token: %s", e)
            self._fail(e.kind)
        except Exception as e:
            logger.error("[Notifications] Error saving token: %s", e)
            self._fail(NotificationFailure.PERSISTENCE_ERROR)

    def on_foreground_message(self, callback: MessageHandler) -> Unsubscribe:
        """Invoke callback for each message received while active."""
        if not self._messaging_supported():
            return _noop

        def _handler(payload: Dict[str, Any]) -> None:
            logger.info("[Notifications] Foreground message: %s", payload)
            callback(payload)

        try:
            unsubscribe: Callable[[], None] = self.messaging.on_message(_handler)
        except Exception as e:
            logger.error("[Notifications] Could not subscribe to messages: %s", e)
            self._fail(NotificationFailure.PROVIDER_ERROR)
            return _noop
        return unsubscribe or _noop

    def show_local_notification(
        self,
        title: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Show a notification through the active service worker."""
        status = self.check_status()
        if not status.supported or status.permission != PermissionState.GRANTED:
            logger.info("[Notifications] Cannot show local notification")
            return False

        try:
            registration = self.service_workers.ready() if self.service_workers else None
        except Exception as e:
            logger.error("[Notifications] Service worker not ready: %s", e)
            return False
        if registration is None:
            logger.info("[Notifications] No active service worker registration")
            return False

        merged = {
            "icon": NOTIFICATION_ICON,
            "badge": NOTIFICATION_BADGE,
            "vibrate": list(NOTIFICATION_VIBRATE),
        }
        merged.update(options or {})
        try:
            registration.show_notification(title, merged)
        except Exception as e:
            logger.error("[Notifications] Error showing notification: %s", e)
            return False
        return True


__all__ = ["NotificationLifecycleManager"]
