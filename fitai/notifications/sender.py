"""
Server-side push sends through Firebase Cloud Messaging.

Tokens the provider reports as invalid or unregistered are deleted after the
send. Nothing here raises; results are returned as dicts.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging

from fitai.config import NOTIFICATION_BADGE, NOTIFICATION_VIBRATE
from fitai.firestore_client import get_firebase_app
from fitai.notifications.templates import NotificationTemplate, get_template
from fitai.notifications.token_store import FirestoreTokenStore

logger = logging.getLogger(__name__)

SendFn = Callable[[messaging.Message], str]

# Error codes that mean the token will never work again
_INVALID_TOKEN_CODES = {
    "messaging/invalid-registration-token",
    "messaging/registration-token-not-registered",
}


def _default_send(message: messaging.Message) -> str:
    return messaging.send(message, app=get_firebase_app())


def is_invalid_token_error(error: Exception) -> bool:
    """True if the send failure means the token should be dropped."""
    if isinstance(error, messaging.UnregisteredError):
        return True
    if isinstance(error, firebase_exceptions.InvalidArgumentError):
        return "registration token" in str(error).lower()
    code = getattr(error, "code", None)
    return code in _INVALID_TOKEN_CODES


def build_message(
    token: str,
    user_id: str,
    template_id: str,
    template: NotificationTemplate,
    custom_data: Dict[str, Any],
    now_ms: Optional[int] = None,
) -> messaging.Message:
    """Build one FCM message for a token from a template."""
    body = template.render_body(custom_data)
    url = custom_data.get("url") or template.click_action
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)

    # FCM data payload values must be strings
    data = {
        "url": url,
        "templateId": template_id,
        "userId": user_id,
        "timestamp": str(timestamp),
    }
    data.update({
        str(k): str(v) for k, v in custom_data.items()
        if v is not None and k != "url"
    })

    return messaging.Message(
        token=token,
        notification=messaging.Notification(
            title=custom_data.get("title") or template.title,
            body=custom_data.get("body") or body,
        ),
        data=data,
        webpush=messaging.WebpushConfig(
            fcm_options=messaging.WebpushFCMOptions(link=url),
            notification=messaging.WebpushNotification(
                icon=template.icon,
                badge=NOTIFICATION_BADGE,
                vibrate=list(NOTIFICATION_VIBRATE),
            ),
        ),
    )


class PushSender:
    """Send templated notifications to every token a user owns."""

    def __init__(
        self,
        token_store: Optional[FirestoreTokenStore] = None,
        send_fn: Optional[SendFn] = None,
    ):
        self.token_store = token_store or FirestoreTokenStore()
        self.send_fn = send_fn or _default_send

    def send_raw(self, message: messaging.Message) -> str:
        return self.send_fn(message)

    def send_notification_to_user(
        self,
        user_id: str,
        template_id: str,
        custom_data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        custom_data = dict(custom_data or {})
        try:
            tokens = [t.token for t in self.token_store.list_tokens(user_id)]
            if not tokens:
                logger.info("[Notifications] No tokens found for user %s", user_id)
                return {"success": False, "reason": "no_tokens"}

            template = get_template(template_id)
            if template is None:
                logger.info("[Notifications] Unknown template: %s", template_id)
                return {"success": False, "reason": "unknown_template"}

            sent = 0
            invalid: List[str] = []
            for token in tokens:
                message = build_message(token, user_id, template_id, template, custom_data)
                try:
                    self.send_fn(message)
                    sent += 1
                except Exception as e:
                    logger.warning("[Notifications] Send failed token=%s…: %s", token[:12], e)
                    if is_invalid_token_error(e):
                        invalid.append(token)

            removed = self.token_store.delete_tokens(user_id, invalid) if invalid else 0

            logger.info("[Notifications] Sent to %d/%d tokens for user %s",
                        sent, len(tokens), user_id)
            return {
                "success": sent > 0,
                "sent": sent,
                "total": len(tokens),
                "invalidRemoved": removed,
            }
        except Exception as e:
            logger.error("[Notifications] Error sending notification: %s", e)
            return {"success": False, "error": str(e)}


def send_notification_to_user(
    user_id: str,
    template_id: str,
    custom_data: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Module-level convenience using the default Firestore/FCM wiring."""
    return PushSender().send_notification_to_user(user_id, template_id, custom_data)


__all__ = [
    "PushSender",
    "build_message",
    "is_invalid_token_error",
    "send_notification_to_user",
]
