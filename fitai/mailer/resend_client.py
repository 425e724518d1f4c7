"""
Resend REST client.

Sends are fire-and-forget: the outcome is logged and returned as a dict,
never raised.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from fitai.config import EMAIL_FROM, RESEND_API_KEY, RESEND_BASE_URL
from fitai.libs.http import HttpClient

logger = logging.getLogger(__name__)


class ResendClient:

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = RESEND_BASE_URL,
        http: Optional[HttpClient] = None,
    ):
        self.http = http or HttpClient(
            base_url=base_url,
            bearer_token=api_key if api_key is not None else RESEND_API_KEY,
        )

    def send_email(
        self,
        to: Union[str, List[str]],
        subject: str,
        html: str,
        sender: str = EMAIL_FROM,
    ) -> Dict[str, Any]:
        recipients = [to] if isinstance(to, str) else list(to)
        if not recipients or not all(recipients):
            logger.error("Email not sent: missing recipient (subject=%r)", subject)
            return {"success": False, "error": "missing recipient"}

        try:
            data = self.http.post("emails", {
                "from": sender,
                "to": recipients,
                "subject": subject,
                "html": html,
            })
        except Exception as e:
            logger.error("Error sending email via Resend to %s: %s", recipients, e)
            return {"success": False, "error": str(e)}

        email_id = data.get("id")
        logger.info("Email sent to %s id=%s", recipients, email_id)
        return {"success": True, "id": email_id}


__all__ = ["ResendClient"]
