from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests


@dataclass
class HttpClient:
    """JSON-over-HTTP client with bearer auth, shared by outbound integrations."""
    base_url: str
    bearer_token: Optional[str] = None
    timeout_seconds: int = 30
    session: requests.Session = field(default_factory=requests.Session)

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.bearer_token:
            headers["Authorization"] = f"Bearer {self.bearer_token}"
        return headers

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def post(self, path: str, json_body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        resp = self.session.post(
            self._url(path),
            json=json_body or {},
            headers=self._headers(),
            timeout=self.timeout_seconds,
        )
        return self._handle_response(resp)

    @staticmethod
    def _error_message(data: Any) -> Optional[str]:
        # Resend: {"name", "message", "statusCode"}; others nest under "error"
        if not isinstance(data, dict):
            return None
        err = data.get("error")
        if isinstance(err, dict):
            return err.get("message")
        return err or data.get("message")

    @classmethod
    def _handle_response(cls, resp: requests.Response) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError:
            data = {"raw": resp.text}

        if resp.status_code >= 400:
            message = cls._error_message(data) or resp.text or f"HTTP {resp.status_code}"
            raise requests.HTTPError(message, response=resp)
        return data if isinstance(data, dict) else {"data": data}
