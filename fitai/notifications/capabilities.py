"""
Capability interfaces for the notification lifecycle.

The lifecycle manager only talks to these. Implementations:
- a browser/SDK bridge on the client side
- in-memory fakes in tests
- FirestoreTokenStore for TokenStore
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from fitai.notifications.models import PermissionState

MessageHandler = Callable[[Dict[str, Any]], None]
Unsubscribe = Callable[[], None]


class PermissionApi(ABC):
    """Notification permission API of the host environment."""

    @abstractmethod
    def is_supported(self) -> bool:
        pass

    @abstractmethod
    def current(self) -> PermissionState:
        """Current permission without prompting."""
        pass

    @abstractmethod
    def request(self) -> PermissionState:
        """Prompt the user and return the resulting permission."""
        pass


class ServiceWorkerRegistration(ABC):

    @abstractmethod
    def show_notification(self, title: str, options: Dict[str, Any]) -> None:
        pass


class ServiceWorkerContainer(ABC):

    @abstractmethod
    def is_supported(self) -> bool:
        pass

    @abstractmethod
    def register(self, script_url: str) -> ServiceWorkerRegistration:
        """Register the messaging service worker. Raises ProviderError."""
        pass

    @abstractmethod
    def ready(self) -> Optional[ServiceWorkerRegistration]:
        """Active registration, or None if no worker is active."""
        pass


class MessagingProvider(ABC):
    """Push-messaging SDK (FCM web)."""

    @abstractmethod
    def get_token(
        self,
        vapid_key: str,
        registration: ServiceWorkerRegistration,
    ) -> Optional[str]:
        """Issue a push token. Raises ProviderError."""
        pass

    @abstractmethod
    def on_message(self, handler: MessageHandler) -> Unsubscribe:
        """Deliver foreground messages to handler until unsubscribed."""
        pass


class TokenStore(ABC):

    @abstractmethod
    def save_token(
        self,
        user_id: str,
        token: str,
        platform: str = "web",
        user_agent: str = "",
    ) -> None:
        """Persist a token for a user. Raises PersistenceError."""
        pass
