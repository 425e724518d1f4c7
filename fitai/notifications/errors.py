"""Notification failure kinds and adapter exceptions."""

from enum import Enum


class NotificationFailure(str, Enum):
    UNSUPPORTED_ENVIRONMENT = "unsupported-environment"
    PERMISSION_DENIED = "permission-denied"
    PROVIDER_ERROR = "provider-error"
    PERSISTENCE_ERROR = "persistence-error"


class NotificationError(Exception):
    """Base class for notification adapter failures."""
    kind = NotificationFailure.PROVIDER_ERROR


class ProviderError(NotificationError):
    """Raised when the push provider or service worker fails."""
    kind = NotificationFailure.PROVIDER_ERROR


class PersistenceError(NotificationError):
    """Raised when a token record cannot be written or read."""
    kind = NotificationFailure.PERSISTENCE_ERROR
