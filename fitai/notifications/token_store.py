"""
FCM token persistence.

Collections:
- users/{uid}: hasNotifications, lastFcmToken (merge-updated)
- users/{uid}/fcmTokens/{token}: one document per issued token
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from google.cloud import firestore

from fitai.config import FCM_TOKENS_SUBCOLLECTION, USERS_COLLECTION
from fitai.firestore_client import get_db
from fitai.notifications.capabilities import TokenStore
from fitai.notifications.errors import PersistenceError
from fitai.notifications.models import PushToken

logger = logging.getLogger(__name__)


class FirestoreTokenStore(TokenStore):
    """TokenStore backed by the users collection."""

    def __init__(self, db: Optional[firestore.Client] = None):
        self._db = db

    @property
    def db(self) -> firestore.Client:
        if self._db is None:
            self._db = get_db()
        return self._db

    def _user_ref(self, user_id: str):
        return self.db.collection(USERS_COLLECTION).document(user_id)

    def save_token(
        self,
        user_id: str,
        token: str,
        platform: str = "web",
        user_agent: str = "",
    ) -> None:
        if not user_id or not token:
            return

        user_ref = self._user_ref(user_id)
        try:
            user_ref.collection(FCM_TOKENS_SUBCOLLECTION).document(token).set({
                "token": token,
                "createdAt": firestore.SERVER_TIMESTAMP,
                "platform": platform,
                "userAgent": user_agent,
                "lastActive": firestore.SERVER_TIMESTAMP,
            })
            user_ref.set({
                "hasNotifications": True,
                "lastFcmToken": token,
            }, merge=True)
        except Exception as e:
            raise PersistenceError(f"Failed to save token for {user_id}: {e}") from e

        logger.info("Saved FCM token for user %s", user_id)

    def list_tokens(self, user_id: str) -> List[PushToken]:
        try:
            docs = self._user_ref(user_id).collection(FCM_TOKENS_SUBCOLLECTION).get()
        except Exception as e:
            raise PersistenceError(f"Failed to list tokens for {user_id}: {e}") from e
        tokens = []
        for doc in docs:
            data = doc.to_dict() or {}
            if not data.get("token"):
                data["token"] = doc.id
            tokens.append(PushToken.from_dict(user_id, data))
        return tokens

    def delete_tokens(self, user_id: str, tokens: Iterable[str]) -> int:
        """Delete token documents in one batch. Returns number deleted."""
        tokens = [t for t in tokens if t]
        if not tokens:
            return 0

        collection = self._user_ref(user_id).collection(FCM_TOKENS_SUBCOLLECTION)
        batch = self.db.batch()
        for token in tokens:
            batch.delete(collection.document(token))
        try:
            batch.commit()
        except Exception as e:
            raise PersistenceError(f"Failed to delete tokens for {user_id}: {e}") from e

        logger.info("Removed %d invalid tokens for user %s", len(tokens), user_id)
        return len(tokens)


__all__ = ["FirestoreTokenStore"]
