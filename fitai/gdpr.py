"""
GDPR data export and account deletion.

Covers the right of access (export_user_data) and the right to erasure
(delete_user_account). Every request is recorded in gdprRequests.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from firebase_admin import auth
from google.cloud import firestore
from google.cloud.firestore_v1.field_path import FieldPath

from fitai.config import (
    DELETE_CONFIRMATION_PHRASE,
    GDPR_REQUESTS_COLLECTION,
    NUTRITION_LOGS_COLLECTION,
    USERS_COLLECTION,
)
from fitai.firestore_client import get_db, get_firebase_app

logger = logging.getLogger(__name__)

# Collections holding user-owned documents keyed by a userId field
USER_OWNED_COLLECTIONS = [
    "routines",
    "diets",
    "workouts",
    "activities",
    "communityPosts",
]

# Firestore write batch limit
MAX_BATCH_WRITES = 500


class ConfirmationRequiredError(Exception):
    """Raised when account deletion is not explicitly confirmed."""
    pass


def _default_delete_auth_user(user_id: str) -> None:
    auth.delete_user(user_id, app=get_firebase_app())


class GdprService:

    def __init__(
        self,
        db: Optional[firestore.Client] = None,
        delete_auth_user: Optional[Callable[[str], None]] = None,
    ):
        self._db = db
        self.delete_auth_user = delete_auth_user or _default_delete_auth_user

    @property
    def db(self) -> firestore.Client:
        if self._db is None:
            self._db = get_db()
        return self._db

    def _nutrition_logs(self, user_id: str):
        # Log ids are "{userId}_{date}"
        prefix = f"{user_id}_"
        collection = self.db.collection(NUTRITION_LOGS_COLLECTION)
        return (
            collection
            .where(FieldPath.document_id(), ">=", collection.document(prefix))
            .where(FieldPath.document_id(), "<", collection.document(prefix + "\uf8ff"))
            .get()
        )

    def _user_owned_docs(self, user_id: str) -> Dict[str, List[Any]]:
        return {
            name: list(self.db.collection(name).where("userId", "==", user_id).get())
            for name in USER_OWNED_COLLECTIONS
        }

    def _audit(self, user_id: str, request_type: str, **extra: Any) -> None:
        record = {
            "userId": user_id,
            "type": request_type,
            "requestedAt": firestore.SERVER_TIMESTAMP,
        }
        record.update(extra)
        self.db.collection(GDPR_REQUESTS_COLLECTION).add(record)

    def export_user_data(self, user_id: str) -> Dict[str, Any]:
        """Collect every document owned by the user."""
        export: Dict[str, Any] = {
            "exportDate": datetime.now(timezone.utc).isoformat(),
            "userId": user_id,
            "collections": {},
        }

        user_snap = self.db.collection(USERS_COLLECTION).document(user_id).get()
        if user_snap.exists:
            export["collections"][USERS_COLLECTION] = user_snap.to_dict()

        for name, docs in self._user_owned_docs(user_id).items():
            export["collections"][name] = [{"id": d.id, **(d.to_dict() or {})} for d in docs]

        export["collections"][NUTRITION_LOGS_COLLECTION] = [
            {"id": d.id, **(d.to_dict() or {})} for d in self._nutrition_logs(user_id)
        ]

        self._audit(user_id, "export", completedAt=firestore.SERVER_TIMESTAMP)
        logger.info("Exported data for user %s", user_id)
        return export

    def delete_user_account(self, user_id: str, confirmation: Optional[str]) -> int:
        """
        Delete all user documents, the profile and the Auth user.

        Returns:
            Number of Firestore documents deleted

        Raises:
            ConfirmationRequiredError: If the confirmation phrase does not match
        """
        if confirmation != DELETE_CONFIRMATION_PHRASE:
            raise ConfirmationRequiredError(
                f"Debes confirmar la eliminación enviando: "
                f"{{ confirmDelete: '{DELETE_CONFIRMATION_PHRASE}' }}"
            )

        refs = [doc.reference for docs in self._user_owned_docs(user_id).values() for doc in docs]
        refs.extend(doc.reference for doc in self._nutrition_logs(user_id))
        refs.append(self.db.collection(USERS_COLLECTION).document(user_id))

        for start in range(0, len(refs), MAX_BATCH_WRITES):
            batch = self.db.batch()
            for ref in refs[start:start + MAX_BATCH_WRITES]:
                batch.delete(ref)
            batch.commit()
        deleted = len(refs)

        # Audit before the Auth user disappears
        self._audit(user_id, "delete", documentsDeleted=deleted)
        self.delete_auth_user(user_id)

        logger.info("Deleted account %s (%d documents)", user_id, deleted)
        return deleted


__all__ = [
    "GdprService",
    "ConfirmationRequiredError",
    "USER_OWNED_COLLECTIONS",
]
