"""Manual premium override for a user looked up by email."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from google.cloud import firestore

from fitai.config import USERS_COLLECTION
from fitai.firestore_client import get_db

logger = logging.getLogger(__name__)

MANUAL_OVERRIDE_ID = "manual_override_admin"


def make_user_premium(
    email: str,
    apply: bool = True,
    db: Optional[firestore.Client] = None,
) -> List[str]:
    """
    Grant premium to every user document with this email.

    Args:
        email: Email to look up in users
        apply: If False, only report matches (dry-run)
        db: Firestore client (defaults to the shared one)

    Returns:
        IDs of the matched users (updated when apply=True)
    """
    db = db or get_db()
    matched: List[str] = []
    try:
        logger.info("Searching for user with email: %s", email)
        docs = db.collection(USERS_COLLECTION).where("email", "==", email).get()
        if not docs:
            logger.info("No user found with that email.")
            return matched

        now = datetime.utcnow()
        for doc in docs:
            data = doc.to_dict() or {}
            logger.info("Found user: %s (%s)", doc.id,
                        data.get("displayName") or data.get("name") or "No Name")
            if apply:
                doc.reference.update({
                    "isPremium": True,
                    "subscriptionStatus": "active",
                    "subscriptionId": MANUAL_OVERRIDE_ID,
                    "premiumSince": now,
                    "updatedAt": firestore.SERVER_TIMESTAMP,
                })
            matched.append(doc.id)

        if apply:
            logger.info("Granted PREMIUM status to %d user(s)", len(matched))
        else:
            logger.info("DRY RUN: would grant PREMIUM to %d user(s)", len(matched))
    except Exception as e:
        logger.error("Error updating user: %s", e)
    return matched


__all__ = ["make_user_premium", "MANUAL_OVERRIDE_ID"]
