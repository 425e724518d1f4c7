"""Firestore client and Firebase Admin app singletons."""

from typing import Optional

import firebase_admin
from google.cloud import firestore

from fitai.config import PROJECT_ID

_db: Optional[firestore.Client] = None


def get_db() -> firestore.Client:
    """Get or initialize Firestore client."""
    global _db
    if _db is None:
        _db = firestore.Client(project=PROJECT_ID)
    return _db


def get_firebase_app() -> firebase_admin.App:
    """Get or initialize the default Firebase Admin app (messaging, auth)."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        return firebase_admin.initialize_app(options={"projectId": PROJECT_ID})
