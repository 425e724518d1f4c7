"""
In-memory stand-ins for Firestore and the notification capabilities.

FakeFirestore implements the subset of google.cloud.firestore.Client the
services use: collection/document paths, set(merge)/update/delete, where/limit
queries, add, batches, SERVER_TIMESTAMP and Increment transforms.
"""

from __future__ import annotations

import copy
import itertools
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from google.cloud import firestore

from fitai.notifications.capabilities import (
    MessagingProvider,
    PermissionApi,
    ServiceWorkerContainer,
    ServiceWorkerRegistration,
    TokenStore,
)
from fitai.notifications.errors import PersistenceError, ProviderError
from fitai.notifications.models import PermissionState

FAKE_NOW = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)

_MISSING = object()


# =============================================================================
# FIRESTORE
# =============================================================================

def _get_path(data: Dict[str, Any], dotted: str) -> Any:
    current: Any = data
    for part in dotted.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _resolve(existing: Any, value: Any) -> Any:
    if value is firestore.SERVER_TIMESTAMP:
        return FAKE_NOW
    if isinstance(value, firestore.Increment):
        base = existing if isinstance(existing, (int, float)) and existing is not _MISSING else 0
        return base + value.value
    return value


def _apply(data: Dict[str, Any], updates: Dict[str, Any], dotted: bool) -> None:
    for key, value in updates.items():
        parts = key.split(".") if dotted else [key]
        target = data
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        leaf = parts[-1]
        if isinstance(value, dict) and not dotted and isinstance(target.get(leaf), dict):
            _apply(target[leaf], value, dotted=False)
        else:
            target[leaf] = _resolve(target.get(leaf, _MISSING), value)


class FakeSnapshot:

    def __init__(self, reference: "FakeDocumentRef", data: Optional[Dict[str, Any]]):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocumentRef:

    def __init__(self, db: "FakeFirestore", path: Tuple[str, ...]):
        self._db = db
        self.path = path
        self.id = path[-1]

    def collection(self, name: str) -> "FakeCollectionRef":
        return FakeCollectionRef(self._db, self.path + (name,))

    def get(self, transaction=None) -> FakeSnapshot:
        self._db._maybe_fail("read")
        return FakeSnapshot(self, self._db.docs.get(self.path))

    def set(self, data: Dict[str, Any], merge: bool = False) -> None:
        self._db._maybe_fail("write")
        self._db.writes.append(("set", self.path, data))
        if merge and self.path in self._db.docs:
            _apply(self._db.docs[self.path], data, dotted=False)
        else:
            fresh: Dict[str, Any] = {}
            _apply(fresh, data, dotted=False)
            self._db.docs[self.path] = fresh

    def update(self, data: Dict[str, Any]) -> None:
        self._db._maybe_fail("write")
        if self.path not in self._db.docs:
            raise KeyError(f"No document to update: {'/'.join(self.path)}")
        self._db.writes.append(("update", self.path, data))
        _apply(self._db.docs[self.path], data, dotted=True)

    def delete(self) -> None:
        self._db._maybe_fail("write")
        self._db.writes.append(("delete", self.path, None))
        self._db.docs.pop(self.path, None)


class FakeQuery:

    def __init__(self, db: "FakeFirestore", path: Tuple[str, ...], filters=None, limit_count=None):
        self._db = db
        self._path = path
        self._filters: List[Tuple[str, str, Any]] = list(filters or [])
        self._limit = limit_count

    def where(self, field: str, op: str, value: Any) -> "FakeQuery":
        return FakeQuery(self._db, self._path, self._filters + [(field, op, value)], self._limit)

    def limit(self, count: int) -> "FakeQuery":
        return FakeQuery(self._db, self._path, self._filters, count)

    @staticmethod
    def _matches(doc_id: str, data: Dict[str, Any], field: str, op: str, value: Any) -> bool:
        if field == "__name__":
            actual: Any = doc_id
            value = value.id if isinstance(value, FakeDocumentRef) else value
        else:
            actual = _get_path(data, field)
            if actual is _MISSING:
                return False
        try:
            if op == "==":
                return actual == value
            if op == "!=":
                return actual != value
            if op == ">=":
                return actual >= value
            if op == ">":
                return actual > value
            if op == "<=":
                return actual <= value
            if op == "<":
                return actual < value
            if op == "in":
                return actual in value
            if op == "array_contains":
                return value in (actual or [])
        except TypeError:
            return False
        raise ValueError(f"Unsupported operator {op}")

    def get(self, transaction=None) -> List[FakeSnapshot]:
        self._db._maybe_fail("read")
        results = []
        for path in sorted(self._db.docs):
            if len(path) != len(self._path) + 1 or path[:-1] != self._path:
                continue
            data = self._db.docs[path]
            if all(self._matches(path[-1], data, f, o, v) for f, o, v in self._filters):
                results.append(FakeSnapshot(FakeDocumentRef(self._db, path), data))
        if self._limit is not None:
            results = results[: self._limit]
        return results

    def stream(self, transaction=None):
        return iter(self.get())


class FakeCollectionRef(FakeQuery):

    def __init__(self, db: "FakeFirestore", path: Tuple[str, ...]):
        super().__init__(db, path)
        self.id = path[-1]

    def document(self, doc_id: Optional[str] = None) -> FakeDocumentRef:
        if doc_id is None:
            doc_id = f"auto-{next(self._db._ids)}"
        return FakeDocumentRef(self._db, self._path + (doc_id,))

    def add(self, data: Dict[str, Any]):
        ref = self.document()
        ref.set(data)
        return FAKE_NOW, ref


class FakeBatch:

    def __init__(self, db: "FakeFirestore"):
        self._db = db
        self._ops: List[Callable[[], None]] = []

    def set(self, ref: FakeDocumentRef, data: Dict[str, Any], merge: bool = False) -> None:
        self._ops.append(lambda: ref.set(data, merge=merge))

    def update(self, ref: FakeDocumentRef, data: Dict[str, Any]) -> None:
        self._ops.append(lambda: ref.update(data))

    def delete(self, ref: FakeDocumentRef) -> None:
        self._ops.append(ref.delete)

    def commit(self) -> None:
        self._db._maybe_fail("write")
        self._db.batch_commits += 1
        for op in self._ops:
            op()
        self._ops = []


class FakeFirestore:
    """Dict-backed Firestore client."""

    def __init__(self):
        self.docs: Dict[Tuple[str, ...], Dict[str, Any]] = {}
        self.writes: List[Tuple[str, Tuple[str, ...], Any]] = []
        self.batch_commits = 0
        self.fail_reads = False
        self.fail_writes = False
        self._ids = itertools.count(1)

    def _maybe_fail(self, kind: str) -> None:
        if kind == "read" and self.fail_reads:
            raise RuntimeError("firestore unavailable (read)")
        if kind == "write" and self.fail_writes:
            raise RuntimeError("firestore unavailable (write)")

    def collection(self, name: str) -> FakeCollectionRef:
        return FakeCollectionRef(self, (name,))

    def batch(self) -> FakeBatch:
        return FakeBatch(self)

    # Test helpers

    def seed(self, path: str, data: Dict[str, Any]) -> None:
        self.docs[tuple(path.split("/"))] = copy.deepcopy(data)

    def data(self, path: str) -> Optional[Dict[str, Any]]:
        return self.docs.get(tuple(path.split("/")))

    def paths(self, prefix: str) -> List[str]:
        parts = tuple(prefix.split("/"))
        return sorted(
            "/".join(p) for p in self.docs
            if p[: len(parts)] == parts and len(p) == len(parts) + 1
        )


# =============================================================================
# NOTIFICATION CAPABILITIES
# =============================================================================

class FakePermissionApi(PermissionApi):

    def __init__(self, state: PermissionState = PermissionState.DEFAULT,
                 answer: PermissionState = PermissionState.GRANTED, supported: bool = True):
        self.state = state
        self.answer = answer
        self.supported = supported
        self.prompts = 0

    def is_supported(self) -> bool:
        return self.supported

    def current(self) -> PermissionState:
        return self.state

    def request(self) -> PermissionState:
        self.prompts += 1
        # Browsers only prompt from the default state
        if self.state == PermissionState.DEFAULT:
            self.state = self.answer
        return self.state


class FakeRegistration(ServiceWorkerRegistration):

    def __init__(self, script_url: str = ""):
        self.script_url = script_url
        self.shown: List[Tuple[str, Dict[str, Any]]] = []

    def show_notification(self, title: str, options: Dict[str, Any]) -> None:
        self.shown.append((title, options))


class FakeServiceWorkers(ServiceWorkerContainer):

    def __init__(self, supported: bool = True, fail_register: bool = False):
        self.supported = supported
        self.fail_register = fail_register
        self.registration: Optional[FakeRegistration] = None
        self.registered_urls: List[str] = []

    def is_supported(self) -> bool:
        return self.supported

    def register(self, script_url: str) -> FakeRegistration:
        if self.fail_register:
            raise ProviderError("service worker registration failed")
        self.registered_urls.append(script_url)
        self.registration = self.registration or FakeRegistration(script_url)
        return self.registration

    def ready(self) -> Optional[FakeRegistration]:
        return self.registration


class FakeMessaging(MessagingProvider):

    def __init__(self, tokens: Optional[List[Optional[str]]] = None, error: Optional[Exception] = None):
        self._tokens = list(tokens if tokens is not None else ["tok-abcdefghijklmnop"])
        self.error = error
        self.token_requests: List[Tuple[str, Any]] = []
        self.handlers: List[Callable[[Dict[str, Any]], None]] = []

    def get_token(self, vapid_key, registration):
        self.token_requests.append((vapid_key, registration))
        if self.error:
            raise self.error
        if len(self._tokens) > 1:
            return self._tokens.pop(0)
        return self._tokens[0] if self._tokens else None

    def on_message(self, handler):
        self.handlers.append(handler)

        def unsubscribe():
            if handler in self.handlers:
                self.handlers.remove(handler)
        return unsubscribe

    def deliver(self, payload: Dict[str, Any]) -> None:
        for handler in list(self.handlers):
            handler(payload)


class RecordingTokenStore(TokenStore):

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.saved: List[Tuple[str, str, str, str]] = []

    def save_token(self, user_id, token, platform="web", user_agent=""):
        if self.fail:
            raise PersistenceError("write rejected")
        self.saved.append((user_id, token, platform, user_agent))
