"""Mock services for testing.

This package contains mock implementations of external services
to facilitate testing without requiring actual service connections.
"""

import copy
import itertools
from collections import defaultdict
from datetime import (
    UTC,
    datetime,
)
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Sequence,
)

from app.domain.exceptions import (
    ConflictError,
    NotFoundError,
)
from app.domain.repositories import (
    DESCENDING,
    SERVER_TIMESTAMP,
    Document,
    DocumentStore,
    Filter,
    OrderBy,
    Subscription,
)
from app.services.email import (
    EmailDeliveryError,
    EmailResult,
)
from app.services.firebase_auth import (
    AuthenticatedUser,
    AuthenticationError,
)

FROZEN_NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)

_MISSING = object()


class FrozenClock:
    """Settable clock for deterministic tests."""

    def __init__(self, now: datetime = FROZEN_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta) -> datetime:
        self.now = self.now + delta
        return self.now


def _matches(document: Document, flt: Filter) -> bool:
    value = document.get(flt.field, _MISSING)
    if value is _MISSING:
        return False
    match flt.op:
        case "==":
            return value == flt.value
        case "!=":
            return value != flt.value
        case "<":
            return value < flt.value
        case "<=":
            return value <= flt.value
        case ">":
            return value > flt.value
        case ">=":
            return value >= flt.value
        case "in":
            return value in flt.value
        case "array-contains":
            return isinstance(value, list) and flt.value in value
        case "array-contains-any":
            return isinstance(value, list) and any(item in value for item in flt.value)
    raise ValueError(f"Unsupported filter operator: {flt.op}")


class InMemorySubscription(Subscription):
    """Subscription fed synchronously by :class:`InMemoryDocumentStore` writes."""

    def __init__(self, store: "InMemoryDocumentStore", collection, filters, order_by):
        super().__init__(collection, filters, order_by)
        self._store = store

    def _start(self) -> None:
        self._store.listeners.append(self)
        self.refresh()

    def _stop(self) -> None:
        if self in self._store.listeners:
            self._store.listeners.remove(self)

    def refresh(self) -> None:
        self._publish(self._store.run_query(self.collection, self.filters, self.order_by))


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed document store with Firestore query semantics.

    ``fail(operation, error)`` makes the next call of that operation raise,
    and ``calls`` records every operation for assertions.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or FrozenClock()
        self.collections: Dict[str, Dict[str, Document]] = defaultdict(dict)
        self.listeners: List[InMemorySubscription] = []
        self.calls: List[tuple] = []
        self._failures: Dict[str, List[Exception]] = defaultdict(list)
        self._ids = itertools.count(1)

    def fail(self, operation: str, error: Exception, times: int = 1) -> None:
        self._failures[operation].extend([error] * times)

    def seed(self, collection: str, doc_id: str, data: Document) -> None:
        self.collections[collection][doc_id] = self._resolve(data)

    def writes(self) -> List[tuple]:
        return [call for call in self.calls if call[0] in ("create", "update", "update_if", "batch_update")]

    def run_query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
    ) -> List[Document]:
        results = [
            {**copy.deepcopy(data), "id": doc_id}
            for doc_id, data in self.collections.get(collection, {}).items()
            if all(_matches(data, flt) for flt in filters)
        ]
        if order_by is not None:
            results = [doc for doc in results if order_by.field in doc]
            results.sort(key=lambda doc: doc[order_by.field], reverse=order_by.direction == DESCENDING)
        if limit is not None:
            results = results[:limit]
        return results

    async def get(self, collection: str, doc_id: str) -> Document:
        self._record("get", collection, doc_id)
        data = self.collections.get(collection, {}).get(doc_id)
        if data is None:
            raise NotFoundError(collection, doc_id)
        return {**copy.deepcopy(data), "id": doc_id}

    async def query(self, collection, filters=(), order_by=None, limit=None) -> List[Document]:
        self._record("query", collection, list(filters), order_by, limit)
        return self.run_query(collection, filters, order_by, limit)

    async def count(self, collection, filters=()) -> int:
        self._record("count", collection, list(filters))
        return len(self.run_query(collection, filters))

    async def create(self, collection: str, data: Document, doc_id: Optional[str] = None) -> str:
        self._record("create", collection, doc_id, data)
        doc_id = doc_id or f"doc{next(self._ids)}"
        self.collections[collection][doc_id] = self._resolve(data)
        self._notify(collection)
        return doc_id

    async def update(self, collection: str, doc_id: str, data: Document) -> None:
        self._record("update", collection, doc_id, data)
        document = self._existing(collection, doc_id)
        document.update(self._resolve(data))
        self._notify(collection)

    async def update_if(self, collection: str, doc_id: str, expected: Document, data: Document) -> Document:
        self._record("update_if", collection, doc_id, expected, data)
        document = self._existing(collection, doc_id)
        actual = {key: document.get(key) for key in expected}
        if actual != expected:
            raise ConflictError(collection, doc_id, expected, actual)
        document.update(self._resolve(data))
        self._notify(collection)
        return {**copy.deepcopy(document), "id": doc_id}

    async def batch_update(self, collection: str, updates: Dict[str, Document]) -> None:
        self._record("batch_update", collection, list(updates))
        documents = {doc_id: self._existing(collection, doc_id) for doc_id in updates}
        for doc_id, data in updates.items():
            documents[doc_id].update(self._resolve(data))
        self._notify(collection)

    def subscribe(self, collection, filters=(), order_by=None) -> InMemorySubscription:
        return InMemorySubscription(self, collection, filters, order_by)

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, *args))
        if self._failures[operation]:
            raise self._failures[operation].pop(0)

    def _existing(self, collection: str, doc_id: str) -> Document:
        document = self.collections.get(collection, {}).get(doc_id)
        if document is None:
            raise NotFoundError(collection, doc_id)
        return document

    def _resolve(self, data: Document) -> Document:
        resolved = {key: (self.clock() if value is SERVER_TIMESTAMP else value) for key, value in data.items()}
        resolved.pop("id", None)
        return copy.deepcopy(resolved)

    def _notify(self, collection: str) -> None:
        for listener in list(self.listeners):
            if listener.collection == collection:
                listener.refresh()


class MockAuthService:
    """Mock Firebase ID-token verifier keyed by token string."""

    def __init__(self, users: Optional[Dict[str, AuthenticatedUser]] = None):
        self.users = users or {}

    async def verify_token(self, id_token: str) -> AuthenticatedUser:
        if id_token not in self.users:
            raise AuthenticationError("Invalid token")
        return self.users[id_token]


class RecordingEmailSender:
    """Email sender that records messages and can fail for chosen recipients."""

    def __init__(self, failing_recipients: Sequence[str] = ()):
        self.sent: List[Dict[str, str]] = []
        self.failing_recipients = set(failing_recipients)

    async def send_email(self, to: str, subject: str, html_content: str):
        if to in self.failing_recipients:
            raise EmailDeliveryError()
        self.sent.append({"to": to, "subject": subject, "html_content": html_content})
        return EmailResult()
