"""Firestore document store.

Implements the ``DocumentStore`` contract on the synchronous Firestore client.
Each blocking SDK call runs in a worker thread under ``asyncio.wait_for`` so
no store call can hang a client past ``STORE_TIMEOUT_SECONDS``. SDK errors
are translated into domain exceptions at this boundary.
"""

import asyncio
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Sequence,
)

from google.api_core import exceptions as google_exceptions
from google.cloud.firestore import (
    SERVER_TIMESTAMP as FIRESTORE_SERVER_TIMESTAMP,
    Client,
    Query,
    transactional,
)
from google.cloud.firestore_v1.base_query import FieldFilter

from app.core.logging import logger
from app.domain.exceptions import (
    ConflictError,
    DomainError,
    NotFoundError,
    PermissionDeniedError,
    StoreTimeoutError,
    UnavailableError,
)
from app.domain.repositories.document_store import (
    DESCENDING,
    SERVER_TIMESTAMP,
    Document,
    DocumentStore,
    Filter,
    OrderBy,
    Subscription,
)

DEFAULT_TIMEOUT_SECONDS = 30.0

# Firestore rejects write batches larger than this
MAX_BATCH_WRITES = 500


def _to_document(snapshot) -> Document:
    data = snapshot.to_dict() or {}
    data["id"] = snapshot.id
    return data


def _prepare(data: Document) -> Dict[str, Any]:
    """Swap our server timestamp sentinel for Firestore's."""
    prepared = {}
    for key, value in data.items():
        if key == "id":
            continue
        prepared[key] = FIRESTORE_SERVER_TIMESTAMP if value is SERVER_TIMESTAMP else value
    return prepared


def translate_error(
    error: Exception,
    operation: str,
    collection: str,
    doc_id: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> DomainError:
    """Map a Google API error onto the domain error taxonomy.

    Args:
        error: Exception raised by the Firestore SDK
        operation: Name of the store operation, for messages and logs
        collection: Collection path the call targeted
        doc_id: Document ID the call targeted, if any
        timeout: Deadline in effect for the call

    Returns:
        DomainError: The matching domain exception
    """
    if isinstance(error, google_exceptions.NotFound):
        return NotFoundError(collection, doc_id or "")
    if isinstance(error, (google_exceptions.Forbidden, google_exceptions.Unauthorized)):
        return PermissionDeniedError(operation, str(error.message))
    if isinstance(error, google_exceptions.DeadlineExceeded):
        return StoreTimeoutError(operation, timeout)
    if isinstance(error, google_exceptions.Aborted):
        return ConflictError(collection, doc_id or "")
    return UnavailableError(operation, type(error).__name__)


class FirestoreSubscription(Subscription):
    """Subscription backed by ``Query.on_snapshot``.

    The SDK delivers snapshots on its own watch thread; they are handed to
    the event loop through the base class queue.
    """

    def __init__(self, query, collection: str, filters: Sequence[Filter], order_by: Optional[OrderBy] = None):
        super().__init__(collection, filters, order_by)
        self._query = query
        self._watch = None

    def _start(self) -> None:
        self._watch = self._query.on_snapshot(self._on_snapshot)
        logger.debug("firestore_subscription_started", collection=self.collection)

    def _on_snapshot(self, snapshots, changes, read_time) -> None:
        self._publish([_to_document(snapshot) for snapshot in snapshots])

    def _stop(self) -> None:
        if self._watch is not None:
            self._watch.unsubscribe()
            self._watch = None
            logger.debug("firestore_subscription_stopped", collection=self.collection)


class FirestoreDocumentStore(DocumentStore):
    """``DocumentStore`` on a Firestore ``Client``."""

    def __init__(self, client: Client, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        """Initialize the store.

        Args:
            client: Firestore client, built by the dependency container
            timeout: Deadline in seconds applied to every store call
        """
        self._client = client
        self.timeout = timeout

    async def _run(
        self,
        operation: str,
        collection: str,
        fn: Callable[[], Any],
        doc_id: Optional[str] = None,
    ) -> Any:
        try:
            return await asyncio.wait_for(asyncio.to_thread(fn), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.warning("store_call_timed_out", operation=operation, collection=collection, timeout=self.timeout)
            raise StoreTimeoutError(operation, self.timeout) from e
        except DomainError:
            raise
        except google_exceptions.GoogleAPIError as e:
            error = translate_error(e, operation, collection, doc_id, self.timeout)
            logger.warning(
                "store_call_failed",
                operation=operation,
                collection=collection,
                doc_id=doc_id,
                error_code=error.error_code,
                error=str(e),
            )
            raise error from e

    def _build_query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
    ):
        query = self._client.collection(collection)
        for item in filters:
            query = query.where(filter=FieldFilter(item.field, item.op, item.value))
        if order_by:
            query = query.order_by(
                order_by.field,
                direction=Query.DESCENDING if order_by.direction == DESCENDING else Query.ASCENDING,
            )
        if limit:
            query = query.limit(limit)
        return query

    async def get(self, collection: str, doc_id: str) -> Document:
        def fetch() -> Document:
            snapshot = self._client.collection(collection).document(doc_id).get()
            if not snapshot.exists:
                raise NotFoundError(collection, doc_id)
            return _to_document(snapshot)

        return await self._run("get", collection, fetch, doc_id)

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
    ) -> List[Document]:
        query = self._build_query(collection, filters, order_by, limit)
        return await self._run("query", collection, lambda: [_to_document(doc) for doc in query.stream()])

    async def count(self, collection: str, filters: Sequence[Filter] = ()) -> int:
        query = self._build_query(collection, filters)

        def aggregate() -> int:
            results = query.count(alias="total").get()
            return int(results[0][0].value)

        return await self._run("count", collection, aggregate)

    async def create(self, collection: str, data: Document, doc_id: Optional[str] = None) -> str:
        prepared = _prepare(data)

        def write() -> str:
            if doc_id:
                self._client.collection(collection).document(doc_id).set(prepared)
                return doc_id
            _, doc_ref = self._client.collection(collection).add(prepared)
            return doc_ref.id

        return await self._run("create", collection, write, doc_id)

    async def update(self, collection: str, doc_id: str, data: Document) -> None:
        prepared = _prepare(data)
        doc_ref = self._client.collection(collection).document(doc_id)
        await self._run("update", collection, lambda: doc_ref.update(prepared), doc_id)

    async def update_if(
        self,
        collection: str,
        doc_id: str,
        expected: Document,
        data: Document,
    ) -> Document:
        prepared = _prepare(data)
        doc_ref = self._client.collection(collection).document(doc_id)

        @transactional
        def apply(transaction) -> Document:
            snapshot = doc_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise NotFoundError(collection, doc_id)

            current = _to_document(snapshot)
            actual = {field: current.get(field) for field in expected}
            if actual != dict(expected):
                raise ConflictError(collection, doc_id, dict(expected), actual)

            transaction.update(doc_ref, prepared)
            current.update(data)
            return current

        return await self._run("update_if", collection, lambda: apply(self._client.transaction()), doc_id)

    async def batch_update(self, collection: str, updates: Dict[str, Document]) -> None:
        if not updates:
            return
        if len(updates) > MAX_BATCH_WRITES:
            raise ValueError(f"A batch holds at most {MAX_BATCH_WRITES} writes, got {len(updates)}")

        def commit() -> None:
            batch = self._client.batch()
            for doc_id, data in updates.items():
                batch.update(self._client.collection(collection).document(doc_id), _prepare(data))
            batch.commit()

        await self._run("batch_update", collection, commit)

    def subscribe(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
    ) -> Subscription:
        query = self._build_query(collection, filters, order_by)
        return FirestoreSubscription(query, collection, filters, order_by)
