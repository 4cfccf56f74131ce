"""Document store contract for SkillSwap.

This module defines the operations the core needs from the hosted document
database: typed reads, queries, writes, conditional writes, atomic batches and
live query subscriptions. It says nothing about which database backs them.
"""

import asyncio
from abc import (
    ABC,
    abstractmethod,
)
from typing import (
    Any,
    AsyncIterator,
    Dict,
    List,
    NamedTuple,
    Optional,
    Sequence,
)

Document = Dict[str, Any]

ASCENDING = "asc"
DESCENDING = "desc"

FILTER_OPERATORS = frozenset(
    {"==", "!=", "<", "<=", ">", ">=", "in", "array-contains", "array-contains-any"}
)


class _ServerTimestamp:
    """Sentinel replaced by the store's own clock on write."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


class Filter(NamedTuple):
    """A single ``field op value`` query predicate."""

    field: str
    op: str
    value: Any


class OrderBy(NamedTuple):
    """Sort key for a query."""

    field: str
    direction: str = ASCENDING


def where(field: str, op: str, value: Any) -> Filter:
    """Build a query predicate, rejecting unsupported operators."""
    if op not in FILTER_OPERATORS:
        raise ValueError(f"Unsupported filter operator: {op}")
    return Filter(field, op, value)


class Subscription(ABC):
    """Live query handle.

    Iterating yields the full current result set on every change, starting
    with the initial one. Nothing is registered with the store until the first
    iteration; :meth:`close` removes the listener and ends iteration, and
    :meth:`restart` drops any buffered snapshots, ends a pending iteration and
    re-registers on the next one. An unclosed subscription keeps a live
    listener on the backend.
    """

    def __init__(self, collection: str, filters: Sequence[Filter], order_by: Optional[OrderBy] = None):
        self.collection = collection
        self.filters = list(filters)
        self.order_by = order_by
        self._queue: Optional[asyncio.Queue] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._started = False
        self._closed = False

    @abstractmethod
    def _start(self) -> None:
        """Register the listener with the backend."""

    @abstractmethod
    def _stop(self) -> None:
        """Remove the listener from the backend."""

    @property
    def active(self) -> bool:
        return self._started and not self._closed

    def _publish(self, documents: List[Document]) -> None:
        """Hand a snapshot to the iterator. Safe to call from any thread."""
        if self._closed or self._loop is None:
            return
        self._loop.call_soon_threadsafe(self._queue.put_nowait, documents)

    def __aiter__(self) -> AsyncIterator[List[Document]]:
        return self

    async def __anext__(self) -> List[Document]:
        if self._closed:
            raise StopAsyncIteration
        if not self._started:
            self._loop = asyncio.get_running_loop()
            self._queue = asyncio.Queue()
            self._started = True
            self._start()

        snapshot = await self._queue.get()
        if snapshot is None:
            raise StopAsyncIteration
        return snapshot

    def close(self) -> None:
        """Unsubscribe. Idempotent."""
        if self._closed:
            return
        self._closed = True
        if self._started:
            self._stop()
            # Wake a consumer blocked on the queue
            self._queue.put_nowait(None)

    def restart(self) -> None:
        """Tear down the listener so the next iteration registers a new one."""
        if self._started and not self._closed:
            self._stop()
            # Wake a consumer blocked on the old queue
            self._queue.put_nowait(None)
        self._started = False
        self._closed = False
        self._queue = None
        self._loop = None

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class DocumentStore(ABC):
    """Abstract document store.

    Every operation may raise ``NotFoundError``, ``PermissionDeniedError``,
    ``UnavailableError`` or ``StoreTimeoutError``. Collections are slash
    separated paths, e.g. ``chats/{chat_id}/messages``. Returned documents are
    plain dicts carrying their document ID under ``"id"``.
    """

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Document:
        """Read one document.

        Raises:
            NotFoundError: If the document does not exist
        """

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
    ) -> List[Document]:
        """Run a query and return the matching documents."""

    @abstractmethod
    async def count(self, collection: str, filters: Sequence[Filter] = ()) -> int:
        """Count the documents matching a query."""

    @abstractmethod
    async def create(self, collection: str, data: Document, doc_id: Optional[str] = None) -> str:
        """Create a document and return its ID (generated when not given)."""

    @abstractmethod
    async def update(self, collection: str, doc_id: str, data: Document) -> None:
        """Merge fields into an existing document (last write wins per field).

        Raises:
            NotFoundError: If the document does not exist
        """

    @abstractmethod
    async def update_if(
        self,
        collection: str,
        doc_id: str,
        expected: Document,
        data: Document,
    ) -> Document:
        """Merge fields only if every ``expected`` field still holds its value.

        The read and the write happen atomically on the one document.

        Returns:
            Document: The document as written

        Raises:
            NotFoundError: If the document does not exist
            ConflictError: If any expected field has a different value
        """

    @abstractmethod
    async def batch_update(self, collection: str, updates: Dict[str, Document]) -> None:
        """Apply several updates in one collection atomically: all or none."""

    @abstractmethod
    def subscribe(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
    ) -> Subscription:
        """Open a live query. The caller owns the returned subscription."""
