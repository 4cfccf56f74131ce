"""Base document repository.

This module provides the shared plumbing for the typed repositories: a
collection bound to a ``DocumentStore``, entity conversion hooks and a
subscription wrapper that yields entities instead of raw documents.
"""

from abc import (
    ABC,
    abstractmethod,
)
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Sequence,
)

from app.domain.repositories.document_store import (
    Document,
    DocumentStore,
    Filter,
    OrderBy,
    Subscription,
)
from app.utils.clock import (
    Clock,
    utc_now,
)


class EntitySubscription:
    """Live query yielding converted entities.

    Wraps a store :class:`Subscription`; closing this closes the listener.
    """

    def __init__(self, subscription: Subscription, to_entity: Callable[[Document], Any]):
        self._subscription = subscription
        self._to_entity = to_entity

    @property
    def active(self) -> bool:
        return self._subscription.active

    def __aiter__(self):
        return self

    async def __anext__(self) -> List[Any]:
        documents = await self._subscription.__anext__()
        return [self._to_entity(document) for document in documents]

    def close(self) -> None:
        self._subscription.close()

    def restart(self) -> None:
        self._subscription.restart()

    async def __aenter__(self) -> "EntitySubscription":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class BaseDocumentRepository(ABC):
    """Base class for repositories over one collection."""

    def __init__(self, store: DocumentStore, collection_name: str, clock: Clock = utc_now):
        """Initialize base repository.

        Args:
            store: Document store the repository reads and writes
            collection_name: Name of the collection
            clock: Source of client-side timestamps
        """
        self.store = store
        self.collection_name = collection_name
        self.clock = clock

    async def _get_entity(self, doc_id: str) -> Any:
        return self.to_entity(await self.store.get(self.collection_name, doc_id))

    async def _query_entities(
        self,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
        collection: Optional[str] = None,
    ) -> List[Any]:
        documents = await self.store.query(collection or self.collection_name, filters, order_by, limit)
        return [self.to_entity(document) for document in documents]

    def _with_timestamps(self, data: Dict[str, Any], created: bool = False) -> Dict[str, Any]:
        now = self.clock()
        data["updatedAt"] = now
        if created:
            data["createdAt"] = now
        return data

    @abstractmethod
    def to_entity(self, data: Document) -> Any:
        """Convert a stored document to a domain entity.

        Args:
            data: Document data from the store

        Returns:
            Any: Domain entity instance
        """
        pass

    @abstractmethod
    def from_entity(self, entity: Any) -> Document:
        """Convert a domain entity to a stored document.

        Args:
            entity: Domain entity instance

        Returns:
            Document: Document data for the store
        """
        pass
