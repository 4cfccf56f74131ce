"""Message repository over the ``chats/{chat_id}/messages`` subcollections."""

from typing import (
    Any,
    Dict,
    List,
    Optional,
    Sequence,
)

from app.domain.entities import MessageEntity
from app.domain.repositories import (
    ASCENDING,
    DESCENDING,
    SERVER_TIMESTAMP,
    Document,
    DocumentStore,
    MessageRepositoryInterface,
    OrderBy,
    where,
)
from app.infrastructure.repositories.base_repository import (
    BaseDocumentRepository,
    EntitySubscription,
)
from app.utils.clock import (
    Clock,
    utc_now,
)

CHATS_COLLECTION = "chats"


def messages_path(chat_id: str) -> str:
    """Collection path holding one conversation's messages."""
    return f"{CHATS_COLLECTION}/{chat_id}/messages"


class DocumentMessageRepository(BaseDocumentRepository, MessageRepositoryInterface):
    """Messages stored in per-conversation subcollections."""

    def __init__(self, store: DocumentStore, clock: Clock = utc_now):
        super().__init__(store, CHATS_COLLECTION, clock)

    async def create(self, message: MessageEntity) -> MessageEntity:
        data = self.from_entity(message)
        data["timestamp"] = SERVER_TIMESTAMP
        message.id = await self.store.create(messages_path(message.chat_id), data)
        return message

    async def get_messages(self, chat_id: str, limit: Optional[int] = None) -> List[MessageEntity]:
        documents = await self.store.query(
            messages_path(chat_id),
            order_by=OrderBy("timestamp", ASCENDING),
            limit=limit,
        )
        return [self._to_message(chat_id, document) for document in documents]

    async def get_last_message(self, chat_id: str) -> Optional[MessageEntity]:
        documents = await self.store.query(
            messages_path(chat_id),
            order_by=OrderBy("timestamp", DESCENDING),
            limit=1,
        )
        return self._to_message(chat_id, documents[0]) if documents else None

    async def get_unread_for(self, chat_id: str, user_id: str) -> List[MessageEntity]:
        documents = await self.store.query(
            messages_path(chat_id),
            [where("read", "==", False), where("senderId", "!=", user_id)],
        )
        return [self._to_message(chat_id, document) for document in documents]

    async def count_unread_for(self, chat_id: str, user_id: str) -> int:
        return await self.store.count(
            messages_path(chat_id),
            [where("read", "==", False), where("senderId", "!=", user_id)],
        )

    async def mark_read(self, chat_id: str, message_ids: Sequence[str]) -> None:
        await self.store.batch_update(
            messages_path(chat_id),
            {message_id: {"read": True} for message_id in message_ids},
        )

    def watch_messages(self, chat_id: str) -> EntitySubscription:
        subscription = self.store.subscribe(
            messages_path(chat_id),
            order_by=OrderBy("timestamp", ASCENDING),
        )
        return EntitySubscription(subscription, lambda document: self._to_message(chat_id, document))

    def _to_message(self, chat_id: str, data: Document) -> MessageEntity:
        data = dict(data)
        data["chat_id"] = chat_id
        return self.to_entity(data)

    def to_entity(self, data: Document) -> MessageEntity:
        return MessageEntity(
            message_id=data["id"],
            chat_id=data["chat_id"],
            text=data.get("text", ""),
            sender_id=data.get("senderId", ""),
            read=bool(data.get("read", False)),
            timestamp=data.get("timestamp"),
        )

    def from_entity(self, entity: MessageEntity) -> Dict[str, Any]:
        return {
            "text": entity.text,
            "senderId": entity.sender_id,
            "read": entity.read,
        }
