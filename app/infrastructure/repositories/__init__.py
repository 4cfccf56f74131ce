"""Typed repositories over the document store."""

from .base_repository import BaseDocumentRepository, EntitySubscription
from .message_repository import CHATS_COLLECTION, DocumentMessageRepository, messages_path
from .session_repository import SESSIONS_COLLECTION, DocumentSessionRepository
from .user_repository import USERS_COLLECTION, DocumentUserRepository

__all__ = [
    "BaseDocumentRepository",
    "EntitySubscription",
    "DocumentUserRepository",
    "DocumentSessionRepository",
    "DocumentMessageRepository",
    "USERS_COLLECTION",
    "SESSIONS_COLLECTION",
    "CHATS_COLLECTION",
    "messages_path",
]
