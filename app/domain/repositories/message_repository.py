"""Message repository interface for SkillSwap.

This module defines the contract for chat message data access operations
without specifying implementation details.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from app.domain.entities import MessageEntity


class MessageRepositoryInterface(ABC):
    """Abstract repository interface for Message operations."""

    @abstractmethod
    async def create(self, message: MessageEntity) -> MessageEntity:
        """Append a message with a server-assigned timestamp."""
        pass

    @abstractmethod
    async def get_messages(self, chat_id: str, limit: Optional[int] = None) -> List[MessageEntity]:
        """Get a conversation's messages, oldest first."""
        pass

    @abstractmethod
    async def get_last_message(self, chat_id: str) -> Optional[MessageEntity]:
        """Get the newest message of a conversation, if any."""
        pass

    @abstractmethod
    async def get_unread_for(self, chat_id: str, user_id: str) -> List[MessageEntity]:
        """Get unread messages that ``user_id`` received in a conversation."""
        pass

    @abstractmethod
    async def count_unread_for(self, chat_id: str, user_id: str) -> int:
        """Count unread messages that ``user_id`` received in a conversation."""
        pass

    @abstractmethod
    async def mark_read(self, chat_id: str, message_ids: Sequence[str]) -> None:
        """Set ``read`` on the given messages in one atomic batch."""
        pass

    @abstractmethod
    def watch_messages(self, chat_id: str):
        """Open a live subscription on a conversation, oldest first."""
        pass
