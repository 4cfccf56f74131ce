"""Message and conversation domain entities for SkillSwap."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from app.domain.entities.user_entity import UserEntity

CHAT_ID_SEPARATOR = "_"


def chat_id(user_a: str, user_b: str) -> str:
    """Derive the conversation key for an unordered pair of users.

    The key is the two IDs sorted and joined, so it does not depend on who
    opens the conversation first.
    """
    return CHAT_ID_SEPARATOR.join(sorted([user_a, user_b]))


class MessageEntity:
    """A chat message inside ``chats/{chat_id}/messages``."""

    def __init__(
        self,
        chat_id: str,
        text: str,
        sender_id: str,
        read: bool = False,
        timestamp: Optional[datetime] = None,
        message_id: Optional[str] = None,
    ):
        self.id = message_id
        self.chat_id = chat_id
        self.text = text
        self.sender_id = sender_id
        self.read = read
        self.timestamp = timestamp

    def is_unread_for(self, user_id: str) -> bool:
        """A message is unread for everyone but its sender until flipped."""
        return not self.read and self.sender_id != user_id

    def __repr__(self) -> str:
        return f"MessageEntity(id='{self.id}', chat_id='{self.chat_id}', sender_id='{self.sender_id}', read={self.read})"


@dataclass
class Conversation:
    """Summary row for one conversation in a member's inbox."""

    chat_id: str
    other_user: UserEntity
    last_message: Optional[MessageEntity] = None
    unread_count: int = 0
