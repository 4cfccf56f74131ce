"""Domain entities for SkillSwap.

This module contains pure domain entities that represent
the core business objects without any external dependencies.
"""

from .message_entity import (
    CHAT_ID_SEPARATOR,
    Conversation,
    MessageEntity,
    chat_id,
)
from .session_entity import (
    TRANSITIONS,
    SessionAction,
    SessionEntity,
    SessionStatus,
    Transition,
    new_meeting_link,
)
from .user_entity import (
    AVAILABILITY_DAYS,
    AVAILABILITY_KEYS,
    AVAILABILITY_SLOTS,
    DEFAULT_DISPLAY_NAME,
    UserEntity,
    placeholder_avatar_url,
)

__all__ = [
    # User
    "UserEntity",
    "AVAILABILITY_DAYS",
    "AVAILABILITY_SLOTS",
    "AVAILABILITY_KEYS",
    "DEFAULT_DISPLAY_NAME",
    "placeholder_avatar_url",
    # Session
    "SessionEntity",
    "SessionStatus",
    "SessionAction",
    "Transition",
    "TRANSITIONS",
    "new_meeting_link",
    # Message
    "MessageEntity",
    "Conversation",
    "CHAT_ID_SEPARATOR",
    "chat_id",
]
