"""Conversation domain service for SkillSwap.

Conversations are keyed by :func:`chat_id` of the two members and exist only
between members who share at least one session. Read state is per message
and only the recipient ever flips it.
"""

from datetime import (
    UTC,
    datetime,
)
from typing import (
    List,
    Optional,
)

from app.core.logging import logger
from app.domain.entities import (
    CHAT_ID_SEPARATOR,
    Conversation,
    MessageEntity,
    chat_id,
)
from app.domain.exceptions import (
    DomainError,
    InvalidError,
    PermissionDeniedError,
)
from app.domain.repositories import (
    MessageRepositoryInterface,
    SessionRepositoryInterface,
    UserRepositoryInterface,
)

# Firestore rejects write batches larger than this
MAX_MARK_READ_BATCH = 500

_OLDEST = datetime.min.replace(tzinfo=UTC)


def is_chat_member(conversation_id: str, user_id: str) -> bool:
    """Check whether ``user_id`` is one of the two members of a conversation.

    The other half must rebuild the same key, so IDs containing the separator
    cannot match on a prefix or suffix alone.
    """
    prefix = user_id + CHAT_ID_SEPARATOR
    suffix = CHAT_ID_SEPARATOR + user_id
    others = []
    if conversation_id.startswith(prefix):
        others.append(conversation_id[len(prefix):])
    if conversation_id.endswith(suffix):
        others.append(conversation_id[:-len(suffix)])
    return any(other and chat_id(user_id, other) == conversation_id for other in others)


class ConversationStream:
    """Live message list for one member.

    Every snapshot runs a mark-read pass for the viewer, so keeping a
    conversation open writes read flags even if the viewer never replies.
    """

    def __init__(self, service: "ConversationDomainService", conversation_id: str, user_id: str, subscription):
        self._service = service
        self._chat_id = conversation_id
        self._user_id = user_id
        self._subscription = subscription

    def __aiter__(self):
        return self

    async def __anext__(self) -> List[MessageEntity]:
        messages = await self._subscription.__anext__()
        await self._service.mark_read(self._chat_id, self._user_id)
        return messages

    def close(self) -> None:
        self._subscription.close()

    async def __aenter__(self) -> "ConversationStream":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class ConversationDomainService:
    """Domain service for chat between session partners."""

    def __init__(
        self,
        message_repository: MessageRepositoryInterface,
        session_repository: SessionRepositoryInterface,
        user_repository: UserRepositoryInterface,
    ):
        """Initialize the conversation domain service.

        Args:
            message_repository: Repository for message data access
            session_repository: Repository for session data access
            user_repository: Repository for user data access
        """
        self.message_repository = message_repository
        self.session_repository = session_repository
        self.user_repository = user_repository

    async def list_conversations(self, user_id: str) -> List[Conversation]:
        """List one conversation per member ``user_id`` has shared a session with.

        Partners whose profile no longer exists are left out. Conversations
        are ordered by their last message, newest first, with empty ones last.
        """
        sessions = await self.session_repository.get_user_sessions(user_id)
        partner_ids = list(dict.fromkeys(session.other_participant(user_id) for session in sessions))

        conversations = []
        for partner_id in partner_ids:
            partner = await self.user_repository.find_by_id(partner_id)
            if partner is None:
                logger.warning("conversation_partner_missing", user_id=user_id, partner_id=partner_id)
                continue

            conversation_id = chat_id(user_id, partner_id)
            conversations.append(
                Conversation(
                    chat_id=conversation_id,
                    other_user=partner,
                    last_message=await self.message_repository.get_last_message(conversation_id),
                    unread_count=await self.unread_count(conversation_id, user_id),
                )
            )

        conversations.sort(key=self._last_activity, reverse=True)
        return conversations

    async def start_conversation(self, user_id: str, partner_id: str) -> str:
        """Return the conversation key with a partner.

        Raises:
            InvalidError: If both IDs are the same member
            PermissionDeniedError: If the two members never shared a session
        """
        if user_id == partner_id:
            raise InvalidError("partner_id", "cannot start a conversation with yourself")

        sessions = await self.session_repository.get_user_sessions(user_id)
        if not any(session.is_participant(partner_id) for session in sessions):
            raise PermissionDeniedError("start_conversation", "members can only message session partners")
        return chat_id(user_id, partner_id)

    async def send_message(self, conversation_id: str, sender_id: str, text: str) -> MessageEntity:
        """Append a message to a conversation.

        Raises:
            InvalidError: If the text is empty or whitespace only
            PermissionDeniedError: If the sender is not a member of the conversation
        """
        text = (text or "").strip()
        if not text:
            raise InvalidError("text", "message cannot be empty")
        self._ensure_member(conversation_id, sender_id, "send_message")

        message = await self.message_repository.create(
            MessageEntity(chat_id=conversation_id, text=text, sender_id=sender_id, read=False)
        )
        logger.info("message_sent", chat_id=conversation_id, sender_id=sender_id, message_id=message.id)
        return message

    async def get_messages(self, conversation_id: str, user_id: str, limit: Optional[int] = None) -> List[MessageEntity]:
        """Load a conversation once, oldest message first."""
        self._ensure_member(conversation_id, user_id, "get_messages")
        return await self.message_repository.get_messages(conversation_id, limit)

    async def mark_read(self, conversation_id: str, user_id: str) -> int:
        """Mark every message ``user_id`` received in a conversation as read.

        Writes go out in atomic batches. If a batch fails the error propagates
        even when earlier batches were applied.

        Returns:
            int: Number of messages flipped to read
        """
        self._ensure_member(conversation_id, user_id, "mark_read")
        unread = await self.message_repository.get_unread_for(conversation_id, user_id)
        message_ids = [message.id for message in unread if message.is_unread_for(user_id)]

        marked = 0
        for start in range(0, len(message_ids), MAX_MARK_READ_BATCH):
            batch = message_ids[start:start + MAX_MARK_READ_BATCH]
            try:
                await self.message_repository.mark_read(conversation_id, batch)
            except DomainError as e:
                logger.error(
                    "mark_read_failed",
                    chat_id=conversation_id,
                    user_id=user_id,
                    marked=marked,
                    remaining=len(message_ids) - marked,
                    error=str(e),
                )
                raise
            marked += len(batch)

        if marked:
            logger.info("messages_marked_read", chat_id=conversation_id, user_id=user_id, count=marked)
        return marked

    async def unread_count(self, conversation_id: str, user_id: str) -> int:
        """Count messages ``user_id`` received and has not read."""
        return max(0, await self.message_repository.count_unread_for(conversation_id, user_id))

    def open_conversation(self, conversation_id: str, user_id: str) -> ConversationStream:
        """Open a live conversation view. Close it when the view goes away."""
        self._ensure_member(conversation_id, user_id, "open_conversation")
        return ConversationStream(
            self,
            conversation_id,
            user_id,
            self.message_repository.watch_messages(conversation_id),
        )

    @staticmethod
    def _ensure_member(conversation_id: str, user_id: str, action: str) -> None:
        if not is_chat_member(conversation_id, user_id):
            raise PermissionDeniedError(action, f"user {user_id} is not part of conversation {conversation_id}")

    @staticmethod
    def _last_activity(conversation: Conversation) -> datetime:
        if conversation.last_message is None or conversation.last_message.timestamp is None:
            return _OLDEST
        return conversation.last_message.timestamp
