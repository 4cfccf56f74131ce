"""Session repository interface for SkillSwap.

This module defines the contract for session data access operations
without specifying implementation details.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from app.domain.entities import SessionEntity, SessionStatus


class SessionRepositoryInterface(ABC):
    """Abstract repository interface for Session operations.

    Status changes go through :meth:`transition_status`, a conditional write
    keyed on the status the caller last saw.
    """

    @abstractmethod
    async def create(self, session: SessionEntity) -> SessionEntity:
        """Create a new session.

        Args:
            session: Session entity to create

        Returns:
            SessionEntity: Created session with assigned ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, session_id: str) -> SessionEntity:
        """Get session by ID.

        Raises:
            NotFoundError: If the session does not exist
        """
        pass

    @abstractmethod
    async def transition_status(
        self,
        session_id: str,
        expected: SessionStatus,
        target: SessionStatus,
    ) -> SessionEntity:
        """Move a session to ``target`` only if it is still in ``expected``.

        Raises:
            NotFoundError: If the session does not exist
            ConflictError: If the stored status is no longer ``expected``
        """
        pass

    @abstractmethod
    async def mark_reminder_sent(self, session_id: str) -> SessionEntity:
        """Flip ``reminderSent`` from false to true.

        Raises:
            ConflictError: If the flag was already set
        """
        pass

    @abstractmethod
    async def get_user_sessions(
        self,
        user_id: str,
        limit: Optional[int] = None,
        descending: bool = True,
    ) -> List[SessionEntity]:
        """Get sessions a user takes part in, ordered by start time."""
        pass

    @abstractmethod
    async def get_user_sessions_between(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        limit: Optional[int] = None,
    ) -> List[SessionEntity]:
        """Get a user's sessions starting in ``[start, end]``, earliest first."""
        pass

    @abstractmethod
    async def get_unreminded_sessions_between(
        self,
        start: datetime,
        end: datetime,
    ) -> List[SessionEntity]:
        """Get sessions starting in ``[start, end]`` with no reminder sent."""
        pass

    @abstractmethod
    def watch_user_sessions(self, user_id: str):
        """Open a live subscription on a user's sessions."""
        pass
