"""Session domain entity for SkillSwap.

This module contains the pure domain model for a scheduled skill exchange
session and its state machine, independent of any external dependencies.
"""

import uuid
from dataclasses import dataclass
from datetime import (
    datetime,
    timedelta,
)
from enum import Enum
from typing import (
    FrozenSet,
    Optional,
    Sequence,
)

from app.domain.exceptions import InvalidError
from app.utils.clock import (
    as_utc,
    utc_now,
)

MEETING_ROOM_PREFIX = "SkillSwapRoom"


class SessionStatus(str, Enum):
    """Stored session status."""

    PENDING = "pending"
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SessionAction(str, Enum):
    """Status transitions a participant can request."""

    ACCEPT = "accept"
    DECLINE = "decline"
    JOIN = "join"
    CANCEL = "cancel"


@dataclass(frozen=True)
class Transition:
    """One edge set of the session state machine."""

    sources: FrozenSet[SessionStatus]
    target: SessionStatus
    creator_allowed: bool = True
    partner_allowed: bool = True


TRANSITIONS = {
    SessionAction.ACCEPT: Transition(
        sources=frozenset({SessionStatus.PENDING}),
        target=SessionStatus.UPCOMING,
        creator_allowed=False,
    ),
    SessionAction.DECLINE: Transition(
        sources=frozenset({SessionStatus.PENDING}),
        target=SessionStatus.CANCELLED,
        creator_allowed=False,
    ),
    SessionAction.JOIN: Transition(
        sources=frozenset({SessionStatus.UPCOMING}),
        target=SessionStatus.ACTIVE,
    ),
    SessionAction.CANCEL: Transition(
        sources=frozenset({SessionStatus.PENDING, SessionStatus.UPCOMING, SessionStatus.ACTIVE}),
        target=SessionStatus.CANCELLED,
    ),
}


def new_meeting_link(base_url: str) -> str:
    """Mint a meeting URL around a fresh random room token."""
    return f"{base_url.rstrip('/')}/{MEETING_ROOM_PREFIX}{uuid.uuid4().hex}"


class SessionEntity:
    """Pure domain entity for a session between exactly two participants.

    ``completed`` is never written by the core: an upcoming or active session
    whose end time has passed is reported as completed by
    :meth:`effective_status`.
    """

    def __init__(
        self,
        participants: Sequence[str],
        skill: str,
        start_time: datetime,
        duration: int,
        created_by: str,
        meeting_link: str,
        status: SessionStatus = SessionStatus.PENDING,
        reminder_sent: bool = False,
        notes: str = "",
        rescheduled_from: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
        session_id: Optional[str] = None,
    ):
        """Initialize a Session entity.

        Args:
            participants: The two participant user IDs, creator first
            skill: Skill being taught
            start_time: Absolute start time
            duration: Length in minutes
            created_by: Participant who proposed the session
            meeting_link: Video room URL, fixed at creation
            status: Stored status
            reminder_sent: Whether the reminder sweep already notified
            notes: Optional free text
            rescheduled_from: Session this one was rescheduled from
            created_at: Creation timestamp
            updated_at: Last update timestamp
            session_id: Store-generated identifier
        """
        participants = list(participants)
        if len(participants) != 2 or participants[0] == participants[1]:
            raise InvalidError("participants", "a session needs exactly two distinct participants")
        if created_by not in participants:
            raise InvalidError("created_by", "creator must be a participant")
        if duration is None or int(duration) <= 0:
            raise InvalidError("duration", "duration must be a positive number of minutes")

        self.id = session_id
        self.participants = participants
        self.skill = skill
        self.start_time = as_utc(start_time)
        self.duration = int(duration)
        self.created_by = created_by
        self.meeting_link = meeting_link
        self.status = SessionStatus(status)
        self.reminder_sent = reminder_sent
        self.notes = notes or ""
        self.rescheduled_from = rescheduled_from
        self.created_at = created_at or utc_now()
        self.updated_at = updated_at or utc_now()

    @property
    def end_time(self) -> datetime:
        """Scheduled end of the session."""
        return self.start_time + timedelta(minutes=self.duration)

    def is_participant(self, user_id: str) -> bool:
        """Check if a user takes part in the session."""
        return user_id in self.participants

    def other_participant(self, user_id: str) -> str:
        """Return the participant that is not ``user_id``."""
        return self.participants[1] if self.participants[0] == user_id else self.participants[0]

    def effective_status(self, now: datetime) -> SessionStatus:
        """Derive the status as of ``now`` from the stored fields."""
        if self.status in (SessionStatus.UPCOMING, SessionStatus.ACTIVE) and as_utc(now) >= self.end_time:
            return SessionStatus.COMPLETED
        return self.status

    def needs_reminder(self, now: datetime, lead: timedelta) -> bool:
        """Check if the session is due a reminder within ``lead`` of ``now``."""
        now = as_utc(now)
        return (
            not self.reminder_sent
            and self.effective_status(now) == SessionStatus.UPCOMING
            and now <= self.start_time <= now + lead
        )

    def __str__(self) -> str:
        """String representation of the session."""
        return f"Session(id={self.id}, skill='{self.skill}', status={self.status.value})"

    def __repr__(self) -> str:
        """Detailed representation of the session."""
        return (
            f"SessionEntity(id='{self.id}', skill='{self.skill}', "
            f"participants={self.participants}, status={self.status.value})"
        )
