"""Session domain service for SkillSwap.

This module contains the session lifecycle: scheduling, the accept / decline /
join / cancel state machine, rescheduling and the session list queries.

Both participants can act on a session at the same time from different
clients. Every status change is a conditional write keyed on the status the
acting client read, so a transition that lost a race fails with
``ConflictError`` instead of silently overwriting the peer's change.
"""

from dataclasses import (
    dataclass,
    field,
)
from datetime import (
    datetime,
    timedelta,
)
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Optional,
)

from app.core.logging import logger
from app.domain.entities import (
    TRANSITIONS,
    SessionAction,
    SessionEntity,
    SessionStatus,
    new_meeting_link,
)
from app.domain.exceptions import (
    ConflictError,
    DomainError,
    InvalidError,
    PermissionDeniedError,
)
from app.domain.repositories import (
    SessionRepositoryInterface,
    UserRepositoryInterface,
)
from app.utils.clock import (
    Clock,
    as_utc,
    utc_now,
)

DEFAULT_MEETING_BASE_URL = "https://meet.jit.si"
DEFAULT_UPCOMING_WINDOW = timedelta(days=30)
DASHBOARD_SESSION_LIMIT = 5
RECENT_ACTIVITY_LIMIT = 10
UNKNOWN_PARTNER_NAME = "SkillSwap member"


@dataclass
class SessionView:
    """A session as seen by one participant."""

    session: SessionEntity
    status: SessionStatus
    partner_id: str
    partner_name: str


@dataclass
class SessionBuckets:
    """A member's sessions grouped by effective status.

    Active sessions are listed with the upcoming ones.
    """

    pending: List[SessionView] = field(default_factory=list)
    upcoming: List[SessionView] = field(default_factory=list)
    completed: List[SessionView] = field(default_factory=list)
    cancelled: List[SessionView] = field(default_factory=list)

    def add(self, view: SessionView) -> None:
        if view.status == SessionStatus.PENDING:
            self.pending.append(view)
        elif view.status in (SessionStatus.UPCOMING, SessionStatus.ACTIVE):
            self.upcoming.append(view)
        elif view.status == SessionStatus.COMPLETED:
            self.completed.append(view)
        else:
            self.cancelled.append(view)


class SessionWatch:
    """Live session list for one member, yielding fresh buckets per snapshot."""

    def __init__(self, service: "SessionDomainService", user_id: str, subscription):
        self._service = service
        self._user_id = user_id
        self._subscription = subscription

    def __aiter__(self):
        return self

    async def __anext__(self) -> SessionBuckets:
        sessions = await self._subscription.__anext__()
        return await self._service.categorize(self._user_id, sessions)

    def close(self) -> None:
        self._subscription.close()

    async def __aenter__(self) -> "SessionWatch":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class SessionDomainService:
    """Domain service for session-related business logic.

    This service encapsulates the session state machine and the rules for
    who may drive each transition.
    """

    def __init__(
        self,
        session_repository: SessionRepositoryInterface,
        user_repository: UserRepositoryInterface,
        meeting_base_url: str = DEFAULT_MEETING_BASE_URL,
        upcoming_window: timedelta = DEFAULT_UPCOMING_WINDOW,
        clock: Clock = utc_now,
        meeting_opener: Optional[Callable[[str], Any]] = None,
    ):
        """Initialize the session domain service.

        Args:
            session_repository: Repository for session data access
            user_repository: Repository for user data access
            meeting_base_url: Video service URL meeting rooms are minted under
            upcoming_window: How far ahead upcoming-session queries look
            clock: Source of the current time
            meeting_opener: Called with the meeting link when a participant joins
        """
        self.session_repository = session_repository
        self.user_repository = user_repository
        self.meeting_base_url = meeting_base_url
        self.upcoming_window = upcoming_window
        self.clock = clock
        self.meeting_opener = meeting_opener

    async def create_session(
        self,
        creator_id: str,
        partner_id: str,
        skill: str,
        start_time: datetime,
        duration: int,
        notes: str = "",
    ) -> SessionEntity:
        """Propose a new session.

        Args:
            creator_id: Participant proposing the session, who teaches ``skill``
            partner_id: Invited participant
            skill: Skill to be taught
            start_time: Start, strictly in the future
            duration: Length in minutes
            notes: Optional free text

        Returns:
            SessionEntity: The new ``pending`` session

        Raises:
            InvalidError: If any field fails validation
            NotFoundError: If either participant has no profile
        """
        return await self._propose(creator_id, partner_id, skill, start_time, duration, notes, require_teaches=True)

    async def reschedule(
        self,
        session_id: str,
        user_id: str,
        start_time: datetime,
        duration: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> SessionEntity:
        """Propose a new time for a session.

        The original session is left exactly as it is; a new ``pending``
        session proposed by ``user_id`` is created from its fields.

        Raises:
            PermissionDeniedError: If ``user_id`` is not a participant
            InvalidError: If the new time or duration is invalid
        """
        original = await self.session_repository.get_by_id(session_id)
        self._ensure_participant(original, user_id, "reschedule")

        session = await self._propose(
            user_id,
            original.other_participant(user_id),
            original.skill,
            start_time,
            duration if duration is not None else original.duration,
            original.notes if notes is None else notes,
            require_teaches=False,
            rescheduled_from=original.id,
        )
        logger.info("session_rescheduled", session_id=session.id, rescheduled_from=original.id, user_id=user_id)
        return session

    async def accept(self, session_id: str, user_id: str) -> SessionEntity:
        """Accept a session request (``pending -> upcoming``), invitee only."""
        return await self._apply(session_id, user_id, SessionAction.ACCEPT)

    async def decline(self, session_id: str, user_id: str) -> SessionEntity:
        """Decline a session request (``pending -> cancelled``), invitee only."""
        return await self._apply(session_id, user_id, SessionAction.DECLINE)

    async def cancel(self, session_id: str, user_id: str) -> SessionEntity:
        """Cancel a session that has not completed, either participant."""
        return await self._apply(session_id, user_id, SessionAction.CANCEL)

    async def join(self, session_id: str, user_id: str) -> SessionEntity:
        """Join a session (``upcoming -> active``) and open its meeting link.

        Joining an already active session succeeds without a write, including
        when the other participant's join lands first.
        """
        session = await self.session_repository.get_by_id(session_id)
        self._ensure_participant(session, user_id, SessionAction.JOIN.value)

        if session.effective_status(self.clock()) != SessionStatus.ACTIVE:
            try:
                session = await self._transition(session, user_id, SessionAction.JOIN)
            except ConflictError:
                session = await self.session_repository.get_by_id(session_id)
                if session.effective_status(self.clock()) != SessionStatus.ACTIVE:
                    raise

        if self.meeting_opener is not None:
            self.meeting_opener(session.meeting_link)
        logger.info("session_joined", session_id=session_id, user_id=user_id)
        return session

    async def list_sessions(self, user_id: str) -> SessionBuckets:
        """Load all of a member's sessions grouped by effective status."""
        sessions = await self.session_repository.get_user_sessions(user_id)
        return await self.categorize(user_id, sessions)

    async def upcoming_sessions(
        self,
        user_id: str,
        window: Optional[timedelta] = None,
        limit: Optional[int] = None,
    ) -> List[SessionView]:
        """Accepted sessions starting between now and ``now + window``.

        Args:
            user_id: Member whose sessions to list
            window: Look-ahead, defaults to the configured upcoming window
            limit: Maximum number of sessions

        Returns:
            List[SessionView]: Sessions ordered by start time, earliest first
        """
        now = self.clock()
        sessions = await self.session_repository.get_user_sessions_between(
            user_id, now, now + (window or self.upcoming_window)
        )
        upcoming = [
            session for session in sessions
            if session.effective_status(now) in (SessionStatus.UPCOMING, SessionStatus.ACTIVE)
        ]
        if limit is not None:
            upcoming = upcoming[:limit]
        return await self._views(user_id, upcoming, now)

    async def recent_activity(self, user_id: str, limit: int = RECENT_ACTIVITY_LIMIT) -> List[SessionView]:
        """The member's latest sessions in any status, newest start time first."""
        sessions = await self.session_repository.get_user_sessions(user_id, limit=limit, descending=True)
        return await self._views(user_id, sessions, self.clock())

    async def is_new_member(self, user_id: str) -> bool:
        """Check whether a member has no sessions and lists no skills.

        A member without a profile counts as new.
        """
        user = await self.user_repository.find_by_id(user_id)
        if user is not None and user.has_skills:
            return False
        return not await self.session_repository.get_user_sessions(user_id, limit=1)

    def watch_sessions(self, user_id: str) -> SessionWatch:
        """Open a live session list. Close it when the view goes away."""
        return SessionWatch(self, user_id, self.session_repository.watch_user_sessions(user_id))

    async def categorize(self, user_id: str, sessions: Iterable[SessionEntity]) -> SessionBuckets:
        """Group sessions by their status as of now."""
        buckets = SessionBuckets()
        for view in await self._views(user_id, sessions, self.clock()):
            buckets.add(view)
        return buckets

    async def _propose(
        self,
        creator_id: str,
        partner_id: str,
        skill: str,
        start_time: datetime,
        duration: int,
        notes: str,
        require_teaches: bool,
        rescheduled_from: Optional[str] = None,
    ) -> SessionEntity:
        skill = (skill or "").strip()
        if not skill:
            raise InvalidError("skill", "skill cannot be empty")
        if creator_id == partner_id:
            raise InvalidError("participants", "cannot schedule a session with yourself")
        if not isinstance(duration, int) or isinstance(duration, bool) or duration <= 0:
            raise InvalidError("duration", "duration must be a positive number of minutes")
        if start_time is None:
            raise InvalidError("start_time", "start time is required")
        start_time = as_utc(start_time)
        if start_time <= self.clock():
            raise InvalidError("start_time", "session must be scheduled for a future time")

        creator = await self.user_repository.get_by_id(creator_id)
        await self.user_repository.get_by_id(partner_id)
        if require_teaches and not creator.teaches(skill):
            raise InvalidError("skill", f"{skill!r} is not one of the creator's teaching skills")

        session = SessionEntity(
            participants=[creator_id, partner_id],
            skill=skill,
            start_time=start_time,
            duration=duration,
            created_by=creator_id,
            meeting_link=new_meeting_link(self.meeting_base_url),
            notes=notes,
            rescheduled_from=rescheduled_from,
        )
        session = await self.session_repository.create(session)
        logger.info(
            "session_created",
            session_id=session.id,
            created_by=creator_id,
            partner_id=partner_id,
            skill=skill,
            start_time=start_time.isoformat(),
        )
        return session

    async def _apply(self, session_id: str, user_id: str, action: SessionAction) -> SessionEntity:
        session = await self.session_repository.get_by_id(session_id)
        self._ensure_participant(session, user_id, action.value)
        return await self._transition(session, user_id, action)

    async def _transition(self, session: SessionEntity, user_id: str, action: SessionAction) -> SessionEntity:
        rule = TRANSITIONS[action]
        current = session.effective_status(self.clock())
        if current not in rule.sources:
            logger.warning(
                "session_transition_rejected",
                session_id=session.id,
                action=action.value,
                status=current.value,
                user_id=user_id,
            )
            raise ConflictError(
                "sessions",
                session.id,
                {"status": sorted(status.value for status in rule.sources)},
                {"status": current.value},
            )

        is_creator = session.created_by == user_id
        if (is_creator and not rule.creator_allowed) or (not is_creator and not rule.partner_allowed):
            raise PermissionDeniedError(action.value, "only the invited participant can respond to a request")

        updated = await self.session_repository.transition_status(session.id, session.status, rule.target)
        logger.info(
            "session_status_changed",
            session_id=session.id,
            action=action.value,
            from_status=session.status.value,
            to_status=updated.status.value,
            user_id=user_id,
        )
        return updated

    @staticmethod
    def _ensure_participant(session: SessionEntity, user_id: str, action: str) -> None:
        if not session.is_participant(user_id):
            raise PermissionDeniedError(action, f"user {user_id} is not a participant of session {session.id}")

    async def _views(self, user_id: str, sessions: Iterable[SessionEntity], now: datetime) -> List[SessionView]:
        names: Dict[str, str] = {}
        views = []
        for session in sessions:
            partner_id = session.other_participant(user_id)
            if partner_id not in names:
                names[partner_id] = await self._partner_name(partner_id)
            views.append(SessionView(session, session.effective_status(now), partner_id, names[partner_id]))
        return views

    async def _partner_name(self, partner_id: str) -> str:
        """Best-effort display name; one bad reference must not sink the list."""
        try:
            partner = await self.user_repository.find_by_id(partner_id)
        except DomainError as e:
            logger.warning("session_partner_lookup_failed", partner_id=partner_id, error=str(e))
            return UNKNOWN_PARTNER_NAME
        if partner is None or not partner.display_name:
            return UNKNOWN_PARTNER_NAME
        return partner.display_name
