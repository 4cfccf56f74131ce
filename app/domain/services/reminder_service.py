"""Reminder sweep for sessions that are about to start.

The sweep runs on a schedule. Each run emails both participants of every
confirmed session starting within the lead time and then flips
``reminderSent`` with a conditional write, so two overlapping runs never
remind the same session twice.
"""

from dataclasses import (
    dataclass,
    field,
)
from datetime import (
    datetime,
    timedelta,
)
from html import escape
from typing import (
    List,
    Optional,
    Protocol,
)

from app.core.logging import logger
from app.domain.entities import (
    SessionEntity,
    UserEntity,
)
from app.domain.exceptions import ConflictError
from app.domain.repositories import (
    SessionRepositoryInterface,
    UserRepositoryInterface,
)
from app.utils.clock import (
    Clock,
    as_utc,
    utc_now,
)

DEFAULT_REMINDER_LEAD = timedelta(minutes=60)

REMINDER_SUBJECT = "SkillSwap Session Reminder: {skill}"

REMINDER_TEMPLATE = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #4F46E5;">SkillSwap Session Reminder</h2>
  <p>Hello {name},</p>
  <p>This is a reminder for your upcoming SkillSwap session:</p>
  <div style="background: #f8fafc; padding: 15px; border-radius: 8px; margin: 15px 0;">
    <h3 style="margin: 0 0 10px 0;">Session Details</h3>
    <p><strong>Skill:</strong> {skill}</p>
    <p><strong>With:</strong> {partner}</p>
    <p><strong>Time:</strong> {start_time}</p>
    <p><strong>Duration:</strong> {duration} minutes</p>
  </div>
  <p>Join your session using this link: <a href="{link}">{link}</a></p>
  <p>Happy learning!</p>
  <p><em>The SkillSwap Team</em></p>
</div>
"""


class EmailSender(Protocol):
    async def send_email(self, to: str, subject: str, html_content: str): ...


@dataclass
class SweepResult:
    """Outcome of one sweep, by session ID."""

    reminded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def render_reminder(recipient: UserEntity, partner: UserEntity, session: SessionEntity) -> str:
    """Render the reminder body for one participant."""
    return REMINDER_TEMPLATE.format(
        name=escape(recipient.display_name),
        skill=escape(session.skill),
        partner=escape(partner.display_name),
        start_time=session.start_time.strftime("%Y-%m-%d %H:%M UTC"),
        duration=session.duration,
        link=escape(session.meeting_link, quote=True),
    )


class ReminderDomainService:
    """Domain service sending session reminders."""

    def __init__(
        self,
        session_repository: SessionRepositoryInterface,
        user_repository: UserRepositoryInterface,
        email_sender: EmailSender,
        lead: timedelta = DEFAULT_REMINDER_LEAD,
        clock: Clock = utc_now,
    ):
        self.session_repository = session_repository
        self.user_repository = user_repository
        self.email_sender = email_sender
        self.lead = lead
        self.clock = clock

    async def run(self, now: Optional[datetime] = None) -> SweepResult:
        """Run one sweep.

        A failure on one session is logged and recorded in the result; it
        never stops the sweep and leaves that session's flag unset so the
        next run retries it. Errors from the initial query propagate.
        """
        now = as_utc(now) if now is not None else self.clock()
        candidates = await self.session_repository.get_unreminded_sessions_between(now, now + self.lead)

        result = SweepResult()
        for session in candidates:
            if not session.needs_reminder(now, self.lead):
                result.skipped.append(session.id)
                continue
            try:
                reminded = await self._remind(session)
            except Exception as e:
                logger.error("session_reminder_failed", session_id=session.id, error=str(e), exc_info=True)
                result.failed.append(session.id)
                continue
            (result.reminded if reminded else result.skipped).append(session.id)

        logger.info(
            "reminder_sweep_completed",
            candidates=len(candidates),
            reminded=len(result.reminded),
            failed=len(result.failed),
            skipped=len(result.skipped),
        )
        return result

    async def _remind(self, session: SessionEntity) -> bool:
        first_id, second_id = session.participants
        first = await self.user_repository.find_by_id(first_id)
        second = await self.user_repository.find_by_id(second_id)
        if first is None or second is None or not first.email or not second.email:
            logger.warning("session_reminder_recipient_missing", session_id=session.id)
            return False

        subject = REMINDER_SUBJECT.format(skill=session.skill)
        await self.email_sender.send_email(first.email, subject, render_reminder(first, second, session))
        await self.email_sender.send_email(second.email, subject, render_reminder(second, first, session))

        try:
            await self.session_repository.mark_reminder_sent(session.id)
        except ConflictError:
            # another run flagged it between our query and this write
            logger.info("session_reminder_already_flagged", session_id=session.id)
            return False

        logger.info("session_reminder_sent", session_id=session.id)
        return True
