"""Tests for the reminder sweep."""

from datetime import (
    UTC,
    datetime,
    timedelta,
)

import pytest

from app.domain.entities import (
    SessionEntity,
    UserEntity,
)
from app.domain.exceptions import UnavailableError
from app.domain.services import ReminderDomainService
from app.domain.services.reminder_service import render_reminder
from tests.mocks import RecordingEmailSender


async def confirmed_session(session_service, clock, start_in=timedelta(minutes=30), creator="alice", partner="bob", skill="Python"):
    session = await session_service.create_session(creator, partner, skill, clock() + start_in, 45)
    return await session_service.accept(session.id, partner)


class TestReminderSweep:
    """Test suite for ReminderDomainService.run."""

    @pytest.mark.asyncio
    async def test_reminds_both_participants_once(self, reminder_service, session_service, session_repository, email_sender, members, clock):
        """Test a due session is emailed to both sides and flagged."""
        session = await confirmed_session(session_service, clock)

        result = await reminder_service.run()

        assert result.reminded == [session.id]
        assert sorted(mail["to"] for mail in email_sender.sent) == ["alice@example.com", "bob@example.com"]
        assert all(mail["subject"] == "SkillSwap Session Reminder: Python" for mail in email_sender.sent)
        assert (await session_repository.get_by_id(session.id)).reminder_sent is True

        again = await reminder_service.run()

        assert again.reminded == []
        assert len(email_sender.sent) == 2

    @pytest.mark.asyncio
    async def test_sessions_outside_window_ignored(self, reminder_service, session_service, email_sender, members, clock):
        """Test sessions more than the lead time away wait for a later sweep."""
        await confirmed_session(session_service, clock, start_in=timedelta(hours=3))

        result = await reminder_service.run()

        assert result.reminded == result.failed == result.skipped == []
        assert email_sender.sent == []

    @pytest.mark.asyncio
    async def test_unconfirmed_and_cancelled_sessions_skipped(self, reminder_service, session_service, email_sender, members, clock):
        """Test only accepted sessions get reminders."""
        pending = await session_service.create_session("alice", "bob", "Python", clock() + timedelta(minutes=20), 30)
        cancelled = await confirmed_session(session_service, clock)
        await session_service.cancel(cancelled.id, "alice")

        result = await reminder_service.run()

        assert sorted(result.skipped) == sorted([pending.id, cancelled.id])
        assert email_sender.sent == []

    @pytest.mark.asyncio
    async def test_failure_is_isolated(self, session_repository, user_repository, session_service, members, clock):
        """Test one failing session does not stop the others and stays unflagged."""
        sender = RecordingEmailSender(failing_recipients=["carol@example.com"])
        service = ReminderDomainService(session_repository, user_repository, sender, clock=clock)
        good = await confirmed_session(session_service, clock)
        bad = await confirmed_session(session_service, clock, creator="carol", partner="alice", skill="Guitar")

        result = await service.run()

        assert result.reminded == [good.id]
        assert result.failed == [bad.id]
        assert (await session_repository.get_by_id(bad.id)).reminder_sent is False
        assert (await session_repository.get_by_id(good.id)).reminder_sent is True

    @pytest.mark.asyncio
    async def test_flag_write_failure_counts_as_failed(self, reminder_service, session_service, store, members, clock):
        """Test a failed conditional write leaves the session for the next sweep."""
        session = await confirmed_session(session_service, clock)
        store.fail("update_if", UnavailableError("update_if", "backend down"))

        result = await reminder_service.run()

        assert result.failed == [session.id]

    @pytest.mark.asyncio
    async def test_concurrent_sweep_flagged_first(self, reminder_service, session_service, session_repository, store, members, clock):
        """Test a session flagged by an overlapping run is not counted twice."""
        session = await confirmed_session(session_service, clock)
        original_update_if = store.update_if

        async def other_run_wins(collection, doc_id, expected, data):
            store.collections[collection][doc_id]["reminderSent"] = True
            return await original_update_if(collection, doc_id, expected, data)

        store.update_if = other_run_wins

        result = await reminder_service.run()

        assert result.reminded == []
        assert result.skipped == [session.id]

    @pytest.mark.asyncio
    async def test_missing_recipient_skipped(self, reminder_service, session_service, store, email_sender, members, clock):
        """Test sessions whose partner profile vanished are skipped and retried later."""
        session = await confirmed_session(session_service, clock)
        del store.collections["users"]["bob"]

        result = await reminder_service.run()

        assert result.skipped == [session.id]
        assert email_sender.sent == []

    @pytest.mark.asyncio
    async def test_query_failure_propagates(self, reminder_service, store, members):
        """Test the sweep fails loudly when it cannot list candidates."""
        store.fail("query", UnavailableError("query", "backend down"))

        with pytest.raises(UnavailableError):
            await reminder_service.run()


class TestReminderTemplate:
    """Test suite for the reminder body."""

    @pytest.mark.asyncio
    async def test_body_includes_session_details(self, session_service, members, clock):
        """Test the partner, skill, duration and link are rendered."""
        session = await confirmed_session(session_service, clock)

        body = render_reminder(members["bob"], members["alice"], session)

        assert "Hello Bob Jones," in body
        assert "<strong>With:</strong> Alice Smith" in body
        assert "<strong>Skill:</strong> Python" in body
        assert "45 minutes" in body
        assert session.meeting_link in body

    def test_user_text_is_escaped(self):
        """Test profile text cannot inject markup."""
        session = SessionEntity(
            participants=["alice", "bob"],
            skill="<b>Python</b>",
            start_time=datetime(2026, 3, 2, 10, 0, tzinfo=UTC),
            duration=30,
            created_by="alice",
            meeting_link="https://meet.jit.si/SkillSwapRoomabc",
        )

        body = render_reminder(UserEntity("bob", display_name="Bob"), UserEntity("alice", display_name="<script>"), session)

        assert "<script>" not in body
        assert "&lt;b&gt;Python&lt;/b&gt;" in body
