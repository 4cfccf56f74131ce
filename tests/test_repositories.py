"""Tests for the document-backed repositories."""

import asyncio

import pytest

from app.domain.entities import UserEntity
from app.domain.exceptions import NotFoundError
from app.domain.repositories.document_store import where
from app.infrastructure.repositories.user_repository import ARRAY_CONTAINS_ANY_LIMIT


class TestUserRepository:
    """Test suite for DocumentUserRepository."""

    @pytest.mark.asyncio
    async def test_find_teachers_chunks_large_skill_lists(self, user_repository, store):
        """Test long wanted-skill lists are split across queries."""
        skills = [f"Skill{index:02d}" for index in range(ARRAY_CONTAINS_ANY_LIMIT + 5)]
        await user_repository.create(UserEntity("early", skills_to_teach=[skills[0]]))
        await user_repository.create(UserEntity("late", skills_to_teach=[skills[-1]]))
        store.calls.clear()

        teachers = await user_repository.find_teachers(skills)

        queries = [call for call in store.calls if call[0] == "query"]
        assert len(queries) == 2
        assert sorted(user.id for user in teachers) == ["early", "late"]

    @pytest.mark.asyncio
    async def test_find_teachers_deduplicates(self, user_repository, members):
        """Test a teacher of several wanted skills appears once."""
        teachers = await user_repository.find_teachers(["Python", "Guitar"])

        assert sorted(user.id for user in teachers) == ["alice", "carol"]

    @pytest.mark.asyncio
    async def test_round_trip_uses_stored_field_names(self, user_repository, store, members):
        """Test profiles are persisted with camelCase fields."""
        stored = store.collections["users"]["alice"]

        assert stored["skillsToTeach"] == ["Python", "SQL"]
        assert stored["displayName"] == "Alice Smith"
        assert (await user_repository.get_by_id("alice")).skills_to_learn == ["Guitar"]

    @pytest.mark.asyncio
    async def test_missing_user(self, user_repository):
        """Test reading an unknown profile raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await user_repository.get_by_id("ghost")


class TestSubscription:
    """Test suite for live query handles."""

    @pytest.mark.asyncio
    async def test_restart_reregisters_listener(self, store):
        """Test restart removes the listener and the next iteration adds it back."""
        store.seed("users", "alice", {"skillsToTeach": ["Python"]})
        subscription = store.subscribe("users", [where("skillsToTeach", "array-contains", "Python")])

        assert [document["id"] for document in await subscription.__anext__()] == ["alice"]
        assert store.listeners == [subscription]

        subscription.restart()
        assert store.listeners == []
        assert not subscription.active

        store.seed("users", "carol", {"skillsToTeach": ["Python"]})
        assert [document["id"] for document in await subscription.__anext__()] == ["alice", "carol"]
        assert store.listeners == [subscription]

        subscription.close()
        assert store.listeners == []

    @pytest.mark.asyncio
    async def test_restart_ends_pending_iteration(self, store):
        """Test a consumer waiting for the next snapshot is released by restart."""
        store.seed("users", "alice", {"skillsToTeach": ["Python"]})
        subscription = store.subscribe("users")
        await subscription.__anext__()

        waiting = asyncio.create_task(subscription.__anext__())
        await asyncio.sleep(0)
        subscription.restart()

        with pytest.raises(StopAsyncIteration):
            await asyncio.wait_for(waiting, timeout=1)
        subscription.close()

    @pytest.mark.asyncio
    async def test_close_ends_pending_iteration(self, store):
        """Test a consumer waiting for the next snapshot is released by close."""
        subscription = store.subscribe("users")
        await subscription.__anext__()

        waiting = asyncio.create_task(subscription.__anext__())
        await asyncio.sleep(0)
        subscription.close()

        with pytest.raises(StopAsyncIteration):
            await asyncio.wait_for(waiting, timeout=1)
        assert store.listeners == []

    @pytest.mark.asyncio
    async def test_context_manager_removes_listener(self, store):
        """Test leaving the block unsubscribes."""
        async with store.subscribe("users") as subscription:
            await subscription.__anext__()
            assert store.listeners == [subscription]

        assert store.listeners == []
