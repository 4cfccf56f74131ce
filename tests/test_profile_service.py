"""Tests for member profiles."""

from unittest.mock import AsyncMock

import pytest

from app.domain.exceptions import (
    InvalidError,
    NotFoundError,
    UnavailableError,
)
from app.domain.services import ProfileDomainService
from app.domain.services.profile_service import split_display_name


class TestEnsureProfile:
    """Test suite for first sign-in profile creation."""

    @pytest.mark.asyncio
    async def test_creates_profile_once(self, profile_service, store):
        """Test the first sign-in creates the profile and later ones reuse it."""
        created = await profile_service.ensure_profile("dana", "dana@example.com", display_name="Dana Lee")

        assert created.first_name == "Dana"
        assert created.last_name == "Lee"
        assert created.skills_to_teach == []
        assert store.collections["users"]["dana"]["uid"] == "dana"

        again = await profile_service.ensure_profile("dana", "other@example.com", display_name="Someone Else")

        assert again.display_name == "Dana Lee"
        assert again.email == "dana@example.com"
        assert len([call for call in store.calls if call[0] == "create"]) == 1

    @pytest.mark.asyncio
    async def test_missing_display_name_defaults(self, profile_service):
        """Test a provider without a display name still yields a usable profile."""
        user = await profile_service.ensure_profile("eve", "eve@example.com")

        assert user.display_name == "User"
        assert "name=User" in user.photo_url

    def test_split_display_name(self):
        """Test multi-word last names stay together."""
        assert split_display_name("Ana Maria de Souza") == ("Ana", "Maria de Souza")
        assert split_display_name("Prince") == ("Prince", "")
        assert split_display_name(None) == ("User", "")


class TestProfileEdits:
    """Test suite for self-service profile edits."""

    @pytest.mark.asyncio
    async def test_update_profile(self, profile_service, members):
        """Test names, bio and availability are saved together."""
        user = await profile_service.update_profile(
            "bob",
            "Robert",
            "Jones",
            bio="  Spanish tutor  ",
            availability={"monday_evening": True, "friday_morning": False},
        )

        stored = await profile_service.get_profile("bob")
        assert stored.display_name == user.display_name == "Robert Jones"
        assert stored.bio == "Spanish tutor"
        assert stored.availability == {"monday_evening": True, "friday_morning": False}

    @pytest.mark.asyncio
    async def test_update_profile_requires_names(self, profile_service, members, store):
        """Test a missing last name is rejected without writing."""
        store.calls.clear()

        with pytest.raises(InvalidError):
            await profile_service.update_profile("bob", "Robert", "")
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_unknown_availability_slot(self, profile_service, members, store):
        """Test only the 21 grid keys are accepted."""
        store.calls.clear()

        with pytest.raises(InvalidError):
            await profile_service.update_profile("bob", "Bob", "Jones", availability={"noon": True})
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_duplicate_skill_not_written(self, profile_service, members, store):
        """Test re-adding a listed skill performs no write."""
        store.calls.clear()

        user = await profile_service.add_skill_to_teach("alice", "Python")

        assert user.skills_to_teach == ["Python", "SQL"]
        assert store.writes() == []

    @pytest.mark.asyncio
    async def test_add_and_remove_skills(self, profile_service, match_service, members):
        """Test skill edits feed matching."""
        await profile_service.add_skill_to_teach("bob", "Python")
        assert "bob" in [user.id for user in await match_service.find_matches(["Python"], exclude_user_id="carol")]

        await profile_service.remove_skill_to_teach("bob", "Python")
        await profile_service.add_skill_to_learn("bob", "Guitar")
        await profile_service.remove_skill_to_learn("bob", "Python")

        stored = await profile_service.get_profile("bob")
        assert stored.skills_to_teach == ["Spanish"]
        assert stored.skills_to_learn == ["Guitar"]

    @pytest.mark.asyncio
    async def test_set_availability(self, profile_service, members):
        """Test single slot edits persist."""
        await profile_service.set_availability("carol", "saturday_afternoon", True)

        assert (await profile_service.get_profile("carol")).availability == {"saturday_afternoon": True}

    @pytest.mark.asyncio
    async def test_unchanged_availability_not_written(self, profile_service, members, store):
        """Test setting a slot to its current value performs no write."""
        await profile_service.set_availability("alice", "monday_morning", False)
        store.calls.clear()

        user = await profile_service.set_availability("alice", "monday_morning", False)

        assert user.availability["monday_morning"] is False
        assert store.writes() == []

    @pytest.mark.asyncio
    async def test_unknown_slot_rejected_before_read(self, profile_service, members, store):
        """Test an unknown slot key fails without touching the store."""
        store.calls.clear()

        with pytest.raises(InvalidError):
            await profile_service.set_availability("alice", "noon", True)
        assert store.calls == []

    @pytest.mark.parametrize("skill", ["", "   "])
    @pytest.mark.asyncio
    async def test_blank_skill_rejected_before_read(self, profile_service, members, store, skill):
        """Test blank skill names fail without touching the store."""
        store.calls.clear()

        with pytest.raises(InvalidError):
            await profile_service.add_skill_to_teach("alice", skill)
        with pytest.raises(InvalidError):
            await profile_service.add_skill_to_learn("alice", skill)
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_missing_profile(self, profile_service):
        """Test edits to an unknown member fail."""
        with pytest.raises(NotFoundError):
            await profile_service.add_skill_to_learn("ghost", "Chess")


class TestProfilePhoto:
    """Test suite for profile photo uploads."""

    @pytest.mark.asyncio
    async def test_upload_photo_updates_profile(self, user_repository, members):
        """Test the uploaded URL replaces the placeholder."""
        storage = AsyncMock()
        storage.upload.return_value = "https://storage.example.com/profile-photos/alice/profile.png"
        service = ProfileDomainService(user_repository, storage)

        user = await service.upload_photo("alice", b"\x89PNG", "image/png")

        storage.upload.assert_awaited_once_with("alice", b"\x89PNG", "image/png")
        assert user.photo_url == "https://storage.example.com/profile-photos/alice/profile.png"
        assert (await user_repository.get_by_id("alice")).profile_photo == user.profile_photo

    @pytest.mark.asyncio
    async def test_upload_without_storage(self, profile_service, members):
        """Test uploads fail clearly when storage is not configured."""
        with pytest.raises(UnavailableError):
            await profile_service.upload_photo("alice", b"data", "image/png")
