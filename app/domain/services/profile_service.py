"""Profile domain service for SkillSwap.

Profiles are created on registration or on the first sign-in that finds none,
and afterwards only their owner edits them.
"""

from typing import (
    Callable,
    Dict,
    Optional,
    Protocol,
    Tuple,
)

from app.core.logging import logger
from app.domain.entities import (
    AVAILABILITY_KEYS,
    DEFAULT_DISPLAY_NAME,
    UserEntity,
)
from app.domain.exceptions import (
    InvalidError,
    UnavailableError,
)
from app.domain.repositories import UserRepositoryInterface


class PhotoStorage(Protocol):
    async def upload(self, user_id: str, data: bytes, content_type: str) -> str: ...


def split_display_name(display_name: Optional[str]) -> Tuple[str, str]:
    """Split an identity-provider display name into first and last name."""
    parts = (display_name or "").split()
    if not parts:
        return DEFAULT_DISPLAY_NAME, ""
    return parts[0], " ".join(parts[1:])


def _require_skill(skill: str, field: str) -> str:
    skill = (skill or "").strip()
    if not skill:
        raise InvalidError(field, "skill name cannot be empty")
    return skill


class ProfileDomainService:
    """Domain service for member profiles."""

    def __init__(
        self,
        user_repository: UserRepositoryInterface,
        photo_storage: Optional[PhotoStorage] = None,
    ):
        """Initialize the profile domain service.

        Args:
            user_repository: Repository for user data access
            photo_storage: Upload target for profile photos
        """
        self.user_repository = user_repository
        self.photo_storage = photo_storage

    async def ensure_profile(
        self,
        user_id: str,
        email: str,
        display_name: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> UserEntity:
        """Return the member's profile, creating it on first sign-in."""
        existing = await self.user_repository.find_by_id(user_id)
        if existing is not None:
            return existing

        first_name, last_name = split_display_name(display_name)
        user = UserEntity(
            user_id=user_id,
            display_name=(display_name or "").strip() or f"{first_name} {last_name}".strip(),
            email=email or "",
            first_name=first_name,
            last_name=last_name,
            profile_photo=photo_url,
        )
        user = await self.user_repository.create(user)
        logger.info("profile_created", user_id=user_id)
        return user

    async def get_profile(self, user_id: str) -> UserEntity:
        return await self.user_repository.get_by_id(user_id)

    async def update_profile(
        self,
        user_id: str,
        first_name: str,
        last_name: str,
        bio: Optional[str] = None,
        availability: Optional[Dict[str, bool]] = None,
    ) -> UserEntity:
        """Save the editable profile form.

        ``availability``, when given, replaces the whole grid.

        Raises:
            InvalidError: If a name is missing or a slot key is unknown
        """
        unknown = sorted(set(availability or {}) - set(AVAILABILITY_KEYS))
        if unknown:
            raise InvalidError("availability", f"unknown slots {unknown}")
        if not (first_name or "").strip() or not (last_name or "").strip():
            raise InvalidError("display_name", "first name and last name are required")

        user = await self.user_repository.get_by_id(user_id)
        user.update_names(first_name, last_name)
        if bio is not None:
            user.bio = bio.strip()
        if availability is not None:
            user.availability = {key: bool(value) for key, value in availability.items()}

        user = await self.user_repository.update(user)
        logger.info("profile_updated", user_id=user_id)
        return user

    async def add_skill_to_teach(self, user_id: str, skill: str) -> UserEntity:
        skill = _require_skill(skill, "skills_to_teach")
        return await self._edit(user_id, lambda user: user.add_skill_to_teach(skill), "skill_to_teach_added")

    async def add_skill_to_learn(self, user_id: str, skill: str) -> UserEntity:
        skill = _require_skill(skill, "skills_to_learn")
        return await self._edit(user_id, lambda user: user.add_skill_to_learn(skill), "skill_to_learn_added")

    async def remove_skill_to_teach(self, user_id: str, skill: str) -> UserEntity:
        return await self._edit(user_id, lambda user: user.remove_skill_to_teach(skill), "skill_to_teach_removed")

    async def remove_skill_to_learn(self, user_id: str, skill: str) -> UserEntity:
        return await self._edit(user_id, lambda user: user.remove_skill_to_learn(skill), "skill_to_learn_removed")

    async def set_availability(self, user_id: str, key: str, available: bool) -> UserEntity:
        if key not in AVAILABILITY_KEYS:
            raise InvalidError("availability", f"unknown slot {key!r}")
        return await self._edit(user_id, lambda user: user.set_availability(key, available), "availability_updated")

    async def upload_photo(self, user_id: str, data: bytes, content_type: str) -> UserEntity:
        """Upload a new profile photo and point the profile at it.

        Raises:
            UnavailableError: If no photo storage is configured
        """
        if self.photo_storage is None:
            raise UnavailableError("upload_photo", "photo storage is not configured")

        url = await self.photo_storage.upload(user_id, data, content_type)
        user = await self.user_repository.get_by_id(user_id)
        user.profile_photo = url
        user = await self.user_repository.update(user)
        logger.info("profile_photo_updated", user_id=user_id)
        return user

    async def _edit(self, user_id: str, change: Callable[[UserEntity], bool], event: str) -> UserEntity:
        user = await self.user_repository.get_by_id(user_id)
        if not change(user):
            return user
        user = await self.user_repository.update(user)
        logger.info(event, user_id=user_id)
        return user
