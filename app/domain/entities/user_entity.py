"""User domain entity for SkillSwap.

This module contains the pure domain model for a member profile,
independent of any external dependencies or frameworks.
"""

from datetime import datetime
from typing import (
    Dict,
    Iterable,
    List,
    Optional,
)
from urllib.parse import quote

from app.domain.exceptions import InvalidError
from app.utils.clock import utc_now

AVAILABILITY_DAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)
AVAILABILITY_SLOTS = ("morning", "afternoon", "evening")
AVAILABILITY_KEYS = tuple(f"{day}_{slot}" for day in AVAILABILITY_DAYS for slot in AVAILABILITY_SLOTS)

PLACEHOLDER_AVATAR_URL = "https://ui-avatars.com/api/?name={name}&background=4F46E5&color=fff"
DEFAULT_DISPLAY_NAME = "User"


def placeholder_avatar_url(display_name: str) -> str:
    """Build the generated avatar URL used when no photo was uploaded."""
    return PLACEHOLDER_AVATAR_URL.format(name=quote(display_name or DEFAULT_DISPLAY_NAME, safe=""))


def _dedupe(skills: Iterable[str]) -> List[str]:
    seen = []
    for skill in skills:
        if skill not in seen:
            seen.append(skill)
    return seen


class UserEntity:
    """Pure domain entity for a SkillSwap member.

    Skill names are matched exactly: no case folding, no normalization.
    Only surrounding whitespace is stripped when a skill is added.
    """

    def __init__(
        self,
        user_id: str,
        display_name: str = "",
        email: str = "",
        first_name: str = "",
        last_name: str = "",
        bio: str = "",
        skills_to_teach: Optional[Iterable[str]] = None,
        skills_to_learn: Optional[Iterable[str]] = None,
        availability: Optional[Dict[str, bool]] = None,
        profile_photo: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        """Initialize a User entity.

        Args:
            user_id: Identity-provider subject, stable and immutable
            display_name: Name shown to other members
            email: Contact address used for reminders
            first_name: Given name
            last_name: Family name
            bio: Free text
            skills_to_teach: Skills the member can teach
            skills_to_learn: Skills the member wants to learn
            availability: ``{day}_{slot}`` keys mapped to booleans
            profile_photo: Uploaded photo URL, if any
            created_at: Creation timestamp
            updated_at: Last update timestamp
        """
        self.id = user_id
        self.display_name = display_name
        self.email = email
        self.first_name = first_name
        self.last_name = last_name
        self.bio = bio
        self.skills_to_teach = _dedupe(skills_to_teach or [])
        self.skills_to_learn = _dedupe(skills_to_learn or [])
        self.availability = {key: bool(value) for key, value in (availability or {}).items() if key in AVAILABILITY_KEYS}
        self.profile_photo = profile_photo or None
        self.created_at = created_at or utc_now()
        self.updated_at = updated_at or utc_now()

    @property
    def photo_url(self) -> str:
        """Uploaded photo, or the generated placeholder keyed by display name."""
        return self.profile_photo or placeholder_avatar_url(self.display_name)

    @property
    def has_skills(self) -> bool:
        return bool(self.skills_to_teach or self.skills_to_learn)

    def teaches(self, skill: str) -> bool:
        """Check whether the member offers a skill."""
        return skill in self.skills_to_teach

    def teaching_overlap(self, skills: Iterable[str]) -> List[str]:
        """Skills from ``skills`` this member teaches, in the member's order."""
        wanted = set(skills)
        return [skill for skill in self.skills_to_teach if skill in wanted]

    def add_skill_to_teach(self, skill: str) -> bool:
        """Add a teachable skill. Returns False when it was already listed."""
        return self._add_skill(self.skills_to_teach, skill, "skills_to_teach")

    def add_skill_to_learn(self, skill: str) -> bool:
        """Add a wanted skill. Returns False when it was already listed."""
        return self._add_skill(self.skills_to_learn, skill, "skills_to_learn")

    def remove_skill_to_teach(self, skill: str) -> bool:
        """Remove a teachable skill. Returns False when it was not listed."""
        return self._remove_skill(self.skills_to_teach, skill)

    def remove_skill_to_learn(self, skill: str) -> bool:
        """Remove a wanted skill. Returns False when it was not listed."""
        return self._remove_skill(self.skills_to_learn, skill)

    def set_availability(self, key: str, available: bool) -> bool:
        """Set one availability slot. Returns False when it already had that value."""
        if key not in AVAILABILITY_KEYS:
            raise InvalidError("availability", f"unknown slot {key!r}")
        if self.availability.get(key) == bool(available):
            return False
        self.availability[key] = bool(available)
        self.updated_at = utc_now()
        return True

    def update_names(self, first_name: str, last_name: str) -> None:
        """Update names; the display name follows them."""
        first_name = (first_name or "").strip()
        last_name = (last_name or "").strip()
        if not first_name or not last_name:
            raise InvalidError("display_name", "first name and last name are required")

        self.first_name = first_name
        self.last_name = last_name
        self.display_name = f"{first_name} {last_name}"
        self.updated_at = utc_now()

    def _add_skill(self, skills: List[str], skill: str, field: str) -> bool:
        skill = (skill or "").strip()
        if not skill:
            raise InvalidError(field, "skill name cannot be empty")
        if skill in skills:
            return False
        skills.append(skill)
        self.updated_at = utc_now()
        return True

    def _remove_skill(self, skills: List[str], skill: str) -> bool:
        if skill not in skills:
            return False
        skills.remove(skill)
        self.updated_at = utc_now()
        return True

    def __repr__(self) -> str:
        """Detailed representation of the user."""
        return f"UserEntity(id='{self.id}', display_name='{self.display_name}')"
