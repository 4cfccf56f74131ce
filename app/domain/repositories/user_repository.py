"""User repository interface for SkillSwap.

This module defines the contract for member profile data access operations
without specifying implementation details.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from app.domain.entities import UserEntity


class UserRepositoryInterface(ABC):
    """Abstract repository interface for User operations."""

    @abstractmethod
    async def get_by_id(self, user_id: str) -> UserEntity:
        """Get user by ID.

        Args:
            user_id: User ID to lookup

        Returns:
            UserEntity: The stored profile

        Raises:
            NotFoundError: If the profile does not exist
        """
        pass

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[UserEntity]:
        """Get user by ID, or None when the profile does not exist."""
        pass

    @abstractmethod
    async def create(self, user: UserEntity) -> UserEntity:
        """Create a profile keyed by the user's identity-provider ID."""
        pass

    @abstractmethod
    async def update(self, user: UserEntity) -> UserEntity:
        """Write the owner's editable profile fields.

        Raises:
            NotFoundError: If the profile does not exist
        """
        pass

    @abstractmethod
    async def find_teachers(
        self,
        skills: Iterable[str],
        exclude_user_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[UserEntity]:
        """Find users teaching at least one of ``skills``.

        Args:
            skills: Skill names, matched exactly
            exclude_user_id: User to leave out of the result
            limit: Maximum number of users to fetch per store query; all when None

        Returns:
            List[UserEntity]: Matching users in store order
        """
        pass
