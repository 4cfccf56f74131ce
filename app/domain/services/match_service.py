"""Match domain service for SkillSwap.

Finds teaching partners for a learner by skill overlap. Matching is a plain
filter over profiles: any shared skill qualifies a teacher.
"""

from dataclasses import (
    dataclass,
    field,
)
from typing import (
    Iterable,
    List,
)

from app.core.logging import logger
from app.domain.entities import UserEntity
from app.domain.repositories import UserRepositoryInterface

DASHBOARD_MATCH_LIMIT = 6
PARTNER_LIST_LIMIT = 20


@dataclass
class MatchSuggestions:
    """Matches for one member.

    ``profile_incomplete`` is set when the member lists no skills to learn,
    in which case ``matches`` is empty and the member should be asked to
    complete their profile.
    """

    matches: List[UserEntity] = field(default_factory=list)
    profile_incomplete: bool = False


class MatchDomainService:
    """Domain service computing partner suggestions."""

    def __init__(self, user_repository: UserRepositoryInterface):
        """Initialize the match domain service.

        Args:
            user_repository: Repository for user data access
        """
        self.user_repository = user_repository

    async def find_matches(
        self,
        learner_skills: Iterable[str],
        exclude_user_id: str,
        limit: int = PARTNER_LIST_LIMIT,
    ) -> List[UserEntity]:
        """Find users who teach at least one of the learner's skills.

        Every teacher of a wanted skill is ranked by number of overlapping
        skills, most first, then by user ID, before the result is cut to
        ``limit``, so the order does not depend on store iteration order.

        Args:
            learner_skills: Skills the learner wants
            exclude_user_id: The learner, never part of the result
            limit: Maximum number of matches

        Returns:
            List[UserEntity]: Ranked matches, empty when no skills were given
        """
        skills = [skill for skill in dict.fromkeys(learner_skills) if skill]
        if not skills:
            logger.info("match_search_skipped_no_skills", user_id=exclude_user_id)
            return []

        candidates = await self.user_repository.find_teachers(skills, exclude_user_id=exclude_user_id)

        matches = [
            user for user in candidates
            if user.id != exclude_user_id and user.teaching_overlap(skills)
        ]
        matches.sort(key=lambda user: (-len(user.teaching_overlap(skills)), user.id))

        logger.info(
            "matches_found",
            user_id=exclude_user_id,
            skills=len(skills),
            candidates=len(matches),
            matches=len(matches[:limit]),
        )
        return matches[:limit]

    async def find_matches_for_user(self, user_id: str, limit: int = PARTNER_LIST_LIMIT) -> MatchSuggestions:
        """Find matches for a member's own ``skills_to_learn``.

        Raises:
            NotFoundError: If the member has no profile
        """
        learner = await self.user_repository.get_by_id(user_id)
        if not learner.skills_to_learn:
            logger.info("match_profile_incomplete", user_id=user_id)
            return MatchSuggestions(profile_incomplete=True)

        matches = await self.find_matches(learner.skills_to_learn, exclude_user_id=user_id, limit=limit)
        return MatchSuggestions(matches=matches)
