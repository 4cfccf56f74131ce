"""User repository over the ``users`` collection."""

from typing import (
    Any,
    Dict,
    Iterable,
    List,
    Optional,
)

from app.domain.entities import UserEntity
from app.domain.exceptions import NotFoundError
from app.domain.repositories import (
    Document,
    DocumentStore,
    UserRepositoryInterface,
    where,
)
from app.infrastructure.repositories.base_repository import BaseDocumentRepository
from app.utils.clock import (
    Clock,
    utc_now,
)

USERS_COLLECTION = "users"

# Firestore caps array-contains-any at this many values per query
ARRAY_CONTAINS_ANY_LIMIT = 30


class DocumentUserRepository(BaseDocumentRepository, UserRepositoryInterface):
    """Profiles stored at ``users/{uid}``."""

    def __init__(self, store: DocumentStore, clock: Clock = utc_now):
        super().__init__(store, USERS_COLLECTION, clock)

    async def get_by_id(self, user_id: str) -> UserEntity:
        return await self._get_entity(user_id)

    async def find_by_id(self, user_id: str) -> Optional[UserEntity]:
        try:
            return await self._get_entity(user_id)
        except NotFoundError:
            return None

    async def create(self, user: UserEntity) -> UserEntity:
        data = self._with_timestamps(self.from_entity(user), created=True)
        await self.store.create(self.collection_name, data, doc_id=user.id)
        user.created_at = data["createdAt"]
        user.updated_at = data["updatedAt"]
        return user

    async def update(self, user: UserEntity) -> UserEntity:
        data = self.from_entity(user)
        data.pop("uid")
        data.pop("createdAt", None)
        await self.store.update(self.collection_name, user.id, self._with_timestamps(data))
        user.updated_at = data["updatedAt"]
        return user

    async def find_teachers(
        self,
        skills: Iterable[str],
        exclude_user_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[UserEntity]:
        skills = list(dict.fromkeys(skills))
        if not skills:
            return []

        # One extra row per query leaves room for dropping the caller
        fetch_limit = limit + 1 if limit and exclude_user_id else limit
        found: Dict[str, UserEntity] = {}
        for start in range(0, len(skills), ARRAY_CONTAINS_ANY_LIMIT):
            chunk = skills[start:start + ARRAY_CONTAINS_ANY_LIMIT]
            users = await self._query_entities(
                [where("skillsToTeach", "array-contains-any", chunk)],
                limit=fetch_limit,
            )
            for user in users:
                if user.id != exclude_user_id:
                    found.setdefault(user.id, user)
        return list(found.values())

    def to_entity(self, data: Document) -> UserEntity:
        return UserEntity(
            user_id=data.get("uid") or data["id"],
            display_name=data.get("displayName", ""),
            email=data.get("email", ""),
            first_name=data.get("firstName", ""),
            last_name=data.get("lastName", ""),
            bio=data.get("bio", ""),
            skills_to_teach=data.get("skillsToTeach") or [],
            skills_to_learn=data.get("skillsToLearn") or [],
            availability=data.get("availability") or {},
            profile_photo=data.get("profilePhoto") or None,
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )

    def from_entity(self, entity: UserEntity) -> Dict[str, Any]:
        data = {
            "uid": entity.id,
            "displayName": entity.display_name,
            "email": entity.email,
            "firstName": entity.first_name,
            "lastName": entity.last_name,
            "bio": entity.bio,
            "skillsToTeach": list(entity.skills_to_teach),
            "skillsToLearn": list(entity.skills_to_learn),
            "availability": dict(entity.availability),
            "profilePhoto": entity.profile_photo or "",
        }
        if entity.created_at is not None:
            data["createdAt"] = entity.created_at
        return data
