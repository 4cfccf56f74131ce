"""Session repository over the ``sessions`` collection."""

from datetime import datetime
from typing import (
    Any,
    Dict,
    List,
    Optional,
)

from app.domain.entities import (
    SessionEntity,
    SessionStatus,
)
from app.domain.repositories import (
    ASCENDING,
    DESCENDING,
    Document,
    DocumentStore,
    OrderBy,
    SessionRepositoryInterface,
    where,
)
from app.infrastructure.repositories.base_repository import (
    BaseDocumentRepository,
    EntitySubscription,
)
from app.utils.clock import (
    Clock,
    utc_now,
)

SESSIONS_COLLECTION = "sessions"


class DocumentSessionRepository(BaseDocumentRepository, SessionRepositoryInterface):
    """Sessions stored at ``sessions/{session_id}``."""

    def __init__(self, store: DocumentStore, clock: Clock = utc_now):
        super().__init__(store, SESSIONS_COLLECTION, clock)

    async def create(self, session: SessionEntity) -> SessionEntity:
        data = self._with_timestamps(self.from_entity(session), created=True)
        session.id = await self.store.create(self.collection_name, data)
        session.created_at = data["createdAt"]
        session.updated_at = data["updatedAt"]
        return session

    async def get_by_id(self, session_id: str) -> SessionEntity:
        return await self._get_entity(session_id)

    async def transition_status(
        self,
        session_id: str,
        expected: SessionStatus,
        target: SessionStatus,
    ) -> SessionEntity:
        document = await self.store.update_if(
            self.collection_name,
            session_id,
            expected={"status": expected.value},
            data=self._with_timestamps({"status": target.value}),
        )
        return self.to_entity(document)

    async def mark_reminder_sent(self, session_id: str) -> SessionEntity:
        document = await self.store.update_if(
            self.collection_name,
            session_id,
            expected={"reminderSent": False},
            data=self._with_timestamps({"reminderSent": True}),
        )
        return self.to_entity(document)

    async def get_user_sessions(
        self,
        user_id: str,
        limit: Optional[int] = None,
        descending: bool = True,
    ) -> List[SessionEntity]:
        return await self._query_entities(
            [where("participants", "array-contains", user_id)],
            order_by=OrderBy("startTime", DESCENDING if descending else ASCENDING),
            limit=limit,
        )

    async def get_user_sessions_between(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        limit: Optional[int] = None,
    ) -> List[SessionEntity]:
        return await self._query_entities(
            [
                where("participants", "array-contains", user_id),
                where("startTime", ">=", start),
                where("startTime", "<=", end),
            ],
            order_by=OrderBy("startTime", ASCENDING),
            limit=limit,
        )

    async def get_unreminded_sessions_between(
        self,
        start: datetime,
        end: datetime,
    ) -> List[SessionEntity]:
        return await self._query_entities(
            [
                where("startTime", ">=", start),
                where("startTime", "<=", end),
                where("reminderSent", "==", False),
            ],
            order_by=OrderBy("startTime", ASCENDING),
        )

    def watch_user_sessions(self, user_id: str) -> EntitySubscription:
        subscription = self.store.subscribe(
            self.collection_name,
            [where("participants", "array-contains", user_id)],
            order_by=OrderBy("startTime", DESCENDING),
        )
        return EntitySubscription(subscription, self.to_entity)

    def to_entity(self, data: Document) -> SessionEntity:
        return SessionEntity(
            session_id=data["id"],
            participants=data.get("participants") or [],
            skill=data.get("skill", ""),
            start_time=data["startTime"],
            duration=data.get("duration", 0),
            created_by=data.get("createdBy", ""),
            meeting_link=data.get("meetingLink", ""),
            status=SessionStatus(data.get("status", SessionStatus.PENDING.value)),
            reminder_sent=bool(data.get("reminderSent", False)),
            notes=data.get("notes", ""),
            rescheduled_from=data.get("rescheduledFrom"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )

    def from_entity(self, entity: SessionEntity) -> Dict[str, Any]:
        data = {
            "participants": list(entity.participants),
            "skill": entity.skill,
            "startTime": entity.start_time,
            "duration": entity.duration,
            "createdBy": entity.created_by,
            "meetingLink": entity.meeting_link,
            "status": entity.status.value,
            "reminderSent": entity.reminder_sent,
            "notes": entity.notes,
        }
        if entity.rescheduled_from:
            data["rescheduledFrom"] = entity.rescheduled_from
        return data
