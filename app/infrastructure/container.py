"""Dependency injection container for SkillSwap.

This module provides a dependency injection container to manage
dependencies between domain services, repositories, and other components.
Everything is built from one ``Settings`` value; tests hand in their own
store and collaborators instead of touching Firebase.
"""

from datetime import timedelta
from typing import (
    Callable,
    Optional,
)

from app.core.config import (
    Settings,
    settings,
)
from app.core.firebase import FirebaseConfig
from app.core.logging import logger
from app.domain.repositories import DocumentStore
from app.domain.services import (
    ConversationDomainService,
    MatchDomainService,
    ProfileDomainService,
    ReminderDomainService,
    SessionDomainService,
)
from app.infrastructure.firestore import FirestoreDocumentStore
from app.infrastructure.repositories import (
    DocumentMessageRepository,
    DocumentSessionRepository,
    DocumentUserRepository,
)
from app.services.cloud_storage import ProfilePhotoStorage
from app.services.email import BrevoEmailClient
from app.services.firebase_auth import FirebaseAuthService
from app.utils.clock import (
    Clock,
    utc_now,
)


class Container:
    """Dependency injection container for managing application dependencies."""

    def __init__(
        self,
        config: Settings = settings,
        store: Optional[DocumentStore] = None,
        email_client: Optional[BrevoEmailClient] = None,
        auth_service: Optional[FirebaseAuthService] = None,
        photo_storage: Optional[ProfilePhotoStorage] = None,
        clock: Clock = utc_now,
    ):
        """Initialize the container.

        Args:
            config: Application settings
            store: Document store; a Firestore store is built on first use when omitted
            email_client: Email client; built from the Brevo settings when omitted
            auth_service: ID-token verifier; built from Firebase when omitted
            photo_storage: Profile photo storage; built from Firebase when omitted
            clock: Source of the current time
        """
        self.settings = config
        self.clock = clock
        self._firebase: Optional[FirebaseConfig] = None
        self._store = store
        self._email_client = email_client
        self._auth_service = auth_service
        self._photo_storage = photo_storage

    @property
    def firebase(self) -> FirebaseConfig:
        if self._firebase is None:
            self._firebase = FirebaseConfig(self.settings)
        return self._firebase

    @property
    def store(self) -> DocumentStore:
        if self._store is None:
            self._store = FirestoreDocumentStore(
                self.firebase.firestore,
                timeout=self.settings.STORE_TIMEOUT_SECONDS,
            )
            logger.info("document_store_initialized", timeout=self.settings.STORE_TIMEOUT_SECONDS)
        return self._store

    @property
    def email_client(self) -> BrevoEmailClient:
        if self._email_client is None:
            self._email_client = BrevoEmailClient(
                api_key=self.settings.BREVO_API_KEY,
                sender_name=self.settings.EMAIL_SENDER_NAME,
                sender_email=self.settings.EMAIL_SENDER_ADDRESS,
                api_url=self.settings.BREVO_API_URL,
                timeout=self.settings.EMAIL_TIMEOUT_SECONDS,
            )
        return self._email_client

    @property
    def auth_service(self) -> FirebaseAuthService:
        if self._auth_service is None:
            self._auth_service = FirebaseAuthService(self.firebase.auth)
        return self._auth_service

    @property
    def photo_storage(self) -> ProfilePhotoStorage:
        if self._photo_storage is None:
            self._photo_storage = ProfilePhotoStorage(self.firebase.storage)
        return self._photo_storage

    def user_repository(self) -> DocumentUserRepository:
        return DocumentUserRepository(self.store, self.clock)

    def session_repository(self) -> DocumentSessionRepository:
        return DocumentSessionRepository(self.store, self.clock)

    def message_repository(self) -> DocumentMessageRepository:
        return DocumentMessageRepository(self.store, self.clock)

    def match_service(self) -> MatchDomainService:
        return MatchDomainService(self.user_repository())

    def session_service(self, meeting_opener: Optional[Callable[[str], None]] = None) -> SessionDomainService:
        return SessionDomainService(
            self.session_repository(),
            self.user_repository(),
            meeting_base_url=self.settings.MEETING_BASE_URL,
            upcoming_window=timedelta(days=self.settings.UPCOMING_WINDOW_DAYS),
            clock=self.clock,
            meeting_opener=meeting_opener,
        )

    def conversation_service(self) -> ConversationDomainService:
        return ConversationDomainService(
            self.message_repository(),
            self.session_repository(),
            self.user_repository(),
        )

    def reminder_service(self) -> ReminderDomainService:
        return ReminderDomainService(
            self.session_repository(),
            self.user_repository(),
            self.email_client,
            lead=timedelta(minutes=self.settings.REMINDER_LEAD_MINUTES),
            clock=self.clock,
        )

    def profile_service(self) -> ProfileDomainService:
        return ProfileDomainService(self.user_repository(), self.photo_storage)

    async def aclose(self) -> None:
        if self._email_client is not None:
            await self._email_client.aclose()


# Global container instance
_container: Optional[Container] = None


def get_container() -> Container:
    """Get the global container instance.

    Returns:
        Container: The global container instance
    """
    global _container
    if _container is None:
        _container = Container()
        logger.info("container_initialized", environment=settings.APP_ENV.value)
    return _container


async def cleanup_container() -> None:
    """Release the global container's clients."""
    global _container
    if _container is not None:
        await _container.aclose()
        _container = None
        logger.info("container_cleaned_up")
