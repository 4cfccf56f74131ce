"""Configuration for pytest tests.

This file contains fixtures and setup configuration for all tests.
"""

import os
from datetime import timedelta
from typing import Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

# Set test environment
os.environ["APP_ENV"] = "test"
os.environ["SCHEDULER_TOKEN"] = "scheduler-secret"

# Import app after setting environment
from app.core.config import Settings
from app.core.dependencies import get_app_container
from app.domain.entities import UserEntity
from app.domain.services import (
    ConversationDomainService,
    MatchDomainService,
    ProfileDomainService,
    ReminderDomainService,
    SessionDomainService,
)
from app.infrastructure.container import Container
from app.infrastructure.repositories import (
    DocumentMessageRepository,
    DocumentSessionRepository,
    DocumentUserRepository,
)
from app.main import app
from app.services.firebase_auth import AuthenticatedUser
from tests.mocks import (
    FrozenClock,
    InMemoryDocumentStore,
    MockAuthService,
    RecordingEmailSender,
)


@pytest.fixture
def clock() -> FrozenClock:
    """Clock frozen at a fixed Monday morning, UTC."""
    return FrozenClock()


@pytest.fixture
def store(clock) -> InMemoryDocumentStore:
    return InMemoryDocumentStore(clock)


@pytest.fixture
def user_repository(store, clock) -> DocumentUserRepository:
    return DocumentUserRepository(store, clock)


@pytest.fixture
def session_repository(store, clock) -> DocumentSessionRepository:
    return DocumentSessionRepository(store, clock)


@pytest.fixture
def message_repository(store, clock) -> DocumentMessageRepository:
    return DocumentMessageRepository(store, clock)


@pytest.fixture
def opened_links() -> list:
    return []


@pytest.fixture
def session_service(session_repository, user_repository, clock, opened_links) -> SessionDomainService:
    return SessionDomainService(
        session_repository,
        user_repository,
        meeting_base_url="https://meet.jit.si",
        upcoming_window=timedelta(days=30),
        clock=clock,
        meeting_opener=opened_links.append,
    )


@pytest.fixture
def match_service(user_repository) -> MatchDomainService:
    return MatchDomainService(user_repository)


@pytest.fixture
def conversation_service(message_repository, session_repository, user_repository) -> ConversationDomainService:
    return ConversationDomainService(message_repository, session_repository, user_repository)


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def reminder_service(session_repository, user_repository, email_sender, clock) -> ReminderDomainService:
    return ReminderDomainService(
        session_repository,
        user_repository,
        email_sender,
        lead=timedelta(minutes=60),
        clock=clock,
    )


@pytest.fixture
def profile_service(user_repository) -> ProfileDomainService:
    return ProfileDomainService(user_repository)


@pytest_asyncio.fixture
async def members(user_repository):
    """Three members: A teaches Python, B wants Python, C teaches Python and Guitar."""
    alice = UserEntity(
        "alice",
        display_name="Alice Smith",
        email="alice@example.com",
        skills_to_teach=["Python", "SQL"],
        skills_to_learn=["Guitar"],
    )
    bob = UserEntity(
        "bob",
        display_name="Bob Jones",
        email="bob@example.com",
        skills_to_teach=["Spanish"],
        skills_to_learn=["Python"],
    )
    carol = UserEntity(
        "carol",
        display_name="Carol White",
        email="carol@example.com",
        skills_to_teach=["Python", "Guitar"],
        skills_to_learn=["Spanish"],
    )
    for user in (alice, bob, carol):
        await user_repository.create(user)
    return {"alice": alice, "bob": bob, "carol": carol}


@pytest.fixture
def test_settings() -> Settings:
    return Settings(SCHEDULER_TOKEN="scheduler-secret", BREVO_API_KEY="test-key")


@pytest.fixture
def auth_service() -> MockAuthService:
    return MockAuthService(
        {"alice-token": AuthenticatedUser(uid="alice", email="alice@example.com", name="Alice Smith")}
    )


@pytest.fixture
def container(test_settings, store, auth_service, email_sender, clock) -> Container:
    return Container(
        config=test_settings,
        store=store,
        email_client=email_sender,
        auth_service=auth_service,
        clock=clock,
    )


@pytest.fixture
def client(container) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app wired to in-memory collaborators."""
    app.dependency_overrides[get_app_container] = lambda: container
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
