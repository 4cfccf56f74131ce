"""Repository interfaces for SkillSwap.

This module contains abstract repository interfaces that define
the contracts for data access without specifying implementation details.
"""

from .document_store import (
    ASCENDING,
    DESCENDING,
    SERVER_TIMESTAMP,
    Document,
    DocumentStore,
    Filter,
    OrderBy,
    Subscription,
    where,
)
from .message_repository import MessageRepositoryInterface
from .session_repository import SessionRepositoryInterface
from .user_repository import UserRepositoryInterface

__all__ = [
    "DocumentStore",
    "Document",
    "Filter",
    "OrderBy",
    "Subscription",
    "where",
    "ASCENDING",
    "DESCENDING",
    "SERVER_TIMESTAMP",
    "UserRepositoryInterface",
    "SessionRepositoryInterface",
    "MessageRepositoryInterface",
]
