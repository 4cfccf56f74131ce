"""Domain layer for SkillSwap.

This package contains the core business logic and domain models.
It is independent of any external dependencies like databases or APIs.
"""

from . import entities, repositories, services
from .exceptions import (
    ConflictError,
    DomainError,
    InvalidError,
    NotFoundError,
    PermissionDeniedError,
    StoreTimeoutError,
    UnavailableError,
)

__all__ = [
    "entities",
    "repositories",
    "services",
    # Exceptions
    "DomainError",
    "NotFoundError",
    "PermissionDeniedError",
    "UnavailableError",
    "StoreTimeoutError",
    "ConflictError",
    "InvalidError",
]
