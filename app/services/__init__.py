"""This file contains the external service clients for the application."""

from app.services.cloud_storage import ProfilePhotoStorage
from app.services.email import (
    BrevoEmailClient,
    EmailDeliveryError,
    EmailResult,
)
from app.services.firebase_auth import (
    AuthenticatedUser,
    AuthenticationError,
    FirebaseAuthService,
)

__all__ = [
    "ProfilePhotoStorage",
    "BrevoEmailClient",
    "EmailDeliveryError",
    "EmailResult",
    "FirebaseAuthService",
    "AuthenticatedUser",
    "AuthenticationError",
]
