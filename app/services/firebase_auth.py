"""Firebase Authentication service.

This module verifies Firebase ID tokens presented by signed-in members.
"""

import asyncio
from dataclasses import dataclass
from typing import (
    Any,
    Dict,
    Optional,
)

from firebase_admin.exceptions import FirebaseError

from app.core.logging import logger


class AuthenticationError(Exception):
    """Raised when an ID token is missing, malformed, expired or revoked."""


@dataclass
class AuthenticatedUser:
    """Identity carried by a verified ID token."""

    uid: str
    email: str = ""
    name: Optional[str] = None
    picture: Optional[str] = None
    email_verified: bool = False

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "AuthenticatedUser":
        return cls(
            uid=claims["uid"],
            email=claims.get("email", ""),
            name=claims.get("name"),
            picture=claims.get("picture"),
            email_verified=bool(claims.get("email_verified", False)),
        )


class FirebaseAuthService:
    """Firebase Authentication service."""

    def __init__(self, auth, check_revoked: bool = False):
        """Initialize Firebase Auth service.

        Args:
            auth: ``firebase_admin.auth`` module bound to an initialized app
            check_revoked: Also reject tokens revoked since issue
        """
        self.auth = auth
        self.check_revoked = check_revoked

    async def verify_token(self, id_token: str) -> AuthenticatedUser:
        """Verify Firebase ID token.

        Args:
            id_token: Firebase ID token

        Returns:
            AuthenticatedUser: The token's subject

        Raises:
            AuthenticationError: If token verification fails
        """
        if not id_token:
            raise AuthenticationError("Missing token")
        try:
            claims = await asyncio.to_thread(self.auth.verify_id_token, id_token, check_revoked=self.check_revoked)
        except (ValueError, FirebaseError) as e:
            logger.warning("id_token_rejected", error=str(e))
            raise AuthenticationError(f"Invalid token: {e}") from e
        return AuthenticatedUser.from_claims(claims)
