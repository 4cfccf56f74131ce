"""Firebase initialization and configuration.

This module handles Firebase Admin SDK initialization and hands out the
Firestore client, Storage bucket and Auth module. Nothing in the domain layer
reaches for these directly: the dependency container builds the document
store and the collaborators from one ``FirebaseConfig`` and injects them.
"""

import os
from typing import Optional

import firebase_admin
from firebase_admin import (
    auth,
    credentials,
    firestore,
    storage,
)
from google.cloud.firestore import Client
from google.cloud.storage import Bucket

from app.core.config import Settings
from app.core.logging import logger


class FirebaseConfig:
    """Firebase configuration and service manager."""

    def __init__(self, config: Settings):
        """Initialize Firebase configuration.

        Args:
            config: Application settings carrying the Firebase project values
        """
        self._settings = config
        self._app: Optional[firebase_admin.App] = None
        self._firestore_client: Optional[Client] = None
        self._storage_bucket: Optional[Bucket] = None

    def initialize(self) -> firebase_admin.App:
        """Initialize Firebase Admin SDK.

        Returns:
            firebase_admin.App: The initialized application

        Raises:
            RuntimeError: If the SDK cannot be initialized
        """
        if self._app is not None:
            return self._app

        options = {"projectId": self._settings.FIREBASE_PROJECT_ID}
        if self._settings.FIREBASE_STORAGE_BUCKET:
            options["storageBucket"] = self._settings.FIREBASE_STORAGE_BUCKET

        try:
            credentials_path = self._settings.FIREBASE_CREDENTIALS_PATH
            if credentials_path and os.path.exists(credentials_path):
                cred = credentials.Certificate(credentials_path)
                self._app = firebase_admin.initialize_app(cred, options)
            else:
                # Application Default Credentials on GCP
                self._app = firebase_admin.initialize_app(options=options)
        except ValueError:
            # The default app was already initialized in this process
            self._app = firebase_admin.get_app()
        except Exception as e:
            raise RuntimeError(f"Failed to initialize Firebase: {e}") from e

        logger.info("firebase_initialized", project_id=self._settings.FIREBASE_PROJECT_ID)
        return self._app

    @property
    def firestore(self) -> Client:
        """Get Firestore client."""
        if self._firestore_client is None:
            self._firestore_client = firestore.client(app=self.initialize())
        return self._firestore_client

    @property
    def storage(self) -> Bucket:
        """Get Cloud Storage bucket."""
        if self._storage_bucket is None:
            self._storage_bucket = storage.bucket(app=self.initialize())
        return self._storage_bucket

    @property
    def auth(self):
        """Get Firebase Auth module bound to the initialized app."""
        self.initialize()
        return auth
