"""Firestore infrastructure package."""

from .document_store import (
    FirestoreDocumentStore,
    FirestoreSubscription,
    translate_error,
)

__all__ = [
    "FirestoreDocumentStore",
    "FirestoreSubscription",
    "translate_error",
]
