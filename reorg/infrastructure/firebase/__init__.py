"""Firestore integration over the REST API (httpx + google-auth)."""

from reorg.infrastructure.firebase.client import (
    close_firebase,
    get_firestore_client,
    init_firebase,
)
from reorg.infrastructure.firebase.document_store import FirestoreDocumentStore

__all__ = [
    "FirestoreDocumentStore",
    "close_firebase",
    "get_firestore_client",
    "init_firebase",
]
