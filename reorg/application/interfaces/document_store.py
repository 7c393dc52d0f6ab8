"""Document-store port consumed by the reorganization services.

Paths are slash-separated and relative to the database root, e.g.
"organizations/org1/users/u1". Collection paths have an odd number of
segments, document paths an even number.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from reorg.application.dtos.documents import StoredDocument, WriteOperation


class IDocumentStore(Protocol):
    """Protocol for a hierarchical document store (Firestore semantics)."""

    async def get(self, path: str) -> StoredDocument | None:
        """Return the document at path, or None if it does not exist."""

    async def list_child_collections(self, document_path: str) -> list[str]:
        """Return the IDs of collections nested directly under a document."""

    async def list_documents(
        self, collection_path: str, limit: int | None = None
    ) -> list[StoredDocument]:
        """Return documents in a collection (shallow), up to limit if given."""

    async def query(
        self,
        collection_path: str,
        field: str,
        op: str,
        value: Any,
        limit: int | None = None,
    ) -> list[StoredDocument]:
        """Return documents in a collection matching a single field filter."""

    async def set(self, path: str, data: dict[str, Any], merge: bool = False) -> None:
        """Write a document. merge=False replaces it; merge=True updates named top-level fields."""

    async def delete(self, path: str) -> None:
        """Delete a document. Idempotent when the document is missing."""

    async def commit_batch(self, operations: Sequence[WriteOperation]) -> None:
        """Atomically commit a group of writes/deletes (at most the provider ceiling)."""

    def server_timestamp(self) -> Any:
        """Return a sentinel the store replaces with its commit time."""
