"""Firestore-backed document store (implements IDocumentStore)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from reorg.application.dtos.documents import StoredDocument, WriteOperation
from reorg.core.constants import FIRESTORE_MAX_BATCH_WRITES
from reorg.infrastructure.firebase._rest_client import DocumentSnapshot, FirestoreRESTClient
from reorg.infrastructure.firebase._rest_encoding import SERVER_TIMESTAMP


def _to_stored(snapshot: DocumentSnapshot) -> StoredDocument:
    return StoredDocument(id=snapshot.id, path=snapshot.path, data=snapshot.to_dict())


class FirestoreDocumentStore:
    """Document store over the Firestore REST client. Same contract as the in-memory test store."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client

    async def get(self, path: str) -> StoredDocument | None:
        snapshot = await self._client.document(path).get()
        return _to_stored(snapshot) if snapshot else None

    async def list_child_collections(self, document_path: str) -> list[str]:
        return [c.id for c in await self._client.document(document_path).list_collections()]

    async def list_documents(
        self, collection_path: str, limit: int | None = None
    ) -> list[StoredDocument]:
        coll = self._client.collection(collection_path)
        stream = coll.limit(limit).stream() if limit else coll.stream()
        return [_to_stored(s) async for s in stream]

    async def query(
        self,
        collection_path: str,
        field: str,
        op: str,
        value: Any,
        limit: int | None = None,
    ) -> list[StoredDocument]:
        q = self._client.collection(collection_path).where(field, op, value)
        if limit:
            q = q.limit(limit)
        return [_to_stored(s) async for s in q.stream()]

    async def set(self, path: str, data: dict[str, Any], merge: bool = False) -> None:
        await self._client.document(path).set(data, merge=merge)

    async def delete(self, path: str) -> None:
        await self._client.document(path).delete()

    async def commit_batch(self, operations: Sequence[WriteOperation]) -> None:
        if len(operations) > FIRESTORE_MAX_BATCH_WRITES:
            raise ValueError(
                f"Batch of {len(operations)} writes exceeds the Firestore limit "
                f"of {FIRESTORE_MAX_BATCH_WRITES}"
            )
        await self._client.commit(
            [
                {"path": op.path, "delete": True}
                if op.delete
                else {"path": op.path, "data": op.data or {}, "merge": op.merge}
                for op in operations
            ]
        )

    def server_timestamp(self) -> Any:
        return SERVER_TIMESTAMP
