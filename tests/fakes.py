"""In-memory IDocumentStore used by unit and integration tests.

Documents are keyed by full path. Nested collections are independent of
their parent document, as in Firestore: deleting a document leaves its
subcollections in place.
"""

from __future__ import annotations

import copy
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from reorg.application.dtos.documents import StoredDocument, WriteOperation
from reorg.core.constants import FIRESTORE_MAX_BATCH_WRITES

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


class InMemoryDocumentStore:
    """Dict-backed document store recording every mutating call."""

    def __init__(self, documents: dict[str, dict[str, Any]] | None = None) -> None:
        self.documents: dict[str, dict[str, Any]] = copy.deepcopy(documents or {})
        self.commit_sizes: list[int] = []
        # ("set", path, merge) / ("delete", path) / ("commit", size), in call order
        self.calls: list[tuple] = []
        self.fail_commit_at: int | None = None
        self._sentinel = _ServerTimestamp()

    def snapshot(self) -> dict[str, dict[str, Any]]:
        return copy.deepcopy(self.documents)

    def _resolve(self, data: dict[str, Any]) -> dict[str, Any]:
        return {
            k: (FIXED_NOW if v is self._sentinel else copy.deepcopy(v)) for k, v in data.items()
        }

    def _write(self, path: str, data: dict[str, Any], merge: bool) -> None:
        resolved = self._resolve(data)
        if merge and path in self.documents:
            self.documents[path].update(resolved)
        else:
            self.documents[path] = resolved

    async def get(self, path: str) -> StoredDocument | None:
        if path not in self.documents:
            return None
        return StoredDocument(
            id=path.rsplit("/", 1)[-1], path=path, data=copy.deepcopy(self.documents[path])
        )

    async def list_child_collections(self, document_path: str) -> list[str]:
        prefix = document_path + "/"
        names = {
            key[len(prefix):].split("/", 1)[0]
            for key in self.documents
            if key.startswith(prefix) and key[len(prefix):].count("/") >= 1
        }
        return sorted(names)

    async def list_documents(
        self, collection_path: str, limit: int | None = None
    ) -> list[StoredDocument]:
        docs = [
            StoredDocument(id=key.rsplit("/", 1)[-1], path=key, data=copy.deepcopy(data))
            for key, data in sorted(self.documents.items())
            if key.rsplit("/", 1)[0] == collection_path
        ]
        return docs[:limit] if limit else docs

    async def query(
        self,
        collection_path: str,
        field: str,
        op: str,
        value: Any,
        limit: int | None = None,
    ) -> list[StoredDocument]:
        if op != "==":
            raise NotImplementedError(f"In-memory store only supports '==', got {op!r}")
        matches = [
            doc
            for doc in await self.list_documents(collection_path)
            if field in doc.data and doc.data[field] == value
        ]
        return matches[:limit] if limit else matches

    async def set(self, path: str, data: dict[str, Any], merge: bool = False) -> None:
        self.calls.append(("set", path, merge))
        self._write(path, data, merge)

    async def delete(self, path: str) -> None:
        self.calls.append(("delete", path))
        self.documents.pop(path, None)

    async def commit_batch(self, operations: Sequence[WriteOperation]) -> None:
        if len(operations) > FIRESTORE_MAX_BATCH_WRITES:
            raise ValueError("batch too large")
        index = len(self.commit_sizes)
        self.calls.append(("commit", len(operations)))
        if self.fail_commit_at is not None and index == self.fail_commit_at:
            raise RuntimeError("UNAVAILABLE: simulated commit failure")
        self.commit_sizes.append(len(operations))
        for op in operations:
            if op.delete:
                self.documents.pop(op.path, None)
            else:
                self._write(op.path, op.data or {}, op.merge)

    def server_timestamp(self) -> Any:
        return self._sentinel
