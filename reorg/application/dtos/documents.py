"""DTOs exchanged with the document-store port."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class StoredDocument:
    """Snapshot of a document (id + path + field mapping)."""

    id: str
    path: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return a shallow copy of the fields, safe to mutate."""
        return dict(self.data)


@dataclass(frozen=True)
class WriteOperation:
    """One write or delete inside a batch commit.

    Use WriteOperation.put() / WriteOperation.remove() rather than the
    constructor so set and delete operations cannot be mixed up.
    """

    path: str
    data: dict[str, Any] | None = None
    merge: bool = True
    delete: bool = False

    @classmethod
    def put(cls, path: str, data: dict[str, Any], merge: bool = True) -> WriteOperation:
        return cls(path=path, data=dict(data), merge=merge)

    @classmethod
    def remove(cls, path: str) -> WriteOperation:
        return cls(path=path, delete=True)
