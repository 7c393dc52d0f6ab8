"""Top-level field merge of one document into another."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from reorg.core.constants import FIELD_ORGANIZATION_ID, FIELD_USER_ID


@dataclass(frozen=True)
class MergeResult:
    """Payload to write with merge=True, and the document it will produce."""

    payload: dict[str, Any]
    merged: dict[str, Any]
    rewritten_fields: tuple[str, ...] = field(default=())

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self.payload)


class DocumentMerger:
    """Computes merge writes: source fields overwrite, target-only fields survive.

    Nested maps are replaced as a whole (top-level merge only), which is
    what a store merge write with the payload's top-level keys produces.
    Embedded identity fields (userId, organizationId) that point anywhere
    but the destination are rewritten first so stale self-references do
    not survive a move.
    """

    def __init__(
        self,
        user_field: str = FIELD_USER_ID,
        organization_field: str = FIELD_ORGANIZATION_ID,
    ) -> None:
        self.user_field = user_field
        self.organization_field = organization_field

    def normalize_identity(
        self,
        data: Mapping[str, Any],
        *,
        user_id: str | None = None,
        organization_id: str | None = None,
    ) -> tuple[dict[str, Any], tuple[str, ...]]:
        """Return a copy of data with stale identity fields rewritten, and which ones changed.

        A field is only rewritten when it is present and non-empty; the
        merge never introduces identity fields the source did not carry.
        """
        out = dict(data)
        rewritten: list[str] = []
        for name, wanted in (
            (self.user_field, user_id),
            (self.organization_field, organization_id),
        ):
            if wanted is not None and out.get(name) and out[name] != wanted:
                out[name] = wanted
                rewritten.append(name)
        return out, tuple(rewritten)

    def merge(
        self,
        source: Mapping[str, Any],
        target: Mapping[str, Any] | None,
        *,
        user_id: str | None = None,
        organization_id: str | None = None,
    ) -> MergeResult:
        """Merge source into target (target may be None when it does not exist yet)."""
        payload, rewritten = self.normalize_identity(
            source, user_id=user_id, organization_id=organization_id
        )
        merged = dict(target or {})
        merged.update(payload)
        return MergeResult(payload=payload, merged=merged, rewritten_fields=rewritten)
