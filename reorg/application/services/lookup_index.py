"""Flat lookup index maintenance (users/{userId} -> organization)."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from reorg.application.interfaces.document_store import IDocumentStore
from reorg.core.constants import FIELD_EMAIL
from reorg.domain.collections import flat_user_path, org_user_path
from reorg.domain.value_objects import LookupIndexEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileResult:
    """Entry written (or that would be written) and whether a stale entry was removed."""

    entry: LookupIndexEntry
    path: str
    stale_path: str | None = None
    stale_deleted: bool = False


class LookupIndexMaintainer:
    """Keeps users/{userId} consistent with organizations/{orgId}/users/{userId}.

    The entry is written with full replacement, never merge: once a flat
    user document becomes a lookup entry it must not keep fields from its
    previous shape.
    """

    def __init__(self, store: IDocumentStore) -> None:
        self._store = store

    async def reconcile(
        self,
        tenant_id: str,
        user_id: str,
        *,
        stale_user_id: str | None = None,
        delete_stale: bool = True,
        dry_run: bool = False,
    ) -> ReconcileResult:
        """Write the canonical lookup entry for user_id under tenant_id.

        Email preference: current flat entry, then the organization user
        record, then the stale entry being replaced (if any), else "".
        A stale entry (the merge source's own users/{stale_user_id}) is
        deleted only after the target entry is written, so there is never
        a moment with no valid entry.
        """
        path = flat_user_path(user_id)
        stale_path = flat_user_path(stale_user_id) if stale_user_id else None
        reads = [self._store.get(path), self._store.get(org_user_path(tenant_id, user_id))]
        if stale_path:
            reads.append(self._store.get(stale_path))
        current, record, *rest = await asyncio.gather(*reads)
        stale = rest[0] if rest else None

        email = ""
        for doc in (current, record, stale):
            if doc is not None and doc.data.get(FIELD_EMAIL):
                email = doc.data[FIELD_EMAIL]
                break
        entry = LookupIndexEntry(organization_id=tenant_id, user_id=user_id, email=email)

        remove_stale = stale is not None and delete_stale
        if dry_run:
            logger.info(
                "[DRY RUN] Would ensure %s contains { organizationId: '%s', userId: '%s', email: <preserved> }",
                path,
                tenant_id,
                user_id,
            )
            if remove_stale:
                logger.info("[DRY RUN] Would delete top-level lookup %s.", stale_path)
            return ReconcileResult(entry, path, stale_path if remove_stale else None, False)

        await self._store.set(path, entry.to_document(), merge=False)
        if remove_stale:
            await self._store.delete(stale_path)
            logger.info("- Deleted top-level lookup %s.", stale_path)
        return ReconcileResult(entry, path, stale_path if remove_stale else None, remove_stale)
