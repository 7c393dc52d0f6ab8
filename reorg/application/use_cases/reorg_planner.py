"""Reorganization use cases: flat-to-hierarchy migration and user merges.

Every stage is an idempotent, re-runnable step; nothing spans a
transaction. Copies complete before any deletion starts, and a failed
batch leaves earlier batches committed, so the recovery path is always
to run the same command again.
"""

from __future__ import annotations

import asyncio
import logging

from reorg.application.dtos.documents import StoredDocument, WriteOperation
from reorg.application.dtos.plan import CollectionCount, MergeOperation, ReorgPlan
from reorg.application.interfaces.document_store import IDocumentStore
from reorg.application.services.batch_writer import BatchWriter
from reorg.application.services.document_merger import DocumentMerger
from reorg.application.services.lookup_index import LookupIndexMaintainer
from reorg.application.services.subcollection_copier import SubcollectionCopier
from reorg.core.constants import (
    DEFAULT_BATCH_SIZE,
    FIELD_MIGRATED_AT,
    FIELD_ORGANIZATION_ID,
)
from reorg.domain.collections import (
    COLLECTION_LOCATION_SETTINGS,
    COLLECTION_USERS,
    TENANT_SCOPED_COLLECTIONS,
    flat_user_path,
    join_path,
    org_collection_path,
    org_user_path,
    organization_path,
)
from reorg.domain.enums import PlanAction
from reorg.domain.exceptions import TenantNotFoundException, UserNotFoundException
from reorg.domain.value_objects import LookupIndexEntry
from reorg.shared.telemetry.tracing import add_span_attributes, traced

logger = logging.getLogger(__name__)


class ReorgPlanner:
    """Drives migrations and merges over an IDocumentStore.

    Each public method takes its own dry_run flag. A dry run reads what it
    needs, performs no write, delete or lookup reconciliation, and returns
    the plan a committed run would execute.
    """

    def __init__(
        self,
        store: IDocumentStore,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_writer: BatchWriter | None = None,
        merger: DocumentMerger | None = None,
        copier: SubcollectionCopier | None = None,
        lookup_index: LookupIndexMaintainer | None = None,
    ) -> None:
        self._store = store
        self._batch_writer = batch_writer or BatchWriter(store, batch_size)
        self._merger = merger or DocumentMerger()
        self._copier = copier or SubcollectionCopier(store, self._batch_writer)
        self._lookup_index = lookup_index or LookupIndexMaintainer(store)

    async def require_tenant(self, tenant_id: str) -> StoredDocument:
        """Return the organization document or raise TenantNotFoundException."""
        org = await self._store.get(organization_path(tenant_id))
        if org is None:
            raise TenantNotFoundException(tenant_id)
        return org

    # ------------------------------------------------------------------
    # Flat -> hierarchical migration
    # ------------------------------------------------------------------

    @traced("reorg.migrate_to_hierarchy")
    async def migrate_to_hierarchy(self, tenant_id: str, *, dry_run: bool = False) -> ReorgPlan:
        """Copy the organization's flat documents under organizations/{tenant_id}.

        Users are copied with their nested collections and the flat user
        document is collapsed to a lookup entry. Other collections are
        copied only; the flat copies stay until a separate cleanup.
        """
        org = await self.require_tenant(tenant_id)
        logger.info("Organization found: %s", org.data.get("name") or "Unknown")
        logger.info("Dry run: %s", "YES" if dry_run else "NO")

        plan = ReorgPlan(operation="migrate-to-hierarchy", dry_run=dry_run, tenant_id=tenant_id)
        plan.counts[COLLECTION_USERS] = await self._migrate_users(tenant_id, plan, dry_run)
        for collection in TENANT_SCOPED_COLLECTIONS:
            plan.counts[collection] = await self._migrate_collection(
                tenant_id, collection, plan, dry_run
            )
        add_span_attributes(documents_total=sum(plan.counts.values()))
        return plan

    async def _migrate_users(self, tenant_id: str, plan: ReorgPlan, dry_run: bool) -> int:
        logger.info("=== Migrating users to %s ===", org_collection_path(tenant_id, COLLECTION_USERS))
        users = await self._store.query(COLLECTION_USERS, FIELD_ORGANIZATION_ID, "==", tenant_id)
        if not users:
            logger.info("No users found.")
            return 0
        logger.info("Found %s users.", len(users))

        for user in users:
            await self._migrate_user(tenant_id, user, plan, dry_run)

        if dry_run:
            logger.info("[DRY RUN] Would migrate %s users with their subcollections.", len(users))
        else:
            logger.info(
                "Migrated %s users with subcollections to %s",
                len(users),
                org_collection_path(tenant_id, COLLECTION_USERS),
            )
        return len(users)

    async def _migrate_user(
        self, tenant_id: str, user: StoredDocument, plan: ReorgPlan, dry_run: bool
    ) -> None:
        target_path = org_user_path(tenant_id, user.id)
        target = await self._store.get(target_path)

        if target is not None and LookupIndexEntry.has_lookup_shape(user.data):
            # Already collapsed by an earlier run; the hierarchical record is canonical now.
            logger.info("  - %s already migrated; keeping %s", user.path, target_path)
            plan.add(PlanAction.SKIP, target_path)
        else:
            result = self._merger.merge(
                user.data,
                target.data if target else None,
                user_id=user.id,
                organization_id=tenant_id,
            )
            if not dry_run:
                await self._store.set(target_path, result.payload, merge=True)
            plan.add(PlanAction.MERGE_DOCUMENT, target_path, fields=result.fields)

        self._record_copies(
            plan,
            target_path,
            await self._copier.copy(user.path, target_path, dry_run=dry_run),
        )
        reconciled = await self._lookup_index.reconcile(tenant_id, user.id, dry_run=dry_run)
        plan.add(PlanAction.WRITE_LOOKUP, reconciled.path)

    async def _migrate_collection(
        self, tenant_id: str, collection: str, plan: ReorgPlan, dry_run: bool
    ) -> int:
        target_collection = org_collection_path(tenant_id, collection)
        logger.info("=== Migrating %s to %s ===", collection, target_collection)
        docs = await self._store.query(collection, FIELD_ORGANIZATION_ID, "==", tenant_id)
        if not docs:
            logger.info("No documents found in %s.", collection)
            return 0
        logger.info("Found %s documents in %s.", len(docs), collection)

        if dry_run:
            logger.info("[DRY RUN] Would migrate %s docs.", len(docs))
        else:
            await self._batch_writer.commit(
                WriteOperation.put(join_path(target_collection, doc.id), doc.data, merge=True)
                for doc in docs
            )
            logger.info("Migrated %s documents to %s", len(docs), target_collection)
        plan.add(PlanAction.COPY_COLLECTION, target_collection, count=len(docs))
        return len(docs)

    # ------------------------------------------------------------------
    # User merges
    # ------------------------------------------------------------------

    @traced("reorg.merge_org_user")
    async def merge_org_user(self, op: MergeOperation) -> ReorgPlan:
        """Merge organizations/{t}/users/{source} into .../users/{target}.

        Then reconcile the target's flat lookup entry (removing the source's
        own entry when deletion is enabled) and optionally cascade-delete the
        source user's nested collections and document.
        """
        if op.tenant_id is None:
            raise ValueError("merge_org_user requires a tenant_id")
        tenant_id = op.tenant_id
        await self.require_tenant(tenant_id)

        plan = ReorgPlan(operation="merge-org-user", dry_run=op.dry_run, tenant_id=tenant_id)
        source_path = org_user_path(tenant_id, op.source_user_id)
        target_path = org_user_path(tenant_id, op.target_user_id)
        logger.info(
            "Merging org user '%s' -> '%s' in org '%s'",
            op.source_user_id,
            op.target_user_id,
            tenant_id,
        )
        await self._merge_records(
            op, plan, source_path, target_path, organization_id=tenant_id
        )

        reconciled = await self._lookup_index.reconcile(
            tenant_id,
            op.target_user_id,
            stale_user_id=op.source_user_id,
            delete_stale=op.delete_source,
            dry_run=op.dry_run,
        )
        plan.add(PlanAction.WRITE_LOOKUP, reconciled.path)
        if reconciled.stale_path:
            plan.add(PlanAction.DELETE_LOOKUP, reconciled.stale_path)

        await self._delete_source(op, plan, source_path)
        return plan

    @traced("reorg.merge_user")
    async def merge_user(self, op: MergeOperation) -> ReorgPlan:
        """Merge flat users/{source} into users/{target} (pre-migration layout).

        Only userId is normalized. No lookup reconciliation: the flat
        document is the record itself, and deleting the source removes its
        entry.
        """
        plan = ReorgPlan(operation="merge-user", dry_run=op.dry_run)
        source_path = flat_user_path(op.source_user_id)
        target_path = flat_user_path(op.target_user_id)
        logger.info("Merging user '%s' -> '%s'", op.source_user_id, op.target_user_id)
        await self._merge_records(op, plan, source_path, target_path, organization_id=None)
        await self._delete_source(op, plan, source_path)
        return plan

    async def _merge_records(
        self,
        op: MergeOperation,
        plan: ReorgPlan,
        source_path: str,
        target_path: str,
        *,
        organization_id: str | None,
    ) -> None:
        source, target = await asyncio.gather(
            self._store.get(source_path), self._store.get(target_path)
        )
        if source is None:
            raise UserNotFoundException(op.source_user_id, source_path)
        if target is None:
            logger.warning("Target user %s does not exist yet; it will be created.", target_path)
        logger.info(
            "Dry run: %s | Delete source after copy: %s",
            "YES" if op.dry_run else "NO",
            "YES" if op.delete_source else "NO",
        )

        result = self._merger.merge(
            source.data,
            target.data if target else None,
            user_id=op.target_user_id,
            organization_id=organization_id,
        )
        if op.dry_run:
            logger.info("[DRY RUN] Would merge top-level fields: %s", list(result.fields))
        else:
            await self._store.set(target_path, result.payload, merge=True)
            logger.info("Merged top-level fields into target.")
        kept = sorted(set(result.merged) - set(result.payload))
        if kept:
            logger.info("Target-only fields kept: %s", kept)
        plan.add(PlanAction.MERGE_DOCUMENT, target_path, fields=result.fields)

        self._record_copies(
            plan,
            target_path,
            await self._copier.copy(source_path, target_path, dry_run=op.dry_run),
        )

    async def _delete_source(self, op: MergeOperation, plan: ReorgPlan, source_path: str) -> None:
        if not op.delete_source:
            logger.info("Skipped deletion step.")
            return
        if not op.dry_run:
            logger.info("Deleting source user subcollections and document...")
        for deleted in await self._copier.delete_all(source_path, dry_run=op.dry_run):
            plan.add(
                PlanAction.DELETE_COLLECTION,
                join_path(source_path, deleted.name),
                count=deleted.count,
            )
        if op.dry_run:
            logger.info("[DRY RUN] Would delete source user doc %s.", source_path)
        else:
            await self._store.delete(source_path)
            logger.info("Deleted source user doc '%s'.", source_path)
        plan.add(PlanAction.DELETE_DOCUMENT, source_path)

    # ------------------------------------------------------------------
    # Location settings
    # ------------------------------------------------------------------

    @traced("reorg.migrate_location_settings")
    async def migrate_location_settings(
        self, tenant_id: str, *, dry_run: bool = False
    ) -> ReorgPlan:
        """Copy location_settings/{tenant_id} to organizations/{tenant_id}/location_settings/{tenant_id}.

        Covers the settings document that has no organizationId field and is
        therefore skipped by migrate_to_hierarchy. A missing source is not an
        error; there is simply nothing to migrate.
        """
        await self.require_tenant(tenant_id)
        plan = ReorgPlan(operation="migrate-location-settings", dry_run=dry_run, tenant_id=tenant_id)
        source_path = join_path(COLLECTION_LOCATION_SETTINGS, tenant_id)
        target_path = join_path(org_collection_path(tenant_id, COLLECTION_LOCATION_SETTINGS), tenant_id)

        source = await self._store.get(source_path)
        if source is None:
            logger.info("No top-level %s to migrate.", source_path)
            plan.add(PlanAction.SKIP, source_path, count=0)
            plan.counts[COLLECTION_LOCATION_SETTINGS] = 0
            return plan

        payload = source.to_dict()
        payload[FIELD_ORGANIZATION_ID] = tenant_id
        payload[FIELD_MIGRATED_AT] = self._store.server_timestamp()
        if dry_run:
            logger.info("[DRY RUN] Would copy %s -> %s", source_path, target_path)
        else:
            await self._store.set(target_path, payload, merge=True)
            logger.info("Copied %s -> %s", source_path, target_path)
        plan.add(PlanAction.MERGE_DOCUMENT, target_path, fields=tuple(payload))
        plan.counts[COLLECTION_LOCATION_SETTINGS] = 1
        return plan

    @staticmethod
    def _record_copies(plan: ReorgPlan, target_path: str, copies: list[CollectionCount]) -> None:
        for copied in copies:
            plan.add(
                PlanAction.COPY_COLLECTION,
                join_path(target_path, copied.name),
                count=copied.count,
            )
