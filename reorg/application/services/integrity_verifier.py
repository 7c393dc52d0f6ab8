"""Read-only verification of an organization's hierarchical structure."""

from __future__ import annotations

import asyncio
import logging

from reorg.application.dtos.reports import UserSample, VerificationReport
from reorg.application.interfaces.document_store import IDocumentStore
from reorg.core.constants import FIELD_ORGANIZATION_ID
from reorg.domain.collections import (
    COLLECTION_LEAVES,
    COLLECTION_LOCATION_SETTINGS,
    COLLECTION_PROJECTS,
    COLLECTION_SCHEDULES,
    COLLECTION_USER_GROUPS,
    COLLECTION_USERS,
    COLLECTION_WORK_LOCATIONS,
    join_path,
    org_collection_path,
    org_user_path,
    organization_path,
)
from reorg.domain.enums import WarningCode
from reorg.domain.exceptions import TenantNotFoundException
from reorg.domain.value_objects import LookupIndexEntry, ShapeWarning
from reorg.shared.telemetry.tracing import traced
from reorg.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)

_COUNTED_COLLECTIONS = (
    COLLECTION_USERS,
    COLLECTION_PROJECTS,
    COLLECTION_WORK_LOCATIONS,
    COLLECTION_USER_GROUPS,
)


class IntegrityVerifier:
    """Re-reads organizations/{orgId} after a migration and checks its shape.

    Only a missing organization is fatal (TenantNotFoundException); every
    other finding is a ShapeWarning on the report.
    """

    def __init__(
        self,
        store: IDocumentStore,
        user_sample_size: int = 10,
        lookup_sample_size: int = 5,
    ) -> None:
        self._store = store
        self.user_sample_size = user_sample_size
        self.lookup_sample_size = lookup_sample_size

    @traced("reorg.verify_hierarchy")
    async def verify(self, tenant_id: str) -> VerificationReport:
        org = await self._store.get(organization_path(tenant_id))
        if org is None:
            raise TenantNotFoundException(tenant_id)

        report = VerificationReport(
            tenant_id=tenant_id,
            tenant_name=org.data.get("name") or "Unknown",
            verified_at=utc_now(),
        )

        listings = await asyncio.gather(
            *(
                self._store.list_documents(org_collection_path(tenant_id, name))
                for name in _COUNTED_COLLECTIONS
            )
        )
        docs_by_collection = dict(zip(_COUNTED_COLLECTIONS, listings))
        report.counts = {name: len(docs) for name, docs in docs_by_collection.items()}

        for user in docs_by_collection[COLLECTION_USERS][: self.user_sample_size]:
            report.user_samples.append(await self._sample_user(tenant_id, user.id, user.data))

        await self._check_location_settings(tenant_id, report)
        await self._check_lookup_entries(tenant_id, report)
        return report

    async def _sample_user(self, tenant_id: str, user_id: str, data: dict) -> UserSample:
        user_path = org_user_path(tenant_id, user_id)
        schedules, leaves = await asyncio.gather(
            self._store.list_documents(join_path(user_path, COLLECTION_SCHEDULES), limit=1),
            self._store.list_documents(join_path(user_path, COLLECTION_LEAVES), limit=1),
        )
        return UserSample(
            id=user_id,
            name=data.get("name") or data.get("email") or user_id,
            has_schedules=bool(schedules),
            has_leaves=bool(leaves),
        )

    async def _check_location_settings(self, tenant_id: str, report: VerificationReport) -> None:
        collection_path = org_collection_path(tenant_id, COLLECTION_LOCATION_SETTINGS)
        settings_docs = await self._store.list_documents(collection_path)
        report.location_settings_count = len(settings_docs)
        if not settings_docs:
            report.warnings.append(
                ShapeWarning(
                    WarningCode.LOCATION_SETTINGS_MISSING,
                    "Organization has no location_settings documents",
                    collection_path,
                )
            )
            return

        canonical = next((d for d in settings_docs if d.id == tenant_id), None)
        report.has_canonical_settings = canonical is not None
        if canonical is None:
            # Another settings document may still serve as fallback.
            report.warnings.append(
                ShapeWarning(
                    WarningCode.CANONICAL_SETTINGS_MISSING,
                    f"No location_settings document keyed by '{tenant_id}'",
                    join_path(collection_path, tenant_id),
                )
            )
        effective = canonical or settings_docs[0]
        report.effective_settings_id = effective.id
        report.effective_settings_keys = sorted(effective.data)

    async def _check_lookup_entries(self, tenant_id: str, report: VerificationReport) -> None:
        entries = await self._store.query(
            COLLECTION_USERS,
            FIELD_ORGANIZATION_ID,
            "==",
            tenant_id,
            limit=self.lookup_sample_size,
        )
        report.lookup_entries_checked = len(entries)
        if not entries:
            report.warnings.append(
                ShapeWarning(
                    WarningCode.LOOKUP_ENTRIES_MISSING,
                    f"No top-level users lookup entries for organization '{tenant_id}'",
                    COLLECTION_USERS,
                )
            )
            return
        for entry in entries:
            missing = LookupIndexEntry.missing_fields(entry.data)
            if missing:
                report.lookup_shape_ok = False
                report.warnings.append(
                    ShapeWarning(
                        WarningCode.LOOKUP_SHAPE_INVALID,
                        f"Lookup entry is missing {', '.join(missing)}",
                        entry.path,
                    )
                )
