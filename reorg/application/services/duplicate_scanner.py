"""Read-only scan for organization users sharing an email."""

from __future__ import annotations

import logging
from collections import defaultdict

from reorg.application.dtos.reports import DuplicateGroup, DuplicateMember, DuplicateScanResult
from reorg.application.interfaces.document_store import IDocumentStore
from reorg.core.constants import FIELD_EMAIL
from reorg.domain.collections import COLLECTION_USERS, org_collection_path
from reorg.shared.telemetry.tracing import traced

logger = logging.getLogger(__name__)


def normalize_email(value: object) -> str:
    """Lowercase, trimmed email; "" for missing or non-string values."""
    return value.strip().lower() if isinstance(value, str) else ""


class DuplicateScanner:
    """Groups organizations/{orgId}/users by normalized email. Never writes."""

    def __init__(self, store: IDocumentStore) -> None:
        self._store = store

    @traced("reorg.scan_duplicates")
    async def scan(self, tenant_id: str) -> DuplicateScanResult:
        """Return groups of more than one user sharing an email, sorted by email.

        Users without an email are never grouped.
        """
        users = await self._store.list_documents(org_collection_path(tenant_id, COLLECTION_USERS))
        by_email: dict[str, list[DuplicateMember]] = defaultdict(list)
        for doc in users:
            email = normalize_email(doc.data.get(FIELD_EMAIL))
            if not email:
                continue
            name = doc.data.get("name") or doc.data.get("displayName") or ""
            by_email[email].append(DuplicateMember(id=doc.id, name=name, email=email))

        groups = [
            DuplicateGroup(email=email, members=tuple(members))
            for email, members in sorted(by_email.items())
            if len(members) > 1
        ]
        logger.debug("Scanned %s users in organization %s", len(users), tenant_id)
        return DuplicateScanResult(tenant_id=tenant_id, users_scanned=len(users), groups=groups)
