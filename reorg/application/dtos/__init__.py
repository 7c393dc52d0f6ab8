"""DTOs for reorganization use cases (plain dataclasses, no store types)."""

from reorg.application.dtos.documents import StoredDocument, WriteOperation
from reorg.application.dtos.plan import (
    CollectionCount,
    MergeOperation,
    PlannedAction,
    ReorgPlan,
)
from reorg.application.dtos.reports import (
    DuplicateGroup,
    DuplicateMember,
    DuplicateScanResult,
    UserSample,
    VerificationReport,
)

__all__ = [
    "CollectionCount",
    "DuplicateGroup",
    "DuplicateMember",
    "DuplicateScanResult",
    "MergeOperation",
    "PlannedAction",
    "ReorgPlan",
    "StoredDocument",
    "UserSample",
    "VerificationReport",
    "WriteOperation",
]
