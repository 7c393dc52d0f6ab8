"""DTOs for read-only scans: duplicate groups and verification reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from reorg.domain.value_objects import ShapeWarning


@dataclass(frozen=True)
class DuplicateMember:
    id: str
    name: str
    email: str


@dataclass(frozen=True)
class DuplicateGroup:
    """Users under one organization sharing a case-normalized email."""

    email: str
    members: tuple[DuplicateMember, ...]

    @property
    def size(self) -> int:
        return len(self.members)


@dataclass(kw_only=True)
class DuplicateScanResult:
    tenant_id: str
    users_scanned: int
    groups: list[DuplicateGroup] = field(default_factory=list)

    def group_for(self, email: str) -> DuplicateGroup | None:
        """Return the duplicate group for an email (case-insensitive), if any."""
        key = email.strip().lower()
        for group in self.groups:
            if group.email == key:
                return group
        return None


@dataclass(frozen=True)
class UserSample:
    """Nested-collection presence for one sampled organization user."""

    id: str
    name: str
    has_schedules: bool
    has_leaves: bool


@dataclass(kw_only=True)
class VerificationReport:
    """Structured result of verifying one organization's hierarchy."""

    tenant_id: str
    tenant_name: str
    verified_at: datetime
    counts: dict[str, int] = field(default_factory=dict)
    user_samples: list[UserSample] = field(default_factory=list)
    location_settings_count: int = 0
    has_canonical_settings: bool = False
    effective_settings_id: str | None = None
    effective_settings_keys: list[str] = field(default_factory=list)
    lookup_entries_checked: int = 0
    lookup_shape_ok: bool = True
    warnings: list[ShapeWarning] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when no warnings were recorded."""
        return not self.warnings
