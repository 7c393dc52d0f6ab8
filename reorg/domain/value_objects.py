"""Domain value objects for the reorganization toolkit.

Value objects are immutable and have no identity, only value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from reorg.core.constants import (
    FIELD_EMAIL,
    FIELD_ORGANIZATION_ID,
    FIELD_USER_ID,
    LOOKUP_FIELDS,
)
from reorg.domain.enums import WarningCode


@dataclass(frozen=True)
class LookupIndexEntry:
    """Flat, organization-agnostic lookup document stored at users/{userId}.

    Exactly three fields are persisted: organizationId, userId, email.
    """

    organization_id: str
    user_id: str
    email: str = ""

    def to_document(self) -> dict[str, str]:
        """Return the canonical three-field document body."""
        return {
            FIELD_ORGANIZATION_ID: self.organization_id,
            FIELD_USER_ID: self.user_id,
            FIELD_EMAIL: self.email,
        }

    @staticmethod
    def has_lookup_shape(data: Mapping[str, Any]) -> bool:
        """True when a document carries no fields beyond the lookup fields."""
        return set(data).issubset(LOOKUP_FIELDS)

    @staticmethod
    def missing_fields(data: Mapping[str, Any]) -> list[str]:
        """Return lookup fields that are absent or empty in data."""
        return [name for name in LOOKUP_FIELDS if not data.get(name)]


@dataclass(frozen=True)
class ShapeWarning:
    """Non-fatal finding accumulated into a verification report."""

    code: WarningCode
    message: str
    path: str | None = None

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"
