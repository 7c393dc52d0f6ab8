"""Domain enumerations for the reorganization toolkit."""

from enum import Enum


class PlanAction(str, Enum):
    """Kind of store effect recorded in a reorganization plan.

    The same values describe what a dry run would do and what a
    committed run did.
    """

    MERGE_DOCUMENT = "merge_document"
    COPY_COLLECTION = "copy_collection"
    DELETE_COLLECTION = "delete_collection"
    DELETE_DOCUMENT = "delete_document"
    WRITE_LOOKUP = "write_lookup"
    DELETE_LOOKUP = "delete_lookup"
    SKIP = "skip"


class WarningCode(str, Enum):
    """Non-fatal integrity findings reported by verification."""

    LOCATION_SETTINGS_MISSING = "LOCATION_SETTINGS_MISSING"
    CANONICAL_SETTINGS_MISSING = "CANONICAL_SETTINGS_MISSING"
    LOOKUP_SHAPE_INVALID = "LOOKUP_SHAPE_INVALID"
    LOOKUP_ENTRIES_MISSING = "LOOKUP_ENTRIES_MISSING"
