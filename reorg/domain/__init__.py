"""Domain layer: collection layout, value objects, enums, and exceptions.

No dependencies on infrastructure. Used by application and
infrastructure layers.
"""

from reorg.domain.enums import PlanAction, WarningCode
from reorg.domain.exceptions import (
    CommitFailedException,
    ReorgException,
    ResourceNotFoundException,
    StoreNotConfiguredException,
    TenantNotFoundException,
    UsageException,
    UserNotFoundException,
)
from reorg.domain.value_objects import LookupIndexEntry, ShapeWarning

__all__ = [
    # Enums
    "PlanAction",
    "WarningCode",
    # Exceptions
    "CommitFailedException",
    "ReorgException",
    "ResourceNotFoundException",
    "StoreNotConfiguredException",
    "TenantNotFoundException",
    "UsageException",
    "UserNotFoundException",
    # Value objects
    "LookupIndexEntry",
    "ShapeWarning",
]
