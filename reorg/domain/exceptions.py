"""Domain exceptions for the reorganization toolkit.

Defines the failures a command can end with. Scripts map them to exit
codes and stderr messages in scripts/_cli.py.
"""

from typing import Any


class ReorgException(Exception):
    """Base exception for all reorganization errors.

    All custom exceptions inherit from this class so scripts can report
    them consistently using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. resource_id, group_index).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class UsageException(ReorgException):
    """Raised when command arguments are missing or malformed (before any I/O)."""

    def __init__(self, message: str, usage: str | None = None) -> None:
        """Initialize with message and optional usage line.

        Args:
            message: Description of what is wrong with the arguments.
            usage: Usage line to print on stderr.
        """
        details = {"usage": usage} if usage else {}
        super().__init__(message, "USAGE_ERROR", details)
        self.usage = usage


class ResourceNotFoundException(ReorgException):
    """Raised when a required document is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        error_code: str = "RESOURCE_NOT_FOUND",
        path: str | None = None,
    ) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'organization', 'user').
            resource_id: The ID that was not found.
            error_code: Machine-readable code for subclasses.
            path: Optional full document path that was read.
        """
        details: dict[str, Any] = {
            "resource_type": resource_type,
            "resource_id": resource_id,
        }
        if path:
            details["path"] = path
        super().__init__(
            f"{resource_type} not found: {path or resource_id}",
            error_code,
            details,
        )


class TenantNotFoundException(ResourceNotFoundException):
    """Raised when the organization document does not exist."""

    def __init__(self, tenant_id: str) -> None:
        """Initialize with the missing organization identifier.

        Args:
            tenant_id: The organization ID that was not found.
        """
        super().__init__(
            "Organization",
            tenant_id,
            "TENANT_NOT_FOUND",
            path=f"organizations/{tenant_id}",
        )
        self.tenant_id = tenant_id


class UserNotFoundException(ResourceNotFoundException):
    """Raised when the source user of a merge does not exist."""

    def __init__(self, user_id: str, path: str) -> None:
        """Initialize with the missing user ID and the path that was read.

        Args:
            user_id: The user ID that was not found.
            path: Document path of the user record.
        """
        super().__init__("User", user_id, "USER_NOT_FOUND", path=path)
        self.user_id = user_id


class CommitFailedException(ReorgException):
    """Raised when the store rejects a batch commit.

    Groups committed before group_index stay committed; re-running the
    same command converges because every write uses merge semantics.
    """

    def __init__(self, group_index: int, cause: BaseException) -> None:
        """Initialize with the failing group and the underlying error.

        Args:
            group_index: Zero-based index of the group that failed.
            cause: Exception raised by the store.
        """
        super().__init__(
            f"Batch commit failed at group {group_index}: {cause}",
            "COMMIT_FAILED",
            {"group_index": group_index, "cause": str(cause)},
        )
        self.group_index = group_index
        self.cause = cause


class StoreNotConfiguredException(ReorgException):
    """Raised when no Firestore credentials could be resolved."""

    def __init__(self, message: str = "Firestore is not configured") -> None:
        super().__init__(message, "STORE_NOT_CONFIGURED")
