"""Domain exceptions, value objects and path builders."""

import pytest

from reorg.application.dtos.plan import MergeOperation, ReorgPlan
from reorg.domain.collections import (
    flat_user_path,
    join_path,
    org_collection_path,
    org_user_path,
)
from reorg.domain.enums import PlanAction, WarningCode
from reorg.domain.exceptions import (
    CommitFailedException,
    ReorgException,
    TenantNotFoundException,
    UsageException,
    UserNotFoundException,
)
from reorg.domain.value_objects import LookupIndexEntry, ShapeWarning


def test_reorg_exception_defaults_error_code_to_class_name() -> None:
    """error_code falls back to the class name."""
    exc = ReorgException("boom")
    assert exc.message == "boom"
    assert exc.error_code == "ReorgException"
    assert exc.details == {}


def test_tenant_not_found_carries_path_and_code() -> None:
    """TenantNotFoundException names the organization path."""
    exc = TenantNotFoundException("org9")
    assert exc.error_code == "TENANT_NOT_FOUND"
    assert exc.details["path"] == "organizations/org9"
    assert exc.tenant_id == "org9"
    assert "organizations/org9" in exc.message


def test_user_not_found_and_usage_codes() -> None:
    """User and usage errors carry their machine-readable codes."""
    assert UserNotFoundException("u1", "users/u1").error_code == "USER_NOT_FOUND"
    usage = UsageException("missing --org-id", usage="usage: x")
    assert usage.error_code == "USAGE_ERROR"
    assert usage.details == {"usage": "usage: x"}


def test_commit_failed_records_group_and_cause() -> None:
    """CommitFailedException records the failing group and its cause."""
    exc = CommitFailedException(2, RuntimeError("UNAVAILABLE"))
    assert exc.details == {"group_index": 2, "cause": "UNAVAILABLE"}
    assert isinstance(exc, ReorgException)


def test_path_builders() -> None:
    """Path builders produce flat and hierarchical paths and reject empty segments."""
    assert org_user_path("org1", "u1") == "organizations/org1/users/u1"
    assert org_collection_path("org1", "projects") == "organizations/org1/projects"
    assert flat_user_path("u1") == "users/u1"
    with pytest.raises(ValueError):
        join_path("users", "")


def test_lookup_entry_shape_helpers() -> None:
    """Lookup entries serialize to three fields and shape checks spot extras and gaps."""
    entry = LookupIndexEntry("org1", "u1", "a@x.com")
    assert entry.to_document() == {"organizationId": "org1", "userId": "u1", "email": "a@x.com"}
    assert LookupIndexEntry.has_lookup_shape(entry.to_document())
    assert not LookupIndexEntry.has_lookup_shape({"organizationId": "org1", "name": "Al"})
    assert LookupIndexEntry.missing_fields({"organizationId": "org1", "email": ""}) == [
        "userId",
        "email",
    ]


def test_shape_warning_str() -> None:
    """Warnings render as [CODE] message."""
    warning = ShapeWarning(WarningCode.LOOKUP_ENTRIES_MISSING, "none found")
    assert str(warning) == "[LOOKUP_ENTRIES_MISSING] none found"


@pytest.mark.parametrize(
    "source,target",
    [("", "u2"), ("u1", ""), ("u1", "u1")],
)
def test_merge_operation_rejects_bad_ids(source: str, target: str) -> None:
    """Empty or identical user IDs are rejected."""
    with pytest.raises(ValueError):
        MergeOperation(source_user_id=source, target_user_id=target)


def test_plan_totals() -> None:
    """Plan totals sum written and deleted documents by action kind."""
    plan = ReorgPlan(operation="merge-user", dry_run=True)
    plan.add(PlanAction.MERGE_DOCUMENT, "users/u2", fields=["name"])
    plan.add(PlanAction.COPY_COLLECTION, "users/u2/schedules", count=3)
    plan.add(PlanAction.DELETE_COLLECTION, "users/u1/schedules", count=3)
    plan.add(PlanAction.DELETE_DOCUMENT, "users/u1")
    assert plan.documents_written == 4
    assert plan.documents_deleted == 4
    assert plan.actions[1].describe() == "copy_collection users/u2/schedules (3 docs)"
