"""LookupIndexMaintainer unit tests: replacement, email preference, stale entry order."""

import pytest

from reorg.application.services.lookup_index import LookupIndexMaintainer
from tests.fakes import InMemoryDocumentStore


@pytest.mark.asyncio
async def test_reconcile_replaces_rich_flat_document_with_three_fields() -> None:
    """A rich flat user document is replaced by the three lookup fields."""
    store = InMemoryDocumentStore(
        {
            "users/u1": {"organizationId": "org1", "email": "a@x.com", "name": "Al", "role": "x"},
            "organizations/org1/users/u1": {"name": "Al"},
        }
    )
    result = await LookupIndexMaintainer(store).reconcile("org1", "u1")
    assert store.documents["users/u1"] == {
        "organizationId": "org1",
        "userId": "u1",
        "email": "a@x.com",
    }
    assert result.entry.email == "a@x.com"
    assert ("set", "users/u1", False) in store.calls


@pytest.mark.asyncio
async def test_email_prefers_current_entry_over_record_and_stale() -> None:
    """The target's own flat entry wins over every other email source."""
    store = InMemoryDocumentStore(
        {
            "users/u1": {"email": "source@x.com"},
            "users/u2": {"email": "target@x.com"},
            "organizations/org1/users/u2": {"email": "record@x.com"},
        }
    )
    result = await LookupIndexMaintainer(store).reconcile("org1", "u2", stale_user_id="u1")
    assert result.entry.email == "target@x.com"


@pytest.mark.asyncio
async def test_email_prefers_target_record_over_stale_entry() -> None:
    """Without a target entry, the target record beats the replaced source entry."""
    store = InMemoryDocumentStore(
        {
            "users/u1": {"email": "source@x.com"},
            "organizations/org1/users/u2": {"email": "record@x.com"},
        }
    )
    result = await LookupIndexMaintainer(store).reconcile("org1", "u2", stale_user_id="u1")
    assert result.entry.email == "record@x.com"
    assert store.documents["users/u2"]["email"] == "record@x.com"


@pytest.mark.asyncio
async def test_email_falls_back_to_stale_entry_last() -> None:
    """The stale source entry only supplies the email when the target has none."""
    store = InMemoryDocumentStore(
        {
            "users/u1": {"email": "source@x.com"},
            "organizations/org1/users/u2": {"name": "Bo"},
        }
    )
    result = await LookupIndexMaintainer(store).reconcile(
        "org1", "u2", stale_user_id="u1", delete_stale=False
    )
    assert result.entry.email == "source@x.com"


@pytest.mark.asyncio
async def test_email_defaults_to_empty_string() -> None:
    """Without any email source the entry stores an empty email."""
    store = InMemoryDocumentStore()
    result = await LookupIndexMaintainer(store).reconcile("org1", "u2")
    assert store.documents["users/u2"]["email"] == ""
    assert result.stale_path is None


@pytest.mark.asyncio
async def test_stale_entry_is_deleted_after_target_is_written() -> None:
    """The stale entry is deleted only after the target entry is written."""
    store = InMemoryDocumentStore({"users/u1": {"organizationId": "org1", "email": "a@x.com"}})
    result = await LookupIndexMaintainer(store).reconcile("org1", "u2", stale_user_id="u1")

    assert result.stale_deleted is True
    assert "users/u1" not in store.documents
    assert store.calls == [("set", "users/u2", False), ("delete", "users/u1")]


@pytest.mark.asyncio
async def test_stale_entry_kept_when_deletion_disabled() -> None:
    """delete_stale=False leaves the stale entry in place."""
    store = InMemoryDocumentStore({"users/u1": {"email": "a@x.com"}})
    result = await LookupIndexMaintainer(store).reconcile(
        "org1", "u2", stale_user_id="u1", delete_stale=False
    )
    assert result.stale_deleted is False
    assert "users/u1" in store.documents


@pytest.mark.asyncio
async def test_dry_run_reports_without_writing() -> None:
    """A dry run reports the stale path without writing or deleting."""
    store = InMemoryDocumentStore({"users/u1": {"email": "a@x.com"}})
    before = store.snapshot()
    result = await LookupIndexMaintainer(store).reconcile(
        "org1", "u2", stale_user_id="u1", dry_run=True
    )
    assert store.snapshot() == before
    assert store.calls == []
    assert result.stale_path == "users/u1"
    assert result.stale_deleted is False
