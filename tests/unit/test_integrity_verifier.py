"""IntegrityVerifier unit tests."""

import pytest

from reorg.application.services.integrity_verifier import IntegrityVerifier
from reorg.domain.enums import WarningCode
from reorg.domain.exceptions import TenantNotFoundException
from tests.fakes import InMemoryDocumentStore

ORG = "organizations/org1"


def _healthy() -> dict:
    return {
        ORG: {"name": "Acme"},
        f"{ORG}/users/u1": {"name": "Al", "email": "a@x.com"},
        f"{ORG}/users/u1/schedules/s1": {"day": "mon"},
        f"{ORG}/users/u2": {"email": "b@x.com"},
        f"{ORG}/users/u2/leaves/l1": {"kind": "sick"},
        f"{ORG}/projects/p1": {"name": "P"},
        f"{ORG}/work_locations/w1": {},
        f"{ORG}/location_settings/org1": {"radius": 100, "enabled": True},
        "users/u1": {"organizationId": "org1", "userId": "u1", "email": "a@x.com"},
        "users/u2": {"organizationId": "org1", "userId": "u2", "email": "b@x.com"},
    }


@pytest.mark.asyncio
async def test_missing_tenant_raises() -> None:
    """Verifying a missing organization raises TenantNotFoundException."""
    with pytest.raises(TenantNotFoundException) as exc_info:
        await IntegrityVerifier(InMemoryDocumentStore()).verify("nope")
    assert exc_info.value.tenant_id == "nope"


@pytest.mark.asyncio
async def test_healthy_hierarchy_reports_counts_and_no_warnings() -> None:
    """A fully migrated organization verifies without warnings."""
    store = InMemoryDocumentStore(_healthy())
    report = await IntegrityVerifier(store).verify("org1")

    assert report.ok
    assert report.tenant_name == "Acme"
    assert report.counts == {"users": 2, "projects": 1, "work_locations": 1, "user_groups": 0}
    samples = {s.id: s for s in report.user_samples}
    assert samples["u1"].name == "Al"
    assert samples["u1"].has_schedules and not samples["u1"].has_leaves
    assert samples["u2"].name == "b@x.com"
    assert samples["u2"].has_leaves and not samples["u2"].has_schedules
    assert report.has_canonical_settings
    assert report.effective_settings_id == "org1"
    assert report.effective_settings_keys == ["enabled", "radius"]
    assert report.lookup_entries_checked == 2
    assert report.lookup_shape_ok


@pytest.mark.asyncio
async def test_user_sample_is_bounded() -> None:
    """Only user_sample_size users are sampled for nested collections."""
    docs = {ORG: {"name": "Acme"}}
    docs.update({f"{ORG}/users/u{i:02d}": {"name": f"U{i}"} for i in range(15)})
    report = await IntegrityVerifier(InMemoryDocumentStore(docs), user_sample_size=10).verify("org1")
    assert report.counts["users"] == 15
    assert len(report.user_samples) == 10


@pytest.mark.asyncio
async def test_missing_canonical_settings_is_a_warning_with_fallback() -> None:
    """Another settings document serves as fallback with a warning."""
    docs = _healthy()
    del docs[f"{ORG}/location_settings/org1"]
    docs[f"{ORG}/location_settings/other"] = {"radius": 50}
    report = await IntegrityVerifier(InMemoryDocumentStore(docs)).verify("org1")

    assert not report.ok
    assert [w.code for w in report.warnings] == [WarningCode.CANONICAL_SETTINGS_MISSING]
    assert report.effective_settings_id == "other"
    assert report.has_canonical_settings is False


@pytest.mark.asyncio
async def test_no_location_settings_at_all() -> None:
    """An organization without settings gets a LOCATION_SETTINGS_MISSING warning."""
    docs = _healthy()
    del docs[f"{ORG}/location_settings/org1"]
    report = await IntegrityVerifier(InMemoryDocumentStore(docs)).verify("org1")
    assert [w.code for w in report.warnings] == [WarningCode.LOCATION_SETTINGS_MISSING]
    assert report.effective_settings_id is None


@pytest.mark.asyncio
async def test_lookup_entry_with_empty_field_is_flagged() -> None:
    """A lookup entry with an empty field fails the shape check."""
    docs = _healthy()
    docs["users/u2"] = {"organizationId": "org1", "userId": "u2", "email": ""}
    report = await IntegrityVerifier(InMemoryDocumentStore(docs)).verify("org1")

    assert report.lookup_shape_ok is False
    invalid = [w for w in report.warnings if w.code is WarningCode.LOOKUP_SHAPE_INVALID]
    assert len(invalid) == 1
    assert invalid[0].path == "users/u2"
    assert "email" in invalid[0].message


@pytest.mark.asyncio
async def test_no_lookup_entries_is_a_warning() -> None:
    """An organization without lookup entries is reported."""
    docs = {k: v for k, v in _healthy().items() if not k.startswith("users/")}
    report = await IntegrityVerifier(InMemoryDocumentStore(docs)).verify("org1")
    assert [w.code for w in report.warnings] == [WarningCode.LOOKUP_ENTRIES_MISSING]


@pytest.mark.asyncio
async def test_verify_never_mutates() -> None:
    """Verification only reads."""
    store = InMemoryDocumentStore(_healthy())
    before = store.snapshot()
    await IntegrityVerifier(store).verify("org1")
    assert store.snapshot() == before
    assert store.calls == []
