"""SubcollectionCopier unit tests: discovery, id preservation, dry run, cascade delete."""

import pytest

from reorg.application.services.batch_writer import BatchWriter
from reorg.application.services.subcollection_copier import SubcollectionCopier
from tests.fakes import InMemoryDocumentStore

SRC = "organizations/org1/users/u1"
DST = "organizations/org1/users/u2"


@pytest.fixture
def seeded() -> InMemoryDocumentStore:
    return InMemoryDocumentStore(
        {
            SRC: {"name": "Al"},
            f"{SRC}/schedules/s1": {"day": "mon"},
            f"{SRC}/schedules/s2": {"day": "tue"},
            f"{SRC}/leaves/l1": {"kind": "sick"},
            f"{SRC}/timesheets/t1": {"hours": 8},
            DST: {"name": "Alice"},
            f"{DST}/schedules/s1": {"day": "mon", "note": "kept"},
        }
    )


def _copier(store: InMemoryDocumentStore, size: int = 400) -> SubcollectionCopier:
    return SubcollectionCopier(store, BatchWriter(store, max_batch_size=size))


@pytest.mark.asyncio
async def test_copies_every_discovered_collection_preserving_ids(seeded) -> None:
    """Every discovered nested collection is copied with document IDs kept."""
    counts = await _copier(seeded).copy(SRC, DST)

    assert {c.name: c.count for c in counts} == {"leaves": 1, "schedules": 2, "timesheets": 1}
    assert seeded.documents[f"{DST}/schedules/s2"] == {"day": "tue"}
    assert seeded.documents[f"{DST}/leaves/l1"] == {"kind": "sick"}
    assert seeded.documents[f"{DST}/timesheets/t1"] == {"hours": 8}
    # merge semantics: existing target fields survive
    assert seeded.documents[f"{DST}/schedules/s1"] == {"day": "mon", "note": "kept"}


@pytest.mark.asyncio
async def test_dry_run_counts_without_writing(seeded) -> None:
    """A dry-run copy counts documents without writing."""
    before = seeded.snapshot()
    counts = await _copier(seeded).copy(SRC, DST, dry_run=True)
    assert sum(c.count for c in counts) == 4
    assert seeded.snapshot() == before
    assert seeded.commit_sizes == []


@pytest.mark.asyncio
async def test_copy_is_idempotent(seeded) -> None:
    """Copying twice gives the same store as copying once."""
    copier = _copier(seeded)
    await copier.copy(SRC, DST)
    after_first = seeded.snapshot()
    await copier.copy(SRC, DST)
    assert seeded.snapshot() == after_first


@pytest.mark.asyncio
async def test_document_without_nested_collections_copies_nothing() -> None:
    """A document without nested collections needs no commit."""
    store = InMemoryDocumentStore({SRC: {"name": "Al"}})
    assert await _copier(store).copy(SRC, DST) == []
    assert store.commit_sizes == []


@pytest.mark.asyncio
async def test_large_collection_respects_batch_size() -> None:
    """Large collections are committed in groups of the batch size."""
    docs = {f"{SRC}/schedules/s{i:04d}": {"i": i} for i in range(1000)}
    store = InMemoryDocumentStore({SRC: {}, **docs})
    await _copier(store, size=400).copy(SRC, DST)
    assert store.commit_sizes == [400, 400, 200]


@pytest.mark.asyncio
async def test_delete_all_empties_nested_collections_but_keeps_parent(seeded) -> None:
    """delete_all removes nested documents only."""
    deleted = await _copier(seeded).delete_all(SRC)
    assert sum(d.count for d in deleted) == 4
    assert not [k for k in seeded.documents if k.startswith(SRC + "/")]
    assert SRC in seeded.documents


@pytest.mark.asyncio
async def test_delete_all_dry_run_does_not_mutate(seeded) -> None:
    """A dry-run delete only counts."""
    before = seeded.snapshot()
    deleted = await _copier(seeded).delete_all(SRC, dry_run=True)
    assert sum(d.count for d in deleted) == 4
    assert seeded.snapshot() == before
