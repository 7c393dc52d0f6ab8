"""Chunked batch commits under the Firestore per-commit write ceiling."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TypeVar

from reorg.application.dtos.documents import WriteOperation
from reorg.application.interfaces.document_store import IDocumentStore
from reorg.core.constants import DEFAULT_BATCH_SIZE, FIRESTORE_MAX_BATCH_WRITES
from reorg.domain.exceptions import CommitFailedException

logger = logging.getLogger(__name__)

T = TypeVar("T")


def chunk(items: Sequence[T], size: int) -> list[Sequence[T]]:
    """Split items into contiguous slices of at most size elements, in order."""
    if size < 1:
        raise ValueError(f"chunk size must be >= 1, got {size}")
    return [items[i : i + size] for i in range(0, len(items), size)]


class BatchWriter:
    """Commits an ordered sequence of writes in groups, one atomic commit per group.

    Groups are committed sequentially. There is no atomicity across groups:
    when a commit fails, earlier groups stay committed and the failure is
    raised as CommitFailedException. Callers recover by re-running the same
    (merge-semantics) operation set.
    """

    def __init__(self, store: IDocumentStore, max_batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        if not 1 <= max_batch_size <= FIRESTORE_MAX_BATCH_WRITES:
            raise ValueError(
                f"max_batch_size must be between 1 and {FIRESTORE_MAX_BATCH_WRITES}, "
                f"got {max_batch_size}"
            )
        self._store = store
        self.max_batch_size = max_batch_size

    async def commit(self, operations: Iterable[WriteOperation]) -> int:
        """Commit all operations; return how many were committed.

        Raises:
            CommitFailedException: a group was rejected; carries its index and cause.
        """
        ops = list(operations)
        if not ops:
            return 0
        committed = 0
        groups = chunk(ops, self.max_batch_size)
        for index, group in enumerate(groups):
            try:
                await self._store.commit_batch(group)
            except Exception as exc:
                logger.error(
                    "Batch %s/%s failed after %s committed operation(s): %s",
                    index + 1,
                    len(groups),
                    committed,
                    exc,
                )
                raise CommitFailedException(index, exc) from exc
            committed += len(group)
            logger.debug("Committed batch %s/%s (%s ops)", index + 1, len(groups), len(group))
        return committed
