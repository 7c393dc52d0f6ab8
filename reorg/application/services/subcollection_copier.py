"""Copy (and cascade-delete) every collection nested under a document."""

from __future__ import annotations

import logging

from reorg.application.dtos.documents import WriteOperation
from reorg.application.dtos.plan import CollectionCount
from reorg.application.interfaces.document_store import IDocumentStore
from reorg.application.services.batch_writer import BatchWriter
from reorg.domain.collections import join_path

logger = logging.getLogger(__name__)


class SubcollectionCopier:
    """Copies nested collections from one document to another, keeping document IDs.

    Collection names are discovered from the store (list_child_collections),
    so any nested collection added later (not only schedules and leaves)
    is carried along. Writes use merge semantics, so re-running a copy
    with unchanged source data is a no-op.
    """

    def __init__(self, store: IDocumentStore, batch_writer: BatchWriter) -> None:
        self._store = store
        self._batch_writer = batch_writer

    async def copy(
        self, source_path: str, target_path: str, *, dry_run: bool = False
    ) -> list[CollectionCount]:
        """Copy all nested collections of source_path under target_path.

        Empty collections are skipped without a write. In dry run only the
        read/count step runs.

        Returns:
            One CollectionCount per non-empty nested collection.
        """
        copied: list[CollectionCount] = []
        for name in await self._store.list_child_collections(source_path):
            docs = await self._store.list_documents(join_path(source_path, name))
            if not docs:
                logger.info("- No documents in subcollection '%s' of %s.", name, source_path)
                continue
            if dry_run:
                logger.info("[DRY RUN] Would copy %s docs from %s/%s.", len(docs), source_path, name)
            else:
                target_collection = join_path(target_path, name)
                await self._batch_writer.commit(
                    WriteOperation.put(join_path(target_collection, doc.id), doc.data, merge=True)
                    for doc in docs
                )
                logger.info("- Copied %s docs from %s/%s.", len(docs), source_path, name)
            copied.append(CollectionCount(name=name, count=len(docs)))
        return copied

    async def delete_all(
        self, document_path: str, *, dry_run: bool = False
    ) -> list[CollectionCount]:
        """Delete every document in every nested collection of document_path.

        The parent document itself is left alone.
        """
        deleted: list[CollectionCount] = []
        for name in await self._store.list_child_collections(document_path):
            collection_path = join_path(document_path, name)
            docs = await self._store.list_documents(collection_path)
            if not docs:
                continue
            if dry_run:
                logger.info("[DRY RUN] Would delete %s docs from %s.", len(docs), collection_path)
            else:
                await self._batch_writer.commit(
                    WriteOperation.remove(join_path(collection_path, doc.id)) for doc in docs
                )
                logger.info("- Deleted %s docs from '%s'.", len(docs), collection_path)
            deleted.append(CollectionCount(name=name, count=len(docs)))
        return deleted
