"""Application services: batching, merging, copying, lookup index, scans."""

from reorg.application.services.batch_writer import BatchWriter, chunk
from reorg.application.services.document_merger import DocumentMerger, MergeResult
from reorg.application.services.duplicate_scanner import DuplicateScanner
from reorg.application.services.integrity_verifier import IntegrityVerifier
from reorg.application.services.lookup_index import LookupIndexMaintainer
from reorg.application.services.subcollection_copier import SubcollectionCopier

__all__ = [
    "BatchWriter",
    "DocumentMerger",
    "DuplicateScanner",
    "IntegrityVerifier",
    "LookupIndexMaintainer",
    "MergeResult",
    "SubcollectionCopier",
    "chunk",
]
