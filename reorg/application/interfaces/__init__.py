"""Application interfaces (ports): the document-store protocol.

Defines the contract infrastructure implementations must fulfill (DIP).
No runtime imports from reorg.infrastructure.
"""

from reorg.application.interfaces.document_store import IDocumentStore

__all__ = ["IDocumentStore"]
