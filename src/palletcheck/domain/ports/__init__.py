"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import DocumentPayload, DocumentRepository, StoredDocument
from .unit_of_work import (
    DocumentRepositories,
    DocumentUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "DocumentPayload",
    "DocumentRepositories",
    "DocumentRepository",
    "DocumentUnitOfWork",
    "RepositoryCollection",
    "StoredDocument",
    "UnitOfWork",
]
