"""SQLAlchemy adapter package for palletcheck."""

from __future__ import annotations

from .mappings import create_all_tables, document_table, mapper_registry, start_mappers
from .repositories import SqlAlchemyDocumentRepository
from .unit_of_work import (
    SqlAlchemyDocumentUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyDocumentRepository",
    "SqlAlchemyDocumentUnitOfWork",
    "StartupError",
    "create_all_tables",
    "document_table",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
