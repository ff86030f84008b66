"""Document persistence: pydantic schemas, domain translation and the gateway."""

from __future__ import annotations

from .gateway import (
    DOCUMENT_KEYS,
    HIERARCHY_KEY,
    HISTORY_KEY,
    SESSION_KEY,
    PersistenceGateway,
)
from .schema import HierarchyDocument, HistoryDocument, SessionDocument

__all__ = [
    "DOCUMENT_KEYS",
    "HIERARCHY_KEY",
    "HISTORY_KEY",
    "SESSION_KEY",
    "HierarchyDocument",
    "HistoryDocument",
    "PersistenceGateway",
    "SessionDocument",
]
