"""Ports for persisting keyed documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable

type DocumentPayload = dict[str, Any]


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False, kw_only=True)
class StoredDocument:
    """An opaque JSON payload stored under a well-known key."""

    key: str
    payload: DocumentPayload
    updated_at: datetime = field(default_factory=_utcnow)


@runtime_checkable
class DocumentRepository(Protocol):
    """Persistence contract for keyed documents (last write wins)."""

    def get(self, key: str) -> StoredDocument | None: ...

    def put(self, key: str, payload: DocumentPayload) -> StoredDocument: ...

    def delete(self, key: str) -> bool: ...

    def keys(self) -> list[str]: ...
