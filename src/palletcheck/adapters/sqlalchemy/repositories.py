"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select

from palletcheck.adapters.sqlalchemy.mappings import document_table
from palletcheck.domain.ports.persistence import StoredDocument

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from palletcheck.domain.ports.persistence import DocumentPayload


class SqlAlchemyDocumentRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, key: str) -> StoredDocument | None:
        return self.session.get(StoredDocument, key)

    def put(self, key: str, payload: DocumentPayload) -> StoredDocument:
        now = datetime.now(UTC)
        document = self.session.get(StoredDocument, key)
        if document is None:
            document = StoredDocument(key=key, payload=payload, updated_at=now)
            self.session.add(document)
            return document
        # Reassign so the JSON column is flagged dirty.
        document.payload = dict(payload)
        document.updated_at = now
        return document

    def delete(self, key: str) -> bool:
        document = self.session.get(StoredDocument, key)
        if document is None:
            return False
        self.session.delete(document)
        return True

    def keys(self) -> list[str]:
        stmt = select(document_table.c.key).order_by(document_table.c.key)
        return list(self.session.execute(stmt).scalars())


if TYPE_CHECKING:
    from typing import cast

    from palletcheck.domain.ports.persistence import DocumentRepository

    _session_stub = cast("Session", object())
    _repo_check: DocumentRepository = SqlAlchemyDocumentRepository(_session_stub)
