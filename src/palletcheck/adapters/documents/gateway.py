"""Save and restore the hierarchy, session and history documents."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from palletcheck.adapters.sqlalchemy.unit_of_work import StartupError
from palletcheck.domain.model import BoxReparentPolicy

from .schema import HierarchyDocument, HistoryDocument, SessionDocument
from .translator import (
    hierarchy_to_document,
    history_from_document,
    history_to_document,
    session_to_document,
    snapshot_from_document,
    store_from_document,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from palletcheck.domain.history import CheckHistory
    from palletcheck.domain.model import ContainmentStore, ScanSnapshot
    from palletcheck.domain.ports import DocumentPayload, DocumentUnitOfWork

log = getLogger(__name__)

HIERARCHY_KEY = "hierarchy"
SESSION_KEY = "session"
HISTORY_KEY = "history"
DOCUMENT_KEYS = (HIERARCHY_KEY, SESSION_KEY, HISTORY_KEY)

PERSISTENCE_ERRORS: tuple[type[Exception], ...] = (
    SQLAlchemyError,
    StartupError,
    ValidationError,
    OSError,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PersistenceGateway:
    """Keyed document persistence that never lets a storage failure escape.

    Every method reports failure through its return value (``False`` or ``None``)
    and logs a warning; callers keep working from memory.
    """

    def __init__(self, unit_of_work_factory: Callable[[], DocumentUnitOfWork]) -> None:
        self._uow_factory = unit_of_work_factory

    def save_hierarchy(self, store: ContainmentStore, *, now: datetime | None = None) -> bool:
        document = hierarchy_to_document(store, saved_at=now or _utcnow())
        return self._put(HIERARCHY_KEY, document.model_dump(mode="json"))

    def load_hierarchy(
        self,
        *,
        reparent_policy: BoxReparentPolicy = BoxReparentPolicy.PRESERVE,
    ) -> ContainmentStore | None:
        payload = self._get(HIERARCHY_KEY)
        if payload is None:
            return None
        try:
            document = HierarchyDocument.model_validate(payload)
        except ValidationError as exc:
            log.warning("Ignoring unreadable %s document: %s", HIERARCHY_KEY, exc)
            return None
        return store_from_document(document, reparent_policy=reparent_policy)

    def save_session(self, snapshot: ScanSnapshot, *, now: datetime | None = None) -> bool:
        document = session_to_document(snapshot, saved_at=now or _utcnow())
        return self._put(SESSION_KEY, document.model_dump(mode="json"))

    def load_session(self) -> ScanSnapshot | None:
        payload = self._get(SESSION_KEY)
        if payload is None:
            return None
        try:
            document = SessionDocument.model_validate(payload)
        except ValidationError as exc:
            log.warning("Ignoring unreadable %s document: %s", SESSION_KEY, exc)
            return None
        return snapshot_from_document(document)

    def save_history(self, history: CheckHistory) -> bool:
        return self._put(HISTORY_KEY, history_to_document(history).model_dump(mode="json"))

    def load_history(self, *, limit: int) -> CheckHistory | None:
        payload = self._get(HISTORY_KEY)
        if payload is None:
            return None
        try:
            document = HistoryDocument.model_validate(payload)
        except ValidationError as exc:
            log.warning("Ignoring unreadable %s document: %s", HISTORY_KEY, exc)
            return None
        return history_from_document(document, limit=limit)

    def clear_history(self) -> bool:
        return self._delete((HISTORY_KEY,))

    def clear_all(self) -> bool:
        return self._delete(DOCUMENT_KEYS)

    def _put(self, key: str, payload: DocumentPayload) -> bool:
        try:
            with self._uow_factory() as uow:
                uow.repositories.documents.put(key, payload)
                uow.commit()
        except PERSISTENCE_ERRORS as exc:
            log.warning("Could not save %s document: %s", key, exc)
            return False
        log.debug("Saved %s document", key)
        return True

    def _get(self, key: str) -> DocumentPayload | None:
        try:
            with self._uow_factory() as uow:
                document = uow.repositories.documents.get(key)
                payload = dict(document.payload) if document is not None else None
        except PERSISTENCE_ERRORS as exc:
            log.warning("Could not read %s document: %s", key, exc)
            return None
        return payload

    def _delete(self, keys: tuple[str, ...]) -> bool:
        try:
            with self._uow_factory() as uow:
                for key in keys:
                    uow.repositories.documents.delete(key)
                uow.commit()
        except PERSISTENCE_ERRORS as exc:
            log.warning("Could not delete documents %s: %s", ", ".join(keys), exc)
            return False
        return True
