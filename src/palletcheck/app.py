"""Application orchestration: one workbench owning store, scan session and history."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from palletcheck.adapters.documents import PersistenceGateway
from palletcheck.adapters.manifest import read_manifest
from palletcheck.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyDocumentUnitOfWork,
    is_started,
    startup,
)
from palletcheck.config import CheckConfig, get_check_config
from palletcheck.domain.history import CheckHistory
from palletcheck.domain.ingest_pipeline import IngestionPipeline, normalize_code
from palletcheck.domain.model import BoxReparentPolicy, ContainmentStore, FileInfo
from palletcheck.domain.ports.unit_of_work import DocumentUnitOfWork
from palletcheck.domain.reporting import render_report, report_file_name
from palletcheck.domain.scanning import ScanDebouncer, ScanOutcome, ScanResult, ScanSession

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from palletcheck.domain.history import HistoryReport
    from palletcheck.domain.ingest_pipeline import CancellationToken, IngestResult
    from palletcheck.domain.model import CheckRecord, CodeDescription

UnitOfWorkFactory = Callable[[], DocumentUnitOfWork]

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CheckWorkbench:
    """Coordinates manifest loading, scanning, history and persistence.

    The workbench owns no timers. Hosts call :meth:`tick` with a monotonic
    timestamp to drive autosave and compaction.
    """

    def __init__(
        self,
        store: ContainmentStore,
        session: ScanSession,
        history: CheckHistory,
        *,
        gateway: PersistenceGateway | None = None,
        config: CheckConfig | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.session = session
        self.history = history
        self.gateway = gateway
        self.config = config or CheckConfig()
        self._clock = clock
        self._debouncer = ScanDebouncer(self.config.scan_cooldown_seconds)
        self._next_autosave: float | None = None
        self._next_compact: float | None = None

    def load_manifest(
        self,
        path: Path,
        *,
        cancel: CancellationToken | None = None,
    ) -> IngestResult:
        manifest = read_manifest(path)
        return self.ingest_lines(
            manifest.lines,
            file_name=manifest.name,
            size=manifest.size,
            cancel=cancel,
        )

    def ingest_lines(
        self,
        lines: Iterable[str],
        *,
        file_name: str,
        size: int = 0,
        cancel: CancellationToken | None = None,
    ) -> IngestResult:
        """Replace the store with the contents of ``lines``.

        Progress of the running check is handed to history first. A cancelled
        load discards whatever was ingested before the cancellation.
        """

        self.session.reset()
        self.store.clear()
        self._debouncer.reset()

        pipeline = IngestionPipeline(
            self.store,
            batch_size=self.config.ingest_batch_size,
            delimiter=self.config.field_delimiter,
        )
        result = pipeline.ingest(lines, cancel=cancel)

        if result.cancelled:
            log.warning("Loading %s was cancelled; discarding partial data", file_name)
            self.store.clear()
            self.history.last_file = None
        else:
            self.history.last_file = FileInfo(
                name=file_name,
                size=size,
                loaded_at=self._clock(),
                processed_lines=result.processed,
                skipped_lines=result.skipped,
            )
            log.info(
                "Loaded %s: %s pallets, %s boxes, %s items",
                file_name,
                *_stat_values(self.store),
            )

        if self.gateway is not None:
            self.gateway.save_hierarchy(self.store)
            self.gateway.save_session(self.session.snapshot())
            self.gateway.save_history(self.history)
        return result

    def scan(self, code: str, *, debounce: bool = False) -> ScanResult:
        """Process one scanned code.

        With ``debounce`` a code repeated within the configured cooldown is
        reported as :attr:`ScanOutcome.DEBOUNCED` and not processed.
        """

        if debounce:
            normalized = normalize_code(code)
            if normalized and not self._debouncer.accept(normalized):
                return ScanResult(
                    outcome=ScanOutcome.DEBOUNCED,
                    code=normalized,
                    state=self.session.snapshot(),
                )

        previous_check = self.history.current_check
        result = self.session.scan_code(code)
        if result.ok:
            self._save_session()
        if self.history.current_check is not previous_check:
            self._save_history()
        return result

    def remove_item(self, code: str) -> bool:
        removed = self.session.remove_item(normalize_code(code))
        if removed:
            self._save_session()
        return removed

    def reset(self) -> CheckRecord | None:
        record = self.session.reset()
        self._debouncer.reset()
        self._save_session()
        if record is not None:
            self._save_history()
        return record

    def lookup(self, code: str) -> CodeDescription | None:
        return self.store.describe(normalize_code(code))

    def report(self) -> HistoryReport:
        return self.history.report(self.store, recent=self.config.report_recent)

    def export_report(self, directory: Path, *, now: datetime | None = None) -> Path | None:
        """Write the text report to ``directory``; ``None`` when no file was loaded."""

        last_file = self.history.last_file
        if last_file is None:
            log.warning("No manifest loaded; nothing to report")
            return None

        generated_at = now or self._clock()
        text = render_report(self.report(), last_file=last_file, generated_at=generated_at)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / report_file_name(last_file.name, generated_at.astimezone().date())
        target.write_text(text, encoding="utf-8")
        log.info("Report written to %s", target)
        return target

    def clear_history(self) -> None:
        self.history.clear()
        if self.gateway is not None:
            self.gateway.clear_history()

    def clear_all(self) -> None:
        """Forget the store, the running check and the history, in memory and on disk."""

        self.store.clear()
        self.session.state.clear()
        self.history.clear()
        self._debouncer.reset()
        if self.gateway is not None:
            self.gateway.clear_all()
        log.info("All data cleared")

    def save_now(self) -> bool:
        """Persist the running check and history; a no-op without progress."""

        if not self.session.state.has_progress:
            return False
        if self.gateway is None:
            return False
        saved = self.gateway.save_session(self.session.snapshot())
        return self.gateway.save_history(self.history) and saved

    def maybe_compact(self) -> bool:
        """Trim history to its cap and drop scan state the store no longer knows."""

        evicted = self.history.enforce_limit()
        before = self.session.snapshot()
        after = self.session.restore(before)
        if evicted:
            log.info("Evicted %s check(s) beyond the history limit", evicted)
            self._save_history()
        if after != before:
            self._save_session()
        return bool(evicted) or after != before

    def tick(self, now: float) -> None:
        """Run autosave and compaction when their intervals have elapsed.

        ``now`` is a monotonic timestamp in seconds. Intervals of zero or less
        disable the corresponding job.
        """

        autosave_every = self.config.autosave_interval_seconds
        compact_every = self.config.compact_interval_seconds

        if autosave_every > 0:
            if self._next_autosave is None:
                self._next_autosave = now + autosave_every
            elif now >= self._next_autosave:
                self.save_now()
                self._next_autosave = now + autosave_every

        if compact_every > 0:
            if self._next_compact is None:
                self._next_compact = now + compact_every
            elif now >= self._next_compact:
                self.maybe_compact()
                self._next_compact = now + compact_every

    def _save_session(self) -> None:
        if self.gateway is not None:
            self.gateway.save_session(self.session.snapshot())

    def _save_history(self) -> None:
        if self.gateway is not None:
            self.gateway.save_history(self.history)


def _stat_values(store: ContainmentStore) -> tuple[int, int, int]:
    stats = store.stats()
    return stats.pallet_count, stats.box_count, stats.item_count


def default_gateway(
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> PersistenceGateway | None:
    """Start the SQLAlchemy adapter if needed and wrap it in a gateway.

    Returns ``None`` when the database cannot be opened; the caller then works
    in memory only.
    """

    if not is_started():
        try:
            startup()
        except (SQLAlchemyError, OSError) as exc:
            log.warning("Persistence unavailable, continuing in memory: %s", exc)
            return None
    return PersistenceGateway(unit_of_work_factory or SqlAlchemyDocumentUnitOfWork)


def open_workbench(
    config: CheckConfig | None = None,
    gateway: PersistenceGateway | None = None,
) -> CheckWorkbench:
    """Build a workbench, restoring hierarchy, history and scan state from ``gateway``."""

    effective_config = config or get_check_config()
    policy = BoxReparentPolicy(effective_config.box_reparent_policy)

    store: ContainmentStore | None = None
    history: CheckHistory | None = None
    if gateway is not None:
        store = gateway.load_hierarchy(reparent_policy=policy)
        history = gateway.load_history(limit=effective_config.history_limit)
    if store is None:
        store = ContainmentStore(reparent_policy=policy)
    if history is None:
        history = CheckHistory(limit=effective_config.history_limit)

    session = ScanSession(store, history=history)
    if gateway is not None:
        snapshot = gateway.load_session()
        if snapshot is not None:
            session.restore(snapshot)

    log.debug(
        "Workbench ready: %s pallets, %s boxes, %s items, %s checks",
        *_stat_values(store),
        len(history),
    )
    return CheckWorkbench(store, session, history, gateway=gateway, config=effective_config)
