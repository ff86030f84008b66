"""Batched manifest ingestion into a containment store."""

from __future__ import annotations

from collections.abc import Sized
from itertools import islice
from logging import getLogger
from typing import TYPE_CHECKING

from palletcheck.config.check import DEFAULT_INGEST_BATCH_SIZE
from palletcheck.domain.ingest_pipeline.context import (
    IngestCounters,
    IngestProgress,
    IngestResult,
)
from palletcheck.domain.ingest_pipeline.parsing import FIELD_DELIMITER, parse_record
from palletcheck.domain.model import RegisterOutcome

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from palletcheck.domain.ingest_pipeline.context import CancellationToken
    from palletcheck.domain.model import ContainmentStore

log = getLogger(__name__)


class IngestionPipeline:
    """Feed manifest lines into a :class:`ContainmentStore` in bounded batches.

    :meth:`batches` is a resumable generator that suspends after every batch so a
    host can interleave other work; :meth:`ingest` drives it to completion.
    """

    def __init__(
        self,
        store: ContainmentStore,
        *,
        batch_size: int = DEFAULT_INGEST_BATCH_SIZE,
        delimiter: str = FIELD_DELIMITER,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self.store = store
        self.batch_size = batch_size
        self.delimiter = delimiter

    def batches(
        self,
        lines: Iterable[str],
        *,
        counters: IngestCounters | None = None,
        cancel: CancellationToken | None = None,
    ) -> Iterator[IngestProgress]:
        """Ingest ``lines`` and yield an :class:`IngestProgress` after each batch."""

        totals = counters if counters is not None else IngestCounters()
        total_lines = len(lines) if isinstance(lines, Sized) else None
        source = iter(lines)
        batch_index = 0

        while True:
            if cancel is not None and cancel.cancelled:
                totals.cancelled = True
                log.info("Ingestion cancelled after %s lines", totals.lines)
                return
            batch = list(islice(source, self.batch_size))
            if not batch:
                return
            for line in batch:
                self._ingest_line(line, totals)
            batch_index += 1
            log.debug(
                "Ingested batch %s: lines=%s processed=%s skipped=%s",
                batch_index,
                totals.lines,
                totals.processed,
                totals.skipped,
            )
            yield IngestProgress(
                batch=batch_index,
                lines_seen=totals.lines,
                total_lines=total_lines,
                processed=totals.processed,
                skipped=totals.skipped,
            )

    def ingest(
        self,
        lines: Iterable[str],
        *,
        cancel: CancellationToken | None = None,
    ) -> IngestResult:
        """Ingest every line synchronously and return the run totals."""

        counters = IngestCounters()
        for _progress in self.batches(lines, counters=counters, cancel=cancel):
            pass
        return self.result(counters)

    def result(self, counters: IngestCounters) -> IngestResult:
        anomalies = len(self.store.ownership_anomalies())
        if anomalies:
            log.warning(
                "%s box(es) appear under a pallet other than their owner", anomalies
            )
        log.info(
            "Ingestion finished: processed=%s, skipped=%s, duplicates=%s, rejected=%s",
            counters.processed,
            counters.skipped,
            counters.duplicates,
            counters.rejected,
        )
        return IngestResult(
            processed=counters.processed,
            skipped=counters.skipped,
            registered=counters.registered,
            duplicates=counters.duplicates,
            rejected=counters.rejected,
            anomalies=anomalies,
            cancelled=counters.cancelled,
        )

    def _ingest_line(self, line: str, counters: IngestCounters) -> None:
        counters.lines += 1
        if not line.strip():
            return
        record = parse_record(line, delimiter=self.delimiter)
        if record is None:
            counters.skipped += 1
            return
        counters.processed += 1
        outcome = self.store.register(record)
        if outcome is RegisterOutcome.REGISTERED:
            counters.registered += 1
        elif outcome is RegisterOutcome.DUPLICATE_ITEM:
            counters.duplicates += 1
        else:
            counters.rejected += 1
