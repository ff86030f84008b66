"""Counters and control objects shared across an ingestion run."""

from __future__ import annotations

from dataclasses import dataclass


class CancellationToken:
    """Cooperative cancellation flag, checked by the pipeline at batch boundaries."""

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass(slots=True)
class IngestCounters:
    """Running totals for one ingestion run."""

    lines: int = 0
    processed: int = 0
    skipped: int = 0
    registered: int = 0
    duplicates: int = 0
    rejected: int = 0
    cancelled: bool = False


@dataclass(frozen=True, slots=True)
class IngestProgress:
    """Emitted at each batch boundary."""

    batch: int
    lines_seen: int
    total_lines: int | None
    processed: int
    skipped: int


@dataclass(frozen=True, slots=True)
class IngestResult:
    """Outcome of an ingestion run."""

    processed: int
    skipped: int
    registered: int = 0
    duplicates: int = 0
    rejected: int = 0
    anomalies: int = 0
    cancelled: bool = False
