"""Bounded log of completed verification checks."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from palletcheck.config.check import DEFAULT_HISTORY_LIMIT, DEFAULT_REPORT_RECENT
from palletcheck.domain.model import CheckRecord, CheckSummary, FileInfo, StoreStats

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from palletcheck.domain.model import ContainmentStore, ScanSnapshot

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class HistoryReport:
    """Read-only view combining the latest check, store totals and recent checks."""

    current_check: CheckRecord | None
    store_stats: StoreStats
    recent_checks: tuple[CheckRecord, ...]
    last_file: FileInfo | None


class CheckHistory:
    """Newest-first log of :class:`CheckRecord` entries, capped at ``limit``."""

    def __init__(
        self,
        *,
        limit: int = DEFAULT_HISTORY_LIMIT,
        checks: Iterable[CheckRecord] = (),
        current_check: CheckRecord | None = None,
        last_file: FileInfo | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if limit < 1:
            raise ValueError("History limit must be positive")
        self.limit = limit
        self._checks: list[CheckRecord] = list(checks)
        self.current_check = current_check
        self.last_file = last_file
        self._clock = clock

    @property
    def checks(self) -> tuple[CheckRecord, ...]:
        return tuple(self._checks)

    def snapshot(
        self,
        state: ScanSnapshot,
        *,
        file_info: FileInfo | None,
        store_stats: StoreStats,
        now: datetime | None = None,
    ) -> CheckRecord | None:
        """Record ``state`` as a completed check when it carries any progress."""

        if not state.has_progress:
            return None

        record = CheckRecord(
            checked_at=now or self._clock(),
            state=state,
            file_info=file_info,
            store_stats=store_stats,
            summary=CheckSummary.of(state),
        )
        self._checks.insert(0, record)
        del self._checks[self.limit :]
        self.current_check = record
        log.info(
            "Check recorded: pallet=%s, box=%s, items=%s",
            state.pallet,
            state.box,
            len(state.scanned_items),
        )
        return record

    def report(
        self,
        store: ContainmentStore,
        *,
        recent: int = DEFAULT_REPORT_RECENT,
    ) -> HistoryReport:
        return HistoryReport(
            current_check=self.current_check,
            store_stats=store.stats(),
            recent_checks=tuple(self._checks[:recent]),
            last_file=self.last_file,
        )

    def enforce_limit(self) -> int:
        """Drop checks beyond the cap; returns how many were evicted."""

        evicted = max(0, len(self._checks) - self.limit)
        if evicted:
            del self._checks[self.limit :]
        return evicted

    def clear(self) -> None:
        self._checks.clear()
        self.current_check = None
        self.last_file = None

    def __len__(self) -> int:
        return len(self._checks)
