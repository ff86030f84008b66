"""Scan verification state machine.

A session moves between three states:

* idle: no pallet, no box, no items;
* pallet selected: a pallet is set, no box yet;
* box selected: pallet and box are set and items may be scanned.

Every call returns a :class:`ScanResult`. Rejections (unknown code, wrong order,
foreign pallet/box, repeated item) leave the state untouched and are reported
through :class:`ScanOutcome`, never raised.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from palletcheck.domain.ingest_pipeline.normalization import normalize_code
from palletcheck.domain.model import CodeKind, ScanSnapshot, ScanState

if TYPE_CHECKING:
    from collections.abc import Callable

    from palletcheck.domain.history import CheckHistory
    from palletcheck.domain.model import CheckRecord, ContainmentStore

log = getLogger(__name__)


class ScanOutcome(StrEnum):
    PALLET_SELECTED = "pallet_selected"
    BOX_SELECTED = "box_selected"
    BOX_LEFT = "box_left"
    ITEM_ADDED = "item_added"

    EMPTY = "empty"
    DEBOUNCED = "debounced"

    NOT_FOUND = "not_found"
    NEED_PALLET = "need_pallet"
    NEED_BOX = "need_box"
    CONFLICT = "conflict"
    DUPLICATE_SCAN = "duplicate_scan"


_ACCEPTED = frozenset(
    {
        ScanOutcome.PALLET_SELECTED,
        ScanOutcome.BOX_SELECTED,
        ScanOutcome.BOX_LEFT,
        ScanOutcome.ITEM_ADDED,
    }
)
_IGNORED = frozenset({ScanOutcome.EMPTY, ScanOutcome.DEBOUNCED})


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Outcome of a single scan together with the session state after it."""

    outcome: ScanOutcome
    code: str
    state: ScanSnapshot
    expected_pallet: str | None = None
    expected_box: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome in _ACCEPTED

    @property
    def is_error(self) -> bool:
        return not self.ok and self.outcome not in _IGNORED


def prune_snapshot(snapshot: ScanSnapshot, store: ContainmentStore) -> ScanSnapshot:
    """Drop the parts of a persisted state that the current store no longer knows."""

    if snapshot.pallet is None or not store.has_pallet(snapshot.pallet):
        return ScanSnapshot()
    if snapshot.box is not None and not store.has_box(snapshot.box):
        return ScanSnapshot(pallet=snapshot.pallet)
    items: list[str] = []
    for code in snapshot.scanned_items:
        if store.has_item(code) and code not in items:
            items.append(code)
    return ScanSnapshot(pallet=snapshot.pallet, box=snapshot.box, scanned_items=tuple(items))


class ScanSession:
    """Replay scanned codes against a containment store."""

    def __init__(
        self,
        store: ContainmentStore,
        *,
        history: CheckHistory | None = None,
        state: ScanState | None = None,
    ) -> None:
        self.store = store
        self.history = history
        self.state = state or ScanState()

    @property
    def pallet(self) -> str | None:
        return self.state.pallet

    @property
    def box(self) -> str | None:
        return self.state.box

    @property
    def scanned_items(self) -> tuple[str, ...]:
        return tuple(self.state.scanned_items)

    def snapshot(self) -> ScanSnapshot:
        return self.state.snapshot()

    def scan_code(self, code: str) -> ScanResult:
        normalized = normalize_code(code)
        if not normalized:
            return self._result(ScanOutcome.EMPTY, normalized)

        kind = self.store.classify(normalized)
        log.debug("Scanned %r classified as %s", normalized, kind)
        if kind is CodeKind.PALLET:
            return self._scan_pallet(normalized)
        if kind is CodeKind.BOX:
            return self._scan_box(normalized)
        if kind is CodeKind.ITEM:
            return self._scan_item(normalized)
        return self._result(ScanOutcome.NOT_FOUND, normalized)

    def remove_item(self, code: str) -> bool:
        """Remove ``code`` from the scanned items; a no-op when it is not there."""

        try:
            self.state.scanned_items.remove(code)
        except ValueError:
            return False
        return True

    def reset(self) -> CheckRecord | None:
        """Hand any progress to history, then return to idle."""

        record = self._complete_check()
        self.state.clear()
        return record

    def restore(self, snapshot: ScanSnapshot) -> ScanSnapshot:
        """Adopt a persisted state after pruning it against the store."""

        pruned = prune_snapshot(snapshot, self.store)
        if pruned != snapshot:
            log.info("Restored scan state pruned against the current data")
        self.state = ScanState.from_snapshot(pruned)
        return pruned

    def _scan_pallet(self, code: str) -> ScanResult:
        if self.state.scanned_items and self.state.pallet != code:
            self._complete_check()
        self.state.select_pallet(code)
        return self._result(ScanOutcome.PALLET_SELECTED, code)

    def _scan_box(self, code: str) -> ScanResult:
        owner = self.store.get_box(code).owner_pallet

        if self.state.pallet is None:
            self.state.pallet = owner
            self.state.select_box(code)
            return self._result(ScanOutcome.BOX_SELECTED, code)

        if owner != self.state.pallet:
            return self._result(ScanOutcome.CONFLICT, code, expected_pallet=owner)

        if self.state.box == code:
            self.state.select_box(None)
            return self._result(ScanOutcome.BOX_LEFT, code)

        self.state.select_box(code)
        return self._result(ScanOutcome.BOX_SELECTED, code)

    def _scan_item(self, code: str) -> ScanResult:
        if self.state.pallet is None:
            return self._result(ScanOutcome.NEED_PALLET, code)
        if self.state.box is None:
            return self._result(ScanOutcome.NEED_BOX, code)

        item = self.store.get_item(code)
        if item.pallet != self.state.pallet or item.box != self.state.box:
            return self._result(
                ScanOutcome.CONFLICT,
                code,
                expected_pallet=item.pallet,
                expected_box=item.box,
            )
        if code in self.state.scanned_items:
            return self._result(ScanOutcome.DUPLICATE_SCAN, code)

        self.state.scanned_items.append(code)
        return self._result(ScanOutcome.ITEM_ADDED, code)

    def _complete_check(self) -> CheckRecord | None:
        if self.history is None or not self.state.has_progress:
            return None
        return self.history.snapshot(
            self.state.snapshot(),
            file_info=self.history.last_file,
            store_stats=self.store.stats(),
        )

    def _result(
        self,
        outcome: ScanOutcome,
        code: str,
        *,
        expected_pallet: str | None = None,
        expected_box: str | None = None,
    ) -> ScanResult:
        return ScanResult(
            outcome=outcome,
            code=code,
            state=self.state.snapshot(),
            expected_pallet=expected_pallet,
            expected_box=expected_box,
        )


class ScanDebouncer:
    """Suppress a code repeated within ``cooldown_seconds`` of its previous read.

    Camera and wedge scanners report the same barcode several times while it stays
    in view; only the first read inside the cooldown window counts.
    """

    def __init__(
        self,
        cooldown_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._last_code: str | None = None
        self._last_at = 0.0

    def accept(self, code: str) -> bool:
        now = self._clock()
        if (
            code == self._last_code
            and self.cooldown_seconds > 0
            and now - self._last_at < self.cooldown_seconds
        ):
            return False
        self._last_code = code
        self._last_at = now
        return True

    def reset(self) -> None:
        self._last_code = None
        self._last_at = 0.0
