"""Scan state and completed-check records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003
from uuid import UUID, uuid4

from palletcheck.domain.model.containment import StoreStats


@dataclass(frozen=True, slots=True)
class ScanSnapshot:
    """Immutable copy of a :class:`ScanState`."""

    pallet: str | None = None
    box: str | None = None
    scanned_items: tuple[str, ...] = ()

    @property
    def has_progress(self) -> bool:
        return self.pallet is not None or bool(self.scanned_items)


@dataclass(slots=True)
class ScanState:
    """Current verification context: selected pallet, selected box, scanned items."""

    pallet: str | None = None
    box: str | None = None
    scanned_items: list[str] = field(default_factory=list[str])

    @property
    def has_progress(self) -> bool:
        return self.pallet is not None or bool(self.scanned_items)

    def select_pallet(self, pallet: str) -> None:
        self.pallet = pallet
        self.box = None
        self.scanned_items.clear()

    def select_box(self, box: str | None) -> None:
        self.box = box
        self.scanned_items.clear()

    def clear(self) -> None:
        self.pallet = None
        self.box = None
        self.scanned_items.clear()

    def snapshot(self) -> ScanSnapshot:
        return ScanSnapshot(
            pallet=self.pallet,
            box=self.box,
            scanned_items=tuple(self.scanned_items),
        )

    @classmethod
    def from_snapshot(cls, snapshot: ScanSnapshot) -> ScanState:
        return cls(
            pallet=snapshot.pallet,
            box=snapshot.box,
            scanned_items=list(snapshot.scanned_items),
        )


@dataclass(frozen=True, slots=True)
class FileInfo:
    """Metadata of the manifest file the store was last built from."""

    name: str
    size: int
    loaded_at: datetime
    processed_lines: int
    skipped_lines: int = 0


@dataclass(frozen=True, slots=True)
class CheckSummary:
    total_items: int
    pallets: int
    boxes: int

    @classmethod
    def of(cls, snapshot: ScanSnapshot) -> CheckSummary:
        return cls(
            total_items=len(snapshot.scanned_items),
            pallets=1 if snapshot.pallet else 0,
            boxes=1 if snapshot.box else 0,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class CheckRecord:
    """A completed verification pass, frozen at the moment it was handed to history."""

    id: UUID = field(default_factory=uuid4)
    checked_at: datetime
    state: ScanSnapshot
    file_info: FileInfo | None
    store_stats: StoreStats
    summary: CheckSummary
