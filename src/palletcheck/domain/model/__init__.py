"""Domain model: containment hierarchy, scan state and check records."""

from __future__ import annotations

from .checks import CheckRecord, CheckSummary, FileInfo, ScanSnapshot, ScanState
from .containment import (
    Box,
    CodeDescription,
    ContainmentStore,
    Item,
    OwnershipAnomaly,
    Pallet,
    Record,
    StoreStats,
)
from .enums import BoxReparentPolicy, CodeKind, RegisterOutcome

__all__ = [
    "Box",
    "BoxReparentPolicy",
    "CheckRecord",
    "CheckSummary",
    "CodeDescription",
    "CodeKind",
    "ContainmentStore",
    "FileInfo",
    "Item",
    "OwnershipAnomaly",
    "Pallet",
    "Record",
    "RegisterOutcome",
    "ScanSnapshot",
    "ScanState",
    "StoreStats",
]
