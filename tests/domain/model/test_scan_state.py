from __future__ import annotations

from palletcheck.domain.model import CheckSummary, ScanSnapshot, ScanState


def test_select_pallet_clears_box_and_items() -> None:
    state = ScanState(pallet="P1", box="B1", scanned_items=["KM1"])

    state.select_pallet("P2")

    assert state.snapshot() == ScanSnapshot(pallet="P2")


def test_select_box_clears_items() -> None:
    state = ScanState(pallet="P1", box="B1", scanned_items=["KM1", "KM2"])

    state.select_box("B2")

    assert state.box == "B2"
    assert state.scanned_items == []


def test_progress_requires_pallet_or_items() -> None:
    assert not ScanState().has_progress
    assert ScanState(pallet="P1").has_progress
    assert not ScanSnapshot().has_progress
    assert ScanSnapshot(scanned_items=("KM1",)).has_progress


def test_snapshot_is_detached_from_state() -> None:
    state = ScanState(pallet="P1", box="B1", scanned_items=["KM1"])
    snapshot = state.snapshot()

    state.scanned_items.append("KM2")

    assert snapshot.scanned_items == ("KM1",)
    assert ScanState.from_snapshot(snapshot).scanned_items == ["KM1"]


def test_summary_counts_selected_containers() -> None:
    summary = CheckSummary.of(ScanSnapshot(pallet="P1", box="B1", scanned_items=("A", "B")))

    assert summary == CheckSummary(total_items=2, pallets=1, boxes=1)
    assert CheckSummary.of(ScanSnapshot(pallet="P1")) == CheckSummary(0, 1, 0)
