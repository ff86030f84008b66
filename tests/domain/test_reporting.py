from __future__ import annotations

from datetime import UTC, date, datetime

from palletcheck.domain.history import CheckHistory
from palletcheck.domain.model import FileInfo, ScanSnapshot
from palletcheck.domain.reporting import render_history, render_report, report_file_name
from tests.support.manifests import build_store

T0 = datetime(2025, 3, 1, 8, 0, tzinfo=UTC)
FILE = FileInfo(name="manifest_march.txt", size=120, loaded_at=T0, processed_lines=4)


def test_report_file_name_uses_source_stem_and_date() -> None:
    assert report_file_name("manifest_march.txt", date(2025, 3, 2)) == (
        "report_manifest_march_2025-03-02.txt"
    )


def test_render_report_lists_stats_and_scanned_items() -> None:
    store = build_store()
    history = CheckHistory(last_file=FILE)
    history.snapshot(
        ScanSnapshot(pallet="P1", box="B1", scanned_items=("KM1", "KM2")),
        file_info=FILE,
        store_stats=store.stats(),
        now=T0,
    )

    text = render_report(history.report(store), last_file=FILE, generated_at=T0)

    assert text.startswith("AGGREGATION CHECK REPORT\n")
    assert "Data file: manifest_march.txt" in text
    assert "Processed lines: 4" in text
    assert "Pallets: 2" in text
    assert "Items: 4" in text
    assert "Pallet: P1" in text
    assert "Box: B1" in text
    assert "SCANNED ITEMS (2):\n1. KM1\n2. KM2" in text
    assert text.rstrip().endswith("Generated by palletcheck")


def test_render_report_without_checks_omits_latest_section() -> None:
    store = build_store()

    text = render_report(CheckHistory().report(store), last_file=FILE, generated_at=T0)

    assert "LATEST CHECK" not in text
    assert "SCANNED ITEMS" not in text


def test_render_history_table() -> None:
    store = build_store()
    history = CheckHistory()

    assert render_history(history.report(store)) == "No checks recorded yet."

    history.snapshot(
        ScanSnapshot(pallet="P1", box="B1", scanned_items=("KM1",)),
        file_info=FILE,
        store_stats=store.stats(),
        now=T0,
    )
    lines = render_history(history.report(store)).splitlines()

    assert len(lines) == 2
    assert lines[0].startswith("Date")
    assert lines[1].endswith("manifest_march.txt")
