from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from palletcheck.adapters.documents import HISTORY_KEY, SESSION_KEY, PersistenceGateway
from palletcheck.app import CheckWorkbench, default_gateway, open_workbench
from palletcheck.config import CheckConfig
from palletcheck.domain.ingest_pipeline import CancellationToken
from palletcheck.domain.model import ScanSnapshot, StoreStats
from palletcheck.domain.scanning import ScanOutcome
from tests.support.documents import BrokenDocumentUnitOfWork, FakeDocumentRepository
from tests.support.manifests import SAMPLE_ROWS, manifest_lines

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from palletcheck.adapters.sqlalchemy import SqlAlchemyDocumentUnitOfWork

T0 = datetime(2025, 3, 1, 8, 0, tzinfo=UTC)
CONFIG = CheckConfig(scan_cooldown_seconds=60.0, autosave_interval_seconds=30.0)


@pytest.fixture
def workbench(fake_gateway: PersistenceGateway) -> CheckWorkbench:
    bench = open_workbench(CONFIG, gateway=fake_gateway)
    bench.ingest_lines(manifest_lines(SAMPLE_ROWS), file_name="march.txt", size=64)
    return bench


def test_ingest_records_file_info_and_persists(
    workbench: CheckWorkbench, document_repository: FakeDocumentRepository
) -> None:
    assert workbench.store.stats() == StoreStats(pallet_count=2, box_count=3, item_count=4)
    assert workbench.history.last_file is not None
    assert workbench.history.last_file.name == "march.txt"
    assert workbench.history.last_file.processed_lines == 4
    assert document_repository.keys() == ["hierarchy", "history", "session"]


def test_reloading_snapshots_progress_and_replaces_store(workbench: CheckWorkbench) -> None:
    workbench.scan("B1")
    workbench.scan("KM1")

    workbench.ingest_lines(manifest_lines([("N1", "NB", "NP")]), file_name="april.txt")

    assert workbench.history.checks[0].state.scanned_items == ("KM1",)
    assert workbench.history.checks[0].file_info is not None
    assert workbench.history.checks[0].file_info.name == "march.txt"
    assert workbench.session.snapshot() == ScanSnapshot()
    assert not workbench.store.has_item("KM1")
    assert workbench.store.has_item("N1")


def test_cancelled_ingest_discards_partial_data(fake_gateway: PersistenceGateway) -> None:
    bench = open_workbench(CheckConfig(ingest_batch_size=1), gateway=fake_gateway)
    token = CancellationToken()
    token.cancel()

    result = bench.ingest_lines(manifest_lines(SAMPLE_ROWS), file_name="march.txt", cancel=token)

    assert result.cancelled
    assert bench.store.stats() == StoreStats()
    assert bench.history.last_file is None


def test_state_survives_reopen(
    workbench: CheckWorkbench, fake_gateway: PersistenceGateway
) -> None:
    workbench.scan("P1")
    workbench.scan("B1")
    workbench.scan("KM2")

    reopened = open_workbench(CONFIG, gateway=fake_gateway)

    assert reopened.session.snapshot() == ScanSnapshot(
        pallet="P1", box="B1", scanned_items=("KM2",)
    )
    assert reopened.store.stats() == workbench.store.stats()
    assert reopened.history.last_file == workbench.history.last_file


def test_reopen_prunes_state_against_store(fake_gateway: PersistenceGateway) -> None:
    fake_gateway.save_hierarchy(open_workbench(CONFIG).store)
    fake_gateway.save_session(ScanSnapshot(pallet="P1", box="B1", scanned_items=("KM1",)))

    reopened = open_workbench(CONFIG, gateway=fake_gateway)

    assert reopened.session.snapshot() == ScanSnapshot()


def test_debounced_scans_are_dropped(workbench: CheckWorkbench) -> None:
    workbench.scan("B1", debounce=True)
    first = workbench.scan("KM1", debounce=True)
    repeat = workbench.scan("KM1", debounce=True)
    undebounced = workbench.scan("KM1")

    assert first.outcome is ScanOutcome.ITEM_ADDED
    assert repeat.outcome is ScanOutcome.DEBOUNCED
    assert not repeat.is_error
    assert undebounced.outcome is ScanOutcome.DUPLICATE_SCAN


def test_pallet_override_persists_history(
    workbench: CheckWorkbench, fake_gateway: PersistenceGateway
) -> None:
    workbench.scan("B1")
    workbench.scan("KM1")
    workbench.scan("P2")

    restored = fake_gateway.load_history(limit=50)

    assert restored is not None
    assert len(restored) == 1
    assert restored.checks[0].state.pallet == "P1"


def test_remove_item_and_reset(workbench: CheckWorkbench) -> None:
    workbench.scan("B1")
    workbench.scan("KM1")
    workbench.scan("KM2")

    assert workbench.remove_item(" KM1 ")
    assert not workbench.remove_item("KM1")
    record = workbench.reset()

    assert record is not None
    assert record.state.scanned_items == ("KM2",)
    assert workbench.session.snapshot() == ScanSnapshot()


def test_lookup_describes_codes(workbench: CheckWorkbench) -> None:
    description = workbench.lookup("P1")

    assert description is not None
    assert description.boxes == (("B1", 2), ("B2", 1))
    assert workbench.lookup("nothing") is None


def test_export_report_writes_named_file(workbench: CheckWorkbench, tmp_path: Path) -> None:
    workbench.scan("B1")
    workbench.scan("KM1")
    workbench.reset()

    path = workbench.export_report(tmp_path / "reports", now=T0)

    assert path is not None
    assert path.name == f"report_march_{T0.astimezone().date().isoformat()}.txt"
    text = path.read_text(encoding="utf-8")
    assert "Data file: march.txt" in text
    assert "1. KM1" in text


def test_export_report_requires_loaded_file(tmp_path: Path) -> None:
    bench = open_workbench(CONFIG)

    assert bench.export_report(tmp_path) is None
    assert list(tmp_path.iterdir()) == []


def test_clear_history_and_clear_all(
    workbench: CheckWorkbench, document_repository: FakeDocumentRepository
) -> None:
    workbench.scan("P1")
    workbench.reset()
    workbench.clear_history()

    assert len(workbench.history) == 0
    assert workbench.history.last_file is None
    assert HISTORY_KEY not in document_repository.keys()
    assert SESSION_KEY in document_repository.keys()

    workbench.scan("P1")
    workbench.clear_all()

    assert workbench.store.stats() == StoreStats()
    assert workbench.session.snapshot() == ScanSnapshot()
    assert document_repository.keys() == []


def test_save_now_only_with_progress(
    workbench: CheckWorkbench, document_repository: FakeDocumentRepository
) -> None:
    document_repository.documents.clear()

    assert not workbench.save_now()
    assert document_repository.keys() == []

    workbench.session.state.select_pallet("P1")

    assert workbench.save_now()
    assert document_repository.keys() == ["history", "session"]


def test_maybe_compact_trims_history_and_prunes_state(workbench: CheckWorkbench) -> None:
    for pallet in ("P1", "P2", "P1", "P2"):
        workbench.scan(pallet)
        workbench.reset()
    workbench.history.limit = 2
    workbench.session.state.select_pallet("GONE")

    assert workbench.maybe_compact()

    assert len(workbench.history) == 2
    assert workbench.session.snapshot() == ScanSnapshot()
    assert not workbench.maybe_compact()


def test_tick_runs_autosave_after_interval(
    workbench: CheckWorkbench, document_repository: FakeDocumentRepository
) -> None:
    calls: list[str] = []
    workbench.save_now = lambda: bool(calls.append("save"))  # type: ignore[method-assign]
    workbench.maybe_compact = lambda: bool(calls.append("compact"))  # type: ignore[method-assign]

    workbench.tick(0.0)
    workbench.tick(10.0)
    assert calls == []

    workbench.tick(30.0)
    assert calls == ["save", "compact"]

    workbench.tick(45.0)
    assert calls == ["save", "compact"]
    assert document_repository.keys()


def test_persistence_failure_keeps_working_in_memory() -> None:
    bench = open_workbench(CONFIG, gateway=PersistenceGateway(BrokenDocumentUnitOfWork))

    bench.ingest_lines(manifest_lines(SAMPLE_ROWS), file_name="march.txt")
    result = bench.scan("P1")

    assert result.ok
    assert bench.session.snapshot() == ScanSnapshot(pallet="P1")


def test_default_gateway_uses_started_adapter(
    sqlite_unit_of_work: Callable[[], SqlAlchemyDocumentUnitOfWork],
) -> None:
    _ = sqlite_unit_of_work
    gateway = default_gateway()
    assert gateway is not None

    bench = open_workbench(CONFIG, gateway=gateway)
    bench.ingest_lines(manifest_lines(SAMPLE_ROWS), file_name="march.txt")
    bench.scan("B3")

    reopened = open_workbench(CONFIG, gateway=default_gateway())
    assert reopened.session.snapshot() == ScanSnapshot(pallet="P2", box="B3")
