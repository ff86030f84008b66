from __future__ import annotations

import logging

import pytest

from palletcheck.domain.ingest_pipeline import (
    CancellationToken,
    IngestCounters,
    IngestionPipeline,
)
from palletcheck.domain.model import BoxReparentPolicy, ContainmentStore, StoreStats
from tests.support.manifests import manifest_line, manifest_lines


def test_ingest_deduplicates_items_and_counts_lines() -> None:
    store = ContainmentStore()
    pipeline = IngestionPipeline(store)

    result = pipeline.ingest(
        manifest_lines([("KM1", "B1", "P1"), ("KM2", "B1", "P1"), ("KM1", "B1", "P1")])
    )

    assert store.stats() == StoreStats(pallet_count=1, box_count=1, item_count=2)
    assert result.processed == 3
    assert result.registered == 2
    assert result.duplicates == 1
    assert result.skipped == 0


def test_blank_lines_are_ignored_and_malformed_lines_skipped() -> None:
    store = ContainmentStore()
    lines = ["", manifest_line("KM1", "B1", "P1"), "   ", "broken line", "KM2\tB1"]

    result = IngestionPipeline(store).ingest(lines)

    assert result.processed == 1
    assert result.skipped == 2
    assert store.stats().item_count == 1


def test_batches_yield_progress_per_batch() -> None:
    store = ContainmentStore()
    lines = manifest_lines([(f"KM{i}", "B1", "P1") for i in range(5)])

    progress = list(IngestionPipeline(store, batch_size=2).batches(lines))

    assert [p.batch for p in progress] == [1, 2, 3]
    assert [p.lines_seen for p in progress] == [2, 4, 5]
    assert all(p.total_lines == 5 for p in progress)
    assert progress[-1].processed == 5


def test_batches_accept_unsized_iterables() -> None:
    store = ContainmentStore()
    lines = (line for line in manifest_lines([("KM1", "B1", "P1")]))

    progress = list(IngestionPipeline(store).batches(lines))

    assert progress[0].total_lines is None
    assert store.has_item("KM1")


def test_cancellation_stops_at_batch_boundary() -> None:
    store = ContainmentStore()
    lines = manifest_lines([(f"KM{i}", "B1", "P1") for i in range(6)])
    pipeline = IngestionPipeline(store, batch_size=2)
    token = CancellationToken()
    counters = IngestCounters()

    for progress in pipeline.batches(lines, counters=counters, cancel=token):
        if progress.batch == 2:
            token.cancel()

    result = pipeline.result(counters)
    assert result.cancelled
    assert result.processed == 4
    assert store.stats().item_count == 4


def test_reject_policy_counts_rejected_rows() -> None:
    store = ContainmentStore(reparent_policy=BoxReparentPolicy.REJECT)

    result = IngestionPipeline(store).ingest(
        manifest_lines([("KM1", "B1", "P1"), ("KM2", "B1", "P2")])
    )

    assert result.rejected == 1
    assert result.anomalies == 0
    assert not store.has_item("KM2")


def test_anomalies_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    store = ContainmentStore()
    caplog.set_level(logging.WARNING, logger="palletcheck.domain.ingest_pipeline.runner")

    result = IngestionPipeline(store).ingest(
        manifest_lines([("KM1", "B1", "P1"), ("KM2", "B1", "P2")])
    )

    assert result.anomalies == 1
    assert "pallet other than their owner" in caplog.text


def test_batch_size_must_be_positive() -> None:
    with pytest.raises(ValueError, match="batch_size"):
        IngestionPipeline(ContainmentStore(), batch_size=0)
