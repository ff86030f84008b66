"""Translate between domain objects and persisted document models."""

from __future__ import annotations

from typing import TYPE_CHECKING

from palletcheck.domain.history import CheckHistory
from palletcheck.domain.model import (
    Box,
    BoxReparentPolicy,
    CheckRecord,
    CheckSummary,
    ContainmentStore,
    FileInfo,
    Item,
    Pallet,
    ScanSnapshot,
    StoreStats,
)

from .schema import (
    BoxEntry,
    CheckRecordModel,
    CheckSummaryModel,
    FileInfoModel,
    HierarchyDocument,
    HistoryDocument,
    ItemEntry,
    PalletEntry,
    ScanStateModel,
    SessionDocument,
    StoreStatsModel,
)

if TYPE_CHECKING:
    from datetime import datetime


def hierarchy_to_document(store: ContainmentStore, *, saved_at: datetime) -> HierarchyDocument:
    return HierarchyDocument(
        saved_at=saved_at,
        pallets={
            code: PalletEntry(boxes=sorted(pallet.boxes), items=sorted(pallet.items))
            for code, pallet in store.pallets()
        },
        boxes={
            code: BoxEntry(pallet=box.owner_pallet, items=sorted(box.items))
            for code, box in store.boxes()
        },
        items={code: ItemEntry(box=item.box, pallet=item.pallet) for code, item in store.items()},
    )


def store_from_document(
    document: HierarchyDocument,
    *,
    reparent_policy: BoxReparentPolicy = BoxReparentPolicy.PRESERVE,
) -> ContainmentStore:
    return ContainmentStore.from_entries(
        pallets={
            code: Pallet(boxes=set(entry.boxes), items=set(entry.items))
            for code, entry in document.pallets.items()
        },
        boxes={
            code: Box(owner_pallet=entry.pallet, items=set(entry.items))
            for code, entry in document.boxes.items()
        },
        items={
            code: Item(box=entry.box, pallet=entry.pallet)
            for code, entry in document.items.items()
        },
        reparent_policy=reparent_policy,
    )


def session_to_document(snapshot: ScanSnapshot, *, saved_at: datetime) -> SessionDocument:
    return SessionDocument(saved_at=saved_at, state=_state_model(snapshot))


def snapshot_from_document(document: SessionDocument) -> ScanSnapshot:
    return _snapshot(document.state)


def history_to_document(history: CheckHistory) -> HistoryDocument:
    return HistoryDocument(
        checks=[_check_model(check) for check in history.checks],
        current_check=_check_model(history.current_check) if history.current_check else None,
        last_file=_file_model(history.last_file) if history.last_file else None,
    )


def history_from_document(document: HistoryDocument, *, limit: int) -> CheckHistory:
    history = CheckHistory(
        limit=limit,
        checks=[_check_record(model) for model in document.checks],
        current_check=_check_record(document.current_check) if document.current_check else None,
        last_file=_file_info(document.last_file) if document.last_file else None,
    )
    history.enforce_limit()
    return history


def _state_model(snapshot: ScanSnapshot) -> ScanStateModel:
    return ScanStateModel(
        pallet=snapshot.pallet,
        box=snapshot.box,
        scanned_items=list(snapshot.scanned_items),
    )


def _snapshot(model: ScanStateModel) -> ScanSnapshot:
    return ScanSnapshot(
        pallet=model.pallet,
        box=model.box,
        scanned_items=tuple(dict.fromkeys(model.scanned_items)),
    )


def _file_model(info: FileInfo) -> FileInfoModel:
    return FileInfoModel(
        name=info.name,
        size=info.size,
        loaded_at=info.loaded_at,
        processed_lines=info.processed_lines,
        skipped_lines=info.skipped_lines,
    )


def _file_info(model: FileInfoModel) -> FileInfo:
    return FileInfo(
        name=model.name,
        size=model.size,
        loaded_at=model.loaded_at,
        processed_lines=model.processed_lines,
        skipped_lines=model.skipped_lines,
    )


def _check_model(record: CheckRecord) -> CheckRecordModel:
    return CheckRecordModel(
        id=record.id,
        checked_at=record.checked_at,
        state=_state_model(record.state),
        file_info=_file_model(record.file_info) if record.file_info else None,
        store_stats=StoreStatsModel(
            pallet_count=record.store_stats.pallet_count,
            box_count=record.store_stats.box_count,
            item_count=record.store_stats.item_count,
        ),
        summary=CheckSummaryModel(
            total_items=record.summary.total_items,
            pallets=record.summary.pallets,
            boxes=record.summary.boxes,
        ),
    )


def _check_record(model: CheckRecordModel) -> CheckRecord:
    return CheckRecord(
        id=model.id,
        checked_at=model.checked_at,
        state=_snapshot(model.state),
        file_info=_file_info(model.file_info) if model.file_info else None,
        store_stats=StoreStats(
            pallet_count=model.store_stats.pallet_count,
            box_count=model.store_stats.box_count,
            item_count=model.store_stats.item_count,
        ),
        summary=CheckSummary(
            total_items=model.summary.total_items,
            pallets=model.summary.pallets,
            boxes=model.summary.boxes,
        ),
    )
