"""Pydantic models for the persisted hierarchy, session and history documents."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from uuid import UUID  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field

SCHEMA_VERSION = 1


class DocumentBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class PalletEntry(DocumentBaseModel):
    boxes: list[str] = Field(default_factory=list)
    items: list[str] = Field(default_factory=list)


class BoxEntry(DocumentBaseModel):
    pallet: str
    items: list[str] = Field(default_factory=list)


class ItemEntry(DocumentBaseModel):
    box: str
    pallet: str


class HierarchyDocument(DocumentBaseModel):
    version: int = SCHEMA_VERSION
    saved_at: datetime
    pallets: dict[str, PalletEntry] = Field(default_factory=dict)
    boxes: dict[str, BoxEntry] = Field(default_factory=dict)
    items: dict[str, ItemEntry] = Field(default_factory=dict)


class ScanStateModel(DocumentBaseModel):
    pallet: str | None = None
    box: str | None = None
    scanned_items: list[str] = Field(default_factory=list)


class SessionDocument(DocumentBaseModel):
    version: int = SCHEMA_VERSION
    saved_at: datetime
    state: ScanStateModel = Field(default_factory=ScanStateModel)


class FileInfoModel(DocumentBaseModel):
    name: str
    size: int = 0
    loaded_at: datetime
    processed_lines: int = 0
    skipped_lines: int = 0


class StoreStatsModel(DocumentBaseModel):
    pallet_count: int = 0
    box_count: int = 0
    item_count: int = 0


class CheckSummaryModel(DocumentBaseModel):
    total_items: int = 0
    pallets: int = 0
    boxes: int = 0


class CheckRecordModel(DocumentBaseModel):
    id: UUID
    checked_at: datetime
    state: ScanStateModel
    file_info: FileInfoModel | None = None
    store_stats: StoreStatsModel = Field(default_factory=StoreStatsModel)
    summary: CheckSummaryModel = Field(default_factory=CheckSummaryModel)


class HistoryDocument(DocumentBaseModel):
    version: int = SCHEMA_VERSION
    checks: list[CheckRecordModel] = Field(default_factory=list)
    current_check: CheckRecordModel | None = None
    last_file: FileInfoModel | None = None
