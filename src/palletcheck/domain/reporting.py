"""Plain-text rendering of verification reports."""

from __future__ import annotations

from pathlib import PurePath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date, datetime

    from palletcheck.domain.history import HistoryReport
    from palletcheck.domain.model import FileInfo

RULE = "=" * 40
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def report_file_name(source_name: str, on: date) -> str:
    """Return ``report_<source stem>_<YYYY-MM-DD>.txt``."""

    stem = PurePath(source_name).stem or "data"
    return f"report_{stem}_{on.isoformat()}.txt"


def render_report(
    report: HistoryReport,
    *,
    last_file: FileInfo,
    generated_at: datetime,
) -> str:
    lines = [
        "AGGREGATION CHECK REPORT",
        RULE,
        "",
        f"Generated at: {_fmt(generated_at)}",
        f"Data file: {last_file.name}",
        f"File loaded at: {_fmt(last_file.loaded_at)}",
        f"Processed lines: {last_file.processed_lines}",
        "",
        "DATA STATISTICS:",
        f"Pallets: {report.store_stats.pallet_count}",
        f"Boxes: {report.store_stats.box_count}",
        f"Items: {report.store_stats.item_count}",
        "",
    ]

    check = report.current_check
    if check is not None:
        lines.extend(
            [
                "LATEST CHECK:",
                f"Checked at: {_fmt(check.checked_at)}",
                f"Pallets checked: {check.summary.pallets}",
                f"Boxes checked: {check.summary.boxes}",
                f"Items checked: {check.summary.total_items}",
                "",
            ]
        )
        if check.state.pallet:
            lines.append(f"Pallet: {check.state.pallet}")
        if check.state.box:
            lines.append(f"Box: {check.state.box}")
        if check.state.scanned_items:
            lines.append("")
            lines.append(f"SCANNED ITEMS ({len(check.state.scanned_items)}):")
            lines.extend(
                f"{index}. {code}" for index, code in enumerate(check.state.scanned_items, start=1)
            )

    lines.extend(["", RULE, "Generated by palletcheck", ""])
    return "\n".join(lines)


def render_history(report: HistoryReport) -> str:
    """Tabular summary of the recent checks, newest first."""

    if not report.recent_checks:
        return "No checks recorded yet."
    header = f"{'Date':<20} {'Pallets':>7} {'Boxes':>5} {'Items':>6}  File"
    rows = [header]
    for check in report.recent_checks:
        file_name = check.file_info.name if check.file_info else "-"
        rows.append(
            f"{_fmt(check.checked_at):<20} {check.summary.pallets:>7} "
            f"{check.summary.boxes:>5} {check.summary.total_items:>6}  {file_name}"
        )
    return "\n".join(rows)


def _fmt(value: datetime) -> str:
    return value.astimezone().strftime(TIMESTAMP_FORMAT)
