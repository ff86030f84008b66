# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from palletcheck.adapters.manifest import DEFAULT_PREVIEW_ROWS, preview_manifest
from palletcheck.app import default_gateway, open_workbench
from palletcheck.config import ConfigurationError, configure_logging, get_check_config
from palletcheck.domain.errors import ManifestError
from palletcheck.domain.model import CodeKind
from palletcheck.domain.reporting import render_history
from palletcheck.domain.scanning import ScanOutcome

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from types import FrameType

    from palletcheck.app import CheckWorkbench
    from palletcheck.config import CheckConfig
    from palletcheck.domain.model import CodeDescription
    from palletcheck.domain.scanning import ScanResult

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Verify pallet, box and item scans")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    load = subparsers.add_parser("load", help="Load a manifest file (.csv or .txt)")
    load.add_argument("path", type=Path, help="Tab-separated manifest file")

    preview = subparsers.add_parser("preview", help="Show the first rows of a manifest file")
    preview.add_argument("path", type=Path, help="Tab-separated manifest file")
    preview.add_argument(
        "--rows",
        type=int,
        default=DEFAULT_PREVIEW_ROWS,
        help="Number of rows to show (default: %(default)s)",
    )

    scan = subparsers.add_parser("scan", help="Scan one or more codes in order")
    scan.add_argument("codes", nargs="+", help="Pallet, box or item codes")

    subparsers.add_parser("watch", help="Read scanned codes from stdin, one per line")

    remove = subparsers.add_parser("remove", help="Remove an item from the running check")
    remove.add_argument("code", help="Item code")

    subparsers.add_parser("reset", help="Finish the running check and start over")

    lookup = subparsers.add_parser("lookup", help="Describe a pallet, box or item")
    lookup.add_argument("code", help="Code to look up")

    subparsers.add_parser("status", help="Show loaded data and the running check")

    report = subparsers.add_parser("report", help="Write a text report")
    report.add_argument(
        "--output-dir",
        type=Path,
        default=Path.cwd(),
        help="Directory for the report file (default: current directory)",
    )

    history = subparsers.add_parser("history", help="Check history commands")
    history_sub = history.add_subparsers(dest="history_command", required=True)
    history_sub.add_parser("show", help="List recent checks")
    history_sub.add_parser("clear", help="Delete all recorded checks")

    clear = subparsers.add_parser("clear", help="Delete loaded data, scan state and history")
    clear.add_argument("--yes", action="store_true", help="Confirm deletion")

    return parser.parse_args(list(argv))


def _validate(args: argparse.Namespace) -> None:
    if args.command == "preview" and args.rows < 1:
        raise ValueError("--rows must be positive")
    if args.command == "clear" and not args.yes:
        raise ValueError("Refusing to clear all data without --yes")


def _format_result(result: ScanResult) -> str:
    code = result.code
    state = result.state
    match result.outcome:
        case ScanOutcome.PALLET_SELECTED:
            return f"Pallet {code} selected"
        case ScanOutcome.BOX_SELECTED:
            return f"Box {code} selected (pallet {state.pallet})"
        case ScanOutcome.BOX_LEFT:
            return f"Left box {code}"
        case ScanOutcome.ITEM_ADDED:
            return f"Item {code} added ({len(state.scanned_items)} scanned)"
        case ScanOutcome.NOT_FOUND:
            return f"Code not found: {code}"
        case ScanOutcome.NEED_PALLET:
            return f"Scan a pallet before item {code}"
        case ScanOutcome.NEED_BOX:
            return f"Scan a box before item {code}"
        case ScanOutcome.CONFLICT if result.expected_box is not None:
            return (
                f"Item {code} belongs to pallet {result.expected_pallet}, "
                f"box {result.expected_box}"
            )
        case ScanOutcome.CONFLICT:
            return f"Box {code} belongs to pallet {result.expected_pallet}"
        case ScanOutcome.DUPLICATE_SCAN:
            return f"Item {code} already scanned"
        case _:
            return ""


def _format_description(description: CodeDescription) -> list[str]:
    if description.kind is CodeKind.PALLET:
        lines = [
            f"Pallet {description.code}: {len(description.boxes)} boxes, "
            f"{description.item_count} items"
        ]
        lines.extend(f"  Box {box}: {count} items" for box, count in description.boxes)
        return lines
    if description.kind is CodeKind.BOX:
        return [
            f"Box {description.code} on pallet {description.pallet}: "
            f"{description.item_count} items"
        ]
    return [f"Item {description.code} in box {description.box} on pallet {description.pallet}"]


def _print_scans(workbench: CheckWorkbench, codes: Iterable[str], *, debounce: bool) -> None:
    for raw in codes:
        result = workbench.scan(raw, debounce=debounce)
        if debounce:
            workbench.tick(time.monotonic())
        message = _format_result(result)
        if not message:
            continue
        print(message, file=sys.stderr if result.is_error else sys.stdout)


def _print_status(workbench: CheckWorkbench) -> None:
    report = workbench.report()
    stats = report.store_stats
    if report.last_file is not None:
        print(
            f"File: {report.last_file.name} ({report.last_file.processed_lines} lines, "
            f"{report.last_file.skipped_lines} skipped)"
        )
    else:
        print("File: none loaded")
    print(f"Pallets: {stats.pallet_count}  Boxes: {stats.box_count}  Items: {stats.item_count}")
    print(f"Pallet: {workbench.session.pallet or '-'}")
    print(f"Box: {workbench.session.box or '-'}")
    items = workbench.session.scanned_items
    print(f"Scanned items ({len(items)}):")
    for index, code in enumerate(items, start=1):
        print(f"  {index}. {code}")


def _run(args: argparse.Namespace, config: CheckConfig) -> None:
    if args.command == "preview":
        for row in preview_manifest(args.path, rows=args.rows, delimiter=config.field_delimiter):
            print(" | ".join(row))
        return

    workbench = open_workbench(config, gateway=default_gateway())

    if args.command == "load":
        result = workbench.load_manifest(args.path)
        stats = workbench.store.stats()
        print(
            f"Loaded {args.path.name}: {stats.pallet_count} pallets, {stats.box_count} boxes, "
            f"{stats.item_count} items ({result.processed} lines, {result.skipped} skipped)"
        )
        if result.anomalies:
            print(f"Warning: {result.anomalies} box(es) listed under a second pallet")
    elif args.command == "scan":
        _print_scans(workbench, args.codes, debounce=False)
    elif args.command == "watch":
        _print_scans(workbench, (line.rstrip("\n") for line in sys.stdin), debounce=True)
        workbench.save_now()
    elif args.command == "remove":
        if workbench.remove_item(args.code):
            print(f"Removed {args.code}")
        else:
            print(f"Item {args.code} is not in the running check", file=sys.stderr)
    elif args.command == "reset":
        record = workbench.reset()
        if record is not None:
            print(f"Check saved with {record.summary.total_items} items")
        print("Scan state cleared")
    elif args.command == "lookup":
        description = workbench.lookup(args.code)
        if description is None:
            print(f"Code not found: {args.code}", file=sys.stderr)
        else:
            print("\n".join(_format_description(description)))
    elif args.command == "status":
        _print_status(workbench)
    elif args.command == "report":
        path = workbench.export_report(args.output_dir)
        if path is None:
            raise ValueError("No manifest loaded; load a file before writing a report")
        print(f"Report written to {path}")
    elif args.command == "history" and args.history_command == "show":
        print(render_history(workbench.report()))
    elif args.command == "history" and args.history_command == "clear":
        workbench.clear_history()
        print("History cleared")
    elif args.command == "clear":
        workbench.clear_all()
        print("All data cleared")
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        _validate(parsed_args)
        if parsed_args.verbose:
            configure_logging(level=logging.DEBUG, force=True)
        config = get_check_config()
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        _run(parsed_args, config)
    except ManifestError:
        log.exception("Manifest error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
