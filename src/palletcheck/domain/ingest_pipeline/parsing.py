"""Manifest line parsing."""

from __future__ import annotations

from palletcheck.domain.ingest_pipeline.normalization import normalize_code
from palletcheck.domain.model import Record

FIELD_DELIMITER = "\t"
MIN_FIELDS = 3


def parse_record(line: str, *, delimiter: str = FIELD_DELIMITER) -> Record | None:
    """Parse ``item<TAB>box<TAB>pallet[<TAB>production<TAB>expiry]``.

    Returns ``None`` for lines with fewer than three fields or with an item, box
    or pallet id that normalizes to empty.
    """

    if not line.strip():
        return None

    parts = line.rstrip("\r\n").split(delimiter)
    if len(parts) < MIN_FIELDS:
        return None

    item = normalize_code(parts[0])
    box = normalize_code(parts[1])
    pallet = normalize_code(parts[2])
    if not item or not box or not pallet:
        return None

    return Record(
        item=item,
        box=box,
        pallet=pallet,
        production_date=_optional_field(parts, 3),
        expiry_date=_optional_field(parts, 4),
    )


def _optional_field(parts: list[str], index: int) -> str | None:
    if index >= len(parts):
        return None
    value = parts[index].strip()
    return value or None
