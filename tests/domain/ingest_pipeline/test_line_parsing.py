from __future__ import annotations

import pytest

from palletcheck.domain.ingest_pipeline import normalize_code, parse_record
from palletcheck.domain.model import Record


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("  KM1  ", "KM1"),
        ("\x1dKM1\x1d", "KM1"),
        ("010461\x1d21abc", "01046121abc"),
        ("KM1\r", "KM1"),
        ("\x00\x7f\x9f", ""),
        (None, ""),
    ],
)
def test_normalize_code_strips_control_characters(raw: str | None, expected: str) -> None:
    assert normalize_code(raw) == expected


def test_parse_record_reads_mandatory_and_optional_fields() -> None:
    record = parse_record("KM1\tB1\tP1\t2024-01-01\t2025-01-01\r")

    assert record == Record(
        item="KM1",
        box="B1",
        pallet="P1",
        production_date="2024-01-01",
        expiry_date="2025-01-01",
    )


def test_parse_record_optional_dates_default_to_none() -> None:
    record = parse_record("KM1\tB1\tP1\t\t")

    assert record is not None
    assert record.production_date is None
    assert record.expiry_date is None


@pytest.mark.parametrize(
    "line",
    [
        "",
        "   ",
        "KM1\tB1",
        "KM1 B1 P1",
        "KM1\t\x1d\tP1",
        "\tB1\tP1\t2024-01-01",
        "KM1\t\tP1\t2024-01-01",
    ],
)
def test_parse_record_rejects_malformed_lines(line: str) -> None:
    assert parse_record(line) is None


def test_parse_record_accepts_custom_delimiter() -> None:
    assert parse_record("KM1;B1;P1", delimiter=";") == Record(item="KM1", box="B1", pallet="P1")
