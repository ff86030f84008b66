"""Manifest ingestion: code normalization, line parsing and batched loading.

Lines are parsed into :class:`~palletcheck.domain.model.Record` objects and
registered in a :class:`~palletcheck.domain.model.ContainmentStore`. Loading
happens in bounded batches so a host can drive it cooperatively.
"""

from __future__ import annotations

from .context import CancellationToken, IngestCounters, IngestProgress, IngestResult
from .normalization import normalize_code
from .parsing import FIELD_DELIMITER, parse_record
from .runner import IngestionPipeline

__all__ = [
    "FIELD_DELIMITER",
    "CancellationToken",
    "IngestCounters",
    "IngestProgress",
    "IngestResult",
    "IngestionPipeline",
    "normalize_code",
    "parse_record",
]
