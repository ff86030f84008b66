"""Reading manifest files from disk."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import islice
from logging import getLogger
from pathlib import Path

from palletcheck.domain.errors import ManifestError

log = getLogger(__name__)

MANIFEST_SUFFIXES = frozenset({".csv", ".txt"})
MANIFEST_ENCODING = "utf-8-sig"
DEFAULT_PREVIEW_ROWS = 10


@dataclass(frozen=True, slots=True)
class ManifestFile:
    name: str
    size: int
    lines: list[str]


def check_manifest_path(path: Path) -> Path:
    """Return ``path`` if it names an existing ``.csv``/``.txt`` file."""

    if path.suffix.lower() not in MANIFEST_SUFFIXES:
        allowed = ", ".join(sorted(MANIFEST_SUFFIXES))
        raise ManifestError(f"Unsupported manifest type {path.name!r}; expected one of {allowed}")
    if not path.is_file():
        raise ManifestError(f"Manifest file not found: {path}")
    return path


def read_manifest(path: Path) -> ManifestFile:
    check_manifest_path(path)
    try:
        text = path.read_bytes().decode(MANIFEST_ENCODING, errors="replace")
        size = path.stat().st_size
    except OSError as exc:
        raise ManifestError(f"Could not read manifest {path}: {exc}") from exc
    # Only LF and CRLF end a line; GS1 codes carry \x1d inside the item field.
    lines = [line.removesuffix("\r") for line in text.split("\n")]
    if lines and not lines[-1]:
        lines.pop()
    log.debug("Read %s lines from %s (%s bytes)", len(lines), path, size)
    return ManifestFile(name=path.name, size=size, lines=lines)


def preview_manifest(
    path: Path,
    *,
    rows: int = DEFAULT_PREVIEW_ROWS,
    delimiter: str = "\t",
) -> list[list[str]]:
    """Return the first ``rows`` non-blank lines split into fields."""

    check_manifest_path(path)
    try:
        with path.open(encoding=MANIFEST_ENCODING, errors="replace") as handle:
            non_blank = (line.rstrip("\r\n") for line in handle if line.strip())
            return [line.split(delimiter) for line in islice(non_blank, max(rows, 0))]
    except OSError as exc:
        raise ManifestError(f"Could not read manifest {path}: {exc}") from exc
