"""Code normalization shared by manifest ingestion and live scanning."""

from __future__ import annotations

import re

# C0 controls, DEL and C1 controls; GS1 group separators (0x1D) arrive here from scanners.
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def normalize_code(code: str | None) -> str:
    """Strip control characters and surrounding whitespace.

    An empty result means the code is absent.
    """

    if not code:
        return ""
    return _CONTROL_CHARS.sub("", code).strip()
