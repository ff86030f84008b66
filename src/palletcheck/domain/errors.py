"""Domain error definitions."""

from __future__ import annotations


class PalletCheckError(Exception):
    """Base exception for palletcheck errors."""


class ContainmentNotFoundError(PalletCheckError, LookupError):
    """Raised when a pallet, box or item id is absent from the containment store."""

    def __init__(self, kind: str, code: str) -> None:
        self.kind = kind
        self.code = code
        super().__init__(f"{kind} not found: {code}")


class ManifestError(PalletCheckError):
    """Raised when a manifest file cannot be used as ingestion input."""
