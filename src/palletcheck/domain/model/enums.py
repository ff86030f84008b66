"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class CodeKind(StrEnum):
    """What a scanned or looked-up code resolved to, in lookup priority order."""

    PALLET = "pallet"
    BOX = "box"
    ITEM = "item"


class RegisterOutcome(StrEnum):
    REGISTERED = "registered"
    DUPLICATE_ITEM = "duplicate_item"
    REPARENT_REJECTED = "reparent_rejected"


class BoxReparentPolicy(StrEnum):
    """How records that place an owned box under another pallet are treated.

    ``PRESERVE`` keeps the record: the box joins the other pallet's box set while
    its ``owner_pallet`` stays at the first registration. ``REJECT`` ignores the
    whole record.
    """

    PRESERVE = "preserve"
    REJECT = "reject"
