"""Pallet → box → item containment index built from manifest records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from palletcheck.domain.errors import ContainmentNotFoundError
from palletcheck.domain.model.enums import BoxReparentPolicy, CodeKind, RegisterOutcome

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping


@dataclass(frozen=True, slots=True)
class Record:
    """One parsed manifest line."""

    item: str
    box: str
    pallet: str
    production_date: str | None = None
    expiry_date: str | None = None


@dataclass(slots=True)
class Pallet:
    boxes: set[str] = field(default_factory=set[str])
    items: set[str] = field(default_factory=set[str])


@dataclass(slots=True)
class Box:
    owner_pallet: str
    items: set[str] = field(default_factory=set[str])


@dataclass(frozen=True, slots=True)
class Item:
    box: str
    pallet: str


@dataclass(frozen=True, slots=True)
class StoreStats:
    pallet_count: int = 0
    box_count: int = 0
    item_count: int = 0


@dataclass(frozen=True, slots=True)
class OwnershipAnomaly:
    """A box that sits in the box set of a pallet other than its owner."""

    box: str
    owner_pallet: str
    foreign_pallet: str


@dataclass(frozen=True, slots=True)
class CodeDescription:
    """Read-only summary of what a code is and what it contains."""

    kind: CodeKind
    code: str
    pallet: str | None = None
    box: str | None = None
    item_count: int = 0
    boxes: tuple[tuple[str, int], ...] = ()


class ContainmentStore:
    """In-memory index of the declared packing hierarchy.

    Lookups are by exact code. Item ids are registered at most once; records
    repeating an item id are ignored in full. A box keeps the pallet it was first
    registered under as ``owner_pallet``.
    """

    def __init__(self, *, reparent_policy: BoxReparentPolicy = BoxReparentPolicy.PRESERVE) -> None:
        self.reparent_policy = reparent_policy
        self._pallets: dict[str, Pallet] = {}
        self._boxes: dict[str, Box] = {}
        self._items: dict[str, Item] = {}

    @classmethod
    def from_entries(
        cls,
        *,
        pallets: Mapping[str, Pallet],
        boxes: Mapping[str, Box],
        items: Mapping[str, Item],
        reparent_policy: BoxReparentPolicy = BoxReparentPolicy.PRESERVE,
    ) -> ContainmentStore:
        """Rebuild a store from previously exported entries without re-running registration."""

        store = cls(reparent_policy=reparent_policy)
        store._pallets = dict(pallets)
        store._boxes = dict(boxes)
        store._items = dict(items)
        return store

    def register_record(self, item: str, box: str, pallet: str) -> RegisterOutcome:
        existing_box = self._boxes.get(box)
        if (
            self.reparent_policy is BoxReparentPolicy.REJECT
            and existing_box is not None
            and existing_box.owner_pallet != pallet
        ):
            return RegisterOutcome.REPARENT_REJECTED

        # Containers are materialized before the item dedup check.
        pallet_entry = self._pallets.get(pallet)
        if pallet_entry is None:
            pallet_entry = Pallet()
            self._pallets[pallet] = pallet_entry
        box_entry = existing_box
        if box_entry is None:
            box_entry = Box(owner_pallet=pallet)
            self._boxes[box] = box_entry

        if item in self._items:
            return RegisterOutcome.DUPLICATE_ITEM

        self._items[item] = Item(box=box, pallet=pallet)
        pallet_entry.boxes.add(box)
        pallet_entry.items.add(item)
        box_entry.items.add(item)
        return RegisterOutcome.REGISTERED

    def register(self, record: Record) -> RegisterOutcome:
        return self.register_record(record.item, record.box, record.pallet)

    def has_pallet(self, code: str) -> bool:
        return code in self._pallets

    def has_box(self, code: str) -> bool:
        return code in self._boxes

    def has_item(self, code: str) -> bool:
        return code in self._items

    def get_pallet(self, code: str) -> Pallet:
        try:
            return self._pallets[code]
        except KeyError:
            raise ContainmentNotFoundError("pallet", code) from None

    def get_box(self, code: str) -> Box:
        try:
            return self._boxes[code]
        except KeyError:
            raise ContainmentNotFoundError("box", code) from None

    def get_item(self, code: str) -> Item:
        try:
            return self._items[code]
        except KeyError:
            raise ContainmentNotFoundError("item", code) from None

    def classify(self, code: str) -> CodeKind | None:
        """Resolve ``code`` with pallet > box > item priority."""

        if code in self._pallets:
            return CodeKind.PALLET
        if code in self._boxes:
            return CodeKind.BOX
        if code in self._items:
            return CodeKind.ITEM
        return None

    def describe(self, code: str) -> CodeDescription | None:
        kind = self.classify(code)
        if kind is CodeKind.PALLET:
            pallet = self._pallets[code]
            boxes = tuple(
                (box_id, len(self._boxes[box_id].items)) for box_id in sorted(pallet.boxes)
            )
            return CodeDescription(
                kind=kind, code=code, pallet=code, item_count=len(pallet.items), boxes=boxes
            )
        if kind is CodeKind.BOX:
            box = self._boxes[code]
            return CodeDescription(
                kind=kind, code=code, pallet=box.owner_pallet, box=code, item_count=len(box.items)
            )
        if kind is CodeKind.ITEM:
            item = self._items[code]
            return CodeDescription(kind=kind, code=code, pallet=item.pallet, box=item.box)
        return None

    def ownership_anomalies(self) -> list[OwnershipAnomaly]:
        """List boxes referenced from a pallet that does not own them."""

        anomalies: list[OwnershipAnomaly] = []
        for pallet_id, pallet in self._pallets.items():
            for box_id in sorted(pallet.boxes):
                owner = self._boxes[box_id].owner_pallet
                if owner != pallet_id:
                    anomalies.append(
                        OwnershipAnomaly(box=box_id, owner_pallet=owner, foreign_pallet=pallet_id)
                    )
        return anomalies

    def stats(self) -> StoreStats:
        return StoreStats(
            pallet_count=len(self._pallets),
            box_count=len(self._boxes),
            item_count=len(self._items),
        )

    def clear(self) -> None:
        self._pallets.clear()
        self._boxes.clear()
        self._items.clear()

    def pallets(self) -> Iterator[tuple[str, Pallet]]:
        return iter(self._pallets.items())

    def boxes(self) -> Iterator[tuple[str, Box]]:
        return iter(self._boxes.items())

    def items(self) -> Iterator[tuple[str, Item]]:
        return iter(self._items.items())
