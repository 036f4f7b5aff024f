"""
Merge attribute-identical artwork lines so they can share boxes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from artpack.core.utils_geometry import round_up_dimension
from artpack.models.item import Item

GroupKey = Tuple[str, int, int, int, str, str, str]


def grouping_key(item: Item) -> GroupKey:
    """
    Composite key of every attribute that affects packing.

    The footprint is rotation-normalised, so a 24 x 18 line and an 18 x 24
    line with otherwise equal attributes share a group.
    """
    footprint = item.footprint
    return (
        item.final_medium,
        footprint.long_side,
        footprint.short_side,
        round_up_dimension(item.depth),
        item.glazing,
        item.hardware,
        item.material_type,
    )


@dataclass
class GroupedItem:
    """Transient working record; ``remaining[i]`` tracks ``items[i]``."""

    key: GroupKey
    items: List[Item] = field(default_factory=list)
    remaining: List[int] = field(default_factory=list)

    @property
    def representative(self) -> Item:
        return self.items[0]

    @property
    def first_line_number(self) -> int:
        return self.items[0].line_number

    @property
    def quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def remaining_quantity(self) -> int:
        return sum(self.remaining)

    def add(self, item: Item) -> None:
        index = len(self.items)
        while index > 0 and self.items[index - 1].line_number > item.line_number:
            index -= 1
        self.items.insert(index, item)
        self.remaining.insert(index, item.quantity)

    def take(self, quantity: int) -> List[Tuple[Item, int]]:
        """Consume ``quantity`` pieces from members in line order."""
        if quantity > self.remaining_quantity:
            raise ValueError(
                f"cannot take {quantity} pieces from group starting at line "
                f"{self.first_line_number}; only {self.remaining_quantity} remain"
            )
        slices: List[Tuple[Item, int]] = []
        for index, item in enumerate(self.items):
            if quantity <= 0:
                break
            available = self.remaining[index]
            if available <= 0:
                continue
            taken = min(available, quantity)
            self.remaining[index] = available - taken
            quantity -= taken
            slices.append((item, taken))
        return slices

    def take_all(self) -> List[Tuple[Item, int]]:
        return self.take(self.remaining_quantity)


def group_items(items: Iterable[Item]) -> List[GroupedItem]:
    """Group items by :func:`grouping_key`, ordered by smallest member line number."""
    groups: Dict[GroupKey, GroupedItem] = {}
    for item in items:
        key = grouping_key(item)
        group = groups.get(key)
        if group is None:
            group = GroupedItem(key=key)
            groups[key] = group
        group.add(item)
    return sorted(groups.values(), key=lambda group: group.first_line_number)
