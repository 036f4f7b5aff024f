"""
Data model representing shipping boxes.

Dimensions are internal dimensions in inches and weights are in pounds.
Artwork stands on edge inside a box: the artwork face lies in the
length x height plane of the box and its depth runs across the box width.

``BoxType`` is an immutable catalog entry; ``PackedBox`` is one physical box
instance produced by the allocator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from artpack.core.utils_geometry import (
    calculate_volume,
    fits_within,
    get_largest_dimension,
    round_up_dimension,
    utilization_pct,
)
from artpack.models.item import Item


def _require_positive(name: str, value: float) -> float:
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")
    return value


@dataclass(frozen=True)
class BoxType:
    """Catalog entry for a box size."""

    id: str
    length: float
    width: float
    height: float
    max_weight: float  # content weight, tare excluded
    max_pieces: int
    tare_weight: float = field(default=0)
    max_length: Optional[float] = field(default=None)  # telescoping boxes only
    name: str = field(default="Box")

    def __post_init__(self) -> None:
        object.__setattr__(self, "length", float(_require_positive("length", self.length)))
        object.__setattr__(self, "width", float(_require_positive("width", self.width)))
        object.__setattr__(self, "height", float(_require_positive("height", self.height)))
        object.__setattr__(self, "max_weight", float(_require_positive("max_weight", self.max_weight)))
        object.__setattr__(self, "max_pieces", int(_require_positive("max_pieces", self.max_pieces)))
        if self.tare_weight < 0:
            raise ValueError("tare_weight cannot be negative")
        object.__setattr__(self, "tare_weight", float(self.tare_weight))
        if self.max_length is not None:
            if self.max_length < self.length:
                raise ValueError("max_length must be >= length")
            object.__setattr__(self, "max_length", float(self.max_length))

    @property
    def is_telescoping(self) -> bool:
        return self.max_length is not None and self.max_length > self.length

    @property
    def envelope_length(self) -> float:
        """Longest length this box type can reach (extended when telescoping)."""
        return self.max_length if self.is_telescoping else self.length

    def fits_item(self, item: Item) -> bool:
        return fits_within(item.width, item.height, item.depth, self.envelope_length, self.height, self.width)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "length": self.length,
            "width": self.width,
            "height": self.height,
            "max_length": self.max_length,
            "max_weight": self.max_weight,
            "max_pieces": self.max_pieces,
            "tare_weight": self.tare_weight,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "BoxType":
        """Instantiate from a raw configuration dictionary."""
        max_length = payload.get("max_length")
        return cls(
            id=str(payload["id"]),
            name=str(payload.get("name", payload["id"])),
            length=float(payload["length"]),
            width=float(payload["width"]),
            height=float(payload["height"]),
            max_weight=float(payload["max_weight"]),
            max_pieces=int(payload["max_pieces"]),
            tare_weight=float(payload.get("tare_weight", 0)),
            max_length=float(max_length) if max_length is not None else None,
        )


@dataclass(frozen=True)
class BoxEntry:
    """Quantity of one line item allocated into one box."""

    item: Item
    allocated_quantity: int
    allocated_weight: float


class PackedBox:
    """A physical shipping box holding one or more box entries."""

    def __init__(
        self,
        box_id: str,
        box_type: BoxType,
        material_type: Optional[str] = None,
        mixed_materials: bool = False,
    ) -> None:
        self.id = box_id
        self.box_type = box_type
        self.material_type = material_type
        self.mixed_materials = mixed_materials
        self.length = box_type.length
        self.width = box_type.width
        self.height = box_type.height
        self._entries: List[BoxEntry] = []
        self._sealed = False

    def __repr__(self) -> str:
        return (
            f"PackedBox(id={self.id!r}, type={self.box_type.id!r}, pieces={self.total_pieces}, "
            f"total_weight={self.total_weight:.2f})"
        )

    @property
    def entries(self) -> Tuple[BoxEntry, ...]:
        return tuple(self._entries)

    @property
    def tare_weight(self) -> float:
        return self.box_type.tare_weight

    @property
    def content_weight(self) -> float:
        return sum(entry.allocated_weight for entry in self._entries)

    @property
    def total_weight(self) -> float:
        return self.tare_weight + self.content_weight

    @property
    def total_pieces(self) -> int:
        return sum(entry.allocated_quantity for entry in self._entries)

    @property
    def contains_glass(self) -> bool:
        return any(entry.item.flags.contains_glass for entry in self._entries)

    @property
    def materials(self) -> List[str]:
        """Material types present, in packing order."""
        seen: List[str] = []
        for entry in self._entries:
            if entry.item.material_type not in seen:
                seen.append(entry.item.material_type)
        return seen

    @property
    def stacked_depth(self) -> int:
        """Width taken across the box by the pieces standing in it."""
        return sum(round_up_dimension(entry.item.depth) * entry.allocated_quantity for entry in self._entries)

    @property
    def telescoped_length(self) -> Optional[float]:
        """Extended length when the box had to telescope, otherwise ``None``."""
        return self.length if self.length > self.box_type.length else None

    @property
    def dimensions(self) -> Tuple[float, float, float]:
        return self.length, self.width, self.height

    def remaining_weight(self) -> float:
        return max(0.0, self.box_type.max_weight - self.content_weight)

    def accepts(self, item: Item) -> bool:
        """Same material constraint (or none yet, or a mixed box) and the item fits the envelope."""
        if not self.mixed_materials and self.material_type is not None and self.material_type != item.material_type:
            return False
        return self.box_type.fits_item(item)

    def add(self, item: Item, quantity: int) -> BoxEntry:
        if self._sealed:
            raise RuntimeError(f"Box {self.id} is sealed")
        if quantity <= 0:
            raise ValueError(f"quantity must be positive, got {quantity!r}")
        if not self.accepts(item):
            raise ValueError(f"Line {item.line_number} does not fit box {self.id}")
        entry = BoxEntry(item=item, allocated_quantity=quantity, allocated_weight=item.unit_weight * quantity)
        self._entries.append(entry)
        if self.material_type is None:
            self.material_type = item.material_type
        needed = get_largest_dimension(item.width, item.height, item.depth)
        if self.box_type.is_telescoping and needed > round_up_dimension(self.length):
            self.length = float(min(needed, self.box_type.envelope_length))
        return entry

    def seal(self) -> None:
        self._sealed = True

    def volume_utilisation_pct(self) -> float:
        used = sum(
            calculate_volume(entry.item.width, entry.item.height, entry.item.depth) * entry.allocated_quantity
            for entry in self._entries
        )
        return utilization_pct(used, calculate_volume(self.length, self.width, self.height))

    def line_numbers(self) -> List[int]:
        return sorted({entry.item.line_number for entry in self._entries})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.box_type.id,
            "length": self.length,
            "width": self.width,
            "height": self.height,
            "pieces": self.total_pieces,
            "materials": self.materials,
            "tare_weight": self.tare_weight,
            "content_weight": self.content_weight,
            "total_weight": self.total_weight,
            "telescoped_length": self.telescoped_length,
            "items": [
                {
                    "line_number": entry.item.line_number,
                    "tag_number": entry.item.tag_number,
                    "quantity": entry.allocated_quantity,
                    "weight": entry.allocated_weight,
                }
                for entry in self._entries
            ],
        }
