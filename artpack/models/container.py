"""
Pallet and crate models describing the containers that carry packed boxes.

``ContainerType`` is an immutable catalog entry. ``length`` x ``width`` is the
usable deck, ``base_height`` is added to the tallest box to get the loaded
height (pallet deck or crate padding), and ``max_load_height`` bounds the
height of a single box standing on the deck.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

from artpack.core.utils_geometry import (
    calculate_surface_area,
    fits_within,
    round_up_dimension,
    utilization_pct,
)
from artpack.models.box import PackedBox

CONTAINER_KINDS = ("pallet", "crate")

HEIGHT_RECOMMENDATION_IN = 84
HEIGHT_LIMIT_IN = 102


def _require_positive(name: str, value: float) -> float:
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")
    return value


@dataclass(frozen=True)
class ContainerType:
    """Catalog entry for a pallet category or crate type."""

    id: str
    kind: str
    length: float
    width: float
    max_load_height: float
    max_load_weight: float  # sum of box weights, tare excluded
    tare_weight: float
    base_height: float = field(default=0)
    glass_only: bool = field(default=False)
    oversize: bool = field(default=False)
    name: str = field(default="Container")

    def __post_init__(self) -> None:
        if self.kind not in CONTAINER_KINDS:
            raise ValueError(f"kind must be one of {CONTAINER_KINDS}, got {self.kind!r}")
        object.__setattr__(self, "length", float(_require_positive("length", self.length)))
        object.__setattr__(self, "width", float(_require_positive("width", self.width)))
        object.__setattr__(self, "max_load_height", float(_require_positive("max_load_height", self.max_load_height)))
        object.__setattr__(self, "max_load_weight", float(_require_positive("max_load_weight", self.max_load_weight)))
        if self.tare_weight < 0:
            raise ValueError("tare_weight cannot be negative")
        if self.base_height < 0:
            raise ValueError("base_height cannot be negative")
        object.__setattr__(self, "tare_weight", float(self.tare_weight))
        object.__setattr__(self, "base_height", float(self.base_height))

    @property
    def deck_area(self) -> float:
        """Return deck footprint area in square inches."""
        return calculate_surface_area(self.length, self.width)

    @property
    def category(self) -> str:
        return self.id

    def fits_box(self, box: PackedBox) -> bool:
        return fits_within(box.length, box.width, box.height, self.length, self.width, self.max_load_height)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind,
            "length": self.length,
            "width": self.width,
            "base_height": self.base_height,
            "max_load_height": self.max_load_height,
            "max_load_weight": self.max_load_weight,
            "tare_weight": self.tare_weight,
            "glass_only": self.glass_only,
            "oversize": self.oversize,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], kind: str) -> "ContainerType":
        """Instantiate from a raw configuration dictionary."""
        return cls(
            id=str(payload["id"]),
            name=str(payload.get("name", payload["id"])),
            kind=kind,
            length=float(payload["length"]),
            width=float(payload["width"]),
            base_height=float(payload.get("base_height", 0)),
            max_load_height=float(payload["max_load_height"]),
            max_load_weight=float(payload["max_load_weight"]),
            tare_weight=float(payload["tare_weight"]),
            glass_only=bool(payload.get("glass_only", False)),
            oversize=bool(payload.get("oversize", False)),
        )


def box_deck_area(box: PackedBox) -> float:
    """Deck area a standing box occupies, measured on rounded-up dimensions."""
    return float(calculate_surface_area(round_up_dimension(box.length), round_up_dimension(box.width)))


class Container:
    """A pallet or crate loaded with packed boxes."""

    def __init__(self, container_id: str, container_type: ContainerType) -> None:
        self.id = container_id
        self.container_type = container_type
        self._boxes: List[PackedBox] = []
        self._sealed = False

    def __repr__(self) -> str:
        return (
            f"Container(id={self.id!r}, type={self.container_type.id!r}, boxes={len(self._boxes)}, "
            f"total_weight={self.total_weight:.2f})"
        )

    @property
    def kind(self) -> str:
        return self.container_type.kind

    @property
    def category(self) -> str:
        return self.container_type.category

    @property
    def boxes(self) -> Tuple[PackedBox, ...]:
        return tuple(self._boxes)

    @property
    def tare_weight(self) -> float:
        return self.container_type.tare_weight

    @property
    def content_weight(self) -> float:
        return sum(box.total_weight for box in self._boxes)

    @property
    def total_weight(self) -> float:
        return self.tare_weight + self.content_weight

    @property
    def total_pieces(self) -> int:
        return sum(box.total_pieces for box in self._boxes)

    @property
    def used_area(self) -> float:
        return sum(box_deck_area(box) for box in self._boxes)

    @property
    def length(self) -> float:
        return max([self.container_type.length] + [box.length for box in self._boxes])

    @property
    def width(self) -> float:
        return max([self.container_type.width] + [box.width for box in self._boxes])

    @property
    def height(self) -> float:
        tallest = max((box.height for box in self._boxes), default=0.0)
        return self.container_type.base_height + tallest

    @property
    def dimensions(self) -> Tuple[float, float, float]:
        return self.length, self.width, self.height

    @property
    def warnings(self) -> List[str]:
        label = "Crate" if self.kind == "crate" else "Pallet"
        if self.height > HEIGHT_LIMIT_IN:
            action = "engineer custom crate" if self.kind == "crate" else "split required"
            return [f'{label} {self.id} height {self.height:g}" exceeds {HEIGHT_LIMIT_IN}" limit; {action}.']
        if self.height > HEIGHT_RECOMMENDATION_IN:
            return [f'{label} {self.id} height {self.height:g}" exceeds {HEIGHT_RECOMMENDATION_IN}" recommendation.']
        return []

    def remaining_area(self) -> float:
        return max(0.0, self.container_type.deck_area - self.used_area)

    def remaining_weight(self) -> float:
        return max(0.0, self.container_type.max_load_weight - self.content_weight)

    def can_accommodate(self, box: PackedBox) -> bool:
        if self._sealed or not self.container_type.fits_box(box):
            return False
        if box_deck_area(box) > self.remaining_area():
            return False
        return box.total_weight <= self.remaining_weight()

    def add_box(self, box: PackedBox) -> None:
        if not self.can_accommodate(box):
            raise ValueError(f"Box {box.id} does not fit container {self.id}")
        self._boxes.append(box)

    def seal(self) -> None:
        self._sealed = True
        for box in self._boxes:
            box.seal()

    def area_utilisation_pct(self) -> float:
        return utilization_pct(self.used_area, self.container_type.deck_area)

    def weight_utilisation_pct(self) -> float:
        return utilization_pct(self.content_weight, self.container_type.max_load_weight)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "category": self.category,
            "length": self.length,
            "width": self.width,
            "height": self.height,
            "tare_weight": self.tare_weight,
            "content_weight": self.content_weight,
            "total_weight": self.total_weight,
            "boxes": [box.id for box in self._boxes],
            "warnings": self.warnings,
        }
