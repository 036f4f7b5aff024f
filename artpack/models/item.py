"""
Data model representing one artwork line item.

Dimensions are outside frame sizes in inches and weight is in pounds. The
``weight`` field is the total for the whole line (all pieces); use
``unit_weight`` for a single piece. Geometry is validated by the planner
through :mod:`artpack.core.utils_geometry` so that malformed rows can either
abort a computation or be routed to manual handling.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from artpack.core.errors import UnknownMaterialError
from artpack.core.materials import determine_material_type, estimate_total_weight
from artpack.core.utils_geometry import Footprint, get_planar_footprint

DEFAULT_DEPTH_IN = 4.0
LARGE_BOX_THRESHOLD_IN = 36.0
OVERSIZE_THRESHOLD_IN = 43.5


@dataclass(frozen=True)
class ItemFlags:
    is_oversized: bool
    requires_large_box: bool
    contains_glass: bool


@dataclass(frozen=True)
class Item:
    """
    Immutable artwork line item.

    Only ``quantity`` is checked on construction. Dimensions and weight are
    validated by the planner (``ManualHandlingDetector.check_item``) so that a
    malformed row can either abort the computation in strict mode or be routed
    to manual handling in lenient mode instead of failing at ingestion.
    """

    line_number: int
    tag_number: int
    quantity: int
    final_medium: str
    width: float
    height: float
    weight: float  # pounds, whole line
    material_type: str
    glazing: str = field(default="")
    hardware: str = field(default="")
    depth: float = field(default=DEFAULT_DEPTH_IN)

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValueError(f"Line {self.line_number}: quantity must be an integer, got {self.quantity!r}")
        if self.quantity < 1:
            raise ValueError(f"Line {self.line_number}: quantity must be at least 1, got {self.quantity!r}")
        object.__setattr__(self, "glazing", self.glazing or "")
        object.__setattr__(self, "hardware", self.hardware or "")

    @property
    def unit_weight(self) -> float:
        return self.weight / self.quantity

    @property
    def footprint(self) -> Footprint:
        return get_planar_footprint(self.width, self.height)

    @property
    def flags(self) -> ItemFlags:
        return ItemFlags(
            is_oversized=self.width > OVERSIZE_THRESHOLD_IN or self.height > OVERSIZE_THRESHOLD_IN,
            requires_large_box=self.width > LARGE_BOX_THRESHOLD_IN or self.height > LARGE_BOX_THRESHOLD_IN,
            contains_glass="glass" in self.glazing.lower(),
        )

    def describe_size(self) -> str:
        footprint = self.footprint
        return f'{footprint.long_side}" x {footprint.short_side}"'

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the item for reporting."""
        return {
            "line_number": self.line_number,
            "tag_number": self.tag_number,
            "quantity": self.quantity,
            "final_medium": self.final_medium,
            "width": self.width,
            "height": self.height,
            "depth": self.depth,
            "weight": self.weight,
            "material_type": self.material_type,
            "glazing": self.glazing,
            "hardware": self.hardware,
        }

    @classmethod
    def from_record(cls, payload: Mapping[str, Any]) -> "Item":
        """
        Instantiate from an already-parsed input row.

        ``material_type`` is derived from the medium and glazing when absent,
        and ``weight`` is estimated from the surface area when absent.
        """
        final_medium = str(payload["final_medium"])
        glazing = str(payload.get("glazing") or "")
        width = float(payload["width"])
        height = float(payload["height"])
        quantity = int(payload["quantity"])
        material_type = str(payload.get("material_type") or determine_material_type(final_medium, glazing))
        line_number = int(payload["line_number"])
        weight = payload.get("weight")
        if weight in (None, ""):
            try:
                weight = estimate_total_weight(width, height, material_type, quantity)
            except UnknownMaterialError as exc:
                raise exc.for_line(line_number) from exc
        return cls(
            line_number=line_number,
            tag_number=int(payload.get("tag_number", line_number)),
            quantity=quantity,
            final_medium=final_medium,
            width=width,
            height=height,
            weight=float(weight),
            material_type=material_type,
            glazing=glazing,
            hardware=str(payload.get("hardware") or ""),
            depth=float(payload.get("depth") or DEFAULT_DEPTH_IN),
        )
