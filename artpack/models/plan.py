"""
Packing plan aggregate and the records that hang off it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from artpack.models.box import PackedBox
from artpack.models.container import Container
from artpack.models.item import Item


class ReasonCode(str, Enum):
    """Why an item could not be packed automatically."""

    INVALID_DIMENSION = "invalid-dimension"
    OVERSIZE_FOOTPRINT = "oversize-footprint"
    OVERSIZE_WEIGHT = "oversize-weight"
    NO_CONTAINER = "no-container"
    OVERWEIGHT_CONTAINER = "overweight-container"


REASON_TEXT: Dict[ReasonCode, str] = {
    ReasonCode.INVALID_DIMENSION: "invalid dimensions or weight",
    ReasonCode.OVERSIZE_FOOTPRINT: "exceeds maximum box footprint",
    ReasonCode.OVERSIZE_WEIGHT: "exceeds maximum box weight",
    ReasonCode.NO_CONTAINER: "box exceeds every pallet and crate envelope",
    ReasonCode.OVERWEIGHT_CONTAINER: "box exceeds every pallet and crate load weight",
}

RECOMMENDED_ACTIONS: Dict[ReasonCode, str] = {
    ReasonCode.INVALID_DIMENSION: "Correct the item measurements and resubmit the line.",
    ReasonCode.OVERSIZE_FOOTPRINT: "Route to oversize freight handling or a custom crate.",
    ReasonCode.OVERSIZE_WEIGHT: "Arrange heavy-item freight or split the piece across custom packaging.",
    ReasonCode.NO_CONTAINER: "Engineer a custom crate or coordinate oversize freight for this box.",
    ReasonCode.OVERWEIGHT_CONTAINER: "Split the box contents or arrange heavy freight for this box.",
}


@dataclass(frozen=True)
class ManualHandlingEntry:
    item: Item
    quantity: int
    reason_code: ReasonCode
    reason: str
    recommended_action: str
    box_id: Optional[str] = None

    @classmethod
    def for_code(
        cls,
        item: Item,
        code: ReasonCode,
        quantity: Optional[int] = None,
        box_id: Optional[str] = None,
        detail: str = "",
    ) -> "ManualHandlingEntry":
        reason = REASON_TEXT[code]
        if detail:
            reason = f"{reason} ({detail})"
        return cls(
            item=item,
            quantity=item.quantity if quantity is None else quantity,
            reason_code=code,
            reason=reason,
            recommended_action=RECOMMENDED_ACTIONS[code],
            box_id=box_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line_number": self.item.line_number,
            "tag_number": self.item.tag_number,
            "quantity": self.quantity,
            "reason_code": self.reason_code.value,
            "reason": self.reason,
            "recommended_action": self.recommended_action,
            "box_id": self.box_id,
        }


@dataclass(frozen=True)
class WeightSummary:
    """Weights in pounds. ``shipment_weight`` equals artwork plus packaging."""

    artwork_weight: float
    box_tare_weight: float
    container_tare_weight: float
    manual_handling_weight: float

    @property
    def packaging_weight(self) -> float:
        return self.box_tare_weight + self.container_tare_weight

    @property
    def shipment_weight(self) -> float:
        return self.artwork_weight + self.packaging_weight


@dataclass(frozen=True)
class PlanMetrics:
    total_pieces: int
    packed_pieces: int
    manual_handling_pieces: int
    box_counts: Dict[str, int]
    container_counts: Dict[str, int]
    average_box_utilisation_pct: float
    average_container_area_pct: float

    @property
    def box_count(self) -> int:
        return sum(self.box_counts.values())

    @property
    def container_count(self) -> int:
        return sum(self.container_counts.values())


@dataclass(frozen=True)
class CostEstimate:
    shipping_cost: float
    handling_cost: float
    packaging_cost: float
    special_fees: float
    client_multiplier: float
    total_cost: float
    cost_per_pound: float
    recommendations: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class OversizedItemFlag:
    dimensions: str
    quantity: int
    recommendation: str


@dataclass(frozen=True)
class BusinessIntelligence:
    oversized_items: Tuple[OversizedItemFlag, ...]
    mediums_to_flag: Tuple[str, ...]
    risk_flags: Tuple[str, ...]


@dataclass(frozen=True)
class PackingPlan:
    """Root aggregate returned by :func:`artpack.core.planner.build_packing_plan`."""

    items: Tuple[Item, ...]
    boxes: Tuple[PackedBox, ...]
    containers: Tuple[Container, ...]
    manual_handling: Tuple[ManualHandlingEntry, ...]
    weight_summary: WeightSummary
    metrics: PlanMetrics
    cost: CostEstimate
    business_intelligence: BusinessIntelligence
    warnings: Tuple[str, ...] = field(default_factory=tuple)
    strategy: str = "first-fit"

    @property
    def requires_manual_handling(self) -> bool:
        return bool(self.manual_handling)

    def entries_for_line(self, line_number: int):
        """Box entries (with their box) that carry pieces of the given line."""
        return [
            (box, entry)
            for box in self.boxes
            for entry in box.entries
            if entry.item.line_number == line_number
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy,
            "items": [item.to_dict() for item in self.items],
            "boxes": [box.to_dict() for box in self.boxes],
            "containers": [container.to_dict() for container in self.containers],
            "manual_handling": [entry.to_dict() for entry in self.manual_handling],
            "weight_summary": {
                "artwork_weight": self.weight_summary.artwork_weight,
                "packaging_weight": self.weight_summary.packaging_weight,
                "manual_handling_weight": self.weight_summary.manual_handling_weight,
                "shipment_weight": self.weight_summary.shipment_weight,
            },
            "metrics": {
                "total_pieces": self.metrics.total_pieces,
                "packed_pieces": self.metrics.packed_pieces,
                "manual_handling_pieces": self.metrics.manual_handling_pieces,
                "box_counts": dict(self.metrics.box_counts),
                "container_counts": dict(self.metrics.container_counts),
            },
            "cost": {
                "shipping_cost": self.cost.shipping_cost,
                "handling_cost": self.cost.handling_cost,
                "packaging_cost": self.cost.packaging_cost,
                "special_fees": self.cost.special_fees,
                "total_cost": self.cost.total_cost,
                "cost_per_pound": self.cost.cost_per_pound,
                "recommendations": list(self.cost.recommendations),
            },
            "business_intelligence": {
                "oversized_items": [
                    {"dimensions": flag.dimensions, "quantity": flag.quantity, "recommendation": flag.recommendation}
                    for flag in self.business_intelligence.oversized_items
                ],
                "mediums_to_flag": list(self.business_intelligence.mediums_to_flag),
                "risk_flags": list(self.business_intelligence.risk_flags),
            },
            "warnings": list(self.warnings),
        }
