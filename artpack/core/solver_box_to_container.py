"""
Consolidation of packed boxes onto pallets, falling back to crates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from artpack.core.catalog import Catalog
from artpack.core.utils_geometry import utilization_pct
from artpack.models.box import PackedBox
from artpack.models.container import Container, ContainerType, box_deck_area
from artpack.models.plan import ReasonCode

logger = logging.getLogger(__name__)

ID_PREFIXES = {"pallet": "PAL", "crate": "CRT"}


@dataclass(frozen=True)
class DeliveryCapabilities:
    """What the destination can receive."""

    accepts_pallets: bool = True
    accepts_crates: bool = True


@dataclass
class ConsolidationResult:
    containers: List[Container] = field(default_factory=list)
    unplaced_boxes: List[PackedBox] = field(default_factory=list)
    unplaced_reasons: Dict[str, ReasonCode] = field(default_factory=dict)

    def container_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for container in self.containers:
            counts[container.category] = counts.get(container.category, 0) + 1
        return counts

    def to_dict(self) -> dict:
        return {
            "container_count": len(self.containers),
            "container_counts": self.container_counts(),
            "containers": [container.to_dict() for container in self.containers],
            "unplaced_boxes": [box.id for box in self.unplaced_boxes],
            "unplaced_reasons": {box_id: reason.value for box_id, reason in self.unplaced_reasons.items()},
        }


def _fits_envelope(box: PackedBox, container_type: ContainerType) -> bool:
    if container_type.glass_only and not box.contains_glass:
        return False
    return container_type.fits_box(box) and box_deck_area(box) <= container_type.deck_area


def _feasible_types(box: PackedBox, candidates: Sequence[ContainerType]) -> List[ContainerType]:
    """Types whose deck, load height and load weight can take this box on its own."""
    return [
        container_type
        for container_type in candidates
        if _fits_envelope(box, container_type) and box.total_weight <= container_type.max_load_weight
    ]


def _unplaced_reason(box: PackedBox, tiers: Sequence[Sequence[ContainerType]]) -> ReasonCode:
    """Weight-only rejection when some accepted type's envelope would have taken the box."""
    if any(_fits_envelope(box, container_type) for tier in tiers for container_type in tier):
        return ReasonCode.OVERWEIGHT_CONTAINER
    return ReasonCode.NO_CONTAINER


def _candidate_tiers(catalog: Catalog, capabilities: DeliveryCapabilities) -> List[Sequence[ContainerType]]:
    tiers: List[Sequence[ContainerType]] = []
    if capabilities.accepts_pallets and catalog.pallet_types:
        tiers.append(catalog.pallet_types)
    if capabilities.accepts_crates and catalog.crate_types:
        tiers.append(catalog.crate_types)
    return tiers


def consolidate_boxes(
    boxes: Iterable[PackedBox],
    catalog: Catalog,
    capabilities: Optional[DeliveryCapabilities] = None,
) -> ConsolidationResult:
    """
    Place each box, in order, onto pallets or crates.

    Pallet categories are tried smallest deck first. A box joins the first
    open container whose category is feasible for it and that still has deck
    area and weight budget; otherwise a container of the smallest feasible
    category is opened. Crates are only used when no pallet category is
    feasible (or pallets are not accepted). Boxes that fit nothing are
    returned in ``unplaced_boxes``, with ``OVERWEIGHT_CONTAINER`` recorded in
    ``unplaced_reasons`` when only the load weight ruled every type out and
    ``NO_CONTAINER`` otherwise.
    """
    capabilities = capabilities or DeliveryCapabilities()
    tiers = _candidate_tiers(catalog, capabilities)
    result = ConsolidationResult()
    sequences: Dict[str, int] = {}

    for box in boxes:
        placed = False
        for tier in tiers:
            feasible = _feasible_types(box, tier)
            if not feasible:
                continue
            feasible_ids = [container_type.id for container_type in feasible]

            target = None
            for type_id in feasible_ids:
                target = next(
                    (
                        container
                        for container in result.containers
                        if container.container_type.id == type_id and container.can_accommodate(box)
                    ),
                    None,
                )
                if target is not None:
                    break

            if target is None:
                container_type = feasible[0]
                kind = container_type.kind
                sequences[kind] = sequences.get(kind, 0) + 1
                target = Container(f"{ID_PREFIXES[kind]}-{sequences[kind]:03d}", container_type)
                result.containers.append(target)
                logger.debug("Opened %s (%s) for box %s", target.id, container_type.id, box.id)

            target.add_box(box)
            placed = True
            break

        if not placed:
            reason = _unplaced_reason(box, tiers)
            logger.warning("Box %s fits no accepted pallet or crate (%s)", box.id, reason.value)
            result.unplaced_boxes.append(box)
            result.unplaced_reasons[box.id] = reason

    logger.debug(
        "Consolidated %s boxes into %s containers, %s unplaced",
        sum(len(container.boxes) for container in result.containers),
        len(result.containers),
        len(result.unplaced_boxes),
    )
    return result


def average_area_utilisation(containers: Iterable[Container]) -> float:
    values = [utilization_pct(container.used_area, container.container_type.deck_area) for container in containers]
    return sum(values) / len(values) if values else 0.0
