"""
Plan assembly: runs grouping, box allocation and container consolidation and
freezes the outcome into a :class:`PackingPlan`.

``build_packing_plan`` is pure. It performs no I/O and keeps no state between
calls, so concurrent callers only need their own inputs.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Iterable, List, Optional, Sequence

from artpack.core.catalog import Catalog, load_catalog
from artpack.core.cost import estimate_cost
from artpack.core.errors import AllocationInvariantError, PlanComputationError
from artpack.core.grouping import group_items
from artpack.core.manual_handling import ManualHandlingDetector, ReasonCode
from artpack.core.solver_box_to_container import (
    DeliveryCapabilities,
    average_area_utilisation,
    consolidate_boxes,
)
from artpack.core.solver_item_to_box import (
    DEFAULT_STRATEGY,
    WEIGHT_EPSILON,
    allocate_boxes,
    average_box_utilisation,
    validate_strategy,
)
from artpack.models.box import PackedBox
from artpack.models.container import Container
from artpack.models.item import Item
from artpack.models.plan import (
    BusinessIntelligence,
    ManualHandlingEntry,
    OversizedItemFlag,
    PackingPlan,
    PlanMetrics,
    WeightSummary,
)

logger = logging.getLogger(__name__)

MEDIUM_FLAGS = (
    ("wall decor", "Wall Decor - include item URL for documentation"),
    ("metal", "Metal Prints - verify protective wrapping"),
    ("tactile", "Tactile pieces - keep raised surfaces free of contact"),
    ("float mount", "Float-mounted pieces - confirm mount hardware is secured"),
)


def verify_quantities(
    items: Sequence[Item],
    boxes: Iterable[PackedBox],
    manual_entries: Iterable[ManualHandlingEntry],
) -> None:
    """
    Every input piece must end up in exactly one box entry or manual-handling entry.

    The same ``Item`` instance may appear more than once in ``items``; its
    expected count is then the sum over every occurrence.
    """
    expected: Dict[int, int] = {}
    unique: Dict[int, Item] = {}
    for item in items:
        expected[id(item)] = expected.get(id(item), 0) + item.quantity
        unique.setdefault(id(item), item)
    accounted: Dict[int, int] = {key: 0 for key in expected}
    for box in boxes:
        for entry in box.entries:
            if id(entry.item) not in accounted:
                raise AllocationInvariantError(f"box {box.id} holds line {entry.item.line_number} not in the input")
            accounted[id(entry.item)] += entry.allocated_quantity
    for entry in manual_entries:
        if id(entry.item) not in accounted:
            raise AllocationInvariantError(f"manual-handling entry for unknown line {entry.item.line_number}")
        accounted[id(entry.item)] += entry.quantity
    for key, item in unique.items():
        if accounted[key] != expected[key]:
            raise AllocationInvariantError(
                f"Line {item.line_number}: {accounted[key]} pieces accounted for, expected {expected[key]}"
            )


def verify_weights(boxes: Iterable[PackedBox], containers: Iterable[Container]) -> None:
    for box in boxes:
        if box.content_weight > box.box_type.max_weight + WEIGHT_EPSILON:
            raise AllocationInvariantError(
                f"box {box.id} carries {box.content_weight:g} lbs over its {box.box_type.max_weight:g} lbs limit"
            )
    for container in containers:
        if container.content_weight > container.container_type.max_load_weight + WEIGHT_EPSILON:
            raise AllocationInvariantError(
                f"{container.kind} {container.id} carries {container.content_weight:g} lbs over its "
                f"{container.container_type.max_load_weight:g} lbs limit"
            )


def _entry_weight(entry: ManualHandlingEntry) -> float:
    weight = entry.item.weight
    if isinstance(weight, bool) or not isinstance(weight, (int, float)):
        return 0.0
    if not math.isfinite(weight) or weight <= 0:
        return 0.0
    return entry.item.unit_weight * entry.quantity


def _counts(keys: Iterable[str]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for key in keys:
        counts[key] = counts.get(key, 0) + 1
    return counts


def build_business_intelligence(
    boxes: Sequence[PackedBox],
    manual_entries: Sequence[ManualHandlingEntry],
) -> BusinessIntelligence:
    oversized: Dict[str, List[int]] = {}
    recommendations: Dict[str, str] = {}
    items: List[Item] = []
    for box in boxes:
        for entry in box.entries:
            items.append(entry.item)
            flags = entry.item.flags
            if not flags.requires_large_box:
                continue
            size = entry.item.describe_size()
            oversized.setdefault(size, []).append(entry.allocated_quantity)
            if flags.is_oversized:
                recommendations[size] = "Oversize piece - confirm freight handling"
            else:
                recommendations.setdefault(size, "Requires large box")

    oversized_items = tuple(
        OversizedItemFlag(dimensions=size, quantity=sum(quantities), recommendation=recommendations[size])
        for size, quantities in oversized.items()
    )

    mediums: List[str] = []
    for item in items:
        medium = item.final_medium.lower()
        for needle, message in MEDIUM_FLAGS:
            if needle in medium and message not in mediums:
                mediums.append(message)

    risk_flags: List[str] = []
    if any(item.flags.contains_glass for item in items):
        risk_flags.append("Handle glass-framed pieces with caution")
    if any(item.material_type == "MIRROR" for item in items):
        risk_flags.append("Mirror items require crate review")
    if any(box.telescoped_length is not None for box in boxes):
        risk_flags.append("Telescoping boxes extended beyond standard length")
    if manual_entries:
        pieces = sum(entry.quantity for entry in manual_entries)
        risk_flags.append(f"{pieces} piece(s) require manual handling")
    if not risk_flags:
        risk_flags.append("No high-risk items detected")

    return BusinessIntelligence(
        oversized_items=oversized_items,
        mediums_to_flag=tuple(mediums),
        risk_flags=tuple(risk_flags),
    )


def build_packing_plan(
    items: Iterable[Item],
    catalog: Optional[Catalog] = None,
    *,
    capabilities: Optional[DeliveryCapabilities] = None,
    client_name: str = "",
    strict: bool = True,
    strategy: str = DEFAULT_STRATEGY,
) -> PackingPlan:
    """
    Compute a complete packing plan for the given artwork lines.

    Raises :class:`PlanComputationError` when ``items`` is empty and, in strict
    mode, :class:`InvalidDimensionError` for the first line with an invalid
    dimension or weight. Pieces that cannot be boxed or containerised are
    reported in ``plan.manual_handling`` instead of raising. An unknown
    ``strategy`` raises :class:`UnknownStrategyError`.

    ``strategy`` picks the box packing strategy (``first-fit``, ``balanced``
    or ``minimize-boxes``) and ``client_name`` selects both client
    pieces-per-box overrides and the cost multiplier.
    """
    items = tuple(items)
    if not items:
        raise PlanComputationError("cannot compute a packing plan without items")
    validate_strategy(strategy)
    catalog = catalog if catalog is not None else load_catalog()
    capabilities = capabilities or DeliveryCapabilities()

    detector = ManualHandlingDetector(strict=strict)
    valid_items = [item for item in items if detector.check_item(item)]

    groups = group_items(valid_items)
    allocation = allocate_boxes(groups, catalog, detector, strategy=strategy, client_name=client_name)
    consolidation = consolidate_boxes(allocation.boxes, catalog, capabilities)

    unplaced_ids = {box.id for box in consolidation.unplaced_boxes}
    for box in consolidation.unplaced_boxes:
        detector.flag_box(box, consolidation.unplaced_reasons.get(box.id, ReasonCode.NO_CONTAINER))
    boxes = [box for box in allocation.boxes if box.id not in unplaced_ids]
    containers = consolidation.containers
    manual_entries = detector.entries

    verify_quantities(items, boxes, manual_entries)
    verify_weights(boxes, containers)

    artwork_weight = sum(box.content_weight for box in boxes)
    weight_summary = WeightSummary(
        artwork_weight=artwork_weight,
        box_tare_weight=sum(box.tare_weight for box in boxes),
        container_tare_weight=sum(container.tare_weight for container in containers),
        manual_handling_weight=sum(_entry_weight(entry) for entry in manual_entries),
    )

    metrics = PlanMetrics(
        total_pieces=sum(item.quantity for item in items),
        packed_pieces=sum(box.total_pieces for box in boxes),
        manual_handling_pieces=detector.total_pieces,
        box_counts=_counts(box.box_type.id for box in boxes),
        container_counts=_counts(container.category for container in containers),
        average_box_utilisation_pct=average_box_utilisation(boxes),
        average_container_area_pct=average_area_utilisation(containers),
    )

    cost = estimate_cost(
        boxes,
        containers,
        shipment_weight=weight_summary.shipment_weight,
        artwork_weight=weight_summary.artwork_weight,
        packaging_weight=weight_summary.packaging_weight,
        cost_model=catalog.cost_model,
        client_name=client_name,
    )

    warnings: List[str] = []
    warnings.extend(catalog.warnings_for(item.material_type for item in valid_items))
    for container in containers:
        warnings.extend(container.warnings)
    if manual_entries:
        warnings.append(
            f"{metrics.manual_handling_pieces} piece(s) across {len(manual_entries)} entr"
            f"{'y' if len(manual_entries) == 1 else 'ies'} require manual handling"
        )

    for container in containers:
        container.seal()
    for box in boxes:
        box.seal()

    logger.info(
        "Packing plan: %s pieces, %s boxes, %s containers, %s manual-handling pieces, %.1f lbs shipment",
        metrics.total_pieces,
        len(boxes),
        len(containers),
        metrics.manual_handling_pieces,
        weight_summary.shipment_weight,
    )

    return PackingPlan(
        items=items,
        boxes=tuple(boxes),
        containers=tuple(containers),
        manual_handling=manual_entries,
        weight_summary=weight_summary,
        metrics=metrics,
        cost=cost,
        business_intelligence=build_business_intelligence(boxes, manual_entries),
        warnings=tuple(warnings),
        strategy=strategy,
    )
