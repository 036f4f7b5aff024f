"""
Greedy allocation of grouped artwork lines into shipping boxes.

Three packing strategies share the same greedy loop and differ only in which
open boxes a piece may join and how many pieces a box may hold:

``first-fit``
    One material per box; the box holds at most the material's pieces-per-box
    limit. Pieces join the earliest open box of the same type.
``balanced``
    Materials may share a box; the limit is the tightest pieces-per-box rule
    among the materials in it. Pieces join the earliest open box of the same
    type.
``minimize-boxes``
    One material per box; the limit is the stacking depth across the box
    width instead of a piece count. Pieces join the most recently opened box
    of any type that fits them.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from artpack.core.catalog import Catalog
from artpack.core.errors import UnknownStrategyError
from artpack.core.grouping import GroupedItem
from artpack.core.manual_handling import ManualHandlingDetector, ReasonCode
from artpack.core.utils_geometry import round_up_dimension, utilization_pct
from artpack.models.box import BoxType, PackedBox
from artpack.models.item import Item

logger = logging.getLogger(__name__)

WEIGHT_EPSILON = 1e-9  # tolerance for float sums of per-piece weights

FIRST_FIT = "first-fit"
BALANCED = "balanced"
MINIMIZE_BOXES = "minimize-boxes"
STRATEGIES = (FIRST_FIT, BALANCED, MINIMIZE_BOXES)
DEFAULT_STRATEGY = FIRST_FIT


@dataclass
class BoxAllocationResult:
    boxes: List[PackedBox] = field(default_factory=list)
    strategy: str = DEFAULT_STRATEGY

    @property
    def total_pieces(self) -> int:
        return sum(box.total_pieces for box in self.boxes)

    def box_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for box in self.boxes:
            counts[box.box_type.id] = counts.get(box.box_type.id, 0) + 1
        return counts

    def to_dict(self) -> dict:
        return {
            "strategy": self.strategy,
            "box_count": len(self.boxes),
            "box_counts": self.box_counts(),
            "total_pieces": self.total_pieces,
            "boxes": [box.to_dict() for box in self.boxes],
        }


def validate_strategy(strategy: str) -> str:
    if strategy not in STRATEGIES:
        raise UnknownStrategyError(
            f"Unknown packing strategy: {strategy!r} (expected one of {', '.join(STRATEGIES)})"
        )
    return strategy


def resolve_box_type(
    item: Item,
    catalog: Catalog,
    client_name: str = "",
) -> Tuple[Optional[BoxType], Optional[ReasonCode]]:
    """
    Smallest catalog box type that fits the item and can carry one piece.

    Returns ``(box_type, None)`` on success, otherwise ``(None, reason)``:
    ``OVERSIZE_FOOTPRINT`` when no envelope fits and ``OVERSIZE_WEIGHT`` when
    the envelopes that fit are all too light for a single piece.
    """
    fits_any = False
    for box_type in catalog.box_types:
        if not box_type.fits_item(item):
            continue
        fits_any = True
        if item.unit_weight > box_type.max_weight + WEIGHT_EPSILON:
            continue
        if catalog.box_capacity(box_type, item.material_type, client_name) <= 0:
            continue
        return box_type, None
    return None, ReasonCode.OVERSIZE_WEIGHT if fits_any else ReasonCode.OVERSIZE_FOOTPRINT


def _piece_room(box: PackedBox, item: Item, catalog: Catalog, strategy: str, client_name: str) -> int:
    """Additional pieces of ``item`` the box can hold, ignoring weight."""
    if strategy == MINIMIZE_BOXES:
        free_depth = round_up_dimension(box.width) - box.stacked_depth
        return max(0, free_depth // round_up_dimension(item.depth))

    materials = [item.material_type]
    if strategy == BALANCED:
        materials.extend(box.materials)
    limit = min(catalog.box_capacity(box.box_type, material, client_name) for material in materials)
    return max(0, limit - box.total_pieces)


def _room_for(box: PackedBox, item: Item, piece_room: int) -> int:
    """Number of additional pieces of ``item`` the box can take."""
    if piece_room <= 0:
        return 0
    weight_room = int(math.floor((box.remaining_weight() + WEIGHT_EPSILON) / item.unit_weight))
    return max(0, min(piece_room, weight_room))


def _open_boxes(boxes: Sequence[PackedBox], box_type: BoxType, strategy: str) -> Iterable[PackedBox]:
    if strategy == MINIMIZE_BOXES:
        return reversed(boxes)
    return (box for box in boxes if box.box_type.id == box_type.id)


def allocate_boxes(
    groups: Iterable[GroupedItem],
    catalog: Catalog,
    detector: ManualHandlingDetector,
    id_prefix: str = "BOX",
    strategy: str = DEFAULT_STRATEGY,
    client_name: str = "",
) -> BoxAllocationResult:
    """
    Allocate every piece of every group into boxes, in ascending line order.

    Pieces go into an open box that ``strategy`` allows and that has room in
    both pieces and weight; a new box of the smallest fitting type is opened
    only when none has room. ``client_name`` selects client pieces-per-box
    overrides from the catalog. Lines that no box type can take are handed to
    ``detector`` and consumed from the group so quantities stay conserved.
    """
    validate_strategy(strategy)
    result = BoxAllocationResult(strategy=strategy)
    sequence = 0

    for group in groups:
        for index, member in enumerate(group.items):
            if group.remaining[index] <= 0:
                continue

            box_type, reason = resolve_box_type(member, catalog, client_name)
            if box_type is None:
                for item, quantity in group.take(group.remaining[index]):
                    detector.flag_item(item, reason, quantity=quantity)
                continue

            while group.remaining[index] > 0:
                target = None
                room = 0
                for box in _open_boxes(result.boxes, box_type, strategy):
                    if not box.accepts(member):
                        continue
                    room = _room_for(box, member, _piece_room(box, member, catalog, strategy, client_name))
                    if room > 0:
                        target = box
                        break

                if target is None:
                    sequence += 1
                    target = PackedBox(
                        f"{id_prefix}-{sequence:03d}",
                        box_type,
                        mixed_materials=strategy == BALANCED,
                    )
                    room = _room_for(target, member, _piece_room(target, member, catalog, strategy, client_name))
                    if room <= 0:
                        raise RuntimeError(
                            f"Line {member.line_number}: empty {box_type.id} box cannot take a single piece"
                        )
                    result.boxes.append(target)
                    logger.debug("Opened %s (%s) for line %s", target.id, box_type.id, member.line_number)

                for item, quantity in group.take(min(room, group.remaining[index])):
                    target.add(item, quantity)

    logger.debug(
        "Allocated %s pieces into %s boxes with %s: %s",
        result.total_pieces,
        len(result.boxes),
        strategy,
        result.box_counts(),
    )
    return result


def average_box_utilisation(boxes: Iterable[PackedBox]) -> float:
    """Mean content-weight utilisation of the given boxes, as a percentage."""
    values = [utilization_pct(box.content_weight, box.box_type.max_weight) for box in boxes]
    return sum(values) / len(values) if values else 0.0
