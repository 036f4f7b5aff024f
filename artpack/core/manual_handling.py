"""
Collects the items the automatic packer cannot handle.

Exhausting the catalog is not an error: the affected pieces are recorded as
manual-handling entries with a reason code and a recommended action, and the
rest of the plan is still produced.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from artpack.core.errors import InvalidDimensionError
from artpack.core.utils_geometry import validate_positive
from artpack.models.box import PackedBox
from artpack.models.item import Item
from artpack.models.plan import (
    REASON_TEXT,
    RECOMMENDED_ACTIONS,
    ManualHandlingEntry,
    ReasonCode,
)

__all__ = [
    "REASON_TEXT",
    "RECOMMENDED_ACTIONS",
    "ManualHandlingDetector",
    "ManualHandlingEntry",
    "ReasonCode",
]

logger = logging.getLogger(__name__)

ITEM_MEASUREMENTS = ("width", "height", "depth", "weight")


class ManualHandlingDetector:
    """
    Per-computation collector of manual-handling entries.

    In strict mode an invalid dimension aborts the computation with
    :class:`InvalidDimensionError`; otherwise the whole line is routed to
    manual handling with ``ReasonCode.INVALID_DIMENSION``.
    """

    def __init__(self, strict: bool = True) -> None:
        self.strict = strict
        self._entries: List[ManualHandlingEntry] = []

    @property
    def entries(self) -> Tuple[ManualHandlingEntry, ...]:
        return tuple(self._entries)

    @property
    def total_pieces(self) -> int:
        return sum(entry.quantity for entry in self._entries)

    def check_item(self, item: Item) -> bool:
        """Return ``True`` when the item geometry and weight are usable."""
        try:
            for name in ITEM_MEASUREMENTS:
                validate_positive(name, getattr(item, name))
        except InvalidDimensionError as exc:
            error = exc.for_line(item.line_number)
            if self.strict:
                raise error from exc
            self.flag_item(item, ReasonCode.INVALID_DIMENSION, detail=f"{error.field}={error.value!r}")
            return False
        return True

    def flag_item(
        self,
        item: Item,
        code: ReasonCode,
        quantity: Optional[int] = None,
        detail: str = "",
        box_id: Optional[str] = None,
    ) -> ManualHandlingEntry:
        entry = ManualHandlingEntry.for_code(item, code, quantity=quantity, box_id=box_id, detail=detail)
        if entry.quantity <= 0:
            raise ValueError(f"Line {item.line_number}: manual-handling quantity must be positive")
        self._entries.append(entry)
        logger.warning(
            "Line %s (%s pcs) routed to manual handling: %s",
            item.line_number,
            entry.quantity,
            entry.reason,
        )
        return entry

    def flag_box(self, box: PackedBox, code: ReasonCode) -> List[ManualHandlingEntry]:
        """Convert every entry of a rejected box back into per-line entries."""
        detail = f'box {box.id} {box.length:g}" x {box.width:g}" x {box.height:g}", {box.total_weight:g} lbs'
        return [
            self.flag_item(entry.item, code, quantity=entry.allocated_quantity, detail=detail, box_id=box.id)
            for entry in box.entries
        ]
