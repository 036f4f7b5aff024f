"""
Geometry helper utilities shared across solver modules.

All fit decisions go through :func:`fits_within`. Dimensions are rounded up to
whole inches before being compared so that an item is never judged to fit
because of floating point noise.
"""

from __future__ import annotations

import math
from numbers import Real
from typing import NamedTuple, Optional

from artpack.core.errors import InvalidDimensionError


class Footprint(NamedTuple):
    """Rotation-normalised planar extent (long side first), in whole inches."""

    long_side: int
    short_side: int

    @property
    def area(self) -> int:
        return self.long_side * self.short_side


def round_up_dimension(value: float) -> int:
    """
    Conservative ceiling rounding applied before every fit comparison.

    >>> round_up_dimension(24.0), round_up_dimension(24.001)
    (24, 25)
    """
    return int(math.ceil(value))


def get_planar_footprint(length: float, width: float) -> Footprint:
    """
    Return the footprint with the longer side first.

    A 24 x 18 piece and an 18 x 24 piece produce the same footprint, which
    models free rotation in the plane.
    """
    long_side, short_side = sorted((length, width), reverse=True)
    return Footprint(round_up_dimension(long_side), round_up_dimension(short_side))


def get_largest_dimension(length: float, width: float, height: float) -> int:
    return max(
        round_up_dimension(length),
        round_up_dimension(width),
        round_up_dimension(height),
    )


def validate_positive(name: str, value: object) -> None:
    """Raise :class:`InvalidDimensionError` unless ``value`` is a positive finite real number."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidDimensionError(name, value)
    if not math.isfinite(value) or value <= 0:
        raise InvalidDimensionError(name, value)


def validate_dimensions(length: float, width: float, height: Optional[float] = None) -> None:
    """
    Reject zero, negative, NaN and infinite values.

    ``height`` is optional so planar footprints can be validated on their own;
    when it is supplied it must satisfy the same rule.
    """
    validate_positive("length", length)
    validate_positive("width", width)
    if height is not None:
        validate_positive("height", height)


def validate_weight(weight: float) -> None:
    validate_positive("weight", weight)


def fits_within(
    item_length: float,
    item_width: float,
    item_height: float,
    container_length: float,
    container_width: float,
    container_height: float,
) -> bool:
    """
    Check whether an item fits inside a container envelope.

    Both footprints are rotation-normalised and rounded up, then compared side
    by side (long to long, short to short). The heights are compared after
    rounding up as well. This is a per-axis comparison: two shapes of equal
    area do not necessarily fit the same envelope.
    """
    item_footprint = get_planar_footprint(item_length, item_width)
    container_footprint = get_planar_footprint(container_length, container_width)
    return (
        item_footprint.long_side <= container_footprint.long_side
        and item_footprint.short_side <= container_footprint.short_side
        and round_up_dimension(item_height) <= round_up_dimension(container_height)
    )


def calculate_surface_area(length: float, width: float) -> float:
    validate_dimensions(length, width)
    return length * width


def calculate_volume(length: float, width: float, height: float) -> float:
    validate_dimensions(length, width, height)
    return length * width * height


def utilization_pct(used: float, capacity: float) -> float:
    """
    Simple utilisation metric expressed as a percentage (0.0 - 100.0).
    """
    if capacity <= 0:
        return 0.0
    return float(used) / float(capacity) * 100.0
