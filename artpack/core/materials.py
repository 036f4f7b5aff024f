"""
Material classification and artwork weight estimation.

Weights are estimated from the glazed surface area using per-material factors
in pounds per square inch. Each piece is rounded up to a whole pound before
being multiplied by the quantity.
"""

from __future__ import annotations

import math
from typing import Dict, Optional

from artpack.core.errors import UnknownMaterialError
from artpack.core.utils_geometry import calculate_surface_area

MATERIAL_WEIGHTS: Dict[str, float] = {
    "GLASS": 0.0098,
    "ACRYLIC": 0.0094,
    "CANVAS-FRAMED": 0.0085,
    "CANVAS-GALLERY": 0.0061,
    "MIRROR": 0.0191,
    "ACOUSTIC-PANEL": 0.0038,
    "ACOUSTIC-PANEL-FRAMED": 0.0037,
    "PATIENT-BOARD": 0.0347,
}


def determine_material_type(final_medium: str, glazing: Optional[str] = None) -> str:
    """Classify an artwork line by its final medium and glazing description."""
    medium = final_medium.lower()

    if "mirror" in medium:
        return "MIRROR"
    if "acoustic" in medium:
        return "ACOUSTIC-PANEL-FRAMED" if "framed" in medium else "ACOUSTIC-PANEL"
    if "patient board" in medium:
        return "PATIENT-BOARD"
    if "canvas" in medium:
        return "CANVAS-GALLERY" if "gallery" in medium else "CANVAS-FRAMED"

    if glazing:
        glazing_lower = glazing.lower()
        if "acrylic" in glazing_lower:
            return "ACRYLIC"
        if "glass" in glazing_lower:
            return "GLASS"
        if "framed" in medium and "no glazing" not in glazing_lower and glazing_lower != "none":
            return "GLASS"

    return "CANVAS-FRAMED"


def weight_factor(material_type: str) -> float:
    try:
        return MATERIAL_WEIGHTS[material_type]
    except KeyError as exc:
        raise UnknownMaterialError(material_type) from exc


def estimate_piece_weight(width: float, height: float, material_type: str) -> int:
    """Estimated weight of one piece, rounded up to a whole pound."""
    area = calculate_surface_area(width, height)
    return max(1, int(math.ceil(area * weight_factor(material_type))))


def estimate_total_weight(width: float, height: float, material_type: str, quantity: int = 1) -> int:
    return estimate_piece_weight(width, height, material_type) * quantity
