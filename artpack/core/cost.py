"""
Freight cost estimate derived from a packing plan.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence

from artpack.core.catalog import CostModel
from artpack.models.box import PackedBox
from artpack.models.container import Container
from artpack.models.plan import CostEstimate

COST_PER_POUND_THRESHOLD = 1.5
PACKAGING_RATIO_THRESHOLD = 0.2


def _per_started_hundred(weight: float, rate: float) -> float:
    if weight <= 0:
        return 0.0
    return math.ceil(weight / 100.0) * rate


def packaging_cost(boxes: Iterable[PackedBox], containers: Iterable[Container], cost_model: CostModel) -> float:
    box_cost = sum(cost_model.box_costs.get(box.box_type.id, 0.0) for box in boxes)
    container_cost = sum(cost_model.container_costs.get(container.kind, 0.0) for container in containers)
    return box_cost + container_cost


def build_recommendations(cost_per_pound: float, artwork_weight: float, packaging_weight: float) -> List[str]:
    recommendations = []
    if cost_per_pound > COST_PER_POUND_THRESHOLD:
        recommendations.append("Consider alternative shipping methods to reduce cost per pound")
    if packaging_weight > artwork_weight * PACKAGING_RATIO_THRESHOLD:
        recommendations.append("High packaging weight ratio - consider optimizing container selection")
    return recommendations


def estimate_cost(
    boxes: Sequence[PackedBox],
    containers: Sequence[Container],
    shipment_weight: float,
    artwork_weight: float,
    packaging_weight: float,
    cost_model: CostModel,
    client_name: str = "",
) -> CostEstimate:
    """
    Estimate shipping, handling and packaging cost for the plan.

    Shipping and handling are charged per started 100 lbs of shipment weight.
    Every container flagged ``oversize`` in the catalog adds the oversize fee.
    The client multiplier applies to the whole subtotal.
    """
    multiplier = cost_model.client_multiplier(client_name)
    shipping = _per_started_hundred(shipment_weight, cost_model.shipping_rate_per_100_lbs)
    handling = _per_started_hundred(shipment_weight, cost_model.handling_rate_per_100_lbs)
    packaging = packaging_cost(boxes, containers, cost_model)
    special_fees = sum(cost_model.oversize_fee for container in containers if container.container_type.oversize)

    total = (shipping + handling + packaging + special_fees) * multiplier
    cost_per_pound = round(total / shipment_weight, 2) if shipment_weight > 0 else 0.0

    return CostEstimate(
        shipping_cost=round(shipping * multiplier, 2),
        handling_cost=round(handling * multiplier, 2),
        packaging_cost=round(packaging * multiplier, 2),
        special_fees=round(special_fees * multiplier, 2),
        client_multiplier=multiplier,
        total_cost=round(total, 2),
        cost_per_pound=cost_per_pound,
        recommendations=tuple(build_recommendations(cost_per_pound, artwork_weight, packaging_weight)),
    )
