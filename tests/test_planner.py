import dataclasses
import math

import pytest

from artpack.core.errors import (
    AllocationInvariantError,
    InvalidDimensionError,
    PlanComputationError,
    UnknownStrategyError,
)
from artpack.core.manual_handling import ReasonCode
from artpack.core.planner import build_packing_plan, verify_quantities
from artpack.core.solver_box_to_container import DeliveryCapabilities
from artpack.models.box import PackedBox


def _pieces_accounted(plan):
    boxed = sum(entry.allocated_quantity for box in plan.boxes for entry in box.entries)
    return boxed + sum(entry.quantity for entry in plan.manual_handling)


def test_single_small_item(catalog, make_item):
    plan = build_packing_plan([make_item(width=24, height=18, depth=2, weight=5)], catalog)

    assert len(plan.boxes) == 1
    assert plan.boxes[0].box_type.id == "standard"
    assert len(plan.containers) == 1
    assert plan.containers[0].kind == "pallet"
    assert plan.manual_handling == ()
    assert plan.weight_summary.artwork_weight == 5
    assert plan.weight_summary.shipment_weight == 5 + 2 + 60


def test_item_wider_than_every_box(catalog, make_item):
    plan = build_packing_plan([make_item(width=200, height=30, weight=40)], catalog)

    assert plan.boxes == ()
    assert plan.containers == ()
    assert len(plan.manual_handling) == 1
    assert plan.manual_handling[0].reason_code is ReasonCode.OVERSIZE_FOOTPRINT
    assert plan.manual_handling[0].quantity == 1
    assert plan.weight_summary.manual_handling_weight == 40


def test_identical_lines_share_a_box(catalog, make_item):
    items = [
        make_item(line_number=1, quantity=3, weight=6, glazing="Regular Glass", material_type="GLASS"),
        make_item(line_number=2, quantity=2, weight=4, glazing="Regular Glass", material_type="GLASS"),
    ]
    plan = build_packing_plan(items, catalog)

    assert len(plan.boxes) == 1
    assert [(entry.item.line_number, entry.allocated_quantity) for entry in plan.boxes[0].entries] == [(1, 3), (2, 2)]
    assert [box.id for box, _ in plan.entries_for_line(2)] == [plan.boxes[0].id]
    assert plan.containers[0].category == "glass-small"


def test_large_run_spreads_over_several_pallets(catalog, make_item):
    item = make_item(width=43, height=33, quantity=49, weight=980)
    plan = build_packing_plan([item], catalog)

    assert len(plan.boxes) == 13
    assert len(plan.containers) == 5
    assert plan.metrics.packed_pieces == 49
    for container in plan.containers:
        assert container.content_weight <= container.container_type.max_load_weight
    assert plan.business_intelligence.oversized_items[0].dimensions == '43" x 33"'
    assert plan.business_intelligence.oversized_items[0].quantity == 49


def test_large_run_respects_reduced_weight_ceiling(catalog, make_item):
    light_pallets = tuple(dataclasses.replace(pallet, max_load_weight=300) for pallet in catalog.pallet_types)
    tight = dataclasses.replace(catalog, pallet_types=light_pallets)
    plan = build_packing_plan([make_item(width=43, height=33, quantity=49, weight=980)], tight)

    assert len(plan.containers) > 1
    for container in plan.containers:
        assert container.content_weight <= 300
    assert plan.metrics.packed_pieces == 49


def test_box_that_fits_no_container_is_reported(catalog, make_item):
    capabilities = DeliveryCapabilities(accepts_pallets=True, accepts_crates=False)
    plan = build_packing_plan(
        [make_item(line_number=1, width=84, height=30, weight=10), make_item(line_number=2)],
        catalog,
        capabilities=capabilities,
    )

    assert [entry.reason_code for entry in plan.manual_handling] == [ReasonCode.NO_CONTAINER]
    assert plan.manual_handling[0].box_id == "BOX-001"
    assert all(box.id != "BOX-001" for box in plan.boxes)
    assert _pieces_accounted(plan) == 2


def test_empty_input_raises(catalog):
    with pytest.raises(PlanComputationError):
        build_packing_plan([], catalog)


def test_strict_mode_propagates_invalid_dimension(catalog, make_item):
    with pytest.raises(InvalidDimensionError) as excinfo:
        build_packing_plan([make_item(line_number=1), make_item(line_number=2, width=0)], catalog)
    assert excinfo.value.line_number == 2


def test_lenient_mode_routes_invalid_lines(catalog, make_item):
    items = [make_item(line_number=1), make_item(line_number=2, width=math.inf, quantity=3, weight=9)]
    plan = build_packing_plan(items, catalog, strict=False)

    assert [entry.reason_code for entry in plan.manual_handling] == [ReasonCode.INVALID_DIMENSION]
    assert plan.metrics.manual_handling_pieces == 3
    assert plan.metrics.packed_pieces == 1
    assert plan.warnings


def test_quantities_are_conserved_on_mixed_input(catalog, make_item):
    items = [
        make_item(line_number=1, quantity=7, weight=35, glazing="Glass", material_type="GLASS"),
        make_item(line_number=2, width=43, height=33, quantity=5, weight=100),
        make_item(line_number=3, width=60, height=30, quantity=2, weight=14),
        make_item(line_number=4, width=200, quantity=1, weight=90),
        make_item(line_number=5, quantity=2, weight=240),
        make_item(line_number=6, quantity=3, weight=30, final_medium="Mirror", material_type="MIRROR"),
    ]
    plan = build_packing_plan(items, catalog)

    assert _pieces_accounted(plan) == sum(item.quantity for item in items)
    for item in items:
        boxed = sum(entry.allocated_quantity for _, entry in plan.entries_for_line(item.line_number))
        manual = sum(entry.quantity for entry in plan.manual_handling if entry.item.line_number == item.line_number)
        assert boxed + manual == item.quantity
    for box in plan.boxes:
        assert box.content_weight == pytest.approx(sum(entry.allocated_weight for entry in box.entries))
        assert box.total_weight == pytest.approx(box.tare_weight + box.content_weight)
    for container in plan.containers:
        assert container.total_weight == pytest.approx(
            container.tare_weight + sum(box.total_weight for box in container.boxes)
        )
    codes = {entry.item.line_number: entry.reason_code for entry in plan.manual_handling}
    assert codes == {4: ReasonCode.OVERSIZE_FOOTPRINT, 5: ReasonCode.OVERSIZE_WEIGHT}


def test_plan_is_deterministic(catalog, make_item):
    items = [
        make_item(line_number=1, quantity=7, weight=35, glazing="Glass", material_type="GLASS"),
        make_item(line_number=2, width=43, height=33, quantity=9, weight=180),
    ]
    assert build_packing_plan(items, catalog).to_dict() == build_packing_plan(items, catalog).to_dict()


def test_plan_seals_boxes(catalog, make_item):
    plan = build_packing_plan([make_item()], catalog)
    with pytest.raises(RuntimeError):
        plan.boxes[0].add(make_item(line_number=2), 1)


def test_verify_quantities_detects_missing_pieces(catalog, make_item):
    item = make_item(quantity=2, weight=10)
    box = PackedBox("BOX-001", catalog.box_types[0])
    box.add(item, 1)
    with pytest.raises(AllocationInvariantError, match="Line 1"):
        verify_quantities([item], [box], [])


def test_risk_flags_for_glass_and_mirrors(catalog, make_item):
    items = [
        make_item(line_number=1, glazing="Glass", material_type="GLASS"),
        make_item(line_number=2, final_medium="Mirror", material_type="MIRROR", weight=20),
    ]
    flags = build_packing_plan(items, catalog).business_intelligence.risk_flags
    assert "Handle glass-framed pieces with caution" in flags
    assert "Mirror items require crate review" in flags


def test_same_item_instance_listed_twice(catalog, make_item):
    item = make_item(quantity=2, weight=5)
    plan = build_packing_plan([item, item], catalog)

    assert plan.metrics.total_pieces == 4
    assert plan.metrics.packed_pieces == 4
    assert plan.manual_handling == ()
    assert [entry.allocated_quantity for entry in plan.boxes[0].entries] == [2, 2]
    verify_quantities([item, item], plan.boxes, plan.manual_handling)
    with pytest.raises(AllocationInvariantError, match="4 pieces accounted for, expected 2"):
        verify_quantities([item], plan.boxes, plan.manual_handling)


def test_box_too_heavy_for_every_container_is_reported_by_weight(catalog, make_item):
    light_pallets = tuple(dataclasses.replace(pallet, max_load_weight=5) for pallet in catalog.pallet_types)
    tight = dataclasses.replace(catalog, pallet_types=light_pallets)
    plan = build_packing_plan(
        [make_item(weight=5)],
        tight,
        capabilities=DeliveryCapabilities(accepts_pallets=True, accepts_crates=False),
    )

    # 5 lbs of artwork plus 2 lbs of box tare
    assert [entry.reason_code for entry in plan.manual_handling] == [ReasonCode.OVERWEIGHT_CONTAINER]
    assert plan.manual_handling[0].reason.startswith("box exceeds every pallet and crate load weight")
    assert plan.manual_handling[0].box_id == "BOX-001"
    assert plan.boxes == ()
    assert _pieces_accounted(plan) == 1


def test_strategy_is_applied_and_recorded(catalog, make_item):
    items = [
        make_item(line_number=1, quantity=2, weight=2, glazing="Glass", material_type="GLASS"),
        make_item(line_number=2, quantity=2, weight=2),
    ]
    first_fit = build_packing_plan(items, catalog)
    balanced = build_packing_plan(items, catalog, strategy="balanced")

    assert first_fit.strategy == "first-fit"
    assert len(first_fit.boxes) == 2
    assert balanced.strategy == "balanced"
    assert balanced.to_dict()["strategy"] == "balanced"
    assert len(balanced.boxes) == 1
    assert _pieces_accounted(balanced) == 4


def test_unknown_strategy_raises_before_planning(catalog, make_item):
    with pytest.raises(UnknownStrategyError) as excinfo:
        build_packing_plan([make_item()], catalog, strategy="fastest")
    assert isinstance(excinfo.value, ValueError)


def test_client_name_selects_pieces_per_box_override(catalog, make_item):
    items = [make_item(quantity=8, weight=8, glazing="Glass", material_type="GLASS")]
    assert len(build_packing_plan(items, catalog).boxes) == 2
    assert len(build_packing_plan(items, catalog, client_name="Sunrise Senior Living").boxes) == 1


def test_canvas_rule_warning_only_when_canvas_present(catalog, make_item):
    canvas = build_packing_plan([make_item()], catalog)
    glass = build_packing_plan([make_item(glazing="Glass", material_type="GLASS")], catalog)

    assert any("Canvas packing" in warning for warning in canvas.warnings)
    assert not any("Canvas packing" in warning for warning in glass.warnings)
