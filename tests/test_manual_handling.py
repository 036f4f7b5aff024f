import math

import pytest

from artpack.core.errors import InvalidDimensionError
from artpack.core.manual_handling import (
    REASON_TEXT,
    RECOMMENDED_ACTIONS,
    ManualHandlingDetector,
    ReasonCode,
)
from artpack.models.box import PackedBox


def test_every_reason_code_has_text_and_action():
    for code in ReasonCode:
        assert REASON_TEXT[code]
        assert RECOMMENDED_ACTIONS[code]


def test_check_item_accepts_valid_items(make_item):
    detector = ManualHandlingDetector()
    assert detector.check_item(make_item())
    assert detector.entries == ()


def test_strict_mode_raises_with_line_number(make_item):
    detector = ManualHandlingDetector(strict=True)
    with pytest.raises(InvalidDimensionError) as excinfo:
        detector.check_item(make_item(line_number=7, width=-4))
    assert excinfo.value.line_number == 7
    assert excinfo.value.field == "width"
    assert str(excinfo.value).startswith("Line 7:")


def test_lenient_mode_routes_invalid_lines(make_item):
    detector = ManualHandlingDetector(strict=False)
    assert not detector.check_item(make_item(line_number=3, height=math.nan, quantity=2, weight=8))

    entry = detector.entries[0]
    assert entry.reason_code is ReasonCode.INVALID_DIMENSION
    assert entry.quantity == 2
    assert entry.recommended_action == RECOMMENDED_ACTIONS[ReasonCode.INVALID_DIMENSION]
    assert detector.total_pieces == 2


def test_zero_weight_is_invalid(make_item):
    with pytest.raises(InvalidDimensionError, match="weight"):
        ManualHandlingDetector().check_item(make_item(weight=0))


def test_flag_box_attributes_entries_to_original_lines(catalog, make_item):
    box = PackedBox("BOX-004", catalog.box_types[0])
    box.add(make_item(line_number=1, quantity=2, weight=4), 2)
    box.add(make_item(line_number=2, quantity=1, weight=2), 1)

    detector = ManualHandlingDetector()
    entries = detector.flag_box(box, ReasonCode.NO_CONTAINER)

    assert [(entry.item.line_number, entry.quantity) for entry in entries] == [(1, 2), (2, 1)]
    assert {entry.box_id for entry in entries} == {"BOX-004"}
    assert all(entry.reason.startswith(REASON_TEXT[ReasonCode.NO_CONTAINER]) for entry in entries)
