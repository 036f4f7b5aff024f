from __future__ import annotations

import pytest

from artpack.core.catalog import load_catalog
from artpack.models.item import Item


@pytest.fixture(scope="session")
def catalog():
    return load_catalog()


@pytest.fixture
def make_item():
    def _make_item(
        line_number: int = 1,
        width: float = 24,
        height: float = 18,
        depth: float = 2,
        weight: float = 5,
        quantity: int = 1,
        final_medium: str = "Paper Print - Framed",
        glazing: str = "",
        hardware: str = "",
        material_type: str = "CANVAS-FRAMED",
        tag_number: int | None = None,
    ) -> Item:
        return Item(
            line_number=line_number,
            tag_number=tag_number if tag_number is not None else 100 + line_number,
            quantity=quantity,
            final_medium=final_medium,
            width=width,
            height=height,
            weight=weight,
            material_type=material_type,
            glazing=glazing,
            hardware=hardware,
            depth=depth,
        )

    return _make_item
