"""
Box, pallet and crate catalog loaded from ``config/catalog.json``.

Box types are tried smallest first: by the largest face the type can offer
(extended length x height for telescoping boxes), then by width, then by file
order. Pallet and crate types are tried smallest deck first. Every value in
the shipped file is a default that callers may override by passing their own
:class:`Catalog`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from artpack.core.errors import CatalogError
from artpack.models.box import BoxType
from artpack.models.container import ContainerType

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
DEFAULT_CATALOG_PATH = CONFIG_DIR / "catalog.json"

DEFAULT_PIECES_KEY = "default"


def sort_box_types(box_types: Iterable[BoxType]) -> List[BoxType]:
    """Smallest usable face first; width and then the given order break ties."""
    indexed = list(enumerate(box_types))
    indexed.sort(key=lambda pair: (pair[1].envelope_length * pair[1].height, pair[1].width, pair[0]))
    return [box_type for _, box_type in indexed]


@dataclass(frozen=True)
class CostModel:
    shipping_rate_per_100_lbs: float = 45.0
    handling_rate_per_100_lbs: float = 12.0
    box_costs: Mapping[str, float] = field(default_factory=dict)
    container_costs: Mapping[str, float] = field(default_factory=dict)
    oversize_fee: float = 0.0
    client_multipliers: Mapping[str, float] = field(default_factory=dict)

    def client_multiplier(self, client_name: str) -> float:
        """Multiplier for the first configured client whose key appears in the name."""
        name = (client_name or "").lower()
        for key, multiplier in self.client_multipliers.items():
            if key in name:
                return multiplier
        return 1.0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CostModel":
        return cls(
            shipping_rate_per_100_lbs=float(payload.get("shipping_rate_per_100_lbs", 45.0)),
            handling_rate_per_100_lbs=float(payload.get("handling_rate_per_100_lbs", 12.0)),
            box_costs={str(k): float(v) for k, v in payload.get("box_costs", {}).items()},
            container_costs={str(k): float(v) for k, v in payload.get("container_costs", {}).items()},
            oversize_fee=float(payload.get("oversize_fee", 0.0)),
            client_multipliers={str(k).lower(): float(v) for k, v in payload.get("client_multipliers", {}).items()},
        )


@dataclass(frozen=True)
class Catalog:
    box_types: Tuple[BoxType, ...]
    pallet_types: Tuple[ContainerType, ...]
    crate_types: Tuple[ContainerType, ...]
    pieces_per_box: Mapping[str, int] = field(default_factory=dict)
    cost_model: CostModel = field(default_factory=CostModel)
    client_pieces_per_box: Mapping[str, Mapping[str, int]] = field(default_factory=dict)
    rule_warnings: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "box_types", tuple(sort_box_types(self.box_types)))
        object.__setattr__(
            self, "pallet_types", tuple(sorted(self.pallet_types, key=lambda ct: ct.deck_area))
        )
        object.__setattr__(
            self, "crate_types", tuple(sorted(self.crate_types, key=lambda ct: ct.deck_area))
        )
        if not self.box_types:
            raise CatalogError("catalog must define at least one box type")
        if not self.pallet_types and not self.crate_types:
            raise CatalogError("catalog must define at least one pallet or crate type")
        for kind, entries in (("box", self.box_types), ("pallet", self.pallet_types), ("crate", self.crate_types)):
            ids = [entry.id for entry in entries]
            if len(ids) != len(set(ids)):
                raise CatalogError(f"duplicate {kind} type ids in catalog: {ids}")
        for material, pieces in self.pieces_per_box.items():
            if pieces < 1:
                raise CatalogError(f"pieces_per_box for {material} must be at least 1, got {pieces!r}")
        for client, overrides in self.client_pieces_per_box.items():
            for material, pieces in overrides.items():
                if pieces < 1:
                    raise CatalogError(
                        f"client_pieces_per_box for {client}/{material} must be at least 1, got {pieces!r}"
                    )

    def client_overrides(self, client_name: str) -> Mapping[str, int]:
        """Pieces-per-box overrides of the first configured client whose key appears in the name."""
        name = (client_name or "").lower()
        if not name:
            return {}
        for key, overrides in self.client_pieces_per_box.items():
            if key in name:
                return overrides
        return {}

    def pieces_for(self, material_type: str, client_name: str = "") -> int:
        """Per-box piece limit for a material, falling back to the default rule."""
        overrides = self.client_overrides(client_name)
        if material_type in overrides:
            return overrides[material_type]
        if material_type in self.pieces_per_box:
            return self.pieces_per_box[material_type]
        if DEFAULT_PIECES_KEY in self.pieces_per_box:
            return self.pieces_per_box[DEFAULT_PIECES_KEY]
        return max(box_type.max_pieces for box_type in self.box_types)

    def box_capacity(self, box_type: BoxType, material_type: str, client_name: str = "") -> int:
        return min(box_type.max_pieces, self.pieces_for(material_type, client_name))

    def warnings_for(self, material_types: Iterable[str]) -> List[str]:
        """Configured rule warnings for the materials present, in first-seen order."""
        warnings: List[str] = []
        for material in material_types:
            message = self.rule_warnings.get(material)
            if message and message not in warnings:
                warnings.append(message)
        return warnings

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Catalog":
        try:
            return cls(
                box_types=tuple(BoxType.from_dict(entry) for entry in payload["box_types"]),
                pallet_types=tuple(
                    ContainerType.from_dict(entry, "pallet") for entry in payload.get("pallet_types", [])
                ),
                crate_types=tuple(
                    ContainerType.from_dict(entry, "crate") for entry in payload.get("crate_types", [])
                ),
                pieces_per_box={str(k): int(v) for k, v in payload.get("pieces_per_box", {}).items()},
                cost_model=CostModel.from_dict(payload.get("cost", {})),
                client_pieces_per_box={
                    str(client).lower(): {str(k): int(v) for k, v in overrides.items()}
                    for client, overrides in payload.get("client_pieces_per_box", {}).items()
                },
                rule_warnings={str(k): str(v) for k, v in payload.get("rule_warnings", {}).items()},
            )
        except CatalogError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            raise CatalogError(f"invalid catalog configuration: {exc}") from exc


def load_json_config(path: Union[str, Path]) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as file:
        return json.load(file)


def load_catalog(path: Optional[Union[str, Path]] = None) -> Catalog:
    """Load the catalog from ``path`` or from the bundled default file."""
    config_path = Path(path) if path is not None else DEFAULT_CATALOG_PATH
    try:
        payload = load_json_config(config_path)
    except (OSError, json.JSONDecodeError) as exc:
        raise CatalogError(f"could not read catalog {config_path}: {exc}") from exc
    return Catalog.from_dict(payload)
