"""
Exception types raised by the packing core.

Validation and invariant failures abort a plan computation. Items that simply
cannot be packed are not errors; they end up as manual-handling entries.
"""

from __future__ import annotations


class PackingError(Exception):
    """Base class for every error raised by artpack."""


class InvalidDimensionError(PackingError, ValueError):
    """A dimension or weight is zero, negative, NaN, infinite or not a number."""

    def __init__(self, field: str, value: object, line_number: int | None = None) -> None:
        self.field = field
        self.value = value
        self.line_number = line_number
        prefix = f"Line {line_number}: " if line_number is not None else ""
        super().__init__(f"{prefix}invalid {field}: {value!r} (must be a positive finite number)")

    def for_line(self, line_number: int) -> "InvalidDimensionError":
        """Return a copy of this error attributed to an input line."""
        return InvalidDimensionError(self.field, self.value, line_number=line_number)


class CatalogError(PackingError, ValueError):
    """The box/pallet/crate catalog configuration is incomplete or inconsistent."""


class PlanComputationError(PackingError, RuntimeError):
    """A packing plan could not be computed from the supplied input."""


class AllocationInvariantError(PlanComputationError):
    """Allocated quantities do not add up; indicates a defect in the allocator."""


class UnknownMaterialError(PackingError, ValueError):
    """A material type has no weight factor, so no weight can be estimated."""

    def __init__(self, material_type: str, line_number: int | None = None) -> None:
        self.material_type = material_type
        self.line_number = line_number
        prefix = f"Line {line_number}: " if line_number is not None else ""
        super().__init__(f"{prefix}unknown material weight factor for: {material_type!r}")

    def for_line(self, line_number: int) -> "UnknownMaterialError":
        return UnknownMaterialError(self.material_type, line_number=line_number)


class UnknownStrategyError(PackingError, ValueError):
    """The requested box packing strategy is not one of the known strategies."""
