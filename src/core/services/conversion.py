"""
Packaging to usage-unit conversion.

Solids are tracked in grams and liquids in cm3. A package of
``packaging_quantity`` x ``packaging_unit`` converts to
``packaging_quantity * multiplier`` usage units.
"""

from dataclasses import dataclass

from src.config import get_logger
from src.core.entities.inventory import MaterialKind

logger = get_logger(__name__)

USAGE_UNITS: dict[MaterialKind, str] = {
    MaterialKind.SOLID: "g",
    MaterialKind.LIQUID: "cm3",
}

_MULTIPLIERS: dict[MaterialKind, dict[str, float]] = {
    MaterialKind.SOLID: {
        "kg": 1000.0,
        "kilogram": 1000.0,
        "kilogramo": 1000.0,
        "g": 1.0,
        "gram": 1.0,
        "gramo": 1.0,
    },
    MaterialKind.LIQUID: {
        "l": 1000.0,
        "liter": 1000.0,
        "litre": 1000.0,
        "litro": 1000.0,
        "ml": 1.0,
        "milliliter": 1.0,
        "mililitro": 1.0,
        "cm3": 1.0,
        "cm³": 1.0,
    },
}


@dataclass(frozen=True)
class ConversionResult:
    """Resolved conversion for one packaging definition."""

    factor: float
    usage_unit: str
    recognized: bool


def normalize_unit(unit: str | None) -> str:
    return (unit or "").strip().lower()


def resolve_conversion(
    material_kind: MaterialKind,
    packaging_unit: str | None,
    packaging_quantity: float | None,
) -> ConversionResult:
    """
    Map a packaging definition to its usage-unit equivalent.

    Unrecognized units fall back to an identity multiplier, i.e. the package
    is assumed to be expressed in usage units already. That case is logged
    as a data-quality warning and flagged on the result, never raised.

    Args:
        material_kind: Solid or liquid
        packaging_unit: Free-text unit of one package (kg, l, ml, ...)
        packaging_quantity: Size of one package; defaults to 1

    Returns:
        ConversionResult with the factor and canonical usage unit
    """
    quantity = packaging_quantity or 1.0
    unit = normalize_unit(packaging_unit)
    multiplier = _MULTIPLIERS[material_kind].get(unit)

    if multiplier is None:
        logger.warning(
            "unrecognized_packaging_unit",
            material_kind=material_kind.value,
            packaging_unit=unit,
        )
        return ConversionResult(
            factor=quantity,
            usage_unit=USAGE_UNITS[material_kind],
            recognized=False,
        )

    return ConversionResult(
        factor=quantity * multiplier,
        usage_unit=USAGE_UNITS[material_kind],
        recognized=True,
    )
