"""
Units and line-item nutrition math.

A food's stored values describe its reference quantity: 100 g or 100 ml for
mass/volume units, a single unit for count units. The unit a line item is
logged in decides which of the two readings applies.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from duofit.core.errors import ValidationError


class UnitKind(str, Enum):
    MASS = "MASS"
    VOLUME = "VOLUME"
    COUNT = "COUNT"


class Unit(str, Enum):
    GRAM = "g"
    MILLILITER = "ml"
    UNIT = "unit"
    PIECE = "piece"
    SERVING = "serving"
    SPOON = "spoon"
    CUP = "cup"
    SLICE = "slice"

    @property
    def kind(self) -> UnitKind:
        if self is Unit.GRAM:
            return UnitKind.MASS
        if self is Unit.MILLILITER:
            return UnitKind.VOLUME
        return UnitKind.COUNT


REFERENCE_QUANTITY = 100.0

UNIT_ALIASES = {
    "gram": Unit.GRAM,
    "grams": Unit.GRAM,
    "gramas": Unit.GRAM,
    "milliliter": Unit.MILLILITER,
    "unidade": Unit.UNIT,
    "un": Unit.UNIT,
    "colher": Unit.SPOON,
    "fatia": Unit.SLICE,
    "porcao": Unit.SERVING,
    "porção": Unit.SERVING,
    "xicara": Unit.CUP,
    "xícara": Unit.CUP,
}


def parse_unit(token) -> Unit:
    """Resolve a unit token; anything unrecognised is rejected."""
    if isinstance(token, Unit):
        return token
    normalized = str(token or "").strip().lower()
    try:
        return Unit(normalized)
    except ValueError:
        pass
    if normalized in UNIT_ALIASES:
        return UNIT_ALIASES[normalized]
    raise ValidationError(f"Unknown unit: {token!r}")


def multiplier(quantity: float, unit: Unit) -> float:
    if unit.kind in (UnitKind.MASS, UnitKind.VOLUME):
        return quantity / REFERENCE_QUANTITY
    return quantity


@dataclass(frozen=True)
class NutritionTotals:
    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0

    def __add__(self, other: "NutritionTotals") -> "NutritionTotals":
        return NutritionTotals(
            calories=self.calories + other.calories,
            protein_g=self.protein_g + other.protein_g,
            carbs_g=self.carbs_g + other.carbs_g,
            fat_g=self.fat_g + other.fat_g,
        )

    def scaled(self, factor: float) -> "NutritionTotals":
        return NutritionTotals(
            calories=self.calories * factor,
            protein_g=self.protein_g * factor,
            carbs_g=self.carbs_g * factor,
            fat_g=self.fat_g * factor,
        )

    @classmethod
    def of(cls, record) -> "NutritionTotals":
        """Read calories/protein_g/carbs_g/fat_g off any food-shaped object."""
        return cls(
            calories=record.calories or 0.0,
            protein_g=record.protein_g or 0.0,
            carbs_g=record.carbs_g or 0.0,
            fat_g=record.fat_g or 0.0,
        )


def sum_totals(parts: Iterable[NutritionTotals]) -> NutritionTotals:
    total = NutritionTotals()
    for part in parts:
        total = total + part
    return total


def compute_line_totals(food, quantity: float, unit) -> NutritionTotals:
    """Totals for `quantity` of `food`, always derived from the food's reference values."""
    return NutritionTotals.of(food).scaled(multiplier(quantity, parse_unit(unit)))
