"""Builders and fakes shared by the test modules."""

from datetime import datetime
from typing import List

from duofit.models.food_item import FoodItem
from duofit.schemas.food import FoodCandidate, ReferenceQuantityFood, ScaledQuantityFood
from duofit.schemas.meal import MealItemCreate


class FrozenNow:
    """Mutable "now" for CivilClock; tests move it with .set()."""

    def __init__(self, instant: datetime):
        self.instant = instant

    def set(self, instant: datetime) -> None:
        self.instant = instant

    def __call__(self) -> datetime:
        return self.instant


class FakeFoodSearch:
    """Stands in for OpenFoodFactsSearch; records every query."""

    def __init__(self, candidates: List[FoodCandidate] = None):
        self.candidates = candidates or []
        self.queries: List[str] = []

    async def search(self, query: str) -> List[FoodCandidate]:
        self.queries.append(query)
        return list(self.candidates)


class FakePhotoAnalyzer:
    def __init__(self, candidates: List[FoodCandidate] = None):
        self.candidates = candidates or []
        self.calls = 0

    async def analyze(self, image_bytes: bytes, content_type: str = "image/jpeg") -> List[FoodCandidate]:
        self.calls += 1
        return list(self.candidates)


def external_candidate(name: str, calories: float) -> FoodCandidate:
    return FoodCandidate(
        origin="OPEN_FOOD_FACTS",
        external_id=f"off-{name.lower()}",
        food=ReferenceQuantityFood(name=name, calories=calories),
    )


def line(food: FoodItem, quantity: float = 100, unit: str = "g") -> MealItemCreate:
    return MealItemCreate(food_id=food.id, quantity=quantity, unit=unit)


def inline_line(
    name: str,
    calories: float,
    quantity: float = 100,
    unit: str = "g",
    scaled: bool = False,
) -> MealItemCreate:
    food_cls = ScaledQuantityFood if scaled else ReferenceQuantityFood
    return MealItemCreate(food_id=0, quantity=quantity, unit=unit, food=food_cls(name=name, calories=calories))
