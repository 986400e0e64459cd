"""
Food catalog: creation, transient foods and name lookup.
"""
import itertools
import logging
from typing import List, Optional, Protocol

from sqlalchemy.orm import Session

from duofit.core.errors import NotFoundError, ValidationError
from duofit.models.food_item import FoodItem
from duofit.schemas.food import (
    FoodCandidate,
    FoodCreate,
    FoodRead,
    ReferenceQuantityFood,
    ScaledQuantityFood,
)
from duofit.services.nutrition import NutritionTotals, multiplier, parse_unit

logger = logging.getLogger(__name__)

LOCAL_SEARCH_LIMIT = 10
SEARCH_RESULT_LIMIT = 15
MIN_QUERY_LENGTH = 2

_transient_ids = itertools.count(-1, -1)


class FoodSearchBackend(Protocol):
    async def search(self, query: str) -> List[FoodCandidate]:
        ...


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Food name cannot be empty")
    return cleaned


def create_food(db: Session, payload: FoodCreate) -> FoodItem:
    """Persist a catalog food. Commits."""
    food = FoodItem(
        name=_clean_name(payload.name),
        calories=payload.calories or 0.0,
        protein_g=payload.protein_g or 0.0,
        carbs_g=payload.carbs_g or 0.0,
        fat_g=payload.fat_g or 0.0,
    )
    db.add(food)
    db.commit()
    db.refresh(food)
    logger.info(f"[FOODS] Created food id={food.id} name={food.name!r}")
    return food


def create_transient(payload: FoodCreate) -> FoodRead:
    """
    Food-shaped value for one-off use. Its id is negative and unique in this
    process; saving a meal with it persists the food from these values.
    """
    return FoodRead(
        id=next(_transient_ids),
        name=_clean_name(payload.name),
        calories=payload.calories or 0.0,
        protein_g=payload.protein_g or 0.0,
        carbs_g=payload.carbs_g or 0.0,
        fat_g=payload.fat_g or 0.0,
    )


def get_food(db: Session, food_id: int) -> FoodItem:
    food = db.get(FoodItem, food_id)
    if food is None:
        raise NotFoundError(f"Food {food_id} not found")
    return food


def persist_inline(db: Session, inline_food, quantity: float, unit) -> FoodItem:
    """
    Create the catalog row for an inline food. Flushes, does not commit.

    Scaled foods carry totals for the logged portion and are divided back to
    per-reference values; reference foods are stored as given.
    """
    if inline_food is None:
        raise ValidationError("Inline food data is required when food_id is not positive")

    name = _clean_name(inline_food.name)
    values = NutritionTotals.of(inline_food)

    if isinstance(inline_food, ScaledQuantityFood):
        factor = multiplier(quantity, parse_unit(unit))
        if factor <= 0:
            raise ValidationError(f"Cannot normalize {name!r} from quantity {quantity}")
        values = values.scaled(1 / factor)
    elif not isinstance(inline_food, ReferenceQuantityFood):
        raise ValidationError(f"Unsupported inline food for {name!r}")

    food = FoodItem(
        name=name,
        calories=values.calories,
        protein_g=values.protein_g,
        carbs_g=values.carbs_g,
        fat_g=values.fat_g,
    )
    db.add(food)
    db.flush()
    logger.info(f"[FOODS] Created inline food id={food.id} name={name!r} basis={inline_food.basis}")
    return food


def relevance(name: str, query: str) -> int:
    name_norm = name.lower().strip()
    query_norm = query.lower().strip()

    if name_norm == query_norm:
        return 100
    if name_norm.startswith(query_norm):
        return 80
    words = name_norm.split()
    if words and words[0] == query_norm:
        return 70
    if query_norm in name_norm and len(name_norm) < len(query_norm) + 15:
        return 60
    if query_norm in name_norm:
        return 30
    return 10


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _local_candidates(db: Session, query: str) -> List[FoodCandidate]:
    foods = (
        db.query(FoodItem)
        .filter(FoodItem.name.ilike(f"%{_escape_like(query)}%", escape="\\"))
        .order_by(FoodItem.id.asc())
        .limit(LOCAL_SEARCH_LIMIT)
        .all()
    )
    return [
        FoodCandidate(
            origin="LOCAL",
            food_id=food.id,
            food=ReferenceQuantityFood(
                name=food.name,
                calories=food.calories,
                protein_g=food.protein_g,
                carbs_g=food.carbs_g,
                fat_g=food.fat_g,
            ),
        )
        for food in foods
    ]


async def lookup_by_name(
    db: Session,
    query: str,
    external: Optional[FoodSearchBackend] = None,
) -> List[FoodCandidate]:
    """
    Local catalog matches merged with external search results.

    Duplicates (by lowercase name) keep the first seen, local first; results
    are ordered local first, then by name relevance.
    """
    query = (query or "").strip()
    if len(query) < MIN_QUERY_LENGTH:
        return []

    candidates = _local_candidates(db, query)
    if external is not None:
        candidates.extend(await external.search(query))

    merged = {}
    for candidate in candidates:
        key = candidate.food.name.lower()
        if key not in merged:
            merged[key] = candidate

    ordered = sorted(
        merged.values(),
        key=lambda c: (c.origin != "LOCAL", -relevance(c.food.name, query)),
    )
    return ordered[:SEARCH_RESULT_LIMIT]
