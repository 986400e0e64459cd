"""
Meal aggregator: meals, their line items and the cached meal totals.

Every mutation ends by reconciling the affected (user, date), so the day's
totals, goal status and calorie points always follow the meals.
"""
import logging
import math
from datetime import date
from enum import Enum
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session, selectinload

from duofit.core.clock import CivilClock, get_default_clock
from duofit.core.config import settings
from duofit.core.errors import NotFoundError, ValidationError
from duofit.models.food_item import FoodItem
from duofit.models.meal import Meal, MealItem
from duofit.schemas.meal import MealItemCreate
from duofit.services import daily_reconciler, food_ledger
from duofit.services.nutrition import (
    NutritionTotals,
    compute_line_totals,
    parse_unit,
    sum_totals,
)
from duofit.services.users import get_user

logger = logging.getLogger(__name__)


class MealSlot(str, Enum):
    BREAKFAST = "BREAKFAST"
    LUNCH = "LUNCH"
    SNACK = "SNACK"
    DINNER = "DINNER"


def parse_slot(value) -> MealSlot:
    try:
        return MealSlot(str(value).strip().upper())
    except ValueError:
        raise ValidationError(f"Unknown meal slot: {value!r}")


def _apply_line_totals(item: MealItem, totals: NutritionTotals) -> None:
    item.calories = totals.calories
    item.protein_g = totals.protein_g
    item.carbs_g = totals.carbs_g
    item.fat_g = totals.fat_g


def refresh_meal_totals(meal: Meal) -> NutritionTotals:
    """Re-sum the meal's cached totals from its line items."""
    totals = sum_totals(NutritionTotals.of(item) for item in meal.items)
    meal.total_calories = totals.calories
    meal.total_protein_g = totals.protein_g
    meal.total_carbs_g = totals.carbs_g
    meal.total_fat_g = totals.fat_g
    return totals


def _resolve_food(db: Session, item: MealItemCreate, quantity: float, unit) -> FoodItem:
    if item.food_id > 0:
        return food_ledger.get_food(db, item.food_id)
    if item.food is None:
        raise ValidationError(
            f"Incomplete data to create food for line with food_id={item.food_id}"
        )
    return food_ledger.persist_inline(db, item.food, quantity, unit)


def check_quantity(quantity) -> float:
    """NaN and infinity are rejected along with zero and negatives."""
    if quantity is None or not math.isfinite(quantity) or quantity <= 0:
        raise ValidationError(f"Quantity must be a positive number, got {quantity}")
    return quantity


def _build_line(db: Session, item: MealItemCreate) -> MealItem:
    unit = parse_unit(item.unit)
    check_quantity(item.quantity)

    food = _resolve_food(db, item, item.quantity, unit)
    line = MealItem(food_id=food.id, quantity=item.quantity, unit=unit.value)
    line.food = food
    _apply_line_totals(line, compute_line_totals(food, item.quantity, unit))
    return line


def save_meal(
    db: Session,
    user_id: int,
    slot,
    items: Sequence[MealItemCreate],
    day: Optional[date] = None,
    clock: Optional[CivilClock] = None,
) -> Meal:
    """
    Save a meal dated `day` (default today) and reconcile that day.

    Lines with a non-positive food_id create their inline food first. Commits.
    """
    if not items:
        raise ValidationError("Add at least one food to the meal")

    clock = clock or get_default_clock()
    meal_slot = parse_slot(slot)
    get_user(db, user_id)

    try:
        meal = Meal(user_id=user_id, slot=meal_slot.value, eaten_at=clock.instant_on(day))
        meal.items = [_build_line(db, item) for item in items]
        totals = refresh_meal_totals(meal)

        db.add(meal)
        db.flush()

        day_key = clock.date_key(meal.eaten_at)
        if settings.incremental_day_updates:
            daily_reconciler.apply_meal_increment(db, user_id, day_key, totals)
        else:
            daily_reconciler.recompute_day(db, user_id, day_key, clock)

        db.commit()
        db.refresh(meal)
        logger.info(
            f"[MEALS] Saved meal id={meal.id} user_id={user_id} slot={meal.slot} "
            f"date={day_key} items={len(meal.items)} calories={meal.total_calories:.0f}"
        )
        return meal
    except Exception as e:
        db.rollback()
        logger.error(f"[MEALS] Error saving meal user_id={user_id}: {e}", exc_info=True)
        raise


def get_meal(db: Session, meal_id: int) -> Meal:
    meal = db.get(Meal, meal_id)
    if meal is None:
        raise NotFoundError(f"Meal {meal_id} not found")
    return meal


def _get_item(db: Session, item_id: int) -> MealItem:
    item = db.get(MealItem, item_id)
    if item is None:
        raise NotFoundError(f"Meal item {item_id} not found")
    return item


def delete_meal(db: Session, meal_id: int, clock: Optional[CivilClock] = None) -> None:
    """Delete a meal and its items, then fully recompute its day. Commits."""
    clock = clock or get_default_clock()
    meal = get_meal(db, meal_id)
    user_id = meal.user_id
    day_key = clock.date_key(meal.eaten_at)

    try:
        db.delete(meal)
        db.flush()
        daily_reconciler.recompute_day(db, user_id, day_key, clock)
        db.commit()
        logger.info(f"[MEALS] Deleted meal id={meal_id} user_id={user_id} date={day_key}")
    except Exception as e:
        db.rollback()
        logger.error(f"[MEALS] Error deleting meal id={meal_id}: {e}", exc_info=True)
        raise


def delete_meal_item(db: Session, item_id: int, clock: Optional[CivilClock] = None) -> Optional[Meal]:
    """
    Remove one line item. Removing the last item deletes the whole meal.
    Returns the remaining meal, or None when it was deleted. Commits.
    """
    clock = clock or get_default_clock()
    item = _get_item(db, item_id)
    meal = item.meal
    meal_id = meal.id
    user_id = meal.user_id
    day_key = clock.date_key(meal.eaten_at)

    try:
        meal.items.remove(item)
        if not meal.items:
            db.delete(meal)
            meal = None
        else:
            refresh_meal_totals(meal)
        db.flush()

        daily_reconciler.recompute_day(db, user_id, day_key, clock)
        db.commit()
        logger.info(
            f"[MEALS] Deleted item id={item_id} meal_id={meal_id} "
            f"meal_deleted={meal is None} date={day_key}"
        )
        if meal is not None:
            db.refresh(meal)
        return meal
    except Exception as e:
        db.rollback()
        logger.error(f"[MEALS] Error deleting item id={item_id}: {e}", exc_info=True)
        raise


def update_item_quantity(
    db: Session,
    item_id: int,
    new_quantity: float,
    clock: Optional[CivilClock] = None,
) -> MealItem:
    """
    Change a line's quantity. The line is recomputed from the food's reference
    values, never from its previous totals, so repeated edits cannot compound.
    Commits.
    """
    check_quantity(new_quantity)

    clock = clock or get_default_clock()
    item = _get_item(db, item_id)
    meal = item.meal
    day_key = clock.date_key(meal.eaten_at)

    try:
        item.quantity = new_quantity
        _apply_line_totals(item, compute_line_totals(item.food, new_quantity, item.unit))
        refresh_meal_totals(meal)
        db.flush()

        daily_reconciler.recompute_day(db, meal.user_id, day_key, clock)
        db.commit()
        db.refresh(item)
        logger.info(
            f"[MEALS] Updated item id={item_id} quantity={new_quantity} "
            f"calories={item.calories:.0f} meal_id={meal.id}"
        )
        return item
    except Exception as e:
        db.rollback()
        logger.error(f"[MEALS] Error updating item id={item_id}: {e}", exc_info=True)
        raise


def list_meals_for_day(
    db: Session, user_id: int, day: date, clock: Optional[CivilClock] = None
) -> List[Meal]:
    clock = clock or get_default_clock()
    start, end = clock.day_bounds(day)
    return (
        db.query(Meal)
        .options(selectinload(Meal.items).selectinload(MealItem.food))
        .filter(Meal.user_id == user_id, Meal.eaten_at >= start, Meal.eaten_at < end)
        .order_by(Meal.eaten_at.asc(), Meal.id.asc())
        .all()
    )
