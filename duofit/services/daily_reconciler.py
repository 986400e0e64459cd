"""
Daily reconciliation: per-(user, date) nutrition totals, goal status and the
calorie-goal points that follow from it.

State of a day: no row, accumulating, goal met, goal missed, or invalid.
Goal status is re-evaluated on every change and can flip back and forth,
since meals can be added, edited or removed on any date.
"""
import logging
from datetime import date
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from duofit.core.clock import CivilClock, get_default_clock
from duofit.core.config import settings
from duofit.db.upsert import insert_ignore
from duofit.models.daily_nutrition import DailyNutrition
from duofit.models.meal import Meal
from duofit.schemas.day import DailyNutritionRead
from duofit.services import points_ledger
from duofit.services.nutrition import NutritionTotals
from duofit.services.points_ledger import PointCategory
from duofit.services.users import get_user

logger = logging.getLogger(__name__)


def goal_met(calories: float, goal: float, invalid: bool = False) -> bool:
    """A day meets the goal when it is valid and 0 < calories <= goal."""
    return not invalid and 0 < calories <= goal


def _find_row(db: Session, user_id: int, day: date) -> Optional[DailyNutrition]:
    return (
        db.query(DailyNutrition)
        .filter(DailyNutrition.user_id == user_id, DailyNutrition.date == day)
        .populate_existing()
        .first()
    )


def _ensure_row(db: Session, user_id: int, day: date, goal_calories: float) -> DailyNutrition:
    insert_ignore(
        db,
        DailyNutrition,
        ("user_id", "date"),
        user_id=user_id,
        date=day,
        calories=0.0,
        protein_g=0.0,
        carbs_g=0.0,
        fat_g=0.0,
        goal_calories=goal_calories,
        goal_met=False,
        invalid=False,
    )
    return _find_row(db, user_id, day)


def meal_totals_for_day(
    db: Session, user_id: int, day: date, clock: Optional[CivilClock] = None
) -> NutritionTotals:
    """Sum of the cached meal totals inside the civil day's bounds."""
    clock = clock or get_default_clock()
    start, end = clock.day_bounds(day)
    row = (
        db.query(
            func.coalesce(func.sum(Meal.total_calories), 0.0),
            func.coalesce(func.sum(Meal.total_protein_g), 0.0),
            func.coalesce(func.sum(Meal.total_carbs_g), 0.0),
            func.coalesce(func.sum(Meal.total_fat_g), 0.0),
        )
        .filter(Meal.user_id == user_id, Meal.eaten_at >= start, Meal.eaten_at < end)
        .one()
    )
    return NutritionTotals(
        calories=float(row[0]),
        protein_g=float(row[1]),
        carbs_g=float(row[2]),
        fat_g=float(row[3]),
    )


def _settle_goal(db: Session, row: DailyNutrition) -> DailyNutrition:
    """Store the goal flag implied by the row's totals and reconcile calorie points."""
    met = goal_met(row.calories, row.goal_calories, row.invalid)
    if row.goal_met != met:
        db.execute(
            update(DailyNutrition)
            .where(DailyNutrition.id == row.id)
            .values(goal_met=met)
            .execution_options(synchronize_session=False)
        )
        logger.info(
            f"[DAY] Goal {'met' if met else 'missed'} user_id={row.user_id} date={row.date} "
            f"calories={row.calories:.0f}/{row.goal_calories:.0f} invalid={row.invalid}"
        )
    points_ledger.reconcile_category(
        db,
        row.user_id,
        row.date,
        PointCategory.CALORIE_GOAL,
        should_have_points=met,
        point_value=settings.calorie_goal_points,
    )
    return _find_row(db, row.user_id, row.date)


def recompute_day(
    db: Session, user_id: int, day: date, clock: Optional[CivilClock] = None
) -> DailyNutrition:
    """
    Full recompute of a day from its meals. The goal snapshot is refreshed to
    the user's current goal. Safe to repeat. Flushes, does not commit.
    """
    user = get_user(db, user_id)
    totals = meal_totals_for_day(db, user_id, day, clock)

    row = _ensure_row(db, user_id, day, user.calorie_goal)
    db.execute(
        update(DailyNutrition)
        .where(DailyNutrition.id == row.id)
        .values(
            calories=totals.calories,
            protein_g=totals.protein_g,
            carbs_g=totals.carbs_g,
            fat_g=totals.fat_g,
            goal_calories=user.calorie_goal,
        )
        .execution_options(synchronize_session=False)
    )
    row = _find_row(db, user_id, day)
    logger.info(f"[DAY] Recomputed user_id={user_id} date={day} calories={totals.calories:.0f}")
    return _settle_goal(db, row)


def apply_meal_increment(
    db: Session, user_id: int, day: date, totals: NutritionTotals
) -> DailyNutrition:
    """
    Cheap path for a newly saved meal: add its totals to the day in one atomic
    UPDATE, keeping the stored goal snapshot, then re-read the row and settle
    goal status and points from what is stored. Flushes, does not commit.
    """
    user = get_user(db, user_id)
    row = _ensure_row(db, user_id, day, user.calorie_goal)
    db.execute(
        update(DailyNutrition)
        .where(DailyNutrition.id == row.id)
        .values(
            calories=DailyNutrition.calories + totals.calories,
            protein_g=DailyNutrition.protein_g + totals.protein_g,
            carbs_g=DailyNutrition.carbs_g + totals.carbs_g,
            fat_g=DailyNutrition.fat_g + totals.fat_g,
        )
        .execution_options(synchronize_session=False)
    )
    row = _find_row(db, user_id, day)
    logger.info(f"[DAY] +{totals.calories:.0f} kcal user_id={user_id} date={day} total={row.calories:.0f}")
    return _settle_goal(db, row)


def mark_day_invalid(
    db: Session,
    user_id: int,
    day: date,
    invalid: bool,
    clock: Optional[CivilClock] = None,
) -> DailyNutrition:
    """
    Flag (or unflag) a day as not properly logged. An invalid day keeps its
    numbers but never meets the goal, so its calorie points are revoked; clearing
    the flag restores them if the totals still qualify. Commits.
    """
    try:
        user = get_user(db, user_id)
        row = _ensure_row(db, user_id, day, user.calorie_goal)
        db.execute(
            update(DailyNutrition)
            .where(DailyNutrition.id == row.id)
            .values(invalid=invalid)
            .execution_options(synchronize_session=False)
        )
        logger.info(f"[DAY] Marked invalid={invalid} user_id={user_id} date={day}")
        recompute_day(db, user_id, day, clock)
        db.commit()
        return _find_row(db, user_id, day)
    except Exception as e:
        db.rollback()
        logger.error(f"[DAY] Error marking day user_id={user_id} date={day}: {e}", exc_info=True)
        raise


def get_daily_nutrition(db: Session, user_id: int, day: date) -> DailyNutritionRead:
    """Stored day, or an empty day carrying the user's current goal."""
    row = _find_row(db, user_id, day)
    if row is not None:
        return DailyNutritionRead.model_validate(row)
    user = get_user(db, user_id)
    return DailyNutritionRead(
        user_id=user_id,
        date=day,
        calories=0.0,
        protein_g=0.0,
        carbs_g=0.0,
        fat_g=0.0,
        goal_calories=user.calorie_goal,
        goal_met=False,
        invalid=False,
    )
