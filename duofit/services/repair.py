"""
Consistency checks and repair for the derived daily aggregates.

Meals and exercises are the source of truth. DailyNutrition, DailyPoints and
Streak rows are derived from them and can be rebuilt at any time; running the
repair twice in a row changes nothing the second time.
"""
import logging
from datetime import date
from typing import Dict, List, Optional, Set, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from duofit.core.clock import CivilClock, get_default_clock
from duofit.core.config import settings
from duofit.core.errors import ConsistencyViolation
from duofit.models.daily_nutrition import DailyNutrition
from duofit.models.daily_points import DailyPoints
from duofit.models.exercise import Exercise
from duofit.models.meal import Meal
from duofit.schemas.day import RepairReport
from duofit.services import daily_reconciler, points_ledger, streaks
from duofit.services.daily_reconciler import goal_met, meal_totals_for_day

logger = logging.getLogger(__name__)

# float sums from different orders can differ in the last bits
TOLERANCE = 1e-6


def exercise_points_for_day(
    db: Session, user_id: int, day: date, clock: Optional[CivilClock] = None
) -> int:
    clock = clock or get_default_clock()
    start, end = clock.day_bounds(day)
    total = (
        db.query(func.coalesce(func.sum(Exercise.points), 0))
        .filter(
            Exercise.user_id == user_id,
            Exercise.performed_at >= start,
            Exercise.performed_at < end,
        )
        .scalar()
    )
    return int(total or 0)


def find_violations(
    db: Session, user_id: int, day: date, clock: Optional[CivilClock] = None
) -> List[ConsistencyViolation]:
    """Everything about this day's aggregates that disagrees with meals and exercises."""
    violations: List[ConsistencyViolation] = []

    totals = meal_totals_for_day(db, user_id, day, clock)
    nutrition = (
        db.query(DailyNutrition)
        .filter(DailyNutrition.user_id == user_id, DailyNutrition.date == day)
        .populate_existing()
        .first()
    )
    met = False
    if nutrition is None:
        if totals.calories > TOLERANCE:
            violations.append(ConsistencyViolation(user_id, day, "missing nutrition row for logged meals"))
    else:
        for field in ("calories", "protein_g", "carbs_g", "fat_g"):
            stored = getattr(nutrition, field)
            expected = getattr(totals, field)
            if abs(stored - expected) > TOLERANCE:
                violations.append(
                    ConsistencyViolation(user_id, day, f"{field} {stored} != meal sum {expected}")
                )
        met = goal_met(totals.calories, nutrition.goal_calories, nutrition.invalid)
        if nutrition.goal_met != met:
            violations.append(
                ConsistencyViolation(user_id, day, f"goal_met {nutrition.goal_met} != expected {met}")
            )

    exercise_points = exercise_points_for_day(db, user_id, day, clock)
    calorie_points = settings.calorie_goal_points if met else 0
    points = (
        db.query(DailyPoints)
        .filter(DailyPoints.user_id == user_id, DailyPoints.date == day)
        .populate_existing()
        .first()
    )
    if points is None:
        if exercise_points or calorie_points:
            violations.append(ConsistencyViolation(user_id, day, "missing points row"))
    else:
        if points.exercise_points != exercise_points:
            violations.append(
                ConsistencyViolation(
                    user_id, day, f"exercise points {points.exercise_points} != exercise sum {exercise_points}"
                )
            )
        if points.calorie_points != calorie_points:
            violations.append(
                ConsistencyViolation(
                    user_id, day, f"calorie points {points.calorie_points} != expected {calorie_points}"
                )
            )
        category_sum = points.exercise_points + points.calorie_points
        if points.total_points != category_sum:
            violations.append(
                ConsistencyViolation(
                    user_id, day, f"points total {points.total_points} != category sum {category_sum}"
                )
            )
    return violations


def _day_keys(db: Session, clock: CivilClock, user_id: Optional[int]) -> Set[Tuple[int, date]]:
    keys: Set[Tuple[int, date]] = set()

    meal_query = db.query(Meal.user_id, Meal.eaten_at)
    exercise_query = db.query(Exercise.user_id, Exercise.performed_at)
    nutrition_query = db.query(DailyNutrition.user_id, DailyNutrition.date)
    points_query = db.query(DailyPoints.user_id, DailyPoints.date)
    if user_id is not None:
        meal_query = meal_query.filter(Meal.user_id == user_id)
        exercise_query = exercise_query.filter(Exercise.user_id == user_id)
        nutrition_query = nutrition_query.filter(DailyNutrition.user_id == user_id)
        points_query = points_query.filter(DailyPoints.user_id == user_id)

    for owner, instant in meal_query.all():
        keys.add((owner, clock.date_key(instant)))
    for owner, instant in exercise_query.all():
        keys.add((owner, clock.date_key(instant)))
    for owner, day in nutrition_query.all():
        keys.add((owner, day))
    for owner, day in points_query.all():
        keys.add((owner, day))
    return keys


def _overwrite_points(db: Session, user_id: int, day: date, exercise_points: int, met: bool) -> None:
    calorie_points = settings.calorie_goal_points if met else 0
    row = (
        db.query(DailyPoints)
        .filter(DailyPoints.user_id == user_id, DailyPoints.date == day)
        .first()
    )
    if row is None:
        if not (exercise_points or calorie_points):
            return
        row = DailyPoints(user_id=user_id, date=day)
        db.add(row)
    row.exercise_points = exercise_points
    row.calorie_points = calorie_points
    row.total_points = exercise_points + calorie_points
    db.flush()
    points_ledger.check_invariant(row)


def repair_days(
    db: Session, user_id: Optional[int] = None, clock: Optional[CivilClock] = None
) -> RepairReport:
    """
    Rebuild every derived aggregate from meals and exercises for one user (or
    everyone). Only days with violations are rewritten. Commits.
    """
    clock = clock or get_default_clock()
    try:
        keys = sorted(_day_keys(db, clock, user_id))
        messages: List[str] = []
        fixed = 0

        for owner, day in keys:
            violations = find_violations(db, owner, day, clock)
            if not violations:
                continue
            fixed += 1
            messages.extend(str(v) for v in violations)

            # points first: the recompute below re-awards calorie points
            _overwrite_points(db, owner, day, exercise_points_for_day(db, owner, day, clock), met=False)
            daily_reconciler.recompute_day(db, owner, day, clock)
            logger.info(f"[REPAIR] Fixed user_id={owner} date={day}: {len(violations)} violation(s)")

        users: Dict[int, None] = {owner: None for owner, _ in keys}
        for owner in users:
            streaks.rebuild_streak(db, owner, clock)

        db.commit()
        logger.info(f"[REPAIR] Checked {len(keys)} day(s), fixed {fixed}")
        return RepairReport(days_checked=len(keys), days_fixed=fixed, violations=messages)
    except Exception as e:
        db.rollback()
        logger.error(f"[REPAIR] Repair failed: {e}", exc_info=True)
        raise


def verify_day(db: Session, user_id: int, day: date, clock: Optional[CivilClock] = None) -> None:
    """Raise the first ConsistencyViolation found for the day, if any."""
    violations = find_violations(db, user_id, day, clock)
    if violations:
        raise violations[0]
