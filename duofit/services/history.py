import calendar
import logging
from datetime import date
from typing import Dict, Optional, Set

from sqlalchemy import func
from sqlalchemy.orm import Session

from duofit.core.clock import CivilClock, get_default_clock
from duofit.core.errors import ValidationError
from duofit.models.daily_nutrition import DailyNutrition
from duofit.models.daily_points import DailyPoints
from duofit.models.exercise import Exercise
from duofit.schemas.day import MonthlySummary, UserMonth
from duofit.services.daily_reconciler import goal_met
from duofit.services.users import list_users

logger = logging.getLogger(__name__)


def monthly_summary(
    db: Session, year: int, month: int, clock: Optional[CivilClock] = None
) -> MonthlySummary:
    """Per-user diet days, training days, exercise totals and points for a month."""
    if not 1 <= month <= 12:
        raise ValidationError(f"Month must be between 1 and 12, got {month}")
    clock = clock or get_default_clock()

    days_in_month = calendar.monthrange(year, month)[1]
    first_day = date(year, month, 1)
    last_day = date(year, month, days_in_month)
    start, _ = clock.day_bounds(first_day)
    _, end = clock.day_bounds(last_day)

    training_days: Dict[int, Set[date]] = {}
    minutes: Dict[int, int] = {}
    sessions: Dict[int, int] = {}
    exercises = (
        db.query(Exercise.user_id, Exercise.performed_at, Exercise.duration_min)
        .filter(Exercise.performed_at >= start, Exercise.performed_at < end)
        .all()
    )
    for user_id, performed_at, duration_min in exercises:
        training_days.setdefault(user_id, set()).add(clock.date_key(performed_at))
        minutes[user_id] = minutes.get(user_id, 0) + (duration_min or 0)
        sessions[user_id] = sessions.get(user_id, 0) + 1

    diet_days: Dict[int, int] = {}
    nutrition_rows = (
        db.query(DailyNutrition)
        .filter(
            DailyNutrition.date >= first_day,
            DailyNutrition.date <= last_day,
            DailyNutrition.invalid.is_(False),
        )
        .all()
    )
    for row in nutrition_rows:
        if goal_met(row.calories, row.goal_calories, row.invalid):
            diet_days[row.user_id] = diet_days.get(row.user_id, 0) + 1

    points = dict(
        db.query(DailyPoints.user_id, func.coalesce(func.sum(DailyPoints.total_points), 0))
        .filter(DailyPoints.date >= first_day, DailyPoints.date <= last_day)
        .group_by(DailyPoints.user_id)
        .all()
    )

    users = [
        UserMonth(
            user_id=user.id,
            name=user.name,
            color=user.color,
            diet_days=diet_days.get(user.id, 0),
            training_days=len(training_days.get(user.id, ())),
            exercise_minutes=minutes.get(user.id, 0),
            exercise_sessions=sessions.get(user.id, 0),
            total_points=int(points.get(user.id, 0)),
        )
        for user in list_users(db)
    ]
    logger.info(f"[HISTORY] Summary {year}-{month:02d} for {len(users)} user(s)")
    return MonthlySummary(year=year, month=month, days_in_month=days_in_month, users=users)
