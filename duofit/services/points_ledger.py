"""
Per-(user, date) points, split by category.

Every write is a single UPDATE that moves a category and the total together,
so total_points == exercise_points + calorie_points after each statement and
concurrent writers cannot lose an increment.
"""
import logging
from datetime import date
from enum import Enum
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from duofit.core.errors import ConsistencyViolation, ValidationError
from duofit.db.upsert import insert_ignore
from duofit.models.daily_points import DailyPoints
from duofit.schemas.day import DailyPointsRead

logger = logging.getLogger(__name__)


class PointCategory(str, Enum):
    EXERCISE = "EXERCISE"
    CALORIE_GOAL = "CALORIE_GOAL"


CATEGORY_COLUMNS = {
    PointCategory.EXERCISE: "exercise_points",
    PointCategory.CALORIE_GOAL: "calorie_points",
}


def _find_row(db: Session, user_id: int, day: date) -> Optional[DailyPoints]:
    return (
        db.query(DailyPoints)
        .filter(DailyPoints.user_id == user_id, DailyPoints.date == day)
        .populate_existing()
        .first()
    )


def _ensure_row(db: Session, user_id: int, day: date) -> DailyPoints:
    insert_ignore(
        db,
        DailyPoints,
        ("user_id", "date"),
        user_id=user_id,
        date=day,
        exercise_points=0,
        calorie_points=0,
        total_points=0,
    )
    return _find_row(db, user_id, day)


def check_invariant(row: DailyPoints) -> None:
    expected = (row.exercise_points or 0) + (row.calorie_points or 0)
    if row.total_points != expected:
        logger.error(
            f"[POINTS] Total drift user_id={row.user_id} date={row.date}: "
            f"total={row.total_points} categories={expected}"
        )
        raise ConsistencyViolation(
            row.user_id,
            row.date,
            f"points total {row.total_points} != category sum {expected}",
        )


def reconcile_category(
    db: Session,
    user_id: int,
    day: date,
    category: PointCategory,
    should_have_points: bool,
    point_value: int,
) -> Optional[DailyPoints]:
    """
    Bring one category to its desired state: `point_value` when it should have
    points, zero otherwise. Repeating the call with the same arguments is a
    no-op. Flushes, does not commit.
    """
    column = getattr(DailyPoints, CATEGORY_COLUMNS[PointCategory(category)])

    if should_have_points:
        row = _ensure_row(db, user_id, day)
        result = db.execute(
            update(DailyPoints)
            .where(DailyPoints.id == row.id, column == 0)
            .values({
                column: point_value,
                DailyPoints.total_points: DailyPoints.total_points + point_value,
            })
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            logger.info(f"[POINTS] Awarded {category.value}={point_value} user_id={user_id} date={day}")
    else:
        row = _find_row(db, user_id, day)
        if row is None:
            return None
        result = db.execute(
            update(DailyPoints)
            .where(DailyPoints.id == row.id, column > 0)
            .values({
                column: 0,
                DailyPoints.total_points: DailyPoints.total_points - column,
            })
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            logger.info(f"[POINTS] Revoked {category.value} user_id={user_id} date={day}")

    row = _find_row(db, user_id, day)
    check_invariant(row)
    return row


def _apply_exercise_delta(db: Session, user_id: int, day: date, delta: int) -> DailyPoints:
    row = _ensure_row(db, user_id, day)
    db.execute(
        update(DailyPoints)
        .where(DailyPoints.id == row.id)
        .values({
            DailyPoints.exercise_points: DailyPoints.exercise_points + delta,
            DailyPoints.total_points: DailyPoints.total_points + delta,
        })
        .execution_options(synchronize_session=False)
    )
    row = _find_row(db, user_id, day)
    check_invariant(row)
    return row


def award_exercise_points(db: Session, user_id: int, day: date, points: int) -> DailyPoints:
    """Add one session's points; sessions on the same day accumulate."""
    if points < 0:
        raise ValidationError(f"Exercise points cannot be negative, got {points}")
    row = _apply_exercise_delta(db, user_id, day, points)
    logger.info(f"[POINTS] +{points} EXERCISE user_id={user_id} date={day} total={row.total_points}")
    return row


def retract_exercise_points(db: Session, user_id: int, day: date, points: int) -> DailyPoints:
    """Take back the points of an edited or deleted session."""
    if points < 0:
        raise ValidationError(f"Exercise points cannot be negative, got {points}")
    row = _apply_exercise_delta(db, user_id, day, -points)
    logger.info(f"[POINTS] -{points} EXERCISE user_id={user_id} date={day} total={row.total_points}")
    return row


def get_daily_points(db: Session, user_id: int, day: date) -> DailyPointsRead:
    row = _find_row(db, user_id, day)
    if row is None:
        return DailyPointsRead(user_id=user_id, date=day)
    return DailyPointsRead.model_validate(row)
