"""
Exercise logging and its effect on daily points and streaks.
"""
import logging
from datetime import date
from enum import Enum
from typing import List, Optional

from sqlalchemy.orm import Session

from duofit.core.clock import CivilClock, get_default_clock
from duofit.core.errors import NotFoundError, ValidationError
from duofit.models.exercise import Exercise
from duofit.schemas.exercise import ExerciseUpdate
from duofit.services import points_ledger, streaks
from duofit.services.users import get_user

logger = logging.getLogger(__name__)

STRENGTH_POINTS = 2
OTHER_POINTS = 1
CARDIO_MINUTES_PER_POINT = 30


class ExerciseType(str, Enum):
    CARDIO = "CARDIO"
    STRENGTH = "STRENGTH"
    OTHER = "OTHER"


def parse_type(value) -> ExerciseType:
    try:
        return ExerciseType(str(value).strip().upper())
    except ValueError:
        raise ValidationError(f"Unknown exercise type: {value!r}")


def compute_points(exercise_type, duration_min: int) -> int:
    """Strength: flat 2. Cardio: one point per full 30 minutes. Other: flat 1."""
    exercise_type = parse_type(exercise_type)
    if exercise_type is ExerciseType.STRENGTH:
        return STRENGTH_POINTS
    if exercise_type is ExerciseType.CARDIO:
        return int(duration_min) // CARDIO_MINUTES_PER_POINT
    return OTHER_POINTS


def _validate(name: Optional[str], duration_min: Optional[int]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Exercise name cannot be empty")
    if duration_min is None or duration_min < 0:
        raise ValidationError(f"Duration must be zero or more minutes, got {duration_min}")
    return cleaned


def get_exercise(db: Session, exercise_id: int) -> Exercise:
    exercise = db.get(Exercise, exercise_id)
    if exercise is None:
        raise NotFoundError(f"Exercise {exercise_id} not found")
    return exercise


def log_exercise(
    db: Session,
    user_id: int,
    exercise_type,
    name: str,
    duration_min: int,
    day: Optional[date] = None,
    description: Optional[str] = None,
    clock: Optional[CivilClock] = None,
) -> Exercise:
    """Persist an exercise, award its points and advance the streak. Commits."""
    clock = clock or get_default_clock()
    exercise_type = parse_type(exercise_type)
    name = _validate(name, duration_min)
    get_user(db, user_id)

    try:
        exercise = Exercise(
            user_id=user_id,
            type=exercise_type.value,
            name=name,
            description=description,
            duration_min=duration_min,
            points=compute_points(exercise_type, duration_min),
            performed_at=clock.instant_on(day),
        )
        db.add(exercise)
        db.flush()

        day_key = clock.date_key(exercise.performed_at)
        points_ledger.award_exercise_points(db, user_id, day_key, exercise.points)
        streaks.on_exercise_logged(db, user_id, day_key)

        db.commit()
        db.refresh(exercise)
        logger.info(
            f"[EXERCISE] Logged id={exercise.id} user_id={user_id} type={exercise.type} "
            f"duration={duration_min} points={exercise.points} date={day_key}"
        )
        return exercise
    except Exception as e:
        db.rollback()
        logger.error(f"[EXERCISE] Error logging exercise user_id={user_id}: {e}", exc_info=True)
        raise


def update_exercise(
    db: Session,
    exercise_id: int,
    changes: ExerciseUpdate,
    clock: Optional[CivilClock] = None,
) -> Exercise:
    """Edit an exercise; its points are recomputed and the difference applied. Commits."""
    clock = clock or get_default_clock()
    exercise = get_exercise(db, exercise_id)

    exercise_type = parse_type(changes.type) if changes.type is not None else parse_type(exercise.type)
    name = changes.name if changes.name is not None else exercise.name
    duration_min = changes.duration_min if changes.duration_min is not None else exercise.duration_min
    name = _validate(name, duration_min)

    try:
        day_key = clock.date_key(exercise.performed_at)
        old_points = exercise.points
        new_points = compute_points(exercise_type, duration_min)

        exercise.type = exercise_type.value
        exercise.name = name
        exercise.duration_min = duration_min
        if changes.description is not None:
            exercise.description = changes.description
        exercise.points = new_points
        db.flush()

        if new_points > old_points:
            points_ledger.award_exercise_points(db, exercise.user_id, day_key, new_points - old_points)
        elif new_points < old_points:
            points_ledger.retract_exercise_points(db, exercise.user_id, day_key, old_points - new_points)
        streaks.rebuild_streak(db, exercise.user_id, clock)

        db.commit()
        db.refresh(exercise)
        logger.info(f"[EXERCISE] Updated id={exercise_id} points {old_points}->{new_points}")
        return exercise
    except Exception as e:
        db.rollback()
        logger.error(f"[EXERCISE] Error updating exercise id={exercise_id}: {e}", exc_info=True)
        raise


def delete_exercise(db: Session, exercise_id: int, clock: Optional[CivilClock] = None) -> None:
    """Delete an exercise, retract its points and rebuild the streak. Commits."""
    clock = clock or get_default_clock()
    exercise = get_exercise(db, exercise_id)
    user_id = exercise.user_id
    points = exercise.points
    day_key = clock.date_key(exercise.performed_at)

    try:
        db.delete(exercise)
        db.flush()
        points_ledger.retract_exercise_points(db, user_id, day_key, points)
        streaks.rebuild_streak(db, user_id, clock)
        db.commit()
        logger.info(f"[EXERCISE] Deleted id={exercise_id} user_id={user_id} date={day_key} points={points}")
    except Exception as e:
        db.rollback()
        logger.error(f"[EXERCISE] Error deleting exercise id={exercise_id}: {e}", exc_info=True)
        raise


def list_exercises(db: Session, user_id: Optional[int] = None) -> List[Exercise]:
    query = db.query(Exercise)
    if user_id is not None:
        query = query.filter(Exercise.user_id == user_id)
    return query.order_by(Exercise.performed_at.desc(), Exercise.id.desc()).all()
