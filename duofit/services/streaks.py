"""
Consecutive-day exercise streaks.
"""
import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from duofit.core.clock import CivilClock, get_default_clock
from duofit.db.upsert import insert_ignore
from duofit.models.exercise import Exercise
from duofit.models.streak import Streak
from duofit.schemas.day import StreakRead

logger = logging.getLogger(__name__)


def _get_row(db: Session, user_id: int) -> Optional[Streak]:
    return (
        db.query(Streak)
        .filter(Streak.user_id == user_id)
        .populate_existing()
        .first()
    )


def _ensure_row(db: Session, user_id: int) -> Streak:
    # two first exercises racing for the same user both end up on one row
    insert_ignore(db, Streak, ("user_id",), user_id=user_id, current=0, longest=0, last_date=None)
    return _get_row(db, user_id)


def on_exercise_logged(db: Session, user_id: int, day: date) -> Streak:
    """
    Advance the streak for a new exercise on `day`:
    same day as the last one is a no-op, the day after extends the streak,
    anything else (a gap, or an out-of-order earlier day) restarts it at 1.
    Flushes, does not commit.
    """
    streak = _ensure_row(db, user_id)
    if streak.last_date is None:
        streak.current = 1
        streak.longest = max(streak.longest or 0, 1)
        streak.last_date = day
        db.flush()
        logger.info(f"[STREAK] Started user_id={user_id} date={day}")
        return streak

    last = streak.last_date
    if last == day:
        return streak

    if last is not None and last == day - timedelta(days=1):
        streak.current = (streak.current or 0) + 1
        streak.longest = max(streak.longest or 0, streak.current)
        logger.info(f"[STREAK] Extended user_id={user_id} current={streak.current}")
    else:
        streak.current = 1
        streak.longest = max(streak.longest or 0, 1)
        logger.info(f"[STREAK] Reset user_id={user_id} date={day} previous_last={last}")
    streak.last_date = day
    db.flush()
    return streak


def runs_from_days(days: Iterable[date]) -> List[int]:
    """Lengths of the consecutive-day runs in `days`, in date order."""
    ordered = sorted(set(days))
    runs: List[int] = []
    previous = None
    for day in ordered:
        if previous is not None and day == previous + timedelta(days=1):
            runs[-1] += 1
        else:
            runs.append(1)
        previous = day
    return runs


def rebuild_streak(db: Session, user_id: int, clock: Optional[CivilClock] = None) -> Streak:
    """
    Re-derive the streak from the full exercise history (after an exercise is
    deleted or edited). `current` is the run ending on the latest exercise day;
    `longest` never goes down. Flushes, does not commit.
    """
    clock = clock or get_default_clock()
    performed = (
        db.query(Exercise.performed_at)
        .filter(Exercise.user_id == user_id)
        .all()
    )
    days = [clock.date_key(row.performed_at) for row in performed]
    runs = runs_from_days(days)

    streak = _ensure_row(db, user_id)
    if runs:
        streak.current = runs[-1]
        streak.last_date = max(days)
        streak.longest = max(streak.longest or 0, max(runs))
    else:
        streak.current = 0
        streak.last_date = None

    db.flush()
    logger.info(
        f"[STREAK] Rebuilt user_id={user_id} current={streak.current} "
        f"longest={streak.longest} last_date={streak.last_date}"
    )
    return streak


def get_streak(db: Session, user_id: int) -> StreakRead:
    streak = _get_row(db, user_id)
    if streak is None:
        return StreakRead(user_id=user_id)
    return StreakRead.model_validate(streak)
