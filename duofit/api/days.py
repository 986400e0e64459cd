"""
Day-level endpoints: nutrition and points per day, invalid-day flag,
recompute, streaks, the monthly retrospective and the repair pass.
"""
import logging
from datetime import date as date_type
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from duofit.core.clock import CivilClock
from duofit.deps import get_clock, get_db
from duofit.schemas.day import (
    DailyNutritionRead,
    DaySummary,
    InvalidDayUpdate,
    MonthlySummary,
    RepairReport,
    StreakRead,
)
from duofit.services import daily_reconciler, history, points_ledger, repair, streaks
from duofit.services.users import get_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["days"])


@router.get("/days/{user_id}/{day}", response_model=DaySummary)
def get_day_summary(
    user_id: int,
    day: date_type,
    db: Session = Depends(get_db),
):
    get_user(db, user_id)
    return DaySummary(
        nutrition=daily_reconciler.get_daily_nutrition(db, user_id, day),
        points=points_ledger.get_daily_points(db, user_id, day),
    )


@router.put("/days/{user_id}/{day}/invalid", response_model=DailyNutritionRead)
def mark_day_invalid(
    user_id: int,
    day: date_type,
    payload: InvalidDayUpdate,
    db: Session = Depends(get_db),
    clock: CivilClock = Depends(get_clock),
):
    return daily_reconciler.mark_day_invalid(db, user_id, day, payload.invalid, clock)


@router.post("/days/{user_id}/{day}/recompute", response_model=DaySummary)
def recompute_day(
    user_id: int,
    day: date_type,
    db: Session = Depends(get_db),
    clock: CivilClock = Depends(get_clock),
):
    try:
        daily_reconciler.recompute_day(db, user_id, day, clock)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return DaySummary(
        nutrition=daily_reconciler.get_daily_nutrition(db, user_id, day),
        points=points_ledger.get_daily_points(db, user_id, day),
    )


@router.get("/streaks/{user_id}", response_model=StreakRead)
def get_streak(user_id: int, db: Session = Depends(get_db)):
    get_user(db, user_id)
    return streaks.get_streak(db, user_id)


@router.get("/retrospective/{year}/{month}", response_model=MonthlySummary)
def get_retrospective(
    year: int,
    month: int,
    db: Session = Depends(get_db),
    clock: CivilClock = Depends(get_clock),
):
    return history.monthly_summary(db, year, month, clock)


@router.post("/repair", response_model=RepairReport)
def run_repair(
    user_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    clock: CivilClock = Depends(get_clock),
):
    """Rebuild daily totals, points and streaks from meals and exercises."""
    if user_id is not None:
        get_user(db, user_id)
    report = repair.repair_days(db, user_id, clock)
    logger.info(f"[REPAIR] {report.days_fixed}/{report.days_checked} day(s) fixed via API")
    return report
