from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from duofit.core.clock import CivilClock
from duofit.deps import get_clock, get_db
from duofit.schemas.exercise import ExerciseCreate, ExerciseRead, ExerciseUpdate
from duofit.services import exercises as exercise_service

router = APIRouter(prefix="/exercises", tags=["exercises"])


@router.post("", response_model=ExerciseRead, status_code=201)
def log_exercise(
    exercise_in: ExerciseCreate,
    db: Session = Depends(get_db),
    clock: CivilClock = Depends(get_clock),
):
    return exercise_service.log_exercise(
        db,
        exercise_in.user_id,
        exercise_in.type,
        exercise_in.name,
        exercise_in.duration_min,
        day=exercise_in.date,
        description=exercise_in.description,
        clock=clock,
    )


@router.get("", response_model=List[ExerciseRead])
def list_exercises(
    user_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    return exercise_service.list_exercises(db, user_id)


@router.patch("/{exercise_id}", response_model=ExerciseRead)
def update_exercise(
    exercise_id: int,
    changes: ExerciseUpdate,
    db: Session = Depends(get_db),
    clock: CivilClock = Depends(get_clock),
):
    return exercise_service.update_exercise(db, exercise_id, changes, clock)


@router.delete("/{exercise_id}", status_code=204)
def delete_exercise(
    exercise_id: int,
    db: Session = Depends(get_db),
    clock: CivilClock = Depends(get_clock),
):
    exercise_service.delete_exercise(db, exercise_id, clock)
    return Response(status_code=204)
